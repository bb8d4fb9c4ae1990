from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.dates import parse_iso_datetime
from .patient import AppointmentSummary, PatientSummary


class LineItem(BaseModel):
    name: str = Field(..., min_length=1)
    strength: Optional[str] = None
    form: Optional[str] = None
    duration: Optional[str] = None
    notes: Optional[str] = None
    # finite numbers only; a dispense never adds stock back
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    unit_price: float = Field(..., ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Item name is required")
        return v.strip()


class DispenseCreate(BaseModel):
    items: List[LineItem] = Field(..., min_length=1)
    tax: float = Field(0, allow_inf_nan=False)
    patient: Optional[int] = None
    date: Optional[str] = None
    token: Optional[int] = None

    @field_validator("date")
    @classmethod
    def date_is_iso(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_iso_datetime(v)
        return v


class DispenseUpdate(BaseModel):
    items: Optional[List[LineItem]] = Field(None, min_length=1)
    tax: Optional[float] = Field(None, allow_inf_nan=False)


class PaymentIn(BaseModel):
    # additive only, refunds are not supported
    amount: float = Field(..., ge=0, allow_inf_nan=False)


class LineItemOut(BaseModel):
    name: str
    strength: Optional[str] = None
    form: Optional[str] = None
    duration: Optional[str] = None
    notes: Optional[str] = None
    quantity: float = 0
    unit_price: float = 0


class DispenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    patient: Optional[PatientSummary] = None
    appointment_id: Optional[int] = None
    appointment: Optional[AppointmentSummary] = None
    appointment_day: Optional[datetime] = None
    daily_token: Optional[int] = None
    items: List[LineItemOut] = []
    subtotal: float
    tax: float
    total: float
    payment_status: str
    paid_amount: float
    balance_due: float
    bill_number: Optional[str] = None
    dispensed_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PrefillItem(BaseModel):
    name: str
    strength: str = ""
    form: str = ""
    duration: str = ""
    quantity: float = 1
    unit_price: float = 0
    notes: str = ""


class MedicineOut(BaseModel):
    id: int
    label: str
    name: str
    strength: str = ""
    form: str = ""
    stock_qty: int
    selling_price: float
    is_low_stock: bool
