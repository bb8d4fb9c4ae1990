from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PatientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class AppointmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_date: Optional[datetime] = None
    appointment_time: Optional[str] = None
    appointment_day: Optional[datetime] = None
    daily_token: Optional[int] = None
    status: Optional[str] = None
