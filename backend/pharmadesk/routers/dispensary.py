# pharmadesk/routers/dispensary.py
import io
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ..api.deps import require_roles
from ..api.response import ok
from ..core.db import get_db
from ..models.user import User
from ..schemas.dispense import (
    DispenseCreate,
    DispenseOut,
    DispenseUpdate,
    MedicineOut,
    PaymentIn,
    PrefillItem,
)
from ..services import dispensary as svc
from ..utils.pdf_utils import generate_bill_pdf

router = APIRouter(prefix="/dispensary", tags=["Dispensary"])

READ_ROLES = ("chemist", "admin", "receptionist")
WRITE_ROLES = ("chemist", "admin")


def _out(d) -> DispenseOut:
    return DispenseOut.model_validate(d)


# =============================================================================
#                                 DISPENSES
# =============================================================================
@router.get("/dispenses")
def list_dispenses(
    patient_id: Optional[int] = Query(None),
    date: Optional[str] = Query(None, description="ISO date of the appointment day"),
    token: Optional[int] = Query(None, description="Daily token number"),
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*READ_ROLES)),
):
    dispenses = svc.list_dispenses(db, patient_id=patient_id, date=date, token=token)
    return ok([_out(d) for d in dispenses])


@router.get("/dispenses/{dispense_id}")
def get_dispense(
    dispense_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*READ_ROLES)),
):
    return ok(_out(svc.get_dispense(db, dispense_id)))


@router.post("/dispenses", status_code=201)
def create_dispense(
    payload: DispenseCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(*WRITE_ROLES)),
):
    d = svc.create_dispense(db, payload, user_id=user.id)
    return ok(_out(d), message="Dispense created successfully", status_code=201)


@router.put("/dispenses/{dispense_id}")
def update_dispense(
    dispense_id: int,
    payload: DispenseUpdate,
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*WRITE_ROLES)),
):
    d = svc.update_dispense(db, dispense_id, payload)
    return ok(_out(d), message="Dispense updated successfully")


@router.post("/dispenses/{dispense_id}/pay")
def pay_dispense(
    dispense_id: int,
    payload: PaymentIn,
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*WRITE_ROLES)),
):
    d = svc.pay_dispense(db, dispense_id, payload.amount)
    return ok(_out(d), message="Payment recorded")


@router.get("/dispenses/{dispense_id}/bill.pdf")
def bill_pdf(
    dispense_id: int,
    download: bool = Query(False),
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*READ_ROLES)),
):
    """Printable bill; inline by default, as an attachment with ``?download=true``."""
    d = svc.get_dispense(db, dispense_id)
    data = generate_bill_pdf(d)
    filename = f"bill_{d.bill_number or d.id}.pdf"
    disposition = "attachment" if download else "inline"
    return StreamingResponse(
        io.BytesIO(data),
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )


# =============================================================================
#                                 PREFILL
# =============================================================================
@router.get("/prefill")
def prefill(
    appointment_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*WRITE_ROLES)),
):
    items = svc.prefill_from_prescription(db, appointment_id=appointment_id, patient_id=patient_id)
    return ok([PrefillItem(**it) for it in items])


# =============================================================================
#                                 CATALOG
# =============================================================================
@router.get("/medicines")
def api_medicines(
    q: str = Query("", description="Query by name"),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    _user: User = Depends(require_roles(*WRITE_ROLES)),
):
    results = svc.search_medicines(db, q=q, limit=limit)
    return ok(
        [
            MedicineOut(
                id=int(m.id),
                label=m.label(),
                name=m.name,
                strength=m.strength or "",
                form=m.form or "",
                stock_qty=int(m.stock_qty or 0),
                selling_price=float(m.selling_price or 0),
                is_low_stock=m.is_low_stock,
            )
            for m in results
        ]
    )
