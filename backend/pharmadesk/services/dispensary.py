# pharmadesk/services/dispensary.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.appointment import Appointment
from ..models.dispense import Dispense, PAYMENT_PENDING
from ..models.medical_record import MedicalRecord
from ..models.medicine import Medicine
from ..models.patient import Patient
from ..schemas.dispense import DispenseCreate, DispenseUpdate
from ..utils.dates import normalize_day
from .billing import (
    money,
    bill_suffix_for_id,
    compute_totals,
    generate_bill_number,
    payment_status_for,
    to_number,
)

logger = logging.getLogger(__name__)


# =============================================================================
#                          IDENTIFICATION / RESOLVER
# =============================================================================
@dataclass(frozen=True)
class ByPatient:
    patient_id: int


@dataclass(frozen=True)
class ByToken:
    day: datetime
    token: int


Identification = Union[ByPatient, ByToken]


@dataclass
class DispenseContext:
    patient: Patient
    appointment: Optional[Appointment] = None
    appointment_day: Optional[datetime] = None
    daily_token: Optional[int] = None


def _day_or_400(value: Any) -> datetime:
    try:
        return normalize_day(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="date must be an ISO-8601 date")


def identify(
    patient_id: Optional[int] = None,
    date: Optional[Any] = None,
    token: Optional[int] = None,
) -> Identification:
    """Pick the identification scheme; date + token wins over a patient id."""
    if date is not None and token is not None:
        return ByToken(day=_day_or_400(date), token=int(token))
    if patient_id is not None:
        return ByPatient(patient_id=int(patient_id))
    raise HTTPException(status_code=400, detail="Provide (date and token) or patient")


def resolve_context(db: Session, ident: Identification) -> DispenseContext:
    if isinstance(ident, ByToken):
        appointment = (
            db.query(Appointment)
            .filter(Appointment.appointment_day == ident.day, Appointment.daily_token == ident.token)
            .first()
        )
        if not appointment:
            raise HTTPException(status_code=404, detail="No appointment found for given token and date")
        patient = db.get(Patient, appointment.patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found from appointment")
        return DispenseContext(
            patient=patient,
            appointment=appointment,
            appointment_day=ident.day,
            daily_token=ident.token,
        )

    patient = db.get(Patient, ident.patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return DispenseContext(patient=patient)


# =============================================================================
#                               CATALOG LOOKUPS
# =============================================================================
def find_exact_medicine(db: Session, name: str, strength: Optional[str], form: Optional[str]) -> Optional[Medicine]:
    return (
        db.query(Medicine)
        .filter(
            Medicine.name == name,
            func.coalesce(Medicine.strength, "") == (strength or ""),
            func.coalesce(Medicine.form, "") == (form or ""),
        )
        .order_by(Medicine.id.asc())
        .first()
    )


def find_catalog_medicine(db: Session, item: Dict[str, Any]) -> Optional[Medicine]:
    """Exact (name, strength, form) when the item carries either; else by name alone."""
    name = item.get("name")
    if not name:
        return None
    med = None
    if item.get("strength") or item.get("form"):
        med = find_exact_medicine(db, name, item.get("strength"), item.get("form"))
    if med is None:
        med = db.query(Medicine).filter(Medicine.name == name).order_by(Medicine.id.asc()).first()
    return med


def search_medicines(db: Session, q: str = "", limit: int = 10) -> List[Medicine]:
    query = db.query(Medicine)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(func.lower(Medicine.name).like(func.lower(like)))
    return (
        query.order_by(func.coalesce(Medicine.stock_qty, 0).desc(), func.lower(Medicine.name).asc())
        .limit(limit)
        .all()
    )


# =============================================================================
#                        BEST-EFFORT SIDE EFFECTS
# =============================================================================
def decrement_stock(db: Session, items: Sequence[Dict[str, Any]]) -> int:
    """
    Decrement catalog stock for each dispensed line, clamped at 0.

    Unmatched items are skipped. Any failure stops the pass, is logged as a warning
    and is not raised; decrements already committed stay committed.
    Returns the number of medicines adjusted.
    """
    adjusted = 0
    try:
        for it in items:
            med = find_catalog_medicine(db, it)
            if med is None:
                continue
            remaining = to_number(med.stock_qty) - to_number(it.get("quantity"))
            med.stock_qty = int(max(0, remaining))
            db.commit()
            adjusted += 1
    except Exception as e:
        db.rollback()
        logger.warning("Stock decrement failed: %s", e)
    return adjusted


def mark_appointment_dispensed(db: Session, appointment_id: Optional[int]) -> bool:
    if appointment_id is None:
        return False
    try:
        appointment = db.get(Appointment, appointment_id)
        if appointment is None:
            return False
        appointment.status = settings.DISPENSED_APPOINTMENT_STATUS
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.warning("Failed updating appointment %s to dispensed: %s", appointment_id, e)
        return False


# =============================================================================
#                           DISPENSE LIFECYCLE
# =============================================================================
def list_dispenses(
    db: Session,
    patient_id: Optional[int] = None,
    date: Optional[str] = None,
    token: Optional[int] = None,
) -> List[Dispense]:
    by_token = date is not None and token is not None
    if patient_id is None and not by_token:
        raise HTTPException(status_code=400, detail="Provide patient_id or (date and token)")

    query = db.query(Dispense)
    if patient_id is not None:
        query = query.filter(Dispense.patient_id == patient_id)
    if by_token:
        query = query.filter(
            Dispense.appointment_day == _day_or_400(date),
            Dispense.daily_token == int(token),
        )
    return query.order_by(Dispense.created_at.desc(), Dispense.id.desc()).all()


def get_dispense(db: Session, dispense_id: int) -> Dispense:
    d = db.get(Dispense, dispense_id)
    if not d:
        raise HTTPException(status_code=404, detail="Dispense record not found")
    return d


def create_dispense(db: Session, payload: DispenseCreate, user_id: Optional[int]) -> Dispense:
    ctx = resolve_context(db, identify(payload.patient, payload.date, payload.token))

    items = [it.model_dump() for it in payload.items]
    totals = compute_totals(items, payload.tax)

    d = Dispense(
        patient_id=ctx.patient.id,
        appointment_id=ctx.appointment.id if ctx.appointment else None,
        appointment_day=ctx.appointment_day,
        daily_token=ctx.daily_token,
        subtotal=totals["subtotal"],
        tax=money(payload.tax),
        total=totals["total"],
        payment_status=PAYMENT_PENDING,
        paid_amount=0.0,
        bill_number=generate_bill_number() if settings.BILL_NUMBER_ON_CREATE else None,
        dispensed_by=user_id,
    )
    d.items = items

    try:
        db.add(d)
        db.commit()
    except Exception:
        db.rollback()
        raise
    dispense_id = d.id
    logger.info(
        "Dispense %s created for patient %s (total=%.2f, bill=%s)",
        dispense_id, d.patient_id, d.total, d.bill_number,
    )

    # Record is durable from here on; side effects below never fail the request.
    decrement_stock(db, items)
    mark_appointment_dispensed(db, d.appointment_id)

    return get_dispense(db, dispense_id)


def update_dispense(db: Session, dispense_id: int, payload: DispenseUpdate) -> Dispense:
    d = get_dispense(db, dispense_id)

    items = [it.model_dump() for it in payload.items] if payload.items is not None else d.items
    tax = payload.tax if payload.tax is not None else d.tax
    totals = compute_totals(items, tax)

    d.items = items
    d.tax = money(tax)
    d.subtotal = totals["subtotal"]
    d.total = totals["total"]

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(d)
    return d


def pay_dispense(db: Session, dispense_id: int, amount: float) -> Dispense:
    d = get_dispense(db, dispense_id)

    d.paid_amount = money(to_number(d.paid_amount) + to_number(amount))
    d.payment_status = payment_status_for(d.paid_amount, d.total, d.payment_status or PAYMENT_PENDING)

    if not d.bill_number and d.payment_status != PAYMENT_PENDING:
        d.bill_number = generate_bill_number(suffix=bill_suffix_for_id(d.id))

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(d)
    logger.info("Payment of %.2f recorded on dispense %s (%s)", to_number(amount), d.id, d.payment_status)
    return d


# =============================================================================
#                          PRESCRIPTION PREFILL
# =============================================================================
def compose_notes(
    strength: Optional[str] = None,
    dosage: Optional[str] = None,
    frequency: Optional[str] = None,
    duration: Optional[str] = None,
) -> str:
    parts = [f"({strength.strip()})" if strength and strength.strip() else ""]
    parts += [(p or "").strip() for p in (dosage, frequency, duration)]
    return " ".join(p for p in parts if p).strip()


def prefill_from_prescription(
    db: Session,
    appointment_id: Optional[int] = None,
    patient_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    appointment = None
    if appointment_id is not None:
        appointment = db.get(Appointment, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        patient = db.get(Patient, appointment.patient_id)
    elif patient_id is not None:
        patient = db.get(Patient, patient_id)
    else:
        raise HTTPException(status_code=400, detail="Provide appointment_id or patient_id")
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")

    query = db.query(MedicalRecord).filter(
        MedicalRecord.patient_id == patient.id,
        MedicalRecord.medications.any(),
    )
    if appointment is not None:
        query = query.filter(MedicalRecord.appointment_id == appointment.id)
    record = query.order_by(MedicalRecord.visit_date.desc(), MedicalRecord.id.desc()).first()
    if not record or not record.medications:
        return []

    items: List[Dict[str, Any]] = []
    for med in record.medications:
        lookup = find_exact_medicine(db, med.name, med.strength, med.form)
        items.append(
            {
                "name": med.name,
                "strength": med.strength or "",
                "form": med.form or "",
                "duration": med.duration or "",
                "quantity": 1,
                "unit_price": float(lookup.selling_price or 0) if lookup else 0.0,
                "notes": compose_notes(med.strength, med.dosage, med.frequency, med.duration),
            }
        )
    return items
