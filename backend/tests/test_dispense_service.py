from datetime import date, datetime

import pytest
from fastapi import HTTPException

from pharmadesk.models import Appointment
from pharmadesk.services import dispensary as svc
from pharmadesk.utils.dates import normalize_day


def test_normalize_day_zeroes_time():
    assert normalize_day("2024-03-01T15:45:10") == datetime(2024, 3, 1)
    assert normalize_day("2024-03-01T15:45:10Z") == datetime(2024, 3, 1)
    # the offset is dropped, the wall-clock day is kept
    assert normalize_day("2024-03-01T23:30:00-05:00") == datetime(2024, 3, 1)
    assert normalize_day(date(2024, 3, 1)) == datetime(2024, 3, 1)


def test_identify_prefers_token_over_patient():
    ident = svc.identify(patient_id=3, date="2024-03-01", token=7)
    assert ident == svc.ByToken(day=datetime(2024, 3, 1), token=7)


def test_identify_by_patient_and_missing_scheme():
    assert svc.identify(patient_id=3) == svc.ByPatient(patient_id=3)
    # a date without a token is not a usable scheme
    with pytest.raises(HTTPException) as exc:
        svc.identify(date="2024-03-01")
    assert exc.value.status_code == 400


def test_identify_rejects_bad_date():
    with pytest.raises(HTTPException) as exc:
        svc.identify(date="not-a-date", token=1)
    assert exc.value.status_code == 400


def test_resolve_by_token(db, appointment, patient):
    ctx = svc.resolve_context(db, svc.ByToken(day=datetime(2024, 3, 1), token=7))
    assert ctx.patient.id == patient.id
    assert ctx.appointment.id == appointment.id
    assert ctx.appointment_day == datetime(2024, 3, 1)
    assert ctx.daily_token == 7


def test_resolve_by_patient(db, patient):
    ctx = svc.resolve_context(db, svc.ByPatient(patient_id=patient.id))
    assert ctx.patient.id == patient.id
    assert ctx.appointment is None and ctx.daily_token is None


def test_resolve_failures(db, patient):
    with pytest.raises(HTTPException) as exc:
        svc.resolve_context(db, svc.ByPatient(patient_id=999))
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        svc.resolve_context(db, svc.ByToken(day=datetime(2024, 3, 2), token=1))
    assert exc.value.status_code == 404

    orphan = Appointment(
        patient_id=999,
        appointment_date=datetime(2024, 3, 2, 9, 0),
        appointment_day=datetime(2024, 3, 2),
        daily_token=3,
    )
    db.add(orphan)
    db.commit()
    with pytest.raises(HTTPException) as exc:
        svc.resolve_context(db, svc.ByToken(day=datetime(2024, 3, 2), token=3))
    assert exc.value.status_code == 404
    assert exc.value.detail == "Patient not found from appointment"


def test_catalog_match_prefers_strength_and_form(db, medicines):
    med = svc.find_catalog_medicine(db, {"name": "Paracetamol", "strength": "650 mg", "form": "tablet"})
    assert med.id == medicines["para650"].id


def test_catalog_match_falls_back_to_name(db, medicines):
    med = svc.find_catalog_medicine(db, {"name": "Paracetamol", "strength": "1 g"})
    assert med.id == medicines["para500"].id
    assert svc.find_catalog_medicine(db, {"name": "Unknown"}) is None


def test_decrement_stock_clamps_and_skips(db, medicines):
    items = [
        {"name": "Paracetamol", "strength": "500 mg", "form": "tablet", "quantity": 10},
        {"name": "Cough Syrup", "quantity": 8},
        {"name": "Not In Catalog", "quantity": 1},
    ]
    assert svc.decrement_stock(db, items) == 2
    db.expire_all()
    assert medicines["para500"].stock_qty == 90
    assert medicines["syrup"].stock_qty == 0


def test_decrement_stock_swallows_failures(db, medicines, monkeypatch, caplog):
    def boom(db, item):
        raise RuntimeError("catalog down")

    monkeypatch.setattr(svc, "find_catalog_medicine", boom)
    assert svc.decrement_stock(db, [{"name": "Paracetamol", "quantity": 1}]) == 0
    assert "Stock decrement failed" in caplog.text


@pytest.mark.parametrize(
    "args, expected",
    [
        (("500 mg", "1 tab", "twice daily", "5 days"), "(500 mg) 1 tab twice daily 5 days"),
        ((None, "1 tab", "", "3 days"), "1 tab 3 days"),
        (("", None, None, None), ""),
        ((" 10 mg ", " ", "at night", None), "(10 mg) at night"),
    ],
)
def test_compose_notes(args, expected):
    assert svc.compose_notes(*args) == expected
