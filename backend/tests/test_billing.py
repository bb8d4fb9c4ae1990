import re
from datetime import datetime
from types import SimpleNamespace

import pytest

from pharmadesk.services.billing import (
    bill_suffix_for_id,
    compute_totals,
    generate_bill_number,
    payment_status_for,
    to_number,
)


def test_totals_for_two_lines_and_tax():
    items = [{"quantity": 2, "unit_price": 50}, {"quantity": 1, "unit_price": 30}]
    assert compute_totals(items, 10) == {"subtotal": 130, "total": 140}


def test_tax_defaults_to_zero():
    assert compute_totals([{"quantity": 3, "unit_price": 2.5}]) == {"subtotal": 7.5, "total": 7.5}


@pytest.mark.parametrize(
    "item",
    [
        {"quantity": "abc", "unit_price": 10},
        {"quantity": 2, "unit_price": None},
        {"unit_price": 10},
        {"quantity": float("nan"), "unit_price": 10},
        {},
    ],
)
def test_non_numeric_fields_count_as_zero(item):
    items = [item, {"quantity": 1, "unit_price": 20}]
    assert compute_totals(items, "5") == {"subtotal": 20, "total": 25}


def test_numeric_strings_are_coerced():
    assert compute_totals([{"quantity": "2", "unit_price": "12.5"}], None)["subtotal"] == 25


def test_totals_accept_objects_and_empty_input():
    items = [SimpleNamespace(quantity=4, unit_price=1.25)]
    assert compute_totals(items, 1) == {"subtotal": 5, "total": 6}
    assert compute_totals(None) == {"subtotal": 0, "total": 0}


def test_to_number_rejects_bools():
    assert to_number(True) == 0
    assert to_number("1e2") == 100


@pytest.mark.parametrize(
    "paid, total, current, expected",
    [
        (0, 100, "pending", "pending"),
        (40, 100, "pending", "partial"),
        (100, 100, "partial", "paid"),
        (120, 100, "partial", "paid"),
        (0, 0, "pending", "paid"),
    ],
)
def test_payment_status(paid, total, current, expected):
    assert payment_status_for(paid, total, current) == expected


def test_bill_number_format_with_random_suffix():
    now = datetime(2024, 3, 1, 9, 15)
    bill = generate_bill_number(now=now)
    assert re.fullmatch(r"20240301-\d{6}-[0-9a-z]{5}", bill)
    assert bill.split("-")[1] == str(int(now.timestamp() * 1000))[-6:]


def test_bill_number_with_record_suffix():
    bill = generate_bill_number(suffix=bill_suffix_for_id(42), now=datetime(2025, 12, 31, 23, 59))
    assert bill.startswith("20251231-")
    assert bill.endswith("-000042")


def test_bill_suffix_keeps_last_six_digits():
    assert bill_suffix_for_id(1234567) == "234567"
