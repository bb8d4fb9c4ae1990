"""
Money helpers shared by every dispense operation.

``compute_totals`` is the only place subtotal and total are derived. Bill numbers come
from ``generate_bill_number``, both at creation and at first payment.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

import shortuuid

from ..models.dispense import PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_PENDING

BILL_SUFFIX_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
BILL_SUFFIX_LENGTH = 5


def money(n: float) -> float:
    return round(float(n or 0.0), 2)


def to_number(value: Any) -> float:
    """Coerce ``value`` to float; anything missing or non-numeric counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def _field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def compute_totals(items: Optional[Iterable[Any]] = None, tax: Any = 0) -> Dict[str, float]:
    """Return ``{"subtotal", "total"}`` for the given line items and tax. Never raises."""
    subtotal = 0.0
    for it in items or []:
        subtotal += to_number(_field(it, "quantity")) * to_number(_field(it, "unit_price"))
    subtotal = money(subtotal)
    return {"subtotal": subtotal, "total": money(subtotal + to_number(tax))}


def payment_status_for(paid_amount: Any, total: Any, current: str = PAYMENT_PENDING) -> str:
    paid = to_number(paid_amount)
    if paid >= to_number(total):
        return PAYMENT_PAID
    if paid > 0:
        return PAYMENT_PARTIAL
    return current


def generate_bill_number(suffix: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    ``YYYYMMDD-<last 6 digits of epoch millis>-<suffix>``.

    Without an explicit suffix a short random one is used. Not globally unique;
    collisions are possible but negligible.
    """
    now = now or datetime.now()
    millis = str(int(now.timestamp() * 1000))[-6:].rjust(6, "0")
    if not suffix:
        suffix = shortuuid.ShortUUID(alphabet=BILL_SUFFIX_ALPHABET).random(length=BILL_SUFFIX_LENGTH)
    return f"{now:%Y%m%d}-{millis}-{suffix}"


def bill_suffix_for_id(record_id: Any) -> str:
    return str(record_id).rjust(6, "0")[-6:]
