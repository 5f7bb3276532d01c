"""
Invoice math - line amounts, tax lines, totals and payment status.

Pure functions with no database access. Items and tax items may be objects
with attributes or plain mappings.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

from pydantic import BaseModel

PAID = "Paid"
PENDING = "Pending"
OVERDUE = "Overdue"
DRAFT = "Draft"


class TaxLine(BaseModel):
    name: str
    rate: float
    amount: float


def _get(obj: Any, key: str, default=None):
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def round_money(value: float) -> float:
    """Round half-up to cents (0.125 -> 0.13, unlike round())"""
    return float(Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_line_amount(quantity: float, rate: float) -> float:
    return quantity * rate


def compute_subtotal(items: Iterable[Any]) -> float:
    return sum(
        (compute_line_amount(_get(item, "quantity", 0), _get(item, "rate", 0)) for item in items),
        0.0,
    )


def compute_tax_amounts(subtotal: float, tax_items: Iterable[Any]) -> list[TaxLine]:
    """New tax lines with ``amount = subtotal * rate / 100``; the input is left untouched"""
    return [
        TaxLine(
            name=_get(tax, "name", "") or "",
            rate=_get(tax, "rate", 0) or 0,
            amount=subtotal * (_get(tax, "rate", 0) or 0) / 100,
        )
        for tax in tax_items
    ]


def compute_grand_total(subtotal: float, tax_items: Iterable[Any]) -> float:
    return subtotal + sum((_get(tax, "amount", 0) or 0 for tax in tax_items), 0.0)


def derive_payment_status(total: float, new_amount_paid: float, previous_status: str) -> str:
    """
    Status after a payment: Paid once fully covered, an Overdue invoice
    stays Overdue until then, anything else is Pending.
    """
    if new_amount_paid >= total:
        return PAID
    if previous_status == OVERDUE:
        return OVERDUE
    return PENDING


def is_overdue(
    status: str,
    due_date: Optional[date],
    amount_paid: float,
    total: float,
    today: Optional[date] = None,
) -> bool:
    """True when a Pending invoice is past due and not fully paid"""
    today = today or date.today()
    if status != PENDING or due_date is None:
        return False
    return due_date < today and (amount_paid or 0) < (total or 0)
