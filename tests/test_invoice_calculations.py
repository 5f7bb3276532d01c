from datetime import date

from bizznex.domain.invoices.calculations import (
    OVERDUE,
    PAID,
    PENDING,
    compute_grand_total,
    compute_subtotal,
    compute_tax_amounts,
    derive_payment_status,
    is_overdue,
    round_money,
)
from bizznex.domain.invoices.schemas import InvoiceItemIn, TaxItemIn
from bizznex.domain.invoices.service import compute_invoice_totals


def test_subtotal_multiplies_quantity_by_rate():
    items = [{"quantity": 2, "rate": 50}, {"quantity": 1, "rate": 25.5}]
    assert compute_subtotal(items) == 125.5


def test_subtotal_of_no_items_is_zero():
    assert compute_subtotal([]) == 0


def test_tax_amounts_are_computed_from_rate():
    taxes = [{"name": "VAT", "rate": 10, "amount": 999}]
    lines = compute_tax_amounts(100, taxes)

    assert [(t.name, t.rate, t.amount) for t in lines] == [("VAT", 10, 10)]
    # Input is not mutated
    assert taxes[0]["amount"] == 999


def test_grand_total_adds_tax_amounts():
    lines = compute_tax_amounts(100, [{"name": "VAT", "rate": 10}, {"name": "City", "rate": 2.5}])
    assert compute_grand_total(100, lines) == 112.5


def test_round_money_rounds_half_up():
    assert round_money(0.125) == 0.13
    assert round_money(2.675) == 2.68
    assert round_money(None) == 0


def test_invoice_totals_ignore_submitted_amounts():
    totals = compute_invoice_totals(
        [InvoiceItemIn(description=" Lawn care ", quantity=2, rate=50, amount=1)],
        [TaxItemIn(name="VAT", rate=10, amount=0)],
    )

    assert totals.items[0].description == "Lawn care"
    assert totals.items[0].amount == 100
    assert totals.subtotal == 100
    assert totals.tax_amount == 10
    assert totals.tax_rate == 10
    assert totals.total == 110


def test_payment_status_paid_when_covered():
    assert derive_payment_status(110, 110, PENDING) == PAID
    assert derive_payment_status(110, 110, OVERDUE) == PAID


def test_payment_status_partial_keeps_overdue():
    assert derive_payment_status(110, 60, OVERDUE) == OVERDUE
    assert derive_payment_status(110, 60, PENDING) == PENDING
    assert derive_payment_status(110, 60, "Draft") == PENDING


def test_is_overdue_only_for_unpaid_pending_past_due():
    today = date(2024, 6, 15)
    past = date(2024, 6, 1)

    assert is_overdue(PENDING, past, 0, 100, today) is True
    assert is_overdue(PENDING, past, 100, 100, today) is False
    assert is_overdue(PENDING, today, 0, 100, today) is False
    assert is_overdue("Draft", past, 0, 100, today) is False
    assert is_overdue(PAID, past, 0, 100, today) is False
    assert is_overdue(PENDING, None, 0, 100, today) is False


def test_tax_amounts_are_idempotent():
    taxes = [{"name": "VAT", "rate": 7.5}, {"name": "City", "rate": 1}]
    assert compute_tax_amounts(240, taxes) == compute_tax_amounts(240, taxes)


def test_status_law_across_payments():
    assert derive_payment_status(100, 40, PENDING) == PENDING
    assert derive_payment_status(100, 100, PENDING) == PAID
    assert derive_payment_status(100, 30, OVERDUE) == OVERDUE
