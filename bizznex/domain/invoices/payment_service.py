"""Payment service - Apply payments to invoices and derive the resulting status"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import InvalidPaymentAmount, NotFoundError, PersistenceError
from ...models_invoice import Invoice, Payment
from .calculations import derive_payment_status, round_money
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for invoice payments"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def record_payment(
        self,
        invoice_id: int,
        amount: float,
        payment_date: Optional[date] = None,
        method: str = "Other",
        note: Optional[str] = None,
    ) -> tuple[Invoice, Payment]:
        """
        Apply a payment to an invoice.

        The amount must be positive and no more than the remaining balance.
        The new balance, the derived status and the Payment row are committed
        together.
        """
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")

        amount = round_money(amount)
        amount_paid = invoice.amount_paid or 0
        remaining = round_money(invoice.total_amount - amount_paid)
        if amount <= 0:
            raise InvalidPaymentAmount("Payment amount must be greater than zero")
        if amount > remaining:
            raise InvalidPaymentAmount(
                f"Payment amount {amount:.2f} exceeds the remaining balance of {remaining:.2f}"
            )

        previous_status = invoice.status
        new_amount_paid = round_money(amount_paid + amount)
        status = derive_payment_status(invoice.total_amount, new_amount_paid, previous_status)

        payment = Payment(
            invoice=invoice,
            amount=amount,
            payment_date=payment_date or date.today(),
            payment_method=method or "Other",
            note=note,
        )
        try:
            invoice = self.repo.add_payment(
                self.db, invoice, payment, amount_paid=new_amount_paid, status=status
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record payment on invoice {invoice_id}: {e}")
            raise PersistenceError("Failed to record payment") from e

        logger.info(
            f"💰 Recorded {method} payment of {amount:.2f} on {invoice.invoice_number}: "
            f"paid {new_amount_paid:.2f}/{invoice.total_amount:.2f}, "
            f"{previous_status} -> {status}"
        )
        return invoice, payment

    def list_payments(self, invoice_id: int) -> list[Payment]:
        """Payment history for an invoice, newest first"""
        if not self.repo.get_invoice_by_id(self.db, invoice_id):
            raise NotFoundError("Invoice not found")
        return self.repo.get_payments(self.db, invoice_id)
