"""Invoice service - Business logic for invoice operations"""

import logging
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models import Profile
from ...models_invoice import Invoice, InvoiceItem
from .calculations import (
    DRAFT,
    OVERDUE,
    PAID,
    PENDING,
    TaxLine,
    compute_grand_total,
    compute_line_amount,
    compute_subtotal,
    compute_tax_amounts,
    is_overdue,
    round_money,
)
from .pdf_service import render_invoice_pdf
from .repository import InvoiceRepository
from .schemas import (
    BusinessSnapshot,
    ClientSnapshot,
    InvoiceCreate,
    InvoiceDocumentPayload,
    InvoiceItemIn,
    InvoicePdfRequest,
    InvoiceUpdate,
    LineItem,
    TaxItem,
    TaxItemIn,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_TERMS_DAYS = 30


class InvoiceTotals(BaseModel):
    """Server-side figures for a set of line items and tax items"""

    items: list[LineItem]
    tax_lines: list[TaxLine]
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float


class InvoiceDocument(BaseModel):
    """Outcome of the save-then-render flow; the PDF exists even when the save failed"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    invoice: Optional[Invoice] = None
    pdf_bytes: bytes
    persisted: bool
    error: Optional[str] = None


def compute_invoice_totals(
    items: list[InvoiceItemIn], tax_items: list[TaxItemIn]
) -> InvoiceTotals:
    """Recompute every amount from quantities and rates; submitted amounts are ignored"""
    line_items = [
        LineItem(
            description=item.description.strip(),
            quantity=item.quantity,
            rate=round_money(item.rate),
            amount=round_money(compute_line_amount(item.quantity, item.rate)),
        )
        for item in items
    ]
    subtotal = round_money(compute_subtotal(line_items))
    tax_lines = [
        tax.model_copy(update={"amount": round_money(tax.amount)})
        for tax in compute_tax_amounts(subtotal, tax_items)
    ]
    return InvoiceTotals(
        items=line_items,
        tax_lines=tax_lines,
        subtotal=subtotal,
        tax_rate=round(sum(tax.rate for tax in tax_lines), 4),
        tax_amount=round_money(sum(tax.amount for tax in tax_lines)),
        total=round_money(compute_grand_total(subtotal, tax_lines)),
    )


def validate_items(items: list[InvoiceItemIn]) -> None:
    if not items:
        raise ValidationError("At least one line item is required")
    for index, item in enumerate(items, start=1):
        if not item.description or not item.description.strip():
            raise ValidationError(f"Description is required for item {index}")


def business_snapshot(profile: Optional[Profile]) -> BusinessSnapshot:
    if profile is None:
        return BusinessSnapshot()
    return BusinessSnapshot(
        company=profile.company,
        full_name=profile.full_name,
        email=profile.email,
        address=profile.address,
        phone=profile.phone,
        website=profile.website,
        tax_id=profile.tax_id,
    )


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session, profile: Optional[Profile] = None):
        self.db = db
        self.profile = profile
        self.repo = InvoiceRepository()

    # ========================================================================
    # NUMBERING & STATUS
    # ========================================================================

    def generate_invoice_number(self, on: Optional[date] = None) -> str:
        """
        Next number in the ``INV-YYYYMM-NNN`` sequence for the month.

        NNN starts from the count of numbers already issued with the month's
        prefix; it skips ahead if that number is taken.
        """
        on = on or date.today()
        prefix = f"INV-{on:%Y%m}-"
        sequence = self.repo.count_invoice_numbers(self.db, prefix) + 1
        invoice_number = f"{prefix}{sequence:03d}"
        while self.repo.invoice_number_exists(self.db, invoice_number):
            sequence += 1
            invoice_number = f"{prefix}{sequence:03d}"
        return invoice_number

    def refresh_overdue(self, invoices: list[Invoice], today: Optional[date] = None) -> None:
        """Flip unpaid Pending invoices past their due date to Overdue"""
        today = today or date.today()
        overdue = [
            inv
            for inv in invoices
            if is_overdue(inv.status, inv.due_date, inv.amount_paid, inv.total_amount, today)
        ]
        if not overdue:
            return
        try:
            self.repo.mark_overdue(self.db, overdue)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to mark {len(overdue)} invoice(s) overdue: {e}")
            raise PersistenceError("Failed to update overdue invoices") from e
        logger.info(f"⏰ Marked {len(overdue)} invoice(s) overdue")

    # ========================================================================
    # CORE CRUD OPERATIONS
    # ========================================================================

    def _validate_create(self, data: InvoiceCreate) -> InvoiceTotals:
        if not data.client_id:
            raise ValidationError("Please select a client")
        validate_items(data.items)
        if not self.repo.get_client_by_id(self.db, data.client_id):
            raise NotFoundError("Client not found")
        if data.job_id is not None and not self.repo.get_job_by_id(self.db, data.job_id):
            raise NotFoundError("Job not found")
        if data.invoice_number and self.repo.invoice_number_exists(self.db, data.invoice_number):
            raise ValidationError(f"Invoice number {data.invoice_number} already exists")
        return compute_invoice_totals(data.items, data.tax_items)

    def _persist(self, data: InvoiceCreate, totals: InvoiceTotals, status: str) -> Invoice:
        due_date = data.due_date or data.invoice_date + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS)
        invoice_number = data.invoice_number
        try:
            invoice_number = invoice_number or self.generate_invoice_number(data.invoice_date)
            invoice = self.repo.create_invoice(
                self.db,
                items=[item.model_dump() for item in totals.items],
                client_id=data.client_id,
                job_id=data.job_id,
                invoice_number=invoice_number,
                invoice_date=data.invoice_date,
                due_date=due_date,
                subtotal=totals.subtotal,
                tax_rate=totals.tax_rate,
                tax_amount=totals.tax_amount,
                total_amount=totals.total,
                amount_paid=0,
                status=status,
                notes=data.notes,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save invoice {invoice_number or 'new invoice'}: {e}")
            raise PersistenceError("Failed to save invoice") from e

        logger.info(
            f"🧾 Created invoice {invoice.invoice_number} for client {invoice.client_id}: "
            f"{len(totals.items)} item(s), total {invoice.total_amount:.2f}, status {status}"
        )
        return invoice

    def create_invoice(self, data: InvoiceCreate, status: Optional[str] = None) -> Invoice:
        """Validate, compute totals and store the invoice with its items in one transaction"""
        totals = self._validate_create(data)
        return self._persist(data, totals, status or data.status)

    def create_invoice_document(
        self, data: InvoiceCreate, status: Optional[str] = None
    ) -> InvoiceDocument:
        """
        Save the invoice, then render its PDF.

        Validation errors still raise. A failed save is logged and reported
        on the result, and the PDF is rendered from the computed figures anyway.
        """
        totals = self._validate_create(data)

        invoice = None
        error = None
        try:
            invoice = self._persist(data, totals, status or data.status)
        except PersistenceError as e:
            logger.warning(f"⚠️ Invoice not saved, continuing with PDF: {e.message}")
            error = e.message

        if invoice is not None:
            payload = self.build_payload(invoice)
        else:
            client = self.repo.get_client_by_id(self.db, data.client_id)
            payload = InvoiceDocumentPayload(
                invoice_number=data.invoice_number or "DRAFT",
                invoice_date=data.invoice_date,
                due_date=data.due_date,
                client=ClientSnapshot(
                    name=client.name, email=client.email, phone=client.phone, address=client.address
                ),
                items=totals.items,
                subtotal=totals.subtotal,
                tax_items=[TaxItem(**tax.model_dump()) for tax in totals.tax_lines],
                total=totals.total,
                status=status or data.status,
                notes=data.notes,
                business=business_snapshot(self._business_profile()),
            )

        pdf_bytes = render_invoice_pdf(payload)
        return InvoiceDocument(
            invoice=invoice, pdf_bytes=pdf_bytes, persisted=invoice is not None, error=error
        )

    def get_invoices(
        self, status: Optional[str] = None, client_id: Optional[int] = None
    ) -> list[Invoice]:
        """Get invoices newest first, with overdue status brought up to date"""
        self.refresh_overdue(self.repo.get_invoices(self.db, "Pending", client_id))
        return self.repo.get_invoices(self.db, status, client_id)

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        self.refresh_overdue([invoice])
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == PAID:
            raise ValidationError("Paid invoices cannot be edited")

        updates = data.model_dump(exclude_unset=True, exclude={"items", "tax_items"})
        for required in ("invoice_number", "invoice_date", "due_date", "status"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty")
        if updates.get("status") == DRAFT and (invoice.amount_paid or 0) > 0:
            raise ValidationError("Invoices with payments cannot be returned to Draft")

        # A new due date that is not past lifts an unpaid invoice out of Overdue
        if (
            "due_date" in updates
            and invoice.status == OVERDUE
            and "status" not in updates
            and (invoice.amount_paid or 0) < (invoice.total_amount or 0)
            and updates["due_date"] >= date.today()
        ):
            updates["status"] = PENDING

        if updates.get("job_id") is not None and not self.repo.get_job_by_id(
            self.db, updates["job_id"]
        ):
            raise NotFoundError("Job not found")
        new_number = updates.get("invoice_number")
        if (
            new_number
            and new_number != invoice.invoice_number
            and self.repo.invoice_number_exists(self.db, new_number)
        ):
            raise ValidationError(f"Invoice number {new_number} already exists")

        items = None
        if data.items is not None or data.tax_items is not None:
            if data.items is not None:
                validate_items(data.items)
                item_inputs = data.items
            else:
                item_inputs = [
                    InvoiceItemIn(description=i.description, quantity=i.quantity, rate=i.rate)
                    for i in invoice.items
                ]
            if data.tax_items is not None:
                tax_inputs = data.tax_items
            else:
                # Tax lines are stored folded into a single rate
                tax_inputs = [TaxItemIn(name="Tax", rate=invoice.tax_rate or 0)]

            totals = compute_invoice_totals(item_inputs, tax_inputs)
            items = [item.model_dump() for item in totals.items]
            updates.update(
                subtotal=totals.subtotal,
                tax_rate=totals.tax_rate,
                tax_amount=totals.tax_amount,
                total_amount=totals.total,
            )
            new_status = updates.get("status", invoice.status)
            if (invoice.amount_paid or 0) >= totals.total and new_status != DRAFT:
                updates["status"] = PAID

        try:
            invoice = self.repo.update_invoice(self.db, invoice, items=items, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update invoice {invoice_id}: {e}")
            raise PersistenceError("Failed to update invoice") from e

        logger.info(f"✏️ Updated invoice {invoice.invoice_number}: {sorted(updates)}")
        return invoice

    def delete_invoice(self, invoice_id: int) -> None:
        invoice = self.get_invoice(invoice_id)
        try:
            self.repo.delete_invoice(self.db, invoice)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete invoice {invoice_id}: {e}")
            raise PersistenceError("Failed to delete invoice") from e
        logger.info(f"🗑️ Deleted invoice {invoice_id} with its items and payments")

    def get_items(self, invoice_id: int) -> list[InvoiceItem]:
        if not self.repo.get_invoice_by_id(self.db, invoice_id):
            raise NotFoundError("Invoice not found")
        return self.repo.get_items(self.db, invoice_id)

    # ========================================================================
    # DOCUMENTS
    # ========================================================================

    def _business_profile(self) -> Optional[Profile]:
        if self.profile is not None:
            return self.profile
        return self.repo.get_business_profile(self.db)

    def build_payload(self, invoice: Invoice) -> InvoiceDocumentPayload:
        """Normalize a stored invoice for rendering"""
        client = invoice.client
        tax_items = []
        if invoice.tax_amount:
            tax_items.append(
                TaxItem(name="Tax", rate=invoice.tax_rate or 0, amount=invoice.tax_amount)
            )
        return InvoiceDocumentPayload(
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            client=ClientSnapshot(
                name=client.name, email=client.email, phone=client.phone, address=client.address
            ),
            items=[
                LineItem(
                    description=item.description,
                    quantity=item.quantity,
                    rate=item.rate,
                    amount=item.amount,
                )
                for item in invoice.items
            ],
            subtotal=invoice.subtotal,
            tax_items=tax_items,
            total=invoice.total_amount,
            amount_paid=invoice.amount_paid or 0,
            status=invoice.status,
            notes=invoice.notes,
            business=business_snapshot(self._business_profile()),
        )

    def render_document(self, invoice_id: int) -> tuple[Invoice, bytes]:
        invoice = self.get_invoice(invoice_id)
        return invoice, render_invoice_pdf(self.build_payload(invoice))

    def render_adhoc_document(self, data: InvoicePdfRequest) -> bytes:
        """Render a PDF from a submitted invoice without saving anything"""
        client = data.client
        if client is None and data.clientId is not None:
            stored = self.repo.get_client_by_id(self.db, data.clientId)
            if stored:
                client = ClientSnapshot(
                    name=stored.name, email=stored.email, phone=stored.phone, address=stored.address
                )
        if client is None or not client.name:
            raise ValidationError("Client not found or invalid client information provided")

        validate_items(data.items)
        totals = compute_invoice_totals(data.items, data.taxItems)
        business = data.businessProfile or business_snapshot(self._business_profile())
        payload = InvoiceDocumentPayload(
            invoice_number=data.invoiceNumber,
            invoice_date=data.invoiceDate,
            due_date=data.dueDate,
            client=client,
            items=totals.items,
            subtotal=totals.subtotal,
            tax_items=[TaxItem(**tax.model_dump()) for tax in totals.tax_lines],
            total=totals.total,
            amount_paid=round_money(data.amountPaid),
            status=data.status,
            notes=data.notes,
            business=business,
        )
        return render_invoice_pdf(payload)
