"""Invoice repository - Database operations for invoices, items and payments"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Client, Job, Profile
from ...models_invoice import Invoice, InvoiceItem, Payment


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(
        db: Session, status: Optional[str] = None, client_id: Optional[int] = None
    ) -> list[Invoice]:
        """Get invoices with their client, newest first"""
        query = db.query(Invoice).options(joinedload(Invoice.client))
        if status:
            query = query.filter(Invoice.status == status)
        if client_id is not None:
            query = query.filter(Invoice.client_id == client_id)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(
                joinedload(Invoice.client),
                selectinload(Invoice.items),
                selectinload(Invoice.payments),
            )
            .filter(Invoice.id == invoice_id)
            .first()
        )

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_job_by_id(db: Session, job_id: int) -> Optional[Job]:
        return db.query(Job).filter(Job.id == job_id).first()

    @staticmethod
    def get_business_profile(db: Session, profile_id: Optional[str] = None) -> Optional[Profile]:
        """The caller's profile, or the most recently updated one"""
        query = db.query(Profile)
        if profile_id:
            return query.filter(Profile.id == profile_id).first()
        return query.order_by(Profile.updated_at.desc()).first()

    @staticmethod
    def count_invoice_numbers(db: Session, prefix: str) -> int:
        return (
            db.query(func.count(Invoice.id))
            .filter(Invoice.invoice_number.like(f"{prefix}%"))
            .scalar()
            or 0
        )

    @staticmethod
    def invoice_number_exists(db: Session, invoice_number: str) -> bool:
        return (
            db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first()
            is not None
        )

    @staticmethod
    def create_invoice(db: Session, items: list[dict], **invoice_data) -> Invoice:
        """Insert the header and its items in a single commit"""
        invoice = Invoice(**invoice_data)
        invoice.items = [InvoiceItem(**item) for item in items]
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def update_invoice(
        db: Session, invoice: Invoice, items: Optional[list[dict]] = None, **updates
    ) -> Invoice:
        """Update header fields, replacing the line items when given"""
        for key, value in updates.items():
            if hasattr(invoice, key):
                setattr(invoice, key, value)
        if items is not None:
            invoice.items = [InvoiceItem(**item) for item in items]

        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def delete_invoice(db: Session, invoice: Invoice) -> None:
        db.delete(invoice)
        db.commit()

    @staticmethod
    def get_items(db: Session, invoice_id: int) -> list[InvoiceItem]:
        return (
            db.query(InvoiceItem)
            .filter(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.id.asc())
            .all()
        )

    @staticmethod
    def get_payments(db: Session, invoice_id: int) -> list[Payment]:
        """Payment history, newest first"""
        return (
            db.query(Payment)
            .filter(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all()
        )

    @staticmethod
    def add_payment(db: Session, invoice: Invoice, payment: Payment, **updates) -> Invoice:
        """Record a payment and the invoice's new balance/status in one commit"""
        for key, value in updates.items():
            setattr(invoice, key, value)
        db.add(payment)
        db.commit()
        db.refresh(invoice)
        db.refresh(payment)
        return invoice

    @staticmethod
    def mark_overdue(db: Session, invoices: list[Invoice]) -> None:
        for invoice in invoices:
            invoice.status = "Overdue"
        db.commit()
