"""
Email Service using Resend
Sends transactional email (MJML templates or ad-hoc bodies) and records every attempt
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings
from .domain.email.repository import EmailLogRepository
from .domain.email.schemas import EmailLogCreate, EmailResult
from .email_templates import (
    invoice_email_template,
    job_confirmation_template,
    payment_received_template,
)
from .errors import NotFoundError, PersistenceError, ProviderError
from .models import Client, EmailLog, Job
from .models_invoice import Invoice, Payment

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Email service not configured"


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content.strip())
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise ValueError(f"Failed to compile MJML template: {str(e)}") from e


def delivery_error(result: EmailResult, action: str) -> ProviderError:
    """ProviderError for a failed send: 503 when email is not set up, 502 otherwise"""
    status_code = 503 if result.error == NOT_CONFIGURED else 502
    return ProviderError(f"Failed to {action}: {result.error}", status_code=status_code)


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else ""


class EmailService:
    """Sends email through Resend and keeps the send history"""

    def __init__(self, settings: Settings, db: Session):
        self.settings = settings
        self.db = db
        self.repo = EmailLogRepository()

    # ========================================================================
    # HISTORY
    # ========================================================================

    def record_history(self, entry: Union[EmailLogCreate, dict]) -> EmailLog:
        """Store a history entry for a send attempt"""
        if isinstance(entry, dict):
            entry = EmailLogCreate(**entry)
        try:
            return self.repo.create_log(self.db, **entry.model_dump())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record email history for {entry.to}: {e}")
            raise PersistenceError("Failed to record email history") from e

    def list_history(self) -> list[EmailLog]:
        return self.repo.get_logs(self.db)

    def delete_history(self, log_id: int) -> None:
        log = self.repo.get_log_by_id(self.db, log_id)
        if not log:
            raise NotFoundError("Email log not found")
        self.repo.delete_log(self.db, log)
        logger.info(f"🗑️ Deleted email log {log_id}")

    # ========================================================================
    # SENDING
    # ========================================================================

    def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        is_html: bool = False,
        email_type: str = "custom",
    ) -> EmailResult:
        """
        Send an email via Resend and append the attempt to the history.

        Never raises for provider problems: a missing API key or a provider
        error comes back as ``EmailResult(success=False, error=...)``.
        """
        error: Optional[str] = None
        provider_id: Optional[str] = None

        if not self.settings.resend_api_key:
            logger.error("❌ No email service configured - RESEND_API_KEY missing")
            error = NOT_CONFIGURED
        else:
            resend.api_key = self.settings.resend_api_key
            email_data = {
                "from": self.settings.email_from_address,
                "to": [to],
                "subject": subject,
            }
            email_data["html" if is_html else "text"] = body

            try:
                logger.info(f"📧 Sending {email_type} email via Resend to: {to}")
                response = resend.Emails.send(email_data)
                if isinstance(response, dict):
                    provider_id = response.get("id")
                else:
                    provider_id = getattr(response, "id", None)
                logger.info(f"✅ Email sent successfully via Resend: {provider_id}")
            except Exception as e:
                logger.error(f"❌ Email send error to {to}: {e}")
                error = str(e)

        log = self.record_history(
            EmailLogCreate(
                to=to,
                subject=subject,
                body=body,
                is_html=is_html,
                email_type=email_type,
                status="failed" if error else "sent",
                error=error,
            )
        )
        return EmailResult(
            success=error is None, error=error, provider_id=provider_id, log_id=log.id
        )

    def send_template(
        self, to: str, subject: str, mjml_content: str, email_type: str
    ) -> EmailResult:
        """Compile an MJML template and send it as HTML"""
        html_content = compile_mjml_to_html(mjml_content)
        return self.send_email(to, subject, html_content, is_html=True, email_type=email_type)

    # ========================================================================
    # Pre-built emails for common events
    # ========================================================================

    def send_invoice_email(
        self, invoice: Invoice, client: Client, business_name: str
    ) -> EmailResult:
        balance_due = round((invoice.total_amount or 0) - (invoice.amount_paid or 0), 2)
        mjml_content = invoice_email_template(
            client_name=client.name,
            business_name=business_name,
            invoice_number=invoice.invoice_number,
            total_amount=invoice.total_amount,
            balance_due=balance_due,
            due_date=_format_date(invoice.due_date),
            notes=invoice.notes,
        )
        return self.send_template(
            client.email,
            f"Invoice {invoice.invoice_number} from {business_name}",
            mjml_content,
            email_type="invoice",
        )

    def send_job_confirmation(
        self, job: Job, to: str, business_name: str
    ) -> EmailResult:
        mjml_content = job_confirmation_template(
            client_name=job.client.name,
            business_name=business_name,
            service=job.service,
            service_date=_format_date(job.date),
            time_slot=job.time_slot,
            address=job.client.address,
            recurring_type=job.recurring_type or "none",
        )
        return self.send_template(
            to,
            f"Service confirmed: {job.service} on {_format_date(job.date)}",
            mjml_content,
            email_type="job_confirmation",
        )

    def send_payment_received(
        self, invoice: Invoice, payment: Payment, business_name: str
    ) -> EmailResult:
        balance_due = round((invoice.total_amount or 0) - (invoice.amount_paid or 0), 2)
        mjml_content = payment_received_template(
            client_name=invoice.client.name,
            business_name=business_name,
            invoice_number=invoice.invoice_number,
            amount=payment.amount,
            balance_due=balance_due,
            payment_date=_format_date(payment.payment_date),
        )
        return self.send_template(
            invoice.client.email,
            f"Payment received for {invoice.invoice_number}",
            mjml_content,
            email_type="payment",
        )
