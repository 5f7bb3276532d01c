"""Invoice router - FastAPI endpoints for invoices, payments and PDFs"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...config import Settings
from ...database import get_db, get_settings
from ...email_service import EmailService, delivery_error
from ...errors import BizznexError, ValidationError
from ...models import Profile
from ...shared.responses import ApiResponse, MessageResponse
from ..email.schemas import EmailResult
from .payment_service import PaymentService
from .schemas import (
    InvoiceCreate,
    InvoiceDetailResponse,
    InvoiceItemResponse,
    InvoicePdfRequest,
    InvoiceResponse,
    InvoiceStatus,
    InvoiceUpdate,
    PaymentResponse,
    RecordPaymentRequest,
)
from .service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Invoices"])


def get_invoice_service(
    db: Session = Depends(get_db), profile: Profile = Depends(get_current_profile)
) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db, profile)


def get_payment_service(
    db: Session = Depends(get_db), _profile: Profile = Depends(get_current_profile)
) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


def pdf_response(pdf_bytes: bytes, filename: str, headers: Optional[dict] = None) -> Response:
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"', **(headers or {})},
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/invoices", response_model=ApiResponse[list[InvoiceResponse]])
async def get_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter invoices by status"),
    client_id: Optional[int] = Query(None, description="Filter invoices by client ID"),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Get invoices newest first; past-due Pending invoices are marked Overdue"""
    invoices = service.get_invoices(status, client_id)
    return ApiResponse(data=[InvoiceResponse.model_validate(inv) for inv in invoices])


@router.post("/invoices", response_model=ApiResponse[InvoiceDetailResponse], status_code=201)
async def create_invoice(data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)):
    """Create an invoice with its line items; totals are computed server-side"""
    invoice = service.create_invoice(data)
    return ApiResponse(data=InvoiceDetailResponse.model_validate(invoice))


@router.post("/invoices/document")
async def create_invoice_document(
    data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)
):
    """
    Save an invoice and return its PDF.

    The PDF is returned even if the save fails; X-Invoice-Persisted tells
    the caller whether the invoice was stored.
    """
    document = service.create_invoice_document(data)
    headers = {"X-Invoice-Persisted": "true" if document.persisted else "false"}
    if document.invoice is not None:
        headers["X-Invoice-Id"] = str(document.invoice.id)
        filename = document.invoice.invoice_number
    else:
        filename = data.invoice_number or "invoice"
    return pdf_response(document.pdf_bytes, filename, headers)


@router.get("/invoices/{invoice_id}", response_model=ApiResponse[InvoiceDetailResponse])
async def get_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    invoice = service.get_invoice(invoice_id)
    return ApiResponse(data=InvoiceDetailResponse.model_validate(invoice))


@router.put("/invoices/{invoice_id}", response_model=ApiResponse[InvoiceDetailResponse])
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.update_invoice(invoice_id, data)
    return ApiResponse(data=InvoiceDetailResponse.model_validate(invoice))


@router.delete("/invoices/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    service.delete_invoice(invoice_id)
    return MessageResponse(message="Invoice deleted successfully")


@router.get("/invoices/{invoice_id}/items", response_model=ApiResponse[list[InvoiceItemResponse]])
async def get_invoice_items(
    invoice_id: int, service: InvoiceService = Depends(get_invoice_service)
):
    items = service.get_items(invoice_id)
    return ApiResponse(data=[InvoiceItemResponse.model_validate(item) for item in items])


# ============================================================================
# PAYMENTS
# ============================================================================


@router.get("/invoices/{invoice_id}/payments", response_model=ApiResponse[list[PaymentResponse]])
async def get_invoice_payments(
    invoice_id: int, service: PaymentService = Depends(get_payment_service)
):
    payments = service.list_payments(invoice_id)
    return ApiResponse(data=[PaymentResponse.model_validate(p) for p in payments])


@router.post("/update-invoice-status", response_model=ApiResponse[InvoiceDetailResponse])
async def record_payment(
    data: RecordPaymentRequest,
    profile: Profile = Depends(get_current_profile),
    service: PaymentService = Depends(get_payment_service),
    settings: Settings = Depends(get_settings),
):
    """Apply a payment and recompute the invoice status"""
    invoice, payment = service.record_payment(
        data.invoiceId,
        data.amount,
        payment_date=data.paymentDate,
        method=data.paymentMethod,
        note=data.paymentNote,
    )

    if data.notifyClient:
        if invoice.client and invoice.client.email:
            try:
                result = EmailService(settings, service.db).send_payment_received(
                    invoice, payment, business_name=profile.company or "Bizznex"
                )
                error = None if result.success else result.error
            except (ValueError, BizznexError) as e:
                error = str(e)
            if error:
                logger.warning(f"⚠️ Payment receipt for {invoice.invoice_number} not sent: {error}")
        else:
            logger.info(f"No client email on {invoice.invoice_number}, skipping payment receipt")

    return ApiResponse(data=InvoiceDetailResponse.model_validate(invoice))


# ============================================================================
# DOCUMENTS & DELIVERY
# ============================================================================


@router.get("/invoices/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: int, service: InvoiceService = Depends(get_invoice_service)
):
    invoice, pdf_bytes = service.render_document(invoice_id)
    return pdf_response(pdf_bytes, invoice.invoice_number)


@router.post("/generate-invoice-pdf")
async def generate_invoice_pdf(
    data: InvoicePdfRequest, service: InvoiceService = Depends(get_invoice_service)
):
    """Render a submitted invoice to PDF without saving it"""
    pdf_bytes = service.render_adhoc_document(data)
    return pdf_response(pdf_bytes, data.invoiceNumber)


@router.post("/invoices/{invoice_id}/send", response_model=ApiResponse[EmailResult])
async def send_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service),
    settings: Settings = Depends(get_settings),
):
    """Email the invoice to the client"""
    invoice = service.get_invoice(invoice_id)
    if not invoice.client or not invoice.client.email:
        raise ValidationError("Client has no email address")

    business_name = (service.profile.company if service.profile else None) or "Bizznex"
    result = EmailService(settings, service.db).send_invoice_email(
        invoice, invoice.client, business_name=business_name
    )
    if not result.success:
        raise delivery_error(result, "send invoice email")
    return ApiResponse(data=result)
