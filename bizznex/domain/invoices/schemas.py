"""Invoice domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..clients.schemas import ClientSummary

InvoiceStatus = Literal["Draft", "Pending", "Paid", "Overdue"]
# Paid and Overdue are derived from payments and due dates, never set directly
EditableStatus = Literal["Draft", "Pending"]
PaymentMethod = Literal["CreditCard", "Cash", "BankTransfer", "PayPal", "Stripe", "Other"]


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================


class InvoiceItemIn(BaseModel):
    """Line item as submitted; any client-side amount is recomputed"""

    description: str = ""
    quantity: int = Field(default=1, ge=1)
    rate: float = Field(default=0, ge=0)
    amount: Optional[float] = None


class TaxItemIn(BaseModel):
    name: str = "Tax"
    rate: float = Field(default=0, ge=0)
    amount: Optional[float] = None


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice with its items"""

    client_id: Optional[int] = None
    job_id: Optional[int] = None
    invoice_number: Optional[str] = None
    invoice_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    items: list[InvoiceItemIn] = []
    tax_items: list[TaxItemIn] = []
    notes: Optional[str] = None
    status: EditableStatus = "Pending"


class InvoiceUpdate(BaseModel):
    """Header fields to change; items/tax_items replace the lines and recompute totals"""

    job_id: Optional[int] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[EditableStatus] = None
    notes: Optional[str] = None
    items: Optional[list[InvoiceItemIn]] = None
    tax_items: Optional[list[TaxItemIn]] = None


class RecordPaymentRequest(BaseModel):
    """Apply a payment to an invoice"""

    invoiceId: int
    amount: float
    paymentDate: Optional[date] = None
    paymentMethod: PaymentMethod = "Other"
    paymentNote: Optional[str] = None
    notifyClient: bool = False


class ClientSnapshot(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class BusinessSnapshot(BaseModel):
    """Business details printed in the invoice header"""

    company: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None


class InvoicePdfRequest(BaseModel):
    """Ad-hoc invoice rendered straight to PDF without touching the database"""

    invoiceNumber: str = "DRAFT"
    invoiceDate: date = Field(default_factory=date.today)
    dueDate: Optional[date] = None
    client: Optional[ClientSnapshot] = None
    clientId: Optional[int] = None
    items: list[InvoiceItemIn] = []
    taxItems: list[TaxItemIn] = []
    amountPaid: float = 0
    status: InvoiceStatus = "Draft"
    notes: Optional[str] = None
    businessProfile: Optional[BusinessSnapshot] = None


# ============================================================================
# DOCUMENT PAYLOAD
# ============================================================================


class LineItem(BaseModel):
    description: str
    quantity: int
    rate: float
    amount: float


class TaxItem(BaseModel):
    name: str
    rate: float
    amount: float


class InvoiceDocumentPayload(BaseModel):
    """Normalized invoice handed to the PDF renderer"""

    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    client: ClientSnapshot
    items: list[LineItem]
    subtotal: float
    tax_items: list[TaxItem] = []
    total: float
    amount_paid: float = 0
    status: str = "Pending"
    notes: Optional[str] = None
    business: BusinessSnapshot = BusinessSnapshot()

    @property
    def balance_due(self) -> float:
        return round(self.total - self.amount_paid, 2)


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================


class InvoiceItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    description: str
    quantity: int
    rate: float
    amount: float


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    amount: float
    payment_date: date
    payment_method: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class InvoiceResponse(BaseModel):
    """Schema for invoice list rows"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    client_id: int
    job_id: Optional[int] = None
    client: Optional[ClientSummary] = None
    invoice_date: date
    due_date: date
    subtotal: float
    tax_rate: float = 0
    tax_amount: float = 0
    total_amount: float
    amount_paid: float = 0
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoiceDetailResponse(InvoiceResponse):
    """Invoice with its line items and payment history"""

    items: list[InvoiceItemResponse] = []
    payments: list[PaymentResponse] = []
