"""Expense domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import require_text

ExpenseStatus = Literal["Pending", "Reconciled"]


class ExpenseItemIn(BaseModel):
    name: str
    price: float = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Item name")


class ExpenseCreate(BaseModel):
    """Schema for logging a receipt; the total defaults to the sum of its items"""

    vendor: str
    date: dt.date = Field(default_factory=dt.date.today)
    total_amount: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    status: ExpenseStatus = "Pending"
    job_id: Optional[int] = None
    notes: Optional[str] = None
    items: list[ExpenseItemIn] = []

    @field_validator("vendor")
    @classmethod
    def validate_vendor(cls, v):
        return require_text(v, "Vendor")


class ExpenseUpdate(BaseModel):
    """Fields to change; items replace the stored lines"""

    vendor: Optional[str] = None
    date: Optional[dt.date] = None
    total_amount: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    status: Optional[ExpenseStatus] = None
    job_id: Optional[int] = None
    notes: Optional[str] = None
    items: Optional[list[ExpenseItemIn]] = None

    @field_validator("vendor")
    @classmethod
    def validate_vendor(cls, v):
        if v is None:
            return v
        return require_text(v, "Vendor")


class ExpenseItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float = 0


class ExpenseJobSummary(BaseModel):
    """The job an expense was logged against"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    service: str
    date: dt.date
    status: str
    client_name: Optional[str] = None


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vendor: str
    date: dt.date
    total_amount: float = 0
    category: Optional[str] = None
    status: str
    job_id: Optional[int] = None
    job: Optional[ExpenseJobSummary] = None
    notes: Optional[str] = None
    items: list[ExpenseItemResponse] = []
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ExpenseSummary(BaseModel):
    """Dashboard figures across every logged expense"""

    expense_count: int
    pending_count: int
    total_expenses: float
    recent: list[ExpenseResponse]
