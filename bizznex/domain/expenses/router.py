"""Expense router - FastAPI endpoints for logged receipts"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import ExpenseCreate, ExpenseResponse, ExpenseSummary, ExpenseUpdate
from .service import ExpenseService, build_expense_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Expenses"], dependencies=[Depends(get_current_profile)])


def get_expense_service(db: Session = Depends(get_db)) -> ExpenseService:
    """Dependency injection for ExpenseService"""
    return ExpenseService(db)


@router.get("/expenses", response_model=ApiResponse[list[ExpenseResponse]])
async def get_expenses(
    job_id: Optional[int] = Query(None, description="Filter by job ID"),
    vendor: Optional[str] = Query(None, description="Case-insensitive vendor search"),
    start_date: Optional[date] = Query(None, description="Earliest expense date"),
    end_date: Optional[date] = Query(None, description="Latest expense date"),
    service: ExpenseService = Depends(get_expense_service),
):
    """Get expenses, most recent first"""
    expenses = service.get_expenses(job_id, vendor, start_date, end_date)
    return ApiResponse(data=[build_expense_response(e) for e in expenses])


@router.get("/expenses/summary", response_model=ApiResponse[ExpenseSummary])
async def get_expense_summary(service: ExpenseService = Depends(get_expense_service)):
    """Dashboard totals: count, pending count, amount and the latest receipts"""
    return ApiResponse(data=service.get_summary())


@router.get("/expenses/{expense_id}", response_model=ApiResponse[ExpenseResponse])
async def get_expense(expense_id: int, service: ExpenseService = Depends(get_expense_service)):
    return ApiResponse(data=build_expense_response(service.get_expense(expense_id)))


@router.post("/expenses", response_model=ApiResponse[ExpenseResponse], status_code=201)
async def create_expense(
    data: ExpenseCreate, service: ExpenseService = Depends(get_expense_service)
):
    return ApiResponse(data=build_expense_response(service.create_expense(data)))


@router.put("/expenses/{expense_id}", response_model=ApiResponse[ExpenseResponse])
async def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    service: ExpenseService = Depends(get_expense_service),
):
    return ApiResponse(data=build_expense_response(service.update_expense(expense_id, data)))


@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
async def delete_expense(expense_id: int, service: ExpenseService = Depends(get_expense_service)):
    service.delete_expense(expense_id)
    return MessageResponse(message="Expense deleted successfully")
