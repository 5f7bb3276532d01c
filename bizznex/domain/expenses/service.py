"""Expense service - Business logic for logged receipts"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models_expense import Expense
from ..invoices.calculations import round_money
from .repository import ExpenseRepository
from .schemas import (
    ExpenseCreate,
    ExpenseItemIn,
    ExpenseResponse,
    ExpenseSummary,
    ExpenseUpdate,
)

logger = logging.getLogger(__name__)

RECENT_EXPENSES = 3


def build_expense_response(expense: Expense) -> ExpenseResponse:
    response = ExpenseResponse.model_validate(expense)
    if response.job is not None and expense.job.client is not None:
        job = response.job.model_copy(update={"client_name": expense.job.client.name})
        response = response.model_copy(update={"job": job})
    return response


def _item_rows(items: list[ExpenseItemIn]) -> list[dict]:
    return [{"name": item.name, "price": round_money(item.price)} for item in items]


class ExpenseService:
    """Service layer for expense business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ExpenseRepository()

    def _check_job(self, job_id: Optional[int]) -> None:
        if job_id is not None and not self.repo.get_job_by_id(self.db, job_id):
            raise NotFoundError("Job not found")

    def _commit(self, action: str, fn, *args, **kwargs):
        try:
            return fn(self.db, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    def get_expenses(
        self,
        job_id: Optional[int] = None,
        vendor: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Expense]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        return self.repo.get_expenses(self.db, job_id, vendor, start_date, end_date)

    def get_expense(self, expense_id: int) -> Expense:
        expense = self.repo.get_expense_by_id(self.db, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def create_expense(self, data: ExpenseCreate) -> Expense:
        self._check_job(data.job_id)
        items = _item_rows(data.items)
        if data.total_amount is not None:
            total = round_money(data.total_amount)
        else:
            total = round_money(sum(item["price"] for item in items))

        expense = self._commit(
            "save expense",
            self.repo.create_expense,
            items=items,
            total_amount=total,
            **data.model_dump(exclude={"items", "total_amount"}),
        )
        logger.info(
            f"🧾 Logged expense {expense.id} from {expense.vendor}: "
            f"{total:.2f} ({len(items)} item(s))"
        )
        return expense

    def update_expense(self, expense_id: int, data: ExpenseUpdate) -> Expense:
        expense = self.get_expense(expense_id)
        updates = data.model_dump(exclude_unset=True, exclude={"items"})
        for required in ("vendor", "date", "total_amount", "status"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty")
        self._check_job(updates.get("job_id"))
        if "total_amount" in updates:
            updates["total_amount"] = round_money(updates["total_amount"])

        items = None
        if data.items is not None:
            items = _item_rows(data.items)
            if "total_amount" not in updates:
                updates["total_amount"] = round_money(sum(item["price"] for item in items))

        return self._commit(
            "update expense", self.repo.update_expense, expense, items=items, **updates
        )

    def delete_expense(self, expense_id: int) -> None:
        expense = self.get_expense(expense_id)
        self._commit("delete expense", self.repo.delete_expense, expense)
        logger.info(f"🗑️ Deleted expense {expense_id}")

    def get_summary(self) -> ExpenseSummary:
        count, pending, total = self.repo.get_totals(self.db)
        recent = self.repo.get_recent(self.db, RECENT_EXPENSES)
        return ExpenseSummary(
            expense_count=count,
            pending_count=pending,
            total_expenses=round_money(total),
            recent=[build_expense_response(e) for e in recent],
        )
