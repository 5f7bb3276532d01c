"""Expense repository - Database operations for expenses"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Job
from ...models_expense import Expense, ExpenseItem


class ExpenseRepository:
    """Repository for expense database operations"""

    @staticmethod
    def _query(db: Session):
        return db.query(Expense).options(
            joinedload(Expense.job).joinedload(Job.client), selectinload(Expense.items)
        )

    @staticmethod
    def get_expenses(
        db: Session,
        job_id: Optional[int] = None,
        vendor: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Expense]:
        """Get expenses, most recent first"""
        query = ExpenseRepository._query(db)
        if job_id is not None:
            query = query.filter(Expense.job_id == job_id)
        if vendor:
            query = query.filter(Expense.vendor.ilike(f"%{vendor}%"))
        if start_date:
            query = query.filter(Expense.date >= start_date)
        if end_date:
            query = query.filter(Expense.date <= end_date)
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    @staticmethod
    def get_expense_by_id(db: Session, expense_id: int) -> Optional[Expense]:
        return ExpenseRepository._query(db).filter(Expense.id == expense_id).first()

    @staticmethod
    def get_job_by_id(db: Session, job_id: int) -> Optional[Job]:
        return db.query(Job).filter(Job.id == job_id).first()

    @staticmethod
    def create_expense(db: Session, items: list[dict], **expense_data) -> Expense:
        """Insert the expense and its items in a single commit"""
        expense = Expense(**expense_data)
        expense.items = [ExpenseItem(**item) for item in items]
        db.add(expense)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def update_expense(
        db: Session, expense: Expense, items: Optional[list[dict]] = None, **updates
    ) -> Expense:
        for key, value in updates.items():
            if hasattr(expense, key):
                setattr(expense, key, value)
        if items is not None:
            expense.items = [ExpenseItem(**item) for item in items]

        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def delete_expense(db: Session, expense: Expense) -> None:
        db.delete(expense)
        db.commit()

    @staticmethod
    def get_totals(db: Session) -> tuple[int, int, float]:
        """Count, pending count and summed amount over all expenses"""
        count, total = db.query(func.count(Expense.id), func.sum(Expense.total_amount)).one()
        pending = (
            db.query(func.count(Expense.id)).filter(Expense.status == "Pending").scalar() or 0
        )
        return count or 0, pending, total or 0

    @staticmethod
    def get_recent(db: Session, limit: int = 3) -> list[Expense]:
        """Most recently logged expenses"""
        return (
            ExpenseRepository._query(db)
            .order_by(Expense.created_at.desc(), Expense.id.desc())
            .limit(limit)
            .all()
        )
