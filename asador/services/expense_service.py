"""
Expense service
CRUD over operating expenses
"""

import datetime as dt
from typing import Any, Dict, List, Optional

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import ExpenseNotFoundError, ValidationError
from ..models.expense import Expense, ExpenseCreate, ExpenseUpdate
from ..utils.ids import time_ordered_id

_COLUMNS = "id, date, description, amount_cents, category, created_at"


class ExpenseService:
    """Expense service"""

    def __init__(self, db: DatabaseManager = None):
        self.db = db or db_manager

    def list_expenses(self, start: Optional[dt.date] = None,
                      end: Optional[dt.date] = None) -> List[Expense]:
        """Expenses newest first, optionally limited to a date range (inclusive)"""
        query = f"SELECT {_COLUMNS} FROM expenses WHERE 1=1"
        params = []
        if start is not None:
            query += " AND date >= ?"
            params.append(start)
        if end is not None:
            query += " AND date <= ?"
            params.append(end)
        query += " ORDER BY date DESC, created_at DESC"
        return [self._to_expense(row) for row in self.db.query_dicts(query, params)]

    def get_expense(self, expense_id: str) -> Expense:
        rows = self.db.query_dicts(f"SELECT {_COLUMNS} FROM expenses WHERE id = ?", [expense_id])
        if not rows:
            raise ExpenseNotFoundError(expense_id)
        return self._to_expense(rows[0])

    def add_expense(self, data: ExpenseCreate) -> Expense:
        self._validate(data.description, data.amount_cents)
        expense = Expense(id=time_ordered_id(), created_at=dt.datetime.now(), **data.model_dump())
        with self.db.transaction() as conn:
            conn.execute(
                f"INSERT INTO expenses ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                [expense.id, expense.date, expense.description, expense.amount_cents,
                 expense.category.value, expense.created_at],
            )
        return expense

    def update_expense(self, expense_id: str, data: ExpenseUpdate) -> Expense:
        current = self.get_expense(expense_id)
        changes = data.model_dump(exclude_none=True)
        updated = current.model_copy(update=changes)
        self._validate(updated.description, updated.amount_cents)
        with self.db.transaction() as conn:
            conn.execute(
                "UPDATE expenses SET date = ?, description = ?, amount_cents = ?, category = ? WHERE id = ?",
                [updated.date, updated.description.strip(), updated.amount_cents,
                 updated.category.value, expense_id],
            )
        return self.get_expense(expense_id)

    def delete_expense(self, expense_id: str):
        with self.db.transaction() as conn:
            deleted = conn.execute(
                "DELETE FROM expenses WHERE id = ? RETURNING id", [expense_id]
            ).fetchall()
            if not deleted:
                raise ExpenseNotFoundError(expense_id)

    def _validate(self, description: str, amount_cents: int):
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if amount_cents <= 0:
            raise ValidationError("Amount must be greater than zero",
                                  {"amount_cents": amount_cents})

    def _to_expense(self, row: Dict[str, Any]) -> Expense:
        return Expense(**row)
