"""
Expense routes
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.error_handler import create_success_response
from ...core.security import require_session
from ...models.expense import ExpenseCreate, ExpenseUpdate
from ...services.expense_service import ExpenseService
from ..deps import get_expense_service

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("")
def list_expenses(start: Optional[dt.date] = Query(None, description="First day, inclusive"),
                  end: Optional[dt.date] = Query(None, description="Last day, inclusive"),
                  service: ExpenseService = Depends(get_expense_service)):
    expenses = service.list_expenses(start, end)
    return create_success_response(data=[e.model_dump(mode="json") for e in expenses])


@router.post("")
def add_expense(req: ExpenseCreate, service: ExpenseService = Depends(get_expense_service)):
    expense = service.add_expense(req)
    return create_success_response(data=expense.model_dump(mode="json"), message="Expense recorded")


@router.put("/{expense_id}")
def update_expense(expense_id: str, req: ExpenseUpdate,
                   service: ExpenseService = Depends(get_expense_service)):
    expense = service.update_expense(expense_id, req)
    return create_success_response(data=expense.model_dump(mode="json"), message="Expense updated")


@router.delete("/{expense_id}")
def delete_expense(expense_id: str, service: ExpenseService = Depends(get_expense_service)):
    service.delete_expense(expense_id)
    return create_success_response(data={"id": expense_id}, message="Expense deleted")
