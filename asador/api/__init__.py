"""
API routes and endpoints.
"""

from fastapi import APIRouter

from ..schemas.common import ErrorResponse
from .v1 import auth, draft, expenses, menu, reports, sales

api_router = APIRouter(responses={
    400: {"model": ErrorResponse, "description": "Rejected input"},
    401: {"model": ErrorResponse, "description": "Login required"},
    404: {"model": ErrorResponse, "description": "Not found"},
})

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(menu.router, prefix="/menu", tags=["Menu"])
api_router.include_router(draft.router, prefix="/draft", tags=["Draft sale"])
api_router.include_router(sales.router, prefix="/sales", tags=["Sales"],
                          responses={422: {"model": ErrorResponse, "description": "Payment does not match"}})
api_router.include_router(expenses.router, prefix="/expenses", tags=["Expenses"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
