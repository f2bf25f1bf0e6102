"""
Expense data models
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .base import BaseEntity, TimestampMixin, cents_to_mxn


class ExpenseCategory(str, Enum):
    """Expense categories"""
    INGREDIENTES = "ingredientes"
    GAS = "gas"
    TRANSPORTE = "transporte"
    SALARIOS = "salarios"
    RENTA = "renta"
    SERVICIOS = "servicios"
    OTROS = "otros"


EXPENSE_CATEGORY_LABELS = {
    ExpenseCategory.INGREDIENTES: "Ingredientes",
    ExpenseCategory.GAS: "Gas",
    ExpenseCategory.TRANSPORTE: "Transporte",
    ExpenseCategory.SALARIOS: "Salarios",
    ExpenseCategory.RENTA: "Renta",
    ExpenseCategory.SERVICIOS: "Servicios",
    ExpenseCategory.OTROS: "Otros",
}


class ExpenseBase(BaseModel):
    """Expense fields"""
    date: dt.date = Field(..., description="Day the money was spent")
    description: str = Field(..., max_length=500, description="What was bought")
    amount_cents: int = Field(..., description="Amount (cents)")
    category: ExpenseCategory = Field(..., description="Category")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class ExpenseCreate(ExpenseBase):
    """Expense creation model"""
    pass


class Expense(ExpenseBase, BaseEntity, TimestampMixin):
    """Stored expense"""
    id: str = Field(..., description="Expense ID")

    @property
    def amount_mxn(self) -> float:
        return cents_to_mxn(self.amount_cents)

    @property
    def category_label(self) -> str:
        return EXPENSE_CATEGORY_LABELS.get(self.category, str(self.category))


class ExpenseUpdate(BaseModel):
    """Partial expense update"""
    date: Optional[dt.date] = None
    description: Optional[str] = Field(None, max_length=500)
    amount_cents: Optional[int] = None
    category: Optional[ExpenseCategory] = None
