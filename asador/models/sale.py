"""
Sale data models
Draft line items, persisted sales and payment breakdown
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import BaseEntity, cents_to_mxn


class SaleStatus(str, Enum):
    """Sale status"""
    ACTIVE = "active"   # saved, waiting for payment
    CLOSED = "closed"   # paid


class PaymentMethod(str, Enum):
    """Payment methods in tie-break priority order"""
    CASH = "Cash"
    TRANSFER = "Transfer"
    OTHER = "Other"


class DraftLineItem(BaseEntity):
    """One line of the sale being assembled"""
    line_id: str = Field(..., description="Line ID, unique within the draft")
    item_id: str = Field(..., description="Menu item the line came from")
    category_id: str = Field(..., description="Menu category of the item")
    name: str = Field(..., description="Display name")
    unit_price_cents: int = Field(..., ge=0, description="Price of one unit (cents)")
    quantity: int = Field(1, ge=1, description="Units")
    subtotal_cents: int = Field(..., ge=0, description="Line total (cents)")
    bundle_applied: bool = Field(False, description="Pair pricing active")
    bundle_discount_cents: int = Field(0, ge=0, description="Savings from pair pricing (cents)")
    original_unit_price_cents: Optional[int] = Field(None, description="Unit price before pair pricing")
    bundle_pair_price_cents: Optional[int] = Field(None, description="Price charged per completed pair")


class Notice(BaseModel):
    """Message for the presentation layer"""
    message: str
    level: str = Field("info", description="info, success or warning")


class DraftResult(BaseModel):
    """Outcome of one draft mutation; line is the live draft line"""
    line: Optional[DraftLineItem] = None
    removed: bool = False
    notices: List[Notice] = Field(default_factory=list)


class PaymentBreakdown(BaseEntity):
    """Tender split across payment methods"""
    cash_cents: int = Field(0, ge=0, alias="Cash", description="Paid in cash (cents)")
    transfer_cents: int = Field(0, ge=0, alias="Transfer", description="Paid by transfer (cents)")
    other_cents: int = Field(0, ge=0, alias="Other", description="Paid another way (cents)")

    @property
    def total_cents(self) -> int:
        return self.cash_cents + self.transfer_cents + self.other_cents

    def amounts(self) -> Dict[PaymentMethod, int]:
        """Amounts in declaration order, which is also the tie-break order"""
        return {
            PaymentMethod.CASH: self.cash_cents,
            PaymentMethod.TRANSFER: self.transfer_cents,
            PaymentMethod.OTHER: self.other_cents,
        }

    def primary_method(self) -> PaymentMethod:
        """Method carrying the largest share; earlier methods win ties"""
        best_method, best_amount = PaymentMethod.CASH, -1
        for method, amount in self.amounts().items():
            if amount > best_amount:
                best_method, best_amount = method, amount
        return best_method


class PersistedSale(BaseEntity):
    """Saved sale in either partition"""
    id: str = Field(..., description="Sale ID (time-derived)")
    items: List[DraftLineItem] = Field(default_factory=list, description="Snapshot of draft lines")
    total_cents: int = Field(..., ge=0, description="Sale total, tip included once closed (cents)")
    delivery_fee_cents: int = Field(0, ge=0, description="Delivery fee (cents)")
    status: SaleStatus = Field(SaleStatus.ACTIVE, description="Sale status")
    created_at: datetime = Field(..., description="Creation (or reopen) time")
    closed_at: Optional[datetime] = Field(None, description="Close time")
    payment_method: Optional[PaymentMethod] = Field(None, description="Primary payment method")
    payment_breakdown: Optional[PaymentBreakdown] = Field(None, description="Tender split")
    tip_cents: Optional[int] = Field(None, ge=0, description="Tip (cents)")

    @property
    def total_mxn(self) -> float:
        return cents_to_mxn(self.total_cents)


class ClosedFields(BaseModel):
    """Everything a close writes, applied in one move"""
    total_cents: int
    tip_cents: int
    payment_method: PaymentMethod
    payment_breakdown: PaymentBreakdown
    closed_at: datetime
