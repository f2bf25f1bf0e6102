"""
Draft sale request / response schemas
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.sale import DraftLineItem, Notice


class AddItemRequest(BaseModel):
    """Add a menu item to the draft"""
    category_id: str = Field(..., description="Menu category ID")
    item_id: str = Field(..., description="Menu item ID")
    amount_cents: Optional[int] = Field(None, description="Amount for custom-amount items (cents)")
    option_name: Optional[str] = Field(None, description="Chosen option for multi-option items")


class SaveDraftRequest(BaseModel):
    delivery_fee_cents: int = Field(0, ge=0, description="Delivery fee (cents)")


class DraftView(BaseModel):
    """Current draft contents"""
    items: List[DraftLineItem] = Field(default_factory=list)
    total_cents: int = 0
    item_count: int = 0


class DraftMutationResponse(BaseModel):
    """Draft after a mutation, with the line touched and any notices"""
    draft: DraftView
    line: Optional[DraftLineItem] = None
    removed: bool = False
    notices: List[Notice] = Field(default_factory=list)
