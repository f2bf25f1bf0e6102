"""
Menu data models
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .base import BaseEntity


class PricingMode(str, Enum):
    """How an item is priced when added to a sale"""
    STANDARD = "standard"            # fixed unit price
    CUSTOM_AMOUNT = "custom_amount"  # cashier types the amount (delivery)
    MULTI_OPTION = "multi_option"    # cashier picks one of several prices
    BUNDLE = "bundle"                # n units of a sibling item at a set price


class PriceOption(BaseModel):
    """One selectable price of a multi-option item"""
    name: str = Field(..., min_length=1, max_length=100, description="Option name")
    price_cents: int = Field(..., gt=0, description="Option price (cents)")


class MenuItem(BaseEntity):
    """Menu item"""
    id: str = Field(..., min_length=1, description="Item ID")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    price_cents: int = Field(0, ge=0, description="Unit price, or price of the whole bundle (cents)")
    available: bool = Field(True, description="Offered right now")
    pricing_mode: PricingMode = Field(PricingMode.STANDARD, description="Pricing mode")
    note: Optional[str] = Field(None, max_length=300, description="Hint shown when asking for an amount")
    price_options: List[PriceOption] = Field(default_factory=list, description="Options of a multi-option item")
    bundle_quantity: Optional[int] = Field(None, ge=2, description="Units covered by a bundle item")
    bundle_for: Optional[str] = Field(None, description="Name of the item this bundle groups")

    @model_validator(mode="after")
    def check_pricing_mode(self):
        if self.pricing_mode == PricingMode.BUNDLE:
            if not self.bundle_quantity or not self.bundle_for:
                raise ValueError("bundle items need bundle_quantity and bundle_for")
        if self.pricing_mode == PricingMode.MULTI_OPTION and not self.price_options:
            raise ValueError("multi-option items need at least one price option")
        if self.pricing_mode == PricingMode.STANDARD and self.price_cents <= 0:
            raise ValueError("standard items need a positive price")
        return self

    @property
    def is_plain(self) -> bool:
        """Sold by the unit at a fixed price"""
        return self.pricing_mode == PricingMode.STANDARD


class MenuCategory(BaseEntity):
    """Menu category"""
    id: str = Field(..., min_length=1, description="Category ID")
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    icon: Optional[str] = Field(None, description="Emoji shown next to the name")
    items: List[MenuItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_item_ids(self):
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError(f"item IDs must be unique within category {self.id}")
        return self


class Menu(BaseEntity):
    """Whole menu"""
    categories: List[MenuCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_category_ids(self):
        ids = [category.id for category in self.categories]
        if len(ids) != len(set(ids)):
            raise ValueError("category IDs must be unique")
        return self
