"""
Menu catalog
Read-only lookups the draft sale engine runs against the current menu
"""

from typing import Optional

from ..core.exceptions import MenuItemNotFoundError
from ..models.menu import Menu, MenuCategory, MenuItem, PricingMode


class MenuCatalog:
    """Lookups over one menu snapshot"""

    def __init__(self, menu: Menu):
        self.menu = menu

    def find_category(self, category_id: str) -> Optional[MenuCategory]:
        for category in self.menu.categories:
            if category.id == category_id:
                return category
        return None

    def get_category(self, category_id: str) -> MenuCategory:
        category = self.find_category(category_id)
        if category is None:
            raise MenuItemNotFoundError(category_id)
        return category

    def get_item(self, category_id: str, item_id: str) -> MenuItem:
        category = self.get_category(category_id)
        for item in category.items:
            if item.id == item_id:
                return item
        raise MenuItemNotFoundError(category_id, item_id)

    def find_bundle_counterpart(self, category_id: str, item_name: str,
                                target_quantity: int) -> Optional[MenuItem]:
        """
        Find the bundle that groups target_quantity units of item_name

        Only a bundle that is cheaper per unit than the plain item counts;
        a same-size bundle at or above the unit price is ignored.

        Returns:
            The bundle item, or None when pair pricing does not apply
        """
        category = self.find_category(category_id)
        plain = self.find_plain_item(category_id, item_name)
        if category is None or plain is None:
            return None

        for item in category.items:
            if (item.pricing_mode == PricingMode.BUNDLE
                    and item.available
                    and item.bundle_quantity == target_quantity
                    and item.bundle_for == item_name
                    and item.price_cents < plain.price_cents * target_quantity):
                return item
        return None

    def find_plain_item(self, category_id: str, name: str) -> Optional[MenuItem]:
        """Available standard item with this name; None when the category is gone too"""
        category = self.find_category(category_id)
        if category is None:
            return None
        for item in category.items:
            if item.is_plain and item.available and item.name == name:
                return item
        return None
