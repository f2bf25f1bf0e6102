"""
Menu service
Loads, stores and edits the menu document

The whole menu is one JSON document in the menu table. When nothing has
been stored yet the bundled default menu is loaded and written back.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import MenuItemNotFoundError, ValidationError
from ..models.menu import Menu, MenuCategory, MenuItem
from .menu_catalog import MenuCatalog

logger = logging.getLogger(__name__)

MENU_ID = "default"
DEFAULT_MENU_PATH = Path(__file__).parent.parent / "config" / "default_menu.json"


def load_default_menu(path: Path = DEFAULT_MENU_PATH) -> Menu:
    return Menu.model_validate(json.loads(path.read_text(encoding="utf-8")))


class MenuService:
    """Menu service"""

    def __init__(self, db: DatabaseManager = None, default_menu_path: Path = DEFAULT_MENU_PATH):
        self.db = db or db_manager
        self.default_menu_path = default_menu_path

    def get_menu(self) -> Menu:
        row = self.db.execute_one("SELECT data FROM menu WHERE id = ?", [MENU_ID])
        if row is None:
            logger.info("No stored menu, loading %s", self.default_menu_path.name)
            menu = load_default_menu(self.default_menu_path)
            self.save_menu(menu)
            return menu
        return Menu.model_validate(json.loads(row[0]))

    def get_catalog(self) -> MenuCatalog:
        return MenuCatalog(self.get_menu())

    def save_menu(self, menu: Menu) -> Menu:
        """Replace the stored menu"""
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO menu (id, data, updated_at) VALUES (?, ?, ?)",
                [MENU_ID, menu.model_dump_json(), datetime.now()],
            )
        return menu

    def add_category(self, category: MenuCategory) -> Menu:
        menu = self.get_menu()
        if any(c.id == category.id for c in menu.categories):
            raise ValidationError(f"Category {category.id} already exists")
        menu.categories.append(category)
        return self._save_validated(menu)

    def update_category(self, category_id: str, name: str, icon: Optional[str] = None) -> Menu:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        if not name.strip():
            raise ValidationError("Category name cannot be empty")
        category.name = name.strip()
        if icon is not None:
            category.icon = icon
        return self._save_validated(menu)

    def delete_category(self, category_id: str) -> Menu:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        menu.categories.remove(category)
        return self._save_validated(menu)

    def add_item(self, category_id: str, item: MenuItem) -> Menu:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        if any(i.id == item.id for i in category.items):
            raise ValidationError(f"Item {item.id} already exists in {category_id}")
        category.items.append(item)
        return self._save_validated(menu)

    def update_item(self, category_id: str, item_id: str, item: MenuItem) -> Menu:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        index = self._item_index(category, item_id)
        category.items[index] = item
        return self._save_validated(menu)

    def delete_item(self, category_id: str, item_id: str) -> Menu:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        del category.items[self._item_index(category, item_id)]
        return self._save_validated(menu)

    def toggle_availability(self, category_id: str, item_id: str) -> MenuItem:
        menu = self.get_menu()
        category = self._category(menu, category_id)
        item = category.items[self._item_index(category, item_id)]
        item.available = not item.available
        self._save_validated(menu)
        return item

    def _category(self, menu: Menu, category_id: str) -> MenuCategory:
        for category in menu.categories:
            if category.id == category_id:
                return category
        raise MenuItemNotFoundError(category_id)

    def _item_index(self, category: MenuCategory, item_id: str) -> int:
        for index, item in enumerate(category.items):
            if item.id == item_id:
                return index
        raise MenuItemNotFoundError(category.id, item_id)

    def _save_validated(self, menu: Menu) -> Menu:
        # Mutations bypass model validation, so rebuild before storing
        try:
            checked = Menu.model_validate(menu.model_dump())
        except PydanticValidationError as e:
            raise ValidationError("Invalid menu", {"errors": e.errors(include_url=False, include_context=False)})
        return self.save_menu(checked)
