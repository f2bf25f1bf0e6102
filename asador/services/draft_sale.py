"""
Draft sale engine
Owns the sale being assembled at the register before it is saved

Main features:
- add items by pricing mode (standard, custom amount, multi-option)
- increment / decrement with pair (bundle) pricing recomputed on every change
- remove lines and clear the draft
- keep the draft total equal to the sum of line subtotals

Pricing rules:
- pair pricing applies only when the menu offers a bundle of 2 that is
  cheaper per unit than the plain item
- only completed pairs are discounted; an odd unit is charged at the
  original unit price
- the engine never prompts; notices are returned for the caller to show
"""

import logging
import uuid
from typing import Dict, List, Optional

from ..core.exceptions import LineNotFoundError, ValidationError
from ..models.menu import MenuItem, PricingMode
from ..models.sale import DraftLineItem, DraftResult, Notice
from .menu_catalog import MenuCatalog

logger = logging.getLogger(__name__)

PAIR = 2


def _new_line_id(item_id: str) -> str:
    return f"{item_id}-{uuid.uuid4().hex[:12]}"


def _format_mxn(cents: int) -> str:
    return f"${cents / 100:.2f}"


class DraftSaleEngine:
    """In-progress sale for one client session"""

    def __init__(self, catalog: MenuCatalog):
        self.catalog = catalog
        self.items: List[DraftLineItem] = []

    @property
    def total_cents(self) -> int:
        return sum(line.subtotal_cents for line in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_line(self, line_id: str) -> DraftLineItem:
        for line in self.items:
            if line.line_id == line_id:
                return line
        raise LineNotFoundError(line_id)

    def add_item(self, item_id: str, category_id: str, amount_cents: Optional[int] = None,
                 option_name: Optional[str] = None) -> DraftResult:
        """
        Add one unit of a menu item

        Args:
            item_id: menu item ID
            category_id: category holding the item
            amount_cents: amount typed by the cashier (custom-amount items)
            option_name: chosen option (multi-option items)

        Raises:
            MenuItemNotFoundError: unknown category or item
            ValidationError: unavailable item, missing/invalid amount or option
        """
        item = self.catalog.get_item(category_id, item_id)
        if not item.available:
            raise ValidationError(f"{item.name} is not available right now")

        if item.pricing_mode == PricingMode.CUSTOM_AMOUNT:
            return self._add_custom_amount(item, category_id, amount_cents)
        if item.pricing_mode == PricingMode.MULTI_OPTION:
            return self._add_option(item, category_id, option_name)

        existing = self._find_line_for_item(item_id)
        if existing is not None:
            return self.increment_item(existing.line_id)

        line = DraftLineItem(
            line_id=_new_line_id(item.id),
            item_id=item.id,
            category_id=category_id,
            name=item.name,
            unit_price_cents=item.price_cents,
            quantity=1,
            subtotal_cents=item.price_cents,
        )
        self.items.append(line)
        return DraftResult(line=line)

    def increment_item(self, line_id: str) -> DraftResult:
        """Add one unit to a line, switching to pair pricing when it applies"""
        line = self.get_line(line_id)
        new_quantity = line.quantity + 1

        if new_quantity == PAIR and not line.bundle_applied:
            bundle = self.catalog.find_bundle_counterpart(line.category_id, line.name, PAIR)
            if bundle is not None:
                self._apply_bundle(line, bundle)
                return DraftResult(line=line, notices=[self._discount_notice(line)])

        line.quantity = new_quantity
        if line.bundle_applied:
            self._reprice_bundle(line)
            if line.quantity % PAIR == 0:
                return DraftResult(line=line, notices=[self._discount_notice(line)])
        else:
            line.subtotal_cents = line.unit_price_cents * line.quantity
        return DraftResult(line=line)

    def decrement_item(self, line_id: str) -> DraftResult:
        """Take one unit off a line; the last unit removes the line"""
        line = self.get_line(line_id)

        if line.bundle_applied and line.quantity == PAIR:
            self._revert_bundle(line)
            return DraftResult(line=line)

        if line.quantity > 1:
            line.quantity -= 1
            if line.bundle_applied:
                self._reprice_bundle(line)
            else:
                line.subtotal_cents = line.unit_price_cents * line.quantity
            return DraftResult(line=line)

        return self.remove_item(line_id)

    def remove_item(self, line_id: str) -> DraftResult:
        line = self.get_line(line_id)
        self.items.remove(line)
        return DraftResult(line=line, removed=True)

    def clear(self):
        """Empty the draft; callers confirm with the user first when it has lines"""
        self.items = []

    def snapshot(self) -> List[DraftLineItem]:
        """Deep copy of the lines, safe to persist"""
        return [line.model_copy(deep=True) for line in self.items]

    def _find_line_for_item(self, item_id: str) -> Optional[DraftLineItem]:
        for line in self.items:
            if line.item_id == item_id:
                return line
        return None

    def _add_custom_amount(self, item: MenuItem, category_id: str,
                           amount_cents: Optional[int]) -> DraftResult:
        if amount_cents is None or amount_cents <= 0:
            raise ValidationError(
                f"Enter an amount greater than zero for {item.name}",
                {"item_id": item.id, "amount_cents": amount_cents}
            )
        # Custom amounts are not fungible, every add is its own line
        line = DraftLineItem(
            line_id=_new_line_id(item.id),
            item_id=item.id,
            category_id=category_id,
            name=item.name,
            unit_price_cents=amount_cents,
            quantity=1,
            subtotal_cents=amount_cents,
        )
        self.items.append(line)
        return DraftResult(line=line)

    def _add_option(self, item: MenuItem, category_id: str,
                    option_name: Optional[str]) -> DraftResult:
        option = next((o for o in item.price_options if o.name == option_name), None)
        if option is None:
            raise ValidationError(
                f"Choose one of the options for {item.name}",
                {"item_id": item.id, "options": [o.name for o in item.price_options]}
            )
        line = DraftLineItem(
            line_id=_new_line_id(item.id),
            item_id=item.id,
            category_id=category_id,
            name=f"{item.name} ({option.name})",
            unit_price_cents=option.price_cents,
            quantity=1,
            subtotal_cents=option.price_cents,
        )
        self.items.append(line)
        return DraftResult(line=line)

    def _apply_bundle(self, line: DraftLineItem, bundle: MenuItem):
        line.original_unit_price_cents = line.unit_price_cents
        line.bundle_pair_price_cents = bundle.price_cents
        line.quantity = PAIR
        line.subtotal_cents = bundle.price_cents
        line.bundle_applied = True
        line.bundle_discount_cents = PAIR * line.original_unit_price_cents - bundle.price_cents

    def _reprice_bundle(self, line: DraftLineItem):
        pairs, singles = divmod(line.quantity, PAIR)
        line.subtotal_cents = pairs * line.bundle_pair_price_cents + singles * line.original_unit_price_cents
        line.bundle_discount_cents = line.quantity * line.original_unit_price_cents - line.subtotal_cents

    def _revert_bundle(self, line: DraftLineItem):
        plain = self.catalog.find_plain_item(line.category_id, line.name)
        if plain is not None:
            unit_price = plain.price_cents
        else:
            logger.warning(
                "No plain item named %r in category %s; charging half the pair price",
                line.name, line.category_id
            )
            unit_price = line.bundle_pair_price_cents // PAIR

        line.quantity = 1
        line.unit_price_cents = unit_price
        line.subtotal_cents = unit_price
        line.bundle_applied = False
        line.bundle_discount_cents = 0
        line.original_unit_price_cents = None
        line.bundle_pair_price_cents = None

    def _discount_notice(self, line: DraftLineItem) -> Notice:
        pairs = line.quantity // PAIR
        return Notice(
            message=f"Pair price applied to {line.name} ({pairs} x {_format_mxn(line.bundle_pair_price_cents)}), "
            f"saving {_format_mxn(line.bundle_discount_cents)}",
            level="success",
        )


class DraftRegistry:
    """One draft engine per client session, created on first use"""

    def __init__(self):
        self._drafts: Dict[str, DraftSaleEngine] = {}

    def get(self, session_id: str, catalog: MenuCatalog) -> DraftSaleEngine:
        """Return the session's draft, pointed at the current menu"""
        engine = self._drafts.get(session_id)
        if engine is None:
            engine = DraftSaleEngine(catalog)
            self._drafts[session_id] = engine
        else:
            engine.catalog = catalog
        return engine

    def discard(self, session_id: str):
        self._drafts.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._drafts)


# Global registry
draft_registry = DraftRegistry()
