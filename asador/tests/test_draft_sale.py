import pytest

from ..core.exceptions import LineNotFoundError, MenuItemNotFoundError, ValidationError
from ..models.menu import Menu
from ..services.draft_sale import DraftRegistry, DraftSaleEngine
from ..services.menu_catalog import MenuCatalog


def _menu_without(menu, category_id):
    """Copy of the menu with one category deleted, as an admin edit would leave it"""
    return menu.model_copy(update={"categories": [c for c in menu.categories if c.id != category_id]})


class TestAddItem:
    """Adding menu items by pricing mode"""

    def test_standard_item_creates_line(self, draft):
        result = draft.add_item("quesadilla", "especialidades")

        assert result.line.name == "Quesadilla"
        assert result.line.quantity == 1
        assert result.line.subtotal_cents == 5000
        assert draft.total_cents == 5000

    def test_same_item_twice_increments_existing_line(self, draft):
        draft.add_item("refresco", "bebidas")
        draft.add_item("refresco", "bebidas")

        assert len(draft.items) == 1
        assert draft.items[0].quantity == 2
        assert draft.total_cents == 5000

    def test_unavailable_item_rejected(self, draft):
        with pytest.raises(ValidationError):
            draft.add_item("costilla", "especialidades")
        assert draft.is_empty

    def test_unknown_item_rejected(self, draft):
        with pytest.raises(MenuItemNotFoundError):
            draft.add_item("birria", "especialidades")

    def test_custom_amount_lines_are_distinct(self, draft):
        draft.add_item("envio", "servicios", amount_cents=3000)
        draft.add_item("envio", "servicios", amount_cents=4500)

        assert [line.subtotal_cents for line in draft.items] == [3000, 4500]
        assert draft.total_cents == 7500

    @pytest.mark.parametrize("amount", [None, 0, -100])
    def test_custom_amount_requires_positive_amount(self, draft, amount):
        with pytest.raises(ValidationError):
            draft.add_item("envio", "servicios", amount_cents=amount)
        assert draft.is_empty

    def test_multi_option_uses_option_price_and_name(self, draft):
        result = draft.add_item("charola", "especialidades", option_name="Grande")

        assert result.line.name == "Charola (Grande)"
        assert result.line.subtotal_cents == 25000

    def test_multi_option_each_add_is_new_line(self, draft):
        draft.add_item("charola", "especialidades", option_name="Chica")
        draft.add_item("charola", "especialidades", option_name="Chica")

        assert len(draft.items) == 2
        assert draft.total_cents == 30000

    def test_multi_option_unknown_option_rejected(self, draft):
        with pytest.raises(ValidationError):
            draft.add_item("charola", "especialidades", option_name="Mediana")


class TestPairPricing:
    """Pair pricing on increment / decrement (unit 5000, pair 9000)"""

    def test_quantities_one_to_four(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        subtotals = [draft.get_line(line_id).subtotal_cents]
        for _ in range(3):
            subtotals.append(draft.increment_item(line_id).line.subtotal_cents)

        assert subtotals == [5000, 9000, 14000, 18000]

    def test_second_unit_switches_to_pair_price(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        result = draft.increment_item(line_id)
        line = result.line

        assert line.bundle_applied is True
        assert line.original_unit_price_cents == 5000
        assert line.bundle_pair_price_cents == 9000
        assert line.bundle_discount_cents == 1000
        assert len(result.notices) == 1
        assert result.notices[0].level == "success"

    def test_notice_only_on_even_quantities(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.increment_item(line_id)

        assert draft.increment_item(line_id).notices == []
        assert len(draft.increment_item(line_id).notices) == 1

    def test_discount_tracks_completed_pairs(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        for _ in range(4):
            draft.increment_item(line_id)

        line = draft.get_line(line_id)
        assert line.quantity == 5
        assert line.subtotal_cents == 2 * 9000 + 5000
        assert line.bundle_discount_cents == 5 * 5000 - line.subtotal_cents

    def test_decrement_from_pair_restores_unit_price(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.increment_item(line_id)
        line = draft.decrement_item(line_id).line

        assert line.quantity == 1
        assert line.subtotal_cents == 5000
        assert line.bundle_applied is False
        assert line.bundle_discount_cents == 0
        assert line.original_unit_price_cents is None

    def test_decrement_inside_bundle_mode_reprices(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        for _ in range(3):
            draft.increment_item(line_id)

        line = draft.decrement_item(line_id).line
        assert line.quantity == 3
        assert line.subtotal_cents == 14000

    def test_bundle_not_cheaper_is_ignored(self, draft):
        line_id = draft.add_item("gringa", "especialidades").line.line_id
        result = draft.increment_item(line_id)

        assert result.line.bundle_applied is False
        assert result.line.subtotal_cents == 12000
        assert result.notices == []

    def test_item_without_bundle_multiplies(self, draft):
        line_id = draft.add_item("refresco", "bebidas").line.line_id
        draft.increment_item(line_id)
        draft.increment_item(line_id)

        assert draft.get_line(line_id).subtotal_cents == 7500

    def test_revert_without_plain_item_charges_half_pair(self, draft, catalog):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.increment_item(line_id)
        # Plain item taken off the menu while the pair is in the draft
        catalog.get_item("especialidades", "quesadilla").available = False

        line = draft.decrement_item(line_id).line
        assert line.quantity == 1
        assert line.subtotal_cents == 4500

    def test_revert_after_category_removed_charges_half_pair(self, draft, sample_menu):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.increment_item(line_id)
        draft.catalog = MenuCatalog(_menu_without(sample_menu, "especialidades"))

        line = draft.decrement_item(line_id).line
        assert line.quantity == 1
        assert line.subtotal_cents == 4500
        assert line.bundle_applied is False
        assert draft.total_cents == 4500

    def test_increment_after_category_removed_keeps_unit_price(self, draft, sample_menu):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.catalog = MenuCatalog(_menu_without(sample_menu, "especialidades"))

        result = draft.increment_item(line_id)
        assert result.line.quantity == 2
        assert result.line.subtotal_cents == 10000
        assert result.line.bundle_applied is False
        assert result.notices == []


class TestLineOperations:
    """Remove, decrement to zero and clear"""

    def test_decrement_last_unit_removes_line(self, draft):
        line_id = draft.add_item("refresco", "bebidas").line.line_id
        result = draft.decrement_item(line_id)

        assert result.removed is True
        assert draft.is_empty
        assert draft.total_cents == 0

    def test_remove_line(self, draft):
        keep = draft.add_item("refresco", "bebidas").line.line_id
        drop = draft.add_item("quesadilla", "especialidades").line.line_id

        draft.remove_item(drop)
        assert [line.line_id for line in draft.items] == [keep]
        assert draft.total_cents == 2500

    def test_unknown_line_raises(self, draft):
        with pytest.raises(LineNotFoundError):
            draft.increment_item("missing")
        with pytest.raises(LineNotFoundError):
            draft.remove_item("missing")

    def test_clear(self, draft):
        draft.add_item("refresco", "bebidas")
        draft.add_item("envio", "servicios", amount_cents=2000)
        draft.clear()

        assert draft.is_empty
        assert draft.total_cents == 0

    def test_total_is_sum_of_subtotals(self, draft):
        line_id = draft.add_item("quesadilla", "especialidades").line.line_id
        draft.increment_item(line_id)
        draft.add_item("charola", "especialidades", option_name="Chica")
        draft.add_item("envio", "servicios", amount_cents=3000)

        assert draft.total_cents == sum(line.subtotal_cents for line in draft.items) == 27000

    def test_snapshot_is_detached(self, draft):
        line_id = draft.add_item("refresco", "bebidas").line.line_id
        snapshot = draft.snapshot()
        draft.increment_item(line_id)

        assert snapshot[0].quantity == 1


class TestDraftRegistry:
    """One draft per session"""

    def test_sessions_do_not_share_drafts(self, catalog):
        registry = DraftRegistry()
        registry.get("a", catalog).add_item("refresco", "bebidas")

        assert registry.get("b", catalog).is_empty
        assert registry.get("a", catalog).total_cents == 2500

    def test_get_points_existing_draft_at_new_catalog(self, catalog):
        registry = DraftRegistry()
        engine = registry.get("a", catalog)
        newer = MenuCatalog(Menu(categories=[]))

        assert registry.get("a", newer) is engine
        assert engine.catalog is newer

    def test_discard(self, catalog):
        registry = DraftRegistry()
        first = registry.get("a", catalog)
        registry.discard("a")

        assert registry.get("a", catalog) is not first


def test_engine_starts_empty(catalog):
    engine = DraftSaleEngine(catalog)
    assert engine.is_empty
    assert engine.total_cents == 0
