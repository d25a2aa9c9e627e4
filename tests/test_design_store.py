"""
Tests for the Design State Store.

These tests verify:
1. Every design/quantity action recomputes pricing in the same dispatch
2. Rejected actions leave state untouched
3. Element identity and ordering are preserved
4. UI-only actions do not touch the design or pricing
"""

import random
from decimal import Decimal

import pytest

from nfcforge.models.design import (
    ColorSlot,
    Design,
    DesignElement,
    DuplicateElementError,
    ElementKind,
    ElementNotFoundError,
    InvalidColorError,
    InvalidConfigurationError,
    Material,
    NfcChipType,
    new_element,
)
from nfcforge.models.pricing import InvalidQuantityError
from nfcforge.services.design_store import (
    AddElement,
    DesignStore,
    InvalidActionError,
    RemoveElement,
    SelectElement,
    SelectTemplate,
    SetActiveTab,
    SetChipType,
    SetColor,
    SetDragging,
    SetMaterial,
    SetQuantity,
    UpdateElement,
    parse_action,
)
from nfcforge.services.pricing import calculate_pricing


def element(element_id: str, kind: ElementKind = ElementKind.TEXT) -> DesignElement:
    return DesignElement(id=element_id, kind=kind)


@pytest.fixture
def store() -> DesignStore:
    return DesignStore()


def assert_consistent(store: DesignStore) -> None:
    """Published pricing matches an independent recomputation."""
    state = store.state
    assert state.pricing == calculate_pricing(state.design, state.quantity)


# =============================================================================
# INITIAL STATE
# =============================================================================


class TestInitialState:
    def test_defaults(self, store: DesignStore) -> None:
        assert store.design == Design()
        assert store.quantity == 1
        assert store.pricing.total == Decimal("9.99")
        assert store.ui.selected_element_id is None

    def test_custom_start(self) -> None:
        design = Design(material=Material.METAL, nfc_type=NfcChipType.NTAG216)
        store = DesignStore(design=design, quantity=500)

        assert store.pricing.total == Decimal("7596.00")

    def test_rejects_bad_start_quantity(self) -> None:
        with pytest.raises(InvalidQuantityError):
            DesignStore(quantity=0)


# =============================================================================
# PRICING RECOMPUTATION
# =============================================================================


class TestPricingRecomputation:
    def test_set_material_reprices(self, store: DesignStore) -> None:
        snapshot = store.dispatch(SetMaterial(Material.METAL))

        assert snapshot.design.material is Material.METAL
        assert snapshot.pricing.material_cost == Decimal("5.00")
        assert snapshot.pricing.total == Decimal("14.99")

    def test_set_material_accepts_string(self, store: DesignStore) -> None:
        store.dispatch(SetMaterial("Wood"))

        assert store.design.material is Material.WOOD

    def test_set_chip_reprices(self, store: DesignStore) -> None:
        store.dispatch(SetChipType(NfcChipType.NTAG215))

        assert store.pricing.nfc_cost == Decimal("2.00")

    def test_set_quantity_reprices(self, store: DesignStore) -> None:
        store.dispatch(SetQuantity(100))

        assert store.quantity == 100
        assert store.pricing.quantity == 100
        assert store.pricing.discount == Decimal("0.10")

    def test_dispatch_returns_published_state(self, store: DesignStore) -> None:
        snapshot = store.dispatch(SetQuantity(5))

        assert snapshot is store.state

    def test_ui_action_keeps_pricing_object(self, store: DesignStore) -> None:
        before = store.pricing
        store.dispatch(SetActiveTab("colors"))

        assert store.pricing is before

    def test_random_action_sequence_stays_consistent(self) -> None:
        """After any sequence of actions, pricing equals recomputation."""
        rng = random.Random(1234)
        store = DesignStore()
        for i in range(300):
            choice = rng.randrange(6)
            if choice == 0:
                store.dispatch(SetMaterial(rng.choice(list(Material))))
            elif choice == 1:
                store.dispatch(SetChipType(rng.choice(list(NfcChipType))))
            elif choice == 2:
                store.dispatch(SetQuantity(rng.randint(1, 2000)))
            elif choice == 3:
                store.dispatch(AddElement(element(f"e{i}")))
            elif choice == 4 and store.design.elements:
                target = rng.choice(store.design.elements).id
                store.dispatch(RemoveElement(target))
            else:
                store.dispatch(SetColor(ColorSlot.PRIMARY, f"#{rng.randrange(0xFFFFFF):06x}"))
            assert_consistent(store)


# =============================================================================
# REJECTED ACTIONS
# =============================================================================


class TestRejectedActions:
    def test_unknown_material_rejected(self, store: DesignStore) -> None:
        store.dispatch(SetMaterial(Material.METAL))
        before = store.state

        with pytest.raises(InvalidConfigurationError):
            store.dispatch(SetMaterial("Gold"))

        assert store.state is before
        assert store.design.material is Material.METAL

    def test_unknown_chip_rejected(self, store: DesignStore) -> None:
        before = store.state

        with pytest.raises(InvalidConfigurationError):
            store.dispatch(SetChipType("NTAG424"))

        assert store.state is before

    @pytest.mark.parametrize("quantity", [0, -3, 2.5, "10"])
    def test_bad_quantity_rejected(self, store: DesignStore, quantity: object) -> None:
        before = store.state

        with pytest.raises(InvalidQuantityError):
            store.dispatch(SetQuantity(quantity))

        assert store.state is before

    def test_bad_color_rejected(self, store: DesignStore) -> None:
        before = store.state

        with pytest.raises(InvalidColorError):
            store.dispatch(SetColor(ColorSlot.PRIMARY, "blue"))

        assert store.state is before

    def test_blank_template_rejected(self, store: DesignStore) -> None:
        with pytest.raises(InvalidActionError):
            store.dispatch(SelectTemplate("  "))

    def test_unknown_action_type(self, store: DesignStore) -> None:
        with pytest.raises(TypeError):
            store.dispatch(object())  # type: ignore[arg-type]


# =============================================================================
# ELEMENTS
# =============================================================================


class TestElements:
    def test_add_appends(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))
        store.dispatch(AddElement(element("b")))

        assert store.design.element_ids() == ["a", "b"]

    def test_add_duplicate_rejected(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))

        with pytest.raises(DuplicateElementError):
            store.dispatch(AddElement(element("a")))

        assert store.design.element_ids() == ["a"]

    def test_update_preserves_identity_and_position(self, store: DesignStore) -> None:
        for eid in ("a", "b", "c"):
            store.dispatch(AddElement(element(eid)))

        store.dispatch(UpdateElement("b", {"x": 12.5, "content": "Ada Lovelace"}))

        assert store.design.element_ids() == ["a", "b", "c"]
        updated = store.design.get_element("b")
        assert updated.x == 12.5
        assert updated.content == "Ada Lovelace"

    def test_update_cannot_change_id(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))

        with pytest.raises(InvalidActionError):
            store.dispatch(UpdateElement("a", {"id": "z"}))

        assert store.design.element_ids() == ["a"]

    @pytest.mark.parametrize(
        "changes",
        [{"x": "abc"}, {"style": "bold"}, {"content": 123}, {"z_index": "top"}],
    )
    def test_update_with_bad_types_rejected(self, store: DesignStore, changes: dict) -> None:
        """Badly typed edits are rejected and the published snapshot stays put."""
        store.dispatch(AddElement(element("a")))
        before = store.state

        with pytest.raises(InvalidActionError):
            store.dispatch(UpdateElement("a", changes))

        assert store.state is before
        store.dispatch(SetMaterial(Material.METAL))
        assert store.design.material is Material.METAL

    def test_update_coerces_numeric_strings(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))

        store.dispatch(UpdateElement("a", {"x": "7", "z_index": 2.0}))

        updated = store.design.get_element("a")
        assert updated.x == 7.0
        assert updated.z_index == 2

    def test_update_missing_element(self, store: DesignStore) -> None:
        with pytest.raises(ElementNotFoundError):
            store.dispatch(UpdateElement("ghost", {"x": 1.0}))

    def test_remove_preserves_order_and_ids(self, store: DesignStore) -> None:
        for eid in ("a", "b", "c", "d"):
            store.dispatch(AddElement(element(eid)))
        originals = {e.id: e for e in store.design.elements}

        store.dispatch(RemoveElement("b"))

        assert store.design.element_ids() == ["a", "c", "d"]
        for e in store.design.elements:
            assert e == originals[e.id]

    def test_remove_missing_element(self, store: DesignStore) -> None:
        with pytest.raises(ElementNotFoundError):
            store.dispatch(RemoveElement("ghost"))

    def test_remove_clears_selection(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))
        store.dispatch(SelectElement("a"))

        store.dispatch(RemoveElement("a"))

        assert store.ui.selected_element_id is None

    def test_remove_keeps_other_selection(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))
        store.dispatch(AddElement(element("b")))
        store.dispatch(SelectElement("a"))

        store.dispatch(RemoveElement("b"))

        assert store.ui.selected_element_id == "a"

    def test_element_changes_do_not_change_price(self, store: DesignStore) -> None:
        store.dispatch(AddElement(new_element("logo")))

        assert store.pricing.total == Decimal("9.99")
        assert_consistent(store)


# =============================================================================
# UI STATE
# =============================================================================


class TestUIActions:
    def test_select_unknown_element(self, store: DesignStore) -> None:
        with pytest.raises(ElementNotFoundError):
            store.dispatch(SelectElement("ghost"))

    def test_clear_selection(self, store: DesignStore) -> None:
        store.dispatch(AddElement(element("a")))
        store.dispatch(SelectElement("a"))

        store.dispatch(SelectElement(None))

        assert store.ui.selected_element_id is None

    def test_set_tab(self, store: DesignStore) -> None:
        store.dispatch(SetActiveTab("materials"))

        assert store.ui.active_tab == "materials"

    def test_set_dragging(self, store: DesignStore) -> None:
        design_before = store.design
        store.dispatch(SetDragging(True))

        assert store.ui.is_dragging is True
        assert store.design is design_before

    def test_select_template(self, store: DesignStore) -> None:
        store.dispatch(SelectTemplate("minimal"))

        assert store.design.template == "minimal"


# =============================================================================
# ACTION PARSING
# =============================================================================


class TestParseAction:
    def test_parse_set_material(self) -> None:
        assert parse_action({"type": "set_material", "material": "Metal"}) == SetMaterial(
            "Metal"
        )

    def test_parse_add_element_generates_id(self) -> None:
        action = parse_action(
            {"type": "add_element", "element": {"kind": "text", "content": "Hi", "x": 4}}
        )

        assert isinstance(action, AddElement)
        assert action.element.id
        assert action.element.content == "Hi"

    def test_parse_add_element_keeps_given_id(self) -> None:
        action = parse_action({"type": "add_element", "element": {"id": "e1", "kind": "icon"}})

        assert isinstance(action, AddElement)
        assert action.element.id == "e1"

    def test_parse_set_color(self) -> None:
        action = parse_action({"type": "set_color", "slot": "background", "value": "#000"})

        assert action == SetColor(ColorSlot.BACKGROUND, "#000")

    def test_parse_update_element(self) -> None:
        action = parse_action(
            {"type": "update_element", "element_id": "e1", "changes": {"y": 3.0}}
        )

        assert action == UpdateElement("e1", {"y": 3.0})

    def test_unknown_type(self) -> None:
        with pytest.raises(InvalidActionError):
            parse_action({"type": "explode"})

    def test_missing_fields(self) -> None:
        with pytest.raises(InvalidActionError):
            parse_action({"type": "set_quantity"})

    def test_bad_color_slot(self) -> None:
        with pytest.raises(InvalidActionError):
            parse_action({"type": "set_color", "slot": "accent", "value": "#000"})

    @pytest.mark.parametrize(
        "element_data",
        [
            {"kind": "text", "style": ["bold"]},
            {"kind": "text", "style": {"weight": 700}},
            {"kind": "text", "x": "left"},
            {"kind": "sticker"},
            {"id": "e1", "kind": "text", "content": ["Hi"]},
            {"content": "no kind"},
        ],
    )
    def test_malformed_element_rejected(self, element_data: dict) -> None:
        with pytest.raises(InvalidActionError):
            parse_action({"type": "add_element", "element": element_data})

    @pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
    def test_dragging_requires_boolean(self, value: object) -> None:
        with pytest.raises(InvalidActionError):
            parse_action({"type": "set_dragging", "is_dragging": value})

    def test_dragging_false(self) -> None:
        assert parse_action({"type": "set_dragging", "is_dragging": False}) == SetDragging(False)

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "set_active_tab", "tab": 3},
            {"type": "select_template", "template": ["modern"]},
            {"type": "remove_element", "element_id": 7},
            {"type": "select_element", "element_id": {"id": "a"}},
            {"type": "update_element", "element_id": "a", "changes": "x=1"},
        ],
    )
    def test_non_string_fields_rejected(self, payload: dict) -> None:
        with pytest.raises(InvalidActionError):
            parse_action(payload)
