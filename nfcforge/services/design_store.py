"""
Design State Store.

Holds one designer session's Design, UIState, quantity and derived
PricingDetails. All mutation goes through DesignStore.dispatch(), which
accepts a closed set of action types.

INVARIANTS:
- Pricing is recomputed inside the same dispatch() call that changes the
  design or quantity. The new state is published as one immutable
  DesignSnapshot, so a reader can never observe a design paired with
  pricing computed for a different design/quantity.
- A rejected action leaves the published snapshot untouched.
- dispatch() is synchronous: actions never interleave within a session.
- Element edits never change an element's id; append adds to the end;
  removal keeps the relative order of the remaining elements.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from nfcforge.config import DEFAULT_QUANTITY
from nfcforge.models.design import (
    ColorSlot,
    Design,
    DesignElement,
    DuplicateElementError,
    UIState,
    new_element,
    parse_chip_type,
    parse_material,
)
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.models.pricing import PricingDetails
from nfcforge.services.pricing import calculate_pricing, validate_quantity

logger = logging.getLogger(__name__)

EDITABLE_ELEMENT_FIELDS = frozenset(
    {"kind", "x", "y", "width", "height", "z_index", "content", "style"}
)


class InvalidActionError(KnownError):
    """Raised when an action is malformed or not one of the known types."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Invalid designer action: {reason}",
            status_code=400,
        )


# =============================================================================
# ACTIONS
# =============================================================================


def _require_str(action: str, name: str, value: Any, optional: bool = False) -> None:
    if value is None and optional:
        return
    if not isinstance(value, str):
        raise TypeError(f"{action}.{name} must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class SelectTemplate:
    type: ClassVar[str] = "select_template"
    template: str

    def __post_init__(self) -> None:
        _require_str(self.type, "template", self.template)


@dataclass(frozen=True)
class AddElement:
    type: ClassVar[str] = "add_element"
    element: DesignElement


@dataclass(frozen=True)
class UpdateElement:
    type: ClassVar[str] = "update_element"
    element_id: str
    changes: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _require_str(self.type, "element_id", self.element_id)
        if not isinstance(self.changes, dict):
            raise TypeError(f"update_element.changes must be an object, got {self.changes!r}")


@dataclass(frozen=True)
class RemoveElement:
    type: ClassVar[str] = "remove_element"
    element_id: str

    def __post_init__(self) -> None:
        _require_str(self.type, "element_id", self.element_id)


@dataclass(frozen=True)
class SetMaterial:
    type: ClassVar[str] = "set_material"
    material: Any


@dataclass(frozen=True)
class SetChipType:
    type: ClassVar[str] = "set_chip_type"
    nfc_type: Any


@dataclass(frozen=True)
class SetColor:
    type: ClassVar[str] = "set_color"
    slot: ColorSlot
    value: str


@dataclass(frozen=True)
class SetQuantity:
    type: ClassVar[str] = "set_quantity"
    quantity: Any


@dataclass(frozen=True)
class SelectElement:
    type: ClassVar[str] = "select_element"
    element_id: str | None

    def __post_init__(self) -> None:
        _require_str(self.type, "element_id", self.element_id, optional=True)


@dataclass(frozen=True)
class SetActiveTab:
    type: ClassVar[str] = "set_active_tab"
    tab: str

    def __post_init__(self) -> None:
        _require_str(self.type, "tab", self.tab)


@dataclass(frozen=True)
class SetDragging:
    type: ClassVar[str] = "set_dragging"
    is_dragging: bool

    def __post_init__(self) -> None:
        if not isinstance(self.is_dragging, bool):
            raise TypeError(
                f"set_dragging.is_dragging must be true or false, got {self.is_dragging!r}"
            )


DesignAction = (
    SelectTemplate
    | AddElement
    | UpdateElement
    | RemoveElement
    | SetMaterial
    | SetChipType
    | SetColor
    | SetQuantity
    | SelectElement
    | SetActiveTab
    | SetDragging
)

ACTION_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        SelectTemplate,
        AddElement,
        UpdateElement,
        RemoveElement,
        SetMaterial,
        SetChipType,
        SetColor,
        SetQuantity,
        SelectElement,
        SetActiveTab,
        SetDragging,
    )
}


def parse_action(payload: dict[str, Any]) -> DesignAction:
    """
    Build an action from a JSON-style dict with a "type" key.

    For add_element, an "element" without an "id" gets a generated one.

    Raises:
        InvalidActionError: If the type is unknown or fields are missing
    """
    data = dict(payload)
    action_type = data.pop("type", None)
    action_cls = ACTION_TYPES.get(action_type)  # type: ignore[arg-type]
    if action_cls is None:
        raise InvalidActionError(f"unknown action type {action_type!r}")

    try:
        if action_cls is AddElement:
            raw = dict(data.get("element") or {})
            if raw.get("id"):
                element = DesignElement.from_dict(raw)
            else:
                raw.pop("id", None)
                element = new_element(raw.pop("kind"), **raw)
            return AddElement(element=element)
        if action_cls is SetColor:
            return SetColor(slot=ColorSlot(data["slot"]), value=data["value"])
        return action_cls(**data)  # type: ignore[no-any-return]
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidActionError(f"{action_type}: {e}") from e


# =============================================================================
# STORE
# =============================================================================


@dataclass(frozen=True)
class DesignSnapshot:
    """A consistent view of the store: pricing always matches design+quantity."""

    design: Design
    ui: UIState
    quantity: int
    pricing: PricingDetails

    def to_dict(self) -> dict[str, Any]:
        return {
            "design": self.design.to_dict(),
            "ui": self.ui.to_dict(),
            "quantity": self.quantity,
            "pricing": self.pricing.to_dict(),
        }


class DesignStore:
    """
    Single-writer state container for one designer session.

    Readers take `store.state`; writers call `store.dispatch(action)`.
    """

    def __init__(self, design: Design | None = None, quantity: int = DEFAULT_QUANTITY) -> None:
        design = design or Design()
        quantity = validate_quantity(quantity)
        self._state = DesignSnapshot(
            design=design,
            ui=UIState(),
            quantity=quantity,
            pricing=calculate_pricing(design, quantity),
        )
        self._handlers: dict[type, Callable[[Any], tuple[Design, UIState, int]]] = {
            SelectTemplate: self._select_template,
            AddElement: self._add_element,
            UpdateElement: self._update_element,
            RemoveElement: self._remove_element,
            SetMaterial: self._set_material,
            SetChipType: self._set_chip_type,
            SetColor: self._set_color,
            SetQuantity: self._set_quantity,
            SelectElement: self._select_element,
            SetActiveTab: self._set_active_tab,
            SetDragging: self._set_dragging,
        }

    @property
    def state(self) -> DesignSnapshot:
        return self._state

    @property
    def design(self) -> Design:
        return self._state.design

    @property
    def pricing(self) -> PricingDetails:
        return self._state.pricing

    @property
    def ui(self) -> UIState:
        return self._state.ui

    @property
    def quantity(self) -> int:
        return self._state.quantity

    def dispatch(self, action: DesignAction) -> DesignSnapshot:
        """
        Apply one action and return the new snapshot.

        Raises:
            TypeError: If action is not a known action type
            KnownError: If the action is rejected (state is unchanged)
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unknown design action: {type(action).__name__}")

        current = self._state
        try:
            design, ui, quantity = handler(action)
            if design is current.design and quantity == current.quantity:
                pricing = current.pricing
            else:
                pricing = calculate_pricing(design, quantity)
        except KnownError as e:
            logger.warning(
                "DESIGN_ACTION_REJECTED",
                extra={"action": action.type, "kind": e.kind.value, "reason": e.message},
            )
            raise

        self._state = DesignSnapshot(design=design, ui=ui, quantity=quantity, pricing=pricing)
        logger.debug("DESIGN_ACTION_APPLIED", extra={"action": action.type})
        return self._state

    # --- Handlers: each returns (design, ui, quantity) without publishing ---

    def _select_template(self, action: SelectTemplate) -> tuple[Design, UIState, int]:
        if not action.template or not action.template.strip():
            raise InvalidActionError("template must not be blank")
        s = self._state
        return replace(s.design, template=action.template.strip()), s.ui, s.quantity

    def _add_element(self, action: AddElement) -> tuple[Design, UIState, int]:
        s = self._state
        if action.element.id in s.design.element_ids():
            raise DuplicateElementError(action.element.id)
        design = replace(s.design, elements=(*s.design.elements, action.element))
        return design, s.ui, s.quantity

    def _update_element(self, action: UpdateElement) -> tuple[Design, UIState, int]:
        s = self._state
        unknown = set(action.changes) - EDITABLE_ELEMENT_FIELDS
        if unknown:
            raise InvalidActionError(f"cannot edit element fields {sorted(unknown)}")
        index = s.design.index_of(action.element_id)
        try:
            updated = s.design.elements[index].with_changes(**action.changes)
        except (TypeError, ValueError) as e:
            raise InvalidActionError(f"update_element: {e}") from e
        elements = list(s.design.elements)
        elements[index] = updated
        return replace(s.design, elements=tuple(elements)), s.ui, s.quantity

    def _remove_element(self, action: RemoveElement) -> tuple[Design, UIState, int]:
        s = self._state
        index = s.design.index_of(action.element_id)
        elements = s.design.elements[:index] + s.design.elements[index + 1 :]
        ui = s.ui
        if ui.selected_element_id == action.element_id:
            ui = replace(ui, selected_element_id=None)
        return replace(s.design, elements=elements), ui, s.quantity

    def _set_material(self, action: SetMaterial) -> tuple[Design, UIState, int]:
        s = self._state
        return replace(s.design, material=parse_material(action.material)), s.ui, s.quantity

    def _set_chip_type(self, action: SetChipType) -> tuple[Design, UIState, int]:
        s = self._state
        return replace(s.design, nfc_type=parse_chip_type(action.nfc_type)), s.ui, s.quantity

    def _set_color(self, action: SetColor) -> tuple[Design, UIState, int]:
        s = self._state
        colors = s.design.colors.with_color(ColorSlot(action.slot), action.value)
        return replace(s.design, colors=colors), s.ui, s.quantity

    def _set_quantity(self, action: SetQuantity) -> tuple[Design, UIState, int]:
        s = self._state
        return s.design, s.ui, validate_quantity(action.quantity)

    def _select_element(self, action: SelectElement) -> tuple[Design, UIState, int]:
        s = self._state
        if action.element_id is not None:
            s.design.index_of(action.element_id)
        return s.design, replace(s.ui, selected_element_id=action.element_id), s.quantity

    def _set_active_tab(self, action: SetActiveTab) -> tuple[Design, UIState, int]:
        s = self._state
        return s.design, replace(s.ui, active_tab=action.tab), s.quantity

    def _set_dragging(self, action: SetDragging) -> tuple[Design, UIState, int]:
        s = self._state
        return s.design, replace(s.ui, is_dragging=action.is_dragging), s.quantity
