"""
Card design domain model.

A Design is the in-progress configuration of a single business card:
template, placed elements, card material, NFC chip and color scheme.
All types here are immutable; the DesignStore replaces them wholesale
on every action.

INVARIANTS:
- material and nfc_type are always members of their closed enums
- colors are always present and valid hex values
- element order is stacking order and is significant
"""

import math
import re
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from nfcforge.config import (
    DEFAULT_ACTIVE_TAB,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    DEFAULT_TEMPLATE,
)
from nfcforge.models.failure import FailureKind, KnownError


class Material(str, Enum):
    """Card stock the design is printed on."""

    PVC = "PVC"
    METAL = "Metal"
    WOOD = "Wood"
    PREMIUM_PLASTIC = "Premium Plastic"


class NfcChipType(str, Enum):
    """Supported NFC chip models."""

    NTAG213 = "NTAG213"
    NTAG215 = "NTAG215"
    NTAG216 = "NTAG216"


class ElementKind(str, Enum):
    """Kinds of items that can be placed on a card."""

    TEXT = "text"
    LOGO = "logo"
    ICON = "icon"


class ColorSlot(str, Enum):
    """Named slots of a card's color scheme."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    BACKGROUND = "background"


# =============================================================================
# ERRORS
# =============================================================================


class InvalidConfigurationError(KnownError):
    """Raised when a material or chip value is outside its closed enum."""

    def __init__(self, field_name: str, value: Any, allowed: list[str]):
        self.field_name = field_name
        self.value = value
        self.allowed = allowed
        super().__init__(
            kind=FailureKind.INVALID_CONFIGURATION,
            message=f"Unsupported {field_name}: {value!r}",
            detail=f"Allowed values: {', '.join(allowed)}",
            suggestion=f"Choose one of the supported {field_name} options.",
            status_code=400,
        )


class InvalidColorError(KnownError):
    """Raised when a color is not a hex color value."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Invalid color: {value!r}",
            detail="Colors must be hex values like #1a2b3c or #abc",
            status_code=400,
        )


class ElementNotFoundError(KnownError):
    """Raised when an action references an element the design does not hold."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Design element not found: {element_id}",
            status_code=404,
        )


class DuplicateElementError(KnownError):
    """Raised when adding an element whose id is already on the card."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Design element already exists: {element_id}",
            status_code=409,
        )


# =============================================================================
# ENUM PARSING
# =============================================================================


def parse_material(value: Any) -> Material:
    """
    Coerce a raw value to a Material.

    Raises:
        InvalidConfigurationError: If value is not a supported material
    """
    if isinstance(value, Material):
        return value
    try:
        return Material(value)
    except ValueError:
        raise InvalidConfigurationError(
            "material", value, [m.value for m in Material]
        ) from None


def parse_chip_type(value: Any) -> NfcChipType:
    """
    Coerce a raw value to an NfcChipType.

    Raises:
        InvalidConfigurationError: If value is not a supported chip
    """
    if isinstance(value, NfcChipType):
        return value
    try:
        return NfcChipType(value)
    except ValueError:
        raise InvalidConfigurationError(
            "NFC chip type", value, [c.value for c in NfcChipType]
        ) from None


_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_color(value: Any) -> str:
    """
    Validate a hex color and return it lower-cased.

    Raises:
        InvalidColorError: If value is not #RGB or #RRGGBB
    """
    if not isinstance(value, str) or not _HEX_COLOR.match(value.strip()):
        raise InvalidColorError(value)
    return value.strip().lower()


# =============================================================================
# DOMAIN TYPES
# =============================================================================


@dataclass(frozen=True)
class ColorScheme:
    """Primary, secondary and background colors of a card."""

    primary: str = DEFAULT_PRIMARY_COLOR
    secondary: str = DEFAULT_SECONDARY_COLOR
    background: str = DEFAULT_BACKGROUND_COLOR

    def __post_init__(self) -> None:
        for slot in ColorSlot:
            object.__setattr__(self, slot.value, normalize_color(getattr(self, slot.value)))

    def with_color(self, slot: ColorSlot, value: str) -> "ColorScheme":
        """Return a copy with one slot changed."""
        return replace(self, **{slot.value: value})

    def to_dict(self) -> dict[str, str]:
        return {slot.value: getattr(self, slot.value) for slot in ColorSlot}


@dataclass(frozen=True)
class DesignElement:
    """
    One placed item on the card.

    Attributes:
        id: Stable identifier, never reassigned by edits
        kind: Text, logo or icon
        x, y: Position on the card canvas
        width, height: Size on the card canvas
        z_index: Explicit layer hint for the renderer
        content: Text body or asset reference
        style: Style attributes as sorted (key, value) pairs
    """

    id: str
    kind: ElementKind
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    z_index: int = 0
    content: str = ""
    style: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"element id must be a non-empty string, got {self.id!r}")
        object.__setattr__(self, "kind", ElementKind(self.kind))
        for name in ("x", "y", "width", "height"):
            object.__setattr__(self, name, _coerce_number(name, getattr(self, name)))
        object.__setattr__(self, "z_index", _coerce_integer("z_index", self.z_index))
        if not isinstance(self.content, str):
            raise ValueError(f"content must be a string, got {type(self.content).__name__}")
        object.__setattr__(self, "style", _coerce_style(self.style))

    def style_dict(self) -> dict[str, str]:
        return dict(self.style)

    def with_changes(self, **changes: Any) -> "DesignElement":
        """
        Return a copy with the given attributes changed.

        The element id is never changed; `style` may be given as a dict.

        Raises:
            ValueError: If a changed value has the wrong type
        """
        changes.pop("id", None)
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "z_index": self.z_index,
            "content": self.content,
            "style": self.style_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignElement":
        return cls(
            id=data["id"],
            kind=ElementKind(data["kind"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            z_index=data.get("z_index", 0),
            content=data.get("content", ""),
            style=data.get("style", {}),
        )


def new_element(kind: ElementKind | str, **attrs: Any) -> DesignElement:
    """Create an element with a freshly generated id."""
    return DesignElement(id=uuid.uuid4().hex[:12], kind=ElementKind(kind), **attrs)


def _coerce_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got a boolean")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def _coerce_integer(name: str, value: Any) -> int:
    number = _coerce_number(name, value)
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def _coerce_style(value: Any) -> tuple[tuple[str, str], ...]:
    """Normalize a style dict (or pairs) to sorted (key, value) string pairs."""
    if isinstance(value, dict):
        pairs = list(value.items())
    elif isinstance(value, (tuple, list)) and all(
        isinstance(pair, (tuple, list)) and len(pair) == 2 for pair in value
    ):
        pairs = [tuple(pair) for pair in value]
    else:
        raise ValueError(f"style must be an object of string values, got {value!r}")
    for key, item in pairs:
        if not isinstance(key, str) or not isinstance(item, str):
            raise ValueError(f"style entries must be strings, got {key!r}: {item!r}")
    return tuple(sorted(pairs))  # type: ignore[arg-type]


@dataclass(frozen=True)
class Design:
    """
    The full configuration of one business card.

    Elements are ordered: index 0 is drawn first (bottom of the stack).
    """

    template: str = DEFAULT_TEMPLATE
    elements: tuple[DesignElement, ...] = field(default_factory=tuple)
    material: Material = Material.PVC
    nfc_type: NfcChipType = NfcChipType.NTAG213
    colors: ColorScheme = field(default_factory=ColorScheme)

    def __post_init__(self) -> None:
        object.__setattr__(self, "material", parse_material(self.material))
        object.__setattr__(self, "nfc_type", parse_chip_type(self.nfc_type))

    def element_ids(self) -> list[str]:
        return [e.id for e in self.elements]

    def index_of(self, element_id: str) -> int:
        """
        Position of an element in the stacking order.

        Raises:
            ElementNotFoundError: If no element has this id
        """
        for i, element in enumerate(self.elements):
            if element.id == element_id:
                return i
        raise ElementNotFoundError(element_id)

    def get_element(self, element_id: str) -> DesignElement:
        return self.elements[self.index_of(element_id)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "elements": [e.to_dict() for e in self.elements],
            "material": self.material.value,
            "nfc_type": self.nfc_type.value,
            "colors": self.colors.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Design":
        return cls(
            template=data["template"],
            elements=tuple(DesignElement.from_dict(e) for e in data.get("elements", [])),
            material=parse_material(data["material"]),
            nfc_type=parse_chip_type(data["nfc_type"]),
            colors=ColorScheme(**data.get("colors", {})),
        )


@dataclass(frozen=True)
class UIState:
    """
    Transient designer UI state. Never persisted with an order.

    selected_element_id only names an element; it does not own it.
    """

    selected_element_id: str | None = None
    active_tab: str = DEFAULT_ACTIVE_TAB
    is_dragging: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_element_id": self.selected_element_id,
            "active_tab": self.active_tab,
            "is_dragging": self.is_dragging,
        }


# =============================================================================
# WIRE PAYLOADS
# =============================================================================


class ElementPayload(BaseModel):
    """A design element as submitted by the storefront."""

    id: str = Field(..., min_length=1)
    kind: ElementKind
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    z_index: int = 0
    content: str = ""
    style: dict[str, str] = Field(default_factory=dict)

    def to_element(self) -> DesignElement:
        return DesignElement.from_dict(self.model_dump(mode="json"))


class ColorsPayload(BaseModel):
    primary: str = DEFAULT_PRIMARY_COLOR
    secondary: str = DEFAULT_SECONDARY_COLOR
    background: str = DEFAULT_BACKGROUND_COLOR


class DesignPayload(BaseModel):
    """
    A design as submitted by the storefront.

    material and nfc_type are kept as optional plain strings so missing or
    unsupported values reach the engine and fail with
    InvalidConfigurationError instead of a generic schema error.
    """

    template: str = Field(default="", description="Template identifier")
    elements: list[ElementPayload] = Field(default_factory=list)
    material: str | None = Field(default=None, description="Card material", examples=["Metal"])
    nfc_type: str | None = Field(
        default=None, description="NFC chip model", examples=["NTAG216"]
    )
    colors: ColorsPayload = Field(default_factory=ColorsPayload)

    def to_design(self) -> Design:
        """
        Convert to an immutable Design.

        Raises:
            InvalidConfigurationError: Unsupported material or chip
            InvalidColorError: Malformed color
        """
        return Design(
            template=self.template,
            elements=tuple(e.to_element() for e in self.elements),
            material=parse_material(self.material),
            nfc_type=parse_chip_type(self.nfc_type),
            colors=ColorScheme(**self.colors.model_dump()),
        )

    @classmethod
    def from_design(cls, design: Design) -> "DesignPayload":
        return cls.model_validate(design.to_dict())
