"""
Pricing Rules Table.

Static surcharges per material and NFC chip, plus quantity discount tiers.
The tables must cover every member of the Material and NfcChipType enums;
this is checked when the module is imported, so adding an enum member
without a price fails loudly instead of silently pricing at zero.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Any

from nfcforge.models.design import InvalidConfigurationError, Material, NfcChipType

BASE_PRICE = Decimal("9.99")

MATERIAL_SURCHARGES = MappingProxyType(
    {
        Material.PVC: Decimal("0.00"),
        Material.METAL: Decimal("5.00"),
        Material.WOOD: Decimal("3.00"),
        Material.PREMIUM_PLASTIC: Decimal("2.00"),
    }
)

NFC_SURCHARGES = MappingProxyType(
    {
        NfcChipType.NTAG213: Decimal("0.00"),
        NfcChipType.NTAG215: Decimal("2.00"),
        NfcChipType.NTAG216: Decimal("4.00"),
    }
)

# (minimum quantity, discount rate), highest threshold first
DISCOUNT_TIERS: tuple[tuple[int, Decimal], ...] = (
    (1000, Decimal("0.30")),
    (500, Decimal("0.20")),
    (100, Decimal("0.10")),
)

NO_DISCOUNT = Decimal("0")


def _check_exhaustive() -> None:
    missing = [m.value for m in Material if m not in MATERIAL_SURCHARGES]
    missing += [c.value for c in NfcChipType if c not in NFC_SURCHARGES]
    if missing:
        raise RuntimeError(f"Pricing rules missing entries for: {', '.join(missing)}")


_check_exhaustive()


def material_surcharge(material: Any) -> Decimal:
    """
    Surcharge per card for a material.

    Raises:
        InvalidConfigurationError: If the material has no price
    """
    try:
        return MATERIAL_SURCHARGES[material]
    except KeyError:
        raise InvalidConfigurationError(
            "material", material, [m.value for m in MATERIAL_SURCHARGES]
        ) from None


def nfc_surcharge(chip_type: Any) -> Decimal:
    """
    Surcharge per card for an NFC chip.

    Raises:
        InvalidConfigurationError: If the chip has no price
    """
    try:
        return NFC_SURCHARGES[chip_type]
    except KeyError:
        raise InvalidConfigurationError(
            "NFC chip type", chip_type, [c.value for c in NFC_SURCHARGES]
        ) from None


def discount_rate(quantity: int) -> Decimal:
    """Discount for a quantity. Only the highest qualifying tier applies."""
    for threshold, rate in DISCOUNT_TIERS:
        if quantity >= threshold:
            return rate
    return NO_DISCOUNT
