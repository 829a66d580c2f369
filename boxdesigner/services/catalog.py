"""Static catalogs: volumetric divisor profiles, box styles and size presets."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from boxdesigner.services.units import UnitSystem, normalize_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DivisorProfile:
    """Carrier volumetric-weight convention (volume / divisor = weight)."""
    id: str
    label: str
    divisor: Decimal
    weight_unit: str  # kg or lb


@dataclass(frozen=True)
class BoxStyle:
    id: str
    name: str
    note: str

    @property
    def has_lid(self) -> bool:
        return self.id in LIDDED_STYLES


@dataclass(frozen=True)
class SizePreset:
    name: str
    length: Decimal
    width: Decimal
    height: Decimal


@dataclass(frozen=True)
class DivisorSelection:
    """Outcome of resolving a divisor id against a unit system."""
    profile: DivisorProfile
    repaired: bool = False
    advisory: Optional[str] = None


# ── Divisors ────────────────────────────────────────────

DIVISORS: dict[UnitSystem, tuple[DivisorProfile, ...]] = {
    UnitSystem.METRIC: (
        DivisorProfile("cm5000", "Express (5000 cm³/kg)", Decimal("5000"), "kg"),
        DivisorProfile("cm6000", "Some carriers (6000 cm³/kg)", Decimal("6000"), "kg"),
        DivisorProfile("cm8000", "Economy (8000 cm³/kg)", Decimal("8000"), "kg"),
        DivisorProfile("cm9000", "Economy (9000 cm³/kg)", Decimal("9000"), "kg"),
        DivisorProfile("cm4000", "Bulky freight (4000 cm³/kg)", Decimal("4000"), "kg"),
    ),
    UnitSystem.IMPERIAL: (
        DivisorProfile("in139", "UPS/FedEx (139 in³/lb)", Decimal("139"), "lb"),
        DivisorProfile("in166", "Alt/older (166 in³/lb)", Decimal("166"), "lb"),
    ),
}

ABS_FALLBACK_DIVISOR = DivisorProfile("cm5000", "Express (5000 cm³/kg)", Decimal("5000"), "kg")

_DEFAULT_DIVISOR_NUMBER = {
    UnitSystem.METRIC: Decimal("5000"),
    UnitSystem.IMPERIAL: Decimal("139"),
}

REPAIR_ADVISORY = (
    "Your divisor selection didn't match the current unit system. "
    "It was auto-corrected to a valid profile."
)


# ── Styles & presets ────────────────────────────────────

STYLE_OPTIONS: tuple[BoxStyle, ...] = (
    BoxStyle("ttm", "Tuck Top Mailer (TTM)", "Common mailer with hinged lid"),
    BoxStyle("rett", "Roll End Tuck Top (RETT)", "Sturdy mailer, roll-over sides"),
    BoxStyle("reft", "Roll End Front Tuck (REFT)", "Front locking tabs"),
    BoxStyle("rsc", "Regular Slotted Carton (RSC)", "Standard shipping carton"),
    BoxStyle("rigid", "Rigid Mailer / Envelope", "Flat document mailer"),
)

LIDDED_STYLES = frozenset({"ttm", "rett", "reft"})

PRESETS_CM: tuple[SizePreset, ...] = (
    SizePreset("Mailer – Small", Decimal("20"), Decimal("15"), Decimal("7")),
    SizePreset("Mailer – Medium", Decimal("30"), Decimal("22"), Decimal("10")),
    SizePreset("Mailer – Large", Decimal("40"), Decimal("30"), Decimal("12")),
)


def divisor_list_for(
    units: Any,
    catalog: Optional[dict[UnitSystem, tuple[DivisorProfile, ...]]] = None,
) -> tuple[DivisorProfile, ...]:
    """Profiles valid for a unit system."""
    cat = DIVISORS if catalog is None else catalog
    return tuple(cat.get(normalize_units(units), ()))


def resolve_divisor(
    units: Any,
    divisor_id: Optional[str],
    catalog: Optional[dict[UnitSystem, tuple[DivisorProfile, ...]]] = None,
) -> DivisorSelection:
    """Find the profile for ``divisor_id``, falling back to the list's first entry.

    A profile id only means something within its own unit system; selecting
    ``in139`` while working in centimetres is repaired rather than rejected.
    """
    profiles = divisor_list_for(units, catalog)
    for p in profiles:
        if p.id == divisor_id:
            return DivisorSelection(profile=p)

    fallback = profiles[0] if profiles else ABS_FALLBACK_DIVISOR
    logger.warning(
        f"Divisor {divisor_id!r} not valid for {normalize_units(units).value}; using {fallback.id}"
    )
    return DivisorSelection(profile=fallback, repaired=True, advisory=REPAIR_ADVISORY)


def safe_divisor_number(profile: Optional[DivisorProfile], units: Any) -> Decimal:
    """Positive divisor for ``profile``, or the unit system's standard one."""
    d = profile.divisor if profile is not None else None
    if isinstance(d, Decimal) and d.is_finite() and d > 0:
        return d
    return _DEFAULT_DIVISOR_NUMBER[normalize_units(units)]


def get_style(style_id: Optional[str]) -> BoxStyle:
    """Style by id; unknown ids map to the first style."""
    for s in STYLE_OPTIONS:
        if s.id == style_id:
            return s
    return STYLE_OPTIONS[0]
