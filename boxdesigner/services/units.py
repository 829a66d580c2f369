"""Unit handling and defensive coercion of raw form values.

Everything that reaches the calculator passes through here first, so the
engine itself never sees NaN, infinities or out-of-range lengths.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

MM_PER_CM = Decimal("10")
MM_PER_INCH = Decimal("25.4")
KG_PER_LB = Decimal("0.45359237")

# Form bounds
DIM_MIN = Decimal("0.01")
DIM_MAX = Decimal("10000")
BOARD_MM_MAX = Decimal("25")
ACTUAL_WEIGHT_MAX = Decimal("1000")
QTY_MIN = 1
QTY_MAX = 1_000_000


class UnitSystem(str, Enum):
    """Length unit system of the box dimensions."""
    METRIC = "cm"
    IMPERIAL = "in"

    @property
    def volume_label(self) -> str:
        return "cm³" if self is UnitSystem.METRIC else "in³"

    @property
    def weight_label(self) -> str:
        return "kg" if self is UnitSystem.METRIC else "lb"


def to_decimal(value: Any) -> Decimal | None:
    """Parse a raw value into a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not d.is_finite():
        return None
    return d


def clamp_number(value: Any, lo: Decimal, hi: Decimal) -> Decimal:
    """Clamp ``value`` into ``[lo, hi]``; unparseable input yields ``lo``."""
    d = to_decimal(value)
    if d is None:
        return lo
    return min(hi, max(lo, d))


def non_negative(value: Any) -> Decimal:
    d = to_decimal(value)
    if d is None or d < 0:
        return Decimal("0")
    return d


_TRUE_STRINGS = {"1", "true", "yes", "on"}


def to_bool(value: Any) -> bool:
    """Checkbox-style flag; strings count only when they read as true."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return False


def clamp_quantity(value: Any) -> int:
    q = clamp_number(value, Decimal(QTY_MIN), Decimal(QTY_MAX))
    return max(QTY_MIN, int(q))


def normalize_units(units: Any) -> UnitSystem:
    """Anything that is not explicitly inches is treated as centimetres."""
    if isinstance(units, UnitSystem):
        return units
    return UnitSystem.IMPERIAL if units == "in" else UnitSystem.METRIC


def board_to_unit(board_mm: Decimal, units: Any) -> Decimal:
    """Convert board thickness (mm) into the active length unit."""
    if normalize_units(units) is UnitSystem.METRIC:
        return board_mm / MM_PER_CM
    return board_mm / MM_PER_INCH


def lb_to_kg(lb: Decimal) -> Decimal:
    return lb * KG_PER_LB
