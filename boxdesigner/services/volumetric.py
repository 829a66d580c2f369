"""Box geometry and dimensional (volumetric) weight."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from boxdesigner.services.catalog import divisor_list_for
from boxdesigner.services.units import (
    UnitSystem,
    board_to_unit,
    lb_to_kg,
    normalize_units,
    to_decimal,
)

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass(frozen=True)
class BoxDimensions:
    """Outer box size in the active unit, board thickness in mm."""
    length: Decimal
    width: Decimal
    height: Decimal
    board_mm: Decimal = _ZERO
    units: UnitSystem = UnitSystem.METRIC

    @property
    def board(self) -> Decimal:
        """Board thickness in the active length unit."""
        return board_to_unit(self.board_mm, self.units)

    def inner(self) -> tuple[Decimal, Decimal, Decimal]:
        wall = 2 * self.board
        return (
            max(_ZERO, self.length - wall),
            max(_ZERO, self.width - wall),
            max(_ZERO, self.height - wall),
        )


@dataclass(frozen=True)
class BoxMetrics:
    outer: tuple[Decimal, Decimal, Decimal]
    inner: tuple[Decimal, Decimal, Decimal]
    volume: Decimal
    inner_volume: Decimal
    volumetric_weight: Decimal
    chargeable_weight: Decimal
    surface_area: Decimal


def chargeable_weight(actual: Decimal, volumetric: Decimal) -> Decimal:
    """Billable weight: the heavier of actual and volumetric.

    A missing scale reading (zero) must not zero out the bill, so actual
    weight only counts when strictly positive.
    """
    if actual > 0:
        return max(actual, volumetric)
    return volumetric


def calculate_box(dims: BoxDimensions, divisor: Any, actual_weight: Decimal = _ZERO) -> BoxMetrics:
    """Volumes, surface area and weights for a box.

    Weights come out in the divisor profile's unit (kg for cm³ divisors,
    lb for in³ divisors).
    """
    L, W, H = dims.length, dims.width, dims.height
    inner = dims.inner()

    volume = L * W * H
    inner_volume = inner[0] * inner[1] * inner[2]

    d = to_decimal(divisor)
    divisor_safe = max(_ONE, d) if d is not None and d != 0 else _ONE
    vol_weight = volume / divisor_safe

    return BoxMetrics(
        outer=(L, W, H),
        inner=inner,
        volume=volume,
        inner_volume=inner_volume,
        volumetric_weight=vol_weight,
        chargeable_weight=chargeable_weight(actual_weight, vol_weight),
        surface_area=2 * (L * W + L * H + W * H),
    )


def chargeable_to_kg(units: Any, chargeable: Decimal) -> Decimal:
    if normalize_units(units) is UnitSystem.METRIC:
        return chargeable
    return lb_to_kg(chargeable)


def cross_profile_weights(volume: Decimal, units: Any) -> list[dict]:
    """Volumetric weight of one box under every profile of its unit system."""
    rows = []
    for p in divisor_list_for(units):
        w = volume / max(_ONE, p.divisor)
        rows.append({
            "id": p.id,
            "label": p.label,
            "weight": w,
            "value": f"{w:.2f} {p.weight_unit}",
        })
    return rows
