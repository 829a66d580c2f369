"""Shipping fee calculator for China→World parcel lines.

Two interchangeable strategies:

* **sheet** — tiered YunExpress-style rate sheet (CNY): fee per kg for the
  weight bracket × billed weight + a flat item fee per parcel. Billed weight
  is rounded *up* to the sheet's step and never below its minimum.
* **manual** — flat per-kg price on whole started kilograms, with an
  optional minimum charge.
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from enum import Enum
from typing import Optional

from boxdesigner.services.units import non_negative, to_decimal

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_MIN_STEP = Decimal("0.000001")
_DEFAULT_STEP = Decimal("0.001")


class HandlingLine(str, Enum):
    """Handling classification of the goods in the parcel."""
    NO_BATTERY = "No Battery"
    BUILT_IN_BATTERY = "Built-in Battery"

    @classmethod
    def for_battery(cls, battery: bool) -> "HandlingLine":
        return cls.BUILT_IN_BATTERY if battery else cls.NO_BATTERY


class PricingMode(str, Enum):
    SHEET = "sheet"
    MANUAL = "manual"

    @classmethod
    def coerce(cls, value: object) -> "PricingMode":
        """Unknown modes price against the sheet."""
        try:
            return cls(value)
        except ValueError:
            return cls.SHEET


class RateStatus(str, Enum):
    """Outcome of a fee lookup.

    ``UNSUPPORTED`` and ``ERROR`` results carry a zero fee, so callers that
    only read the amount see "nothing chargeable"; callers that care can
    tell an unpriced route apart from a free one.
    """
    OK = "ok"
    UNSUPPORTED = "unsupported"
    ERROR = "error"


@dataclass(frozen=True)
class RateBracket:
    """Weight bracket ``(lo, hi]`` in kg."""
    lo: Decimal
    hi: Decimal
    fee_per_kg: Decimal
    item_fee: Decimal

    def contains(self, weight_kg: Decimal) -> bool:
        return self.lo < weight_kg <= self.hi


@dataclass(frozen=True)
class RateSheet:
    """Tiered rate sheet for one destination country."""
    country: str
    min_weight_kg: Decimal
    round_step_kg: Decimal
    lines: dict[HandlingLine, tuple[RateBracket, ...]] = field(default_factory=dict)
    currency: str = "CNY"
    carrier: str = "YunExpress"

    def brackets(self, line: HandlingLine) -> tuple[RateBracket, ...]:
        return self.lines.get(line, ())

    @property
    def max_weight_kg(self) -> Decimal:
        his = [b.hi for brs in self.lines.values() for b in brs]
        return max(his) if his else _ZERO


@dataclass(frozen=True)
class ManualRate:
    """Flat per-kg pricing. ``cny_per_usd`` is the exchange rate used for display."""
    per_kg_cny: Decimal = Decimal("50")
    min_charge_cny: Decimal = Decimal("0")
    cny_per_usd: Decimal = Decimal("7.20")


@dataclass
class ShippingFee:
    """Fee for one parcel, in CNY."""
    status: RateStatus
    total_cny: Decimal = _ZERO
    billed_kg: Decimal = _ZERO
    mode: PricingMode = PricingMode.SHEET
    bracket: Optional[RateBracket] = None
    breakdown: str = ""

    @property
    def ok(self) -> bool:
        return self.status is RateStatus.OK


def _b(lo: str, hi: str, fee: int, item: int) -> RateBracket:
    return RateBracket(Decimal(lo), Decimal(hi), Decimal(fee), Decimal(item))


# ── Rate Sheets ─────────────────────────────────────────

YUNEXPRESS_US_SHEET = RateSheet(
    country="United States",
    min_weight_kg=Decimal("0.03"),
    round_step_kg=Decimal("0.001"),
    lines={
        HandlingLine.NO_BATTERY: (
            _b("0.00", "0.10", 102, 24),
            _b("0.10", "0.20", 96, 22),
            _b("0.20", "0.30", 94, 20),
            _b("0.30", "0.45", 93, 20),
            _b("0.45", "0.70", 92, 20),
            _b("0.70", "2.00", 91, 13),
            _b("2.00", "30.00", 85, 13),
        ),
        HandlingLine.BUILT_IN_BATTERY: (
            _b("0.00", "0.10", 108, 24),
            _b("0.10", "0.20", 101, 22),
            _b("0.20", "0.30", 102, 20),
            _b("0.30", "0.45", 101, 20),
            _b("0.45", "0.70", 98, 20),
            _b("0.70", "2.00", 97, 13),
            _b("2.00", "30.00", 97, 13),
        ),
    },
)

DEFAULT_MANUAL_RATE = ManualRate()


def round_up(value: Decimal, step: Optional[Decimal] = None) -> Decimal:
    """Carry-over rounding: ``ceil(value / step) * step``."""
    s = to_decimal(step)
    if s is None or s == 0:
        s = _DEFAULT_STEP
    s = max(_MIN_STEP, s)
    return (value / s).to_integral_value(rounding=ROUND_CEILING) * s


def find_bracket(brackets: tuple[RateBracket, ...], weight_kg: Decimal) -> Optional[RateBracket]:
    """First bracket holding ``weight_kg``; past the table's end, the last one."""
    for br in brackets:
        if br.contains(weight_kg):
            return br
    return brackets[-1] if brackets else None


def sheet_breakdown(country: str, battery: bool, fee: ShippingFee) -> str:
    b = fee.bracket
    label = "Battery" if battery else "No Battery"
    return (
        f"Sheet({country}, {label}): fee {b.fee_per_kg}×{fee.billed_kg:.3f} "
        f"+ item {b.item_fee} = {fee.total_cny:.2f} CNY"
    )


def manual_breakdown(per_kg: Decimal, weight_kg: Decimal, fee: ShippingFee) -> str:
    return (
        f"Manual: perKg {per_kg} × ceil({weight_kg:.3f}) = {fee.billed_kg} kg "
        f"→ {fee.total_cny:.2f} CNY"
    )


class ShippingService:
    """Shipping fee calculator over a set of rate sheets."""

    def __init__(self, sheets: Optional[list[RateSheet]] = None):
        sheets = [YUNEXPRESS_US_SHEET] if sheets is None else sheets
        self._sheets = {s.country: s for s in sheets}

    def get_sheet(self, country: str) -> Optional[RateSheet]:
        return self._sheets.get(country)

    def supported_countries(self) -> list[str]:
        return sorted(self._sheets)

    def sheet_fee(
        self,
        weight_kg: Decimal,
        battery: bool = False,
        country: str = "United States",
    ) -> ShippingFee:
        """Tiered sheet price for a parcel of ``weight_kg``."""
        sheet = self.get_sheet(country)
        if sheet is None:
            logger.info(f"No rate sheet for {country!r}")
            return ShippingFee(
                status=RateStatus.UNSUPPORTED,
                mode=PricingMode.SHEET,
                breakdown=f"Sheet pricing is not available for {country}.",
            )

        brackets = sheet.brackets(HandlingLine.for_battery(battery))
        w = max(sheet.min_weight_kg, round_up(non_negative(weight_kg), sheet.round_step_kg))
        br = find_bracket(brackets, w)
        if br is None:
            logger.error(f"Rate sheet {sheet.country!r} has no brackets for battery={battery}")
            return ShippingFee(
                status=RateStatus.ERROR,
                mode=PricingMode.SHEET,
                breakdown=f"Rate sheet for {country} has no brackets.",
            )

        fee = ShippingFee(
            status=RateStatus.OK,
            total_cny=br.fee_per_kg * w + br.item_fee,
            billed_kg=w,
            mode=PricingMode.SHEET,
            bracket=br,
        )
        fee.breakdown = sheet_breakdown(country, battery, fee)
        return fee

    @staticmethod
    def manual_fee(weight_kg: Decimal, rate: ManualRate = DEFAULT_MANUAL_RATE) -> ShippingFee:
        """Per started kilogram, never below the minimum charge."""
        w = non_negative(weight_kg)
        per_kg = non_negative(rate.per_kg_cny)
        min_charge = non_negative(rate.min_charge_cny)

        started_kg = Decimal(math.ceil(w)) if w > 0 else _ZERO
        fee = ShippingFee(
            status=RateStatus.OK,
            total_cny=max(per_kg * started_kg, min_charge),
            billed_kg=started_kg,
            mode=PricingMode.MANUAL,
        )
        fee.breakdown = manual_breakdown(per_kg, w, fee)
        return fee

    def quote(
        self,
        weight_kg: Decimal,
        mode: PricingMode = PricingMode.SHEET,
        battery: bool = False,
        country: str = "United States",
        rate: ManualRate = DEFAULT_MANUAL_RATE,
    ) -> ShippingFee:
        """Fee for the selected pricing mode."""
        if PricingMode.coerce(mode) is PricingMode.MANUAL:
            return self.manual_fee(weight_kg, rate)
        return self.sheet_fee(weight_kg, battery=battery, country=country)


# Module-level singleton
shipping_service = ShippingService()
