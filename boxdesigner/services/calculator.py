"""End-to-end box calculation.

raw form state → normalized inputs → box metrics → chargeable weight →
shipping fee (CNY) → USD → unit economics. ``calculate`` is a pure function
of its arguments; catalogs and rate sheets are passed in, not looked up.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from boxdesigner.services.catalog import (
    DivisorSelection,
    get_style,
    resolve_divisor,
    safe_divisor_number,
)
from boxdesigner.services.fx_rate import FXConverter, effective_rate
from boxdesigner.services.shipping import (
    ManualRate,
    PricingMode,
    ShippingFee,
    ShippingService,
    shipping_service,
)
from boxdesigner.services.unit_economics import CostInputs, UnitEconomics, UnitEconomicsReport
from boxdesigner.services.units import (
    ACTUAL_WEIGHT_MAX,
    BOARD_MM_MAX,
    DIM_MAX,
    DIM_MIN,
    UnitSystem,
    clamp_number,
    non_negative,
    normalize_units,
    to_bool,
)
from boxdesigner.services.volumetric import (
    BoxDimensions,
    BoxMetrics,
    calculate_box,
    chargeable_to_kg,
    cross_profile_weights,
)

_ZERO = Decimal("0")


@dataclass
class BoxInputs:
    """Raw form state. Values may be strings, numbers or missing."""
    units: Any = "cm"
    style_id: str = "ttm"
    length: Any = 30
    width: Any = 22
    height: Any = 10
    board_mm: Any = 2
    battery: bool = False
    country: str = "United States"
    pricing_mode: Any = "sheet"
    divisor_id: Optional[str] = "cm5000"
    actual_weight: Any = 0  # kg for cm, lb for in
    quantity: Any = 1
    price_usd: Any = 0
    product_cost_usd: Any = 0
    variable_fee_pct: Any = 0
    refund_fee_pct: Any = 0
    per_kg_cny: Any = Decimal("50")
    min_charge_cny: Any = Decimal("0")
    cny_per_usd: Any = Decimal("7.20")


@dataclass
class NormalizedInputs:
    units: UnitSystem
    dims: BoxDimensions
    actual_weight: Decimal
    costs: CostInputs
    rate: ManualRate


@dataclass
class Calculation:
    inputs: BoxInputs
    normalized: NormalizedInputs
    divisor: DivisorSelection
    divisor_number: Decimal
    metrics: BoxMetrics
    chargeable_kg: Decimal
    shipping: ShippingFee
    shipping_cny: Decimal
    shipping_usd: Decimal
    economics: UnitEconomicsReport
    cost_per_unit_cny: Decimal
    cross_profiles: list[dict] = field(default_factory=list)

    @property
    def breakdown(self) -> str:
        return self.shipping.breakdown

    @property
    def weight_unit(self) -> str:
        return self.divisor.profile.weight_unit or self.normalized.units.weight_label

    def derived(self) -> dict:
        """Results snapshot stored with a saved setup."""
        return {
            "volWeight": self.metrics.volumetric_weight,
            "chargeable": self.metrics.chargeable_weight,
            "chargeableKg": self.chargeable_kg,
            "shippingCNY": self.shipping_cny,
            "shippingUSD": self.shipping_usd,
            "shippingPerUnitUSD": self.economics.shipping_per_unit_usd,
            "costPerUnitUSD": self.economics.cost_per_unit_usd,
            "totalCostUSD": self.economics.total_cost_usd,
            "breakdown": self.breakdown,
        }


def normalize(inputs: BoxInputs) -> NormalizedInputs:
    units = normalize_units(inputs.units)
    dims = BoxDimensions(
        length=clamp_number(inputs.length, DIM_MIN, DIM_MAX),
        width=clamp_number(inputs.width, DIM_MIN, DIM_MAX),
        height=clamp_number(inputs.height, DIM_MIN, DIM_MAX),
        board_mm=clamp_number(inputs.board_mm, _ZERO, BOARD_MM_MAX),
        units=units,
    )
    costs = CostInputs.from_raw(
        quantity=inputs.quantity,
        price_usd=inputs.price_usd,
        product_cost_usd=inputs.product_cost_usd,
        variable_fee_pct=inputs.variable_fee_pct,
        refund_fee_pct=inputs.refund_fee_pct,
    )
    rate = ManualRate(
        per_kg_cny=non_negative(inputs.per_kg_cny),
        min_charge_cny=non_negative(inputs.min_charge_cny),
        cny_per_usd=effective_rate(inputs.cny_per_usd),
    )
    return NormalizedInputs(
        units=units,
        dims=dims,
        actual_weight=clamp_number(inputs.actual_weight, _ZERO, ACTUAL_WEIGHT_MAX),
        costs=costs,
        rate=rate,
    )


def calculate(inputs: BoxInputs, service: Optional[ShippingService] = None) -> Calculation:
    """Run the whole pipeline for one set of form inputs."""
    svc = shipping_service if service is None else service
    norm = normalize(inputs)

    selection = resolve_divisor(norm.units, inputs.divisor_id)
    divisor_number = safe_divisor_number(selection.profile, norm.units)

    metrics = calculate_box(norm.dims, divisor_number, norm.actual_weight)
    chargeable_kg = chargeable_to_kg(norm.units, metrics.chargeable_weight)

    fee = svc.quote(
        chargeable_kg,
        mode=PricingMode.coerce(inputs.pricing_mode),
        battery=to_bool(inputs.battery),
        country=inputs.country,
        rate=norm.rate,
    )
    fx = FXConverter(norm.rate.cny_per_usd)
    shipping_usd = fx.to_usd(fee.total_cny)
    economics = UnitEconomics.calculate(shipping_usd, norm.costs)

    return Calculation(
        inputs=inputs,
        normalized=norm,
        divisor=selection,
        divisor_number=divisor_number,
        metrics=metrics,
        chargeable_kg=chargeable_kg,
        shipping=fee,
        shipping_cny=fee.total_cny,
        shipping_usd=shipping_usd,
        economics=economics,
        cost_per_unit_cny=fx.to_cny(economics.cost_per_unit_usd),
        cross_profiles=cross_profile_weights(metrics.volume, norm.units),
    )


def style_name(style_id: Optional[str]) -> str:
    return get_style(style_id).name
