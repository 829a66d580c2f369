"""Per-unit landed cost for a shipment of identical units."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from boxdesigner.services.units import clamp_quantity, non_negative

_HUNDRED = Decimal("100")


@dataclass
class CostInputs:
    """Commercial inputs, all in USD per unit."""
    quantity: int = 1
    price_usd: Decimal = Decimal("0")          # selling price
    product_cost_usd: Decimal = Decimal("0")   # COGS
    variable_fee_pct: Decimal = Decimal("0")   # % of price
    refund_fee_pct: Decimal = Decimal("0")     # % of price

    @classmethod
    def from_raw(
        cls,
        quantity: Any = 1,
        price_usd: Any = 0,
        product_cost_usd: Any = 0,
        variable_fee_pct: Any = 0,
        refund_fee_pct: Any = 0,
    ) -> "CostInputs":
        return cls(
            quantity=clamp_quantity(quantity),
            price_usd=non_negative(price_usd),
            product_cost_usd=non_negative(product_cost_usd),
            variable_fee_pct=non_negative(variable_fee_pct),
            refund_fee_pct=non_negative(refund_fee_pct),
        )


@dataclass
class UnitEconomicsReport:
    shipping_usd: Decimal
    shipping_per_unit_usd: Decimal
    variable_fee_usd: Decimal
    refund_fee_usd: Decimal
    cost_per_unit_usd: Decimal
    total_cost_usd: Decimal
    margin_per_unit_usd: Decimal
    details: dict = field(default_factory=dict)


class UnitEconomics:
    """Combine shipping with product cost and percentage fees."""

    @staticmethod
    def calculate(shipping_usd: Decimal, inputs: CostInputs) -> UnitEconomicsReport:
        # Re-clamp: callers may build CostInputs directly
        qty = clamp_quantity(inputs.quantity)
        price = non_negative(inputs.price_usd)
        product_cost = non_negative(inputs.product_cost_usd)

        shipping_per_unit = non_negative(shipping_usd) / qty
        variable_fee = price * non_negative(inputs.variable_fee_pct) / _HUNDRED
        refund_fee = price * non_negative(inputs.refund_fee_pct) / _HUNDRED

        cost_per_unit = product_cost + variable_fee + refund_fee + shipping_per_unit
        return UnitEconomicsReport(
            shipping_usd=non_negative(shipping_usd),
            shipping_per_unit_usd=shipping_per_unit,
            variable_fee_usd=variable_fee,
            refund_fee_usd=refund_fee,
            cost_per_unit_usd=cost_per_unit,
            total_cost_usd=cost_per_unit * qty,
            margin_per_unit_usd=price - cost_per_unit,
            details={
                "product_cost_usd": product_cost.quantize(Decimal("0.01")),
                "variable_fee_usd": variable_fee.quantize(Decimal("0.01")),
                "refund_fee_usd": refund_fee.quantize(Decimal("0.01")),
                "shipping_per_unit_usd": shipping_per_unit.quantize(Decimal("0.01")),
            },
        )
