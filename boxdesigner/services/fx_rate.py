"""Currency conversion between the rate sheet currency (CNY) and USD.

The exchange rate is a static, user-editable constant expressed as
CNY per 1 USD. There is no live feed.
"""

from decimal import Decimal
from typing import Any

from boxdesigner.services.units import to_decimal

DEFAULT_CNY_PER_USD = Decimal("7.20")
_RATE_FLOOR = Decimal("0.0001")


def effective_rate(cny_per_usd: Any, default: Decimal = DEFAULT_CNY_PER_USD) -> Decimal:
    """Usable divisor for conversions; never zero or negative."""
    rate = to_decimal(cny_per_usd)
    if rate is None or rate <= 0:
        rate = default
    return max(_RATE_FLOOR, rate)


def cny_to_usd(amount_cny: Decimal, cny_per_usd: Any) -> Decimal:
    return amount_cny / effective_rate(cny_per_usd)


def usd_to_cny(amount_usd: Decimal, cny_per_usd: Any) -> Decimal:
    return amount_usd * effective_rate(cny_per_usd)


class FXConverter:
    """CNY/USD converter bound to one exchange rate."""

    def __init__(self, cny_per_usd: Any = DEFAULT_CNY_PER_USD):
        self.cny_per_usd = effective_rate(cny_per_usd)

    def to_usd(self, amount_cny: Decimal) -> Decimal:
        return cny_to_usd(amount_cny, self.cny_per_usd)

    def to_cny(self, amount_usd: Decimal) -> Decimal:
        return usd_to_cny(amount_usd, self.cny_per_usd)
