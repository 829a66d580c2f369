"""FX conversion tests."""

from decimal import Decimal

import pytest

from boxdesigner.services.fx_rate import (
    DEFAULT_CNY_PER_USD,
    FXConverter,
    cny_to_usd,
    effective_rate,
    usd_to_cny,
)


class TestEffectiveRate:
    def test_valid_rate(self):
        assert effective_rate(Decimal("7.10")) == Decimal("7.10")

    def test_string_rate(self):
        assert effective_rate("6.9") == Decimal("6.9")

    @pytest.mark.parametrize("bad", [0, "0", -3, "abc", None, float("nan"), float("inf")])
    def test_invalid_rate_uses_default(self, bad):
        assert effective_rate(bad) == DEFAULT_CNY_PER_USD

    def test_tiny_rate_floored(self):
        assert effective_rate(Decimal("0.00001")) == Decimal("0.0001")


class TestConversion:
    def test_cny_to_usd(self):
        assert cny_to_usd(Decimal("72"), Decimal("7.20")) == Decimal("10")

    def test_zero_rate_falls_back(self):
        assert cny_to_usd(Decimal("72"), 0) == Decimal("10")

    def test_usd_to_cny(self):
        assert usd_to_cny(Decimal("10"), Decimal("7.20")) == Decimal("72.00")

    def test_monotonic_decreasing_in_rate(self):
        fee = Decimal("133.12")
        results = [cny_to_usd(fee, r) for r in ("0.5", "1", "6.5", "7.2", "8", "100")]
        assert all(a > b for a, b in zip(results, results[1:]))


class TestFXConverter:
    def test_init_default(self):
        assert FXConverter().cny_per_usd == DEFAULT_CNY_PER_USD

    def test_init_invalid(self):
        assert FXConverter(-1).cny_per_usd == DEFAULT_CNY_PER_USD

    def test_to_usd(self):
        assert FXConverter(Decimal("7.25")).to_usd(Decimal("725")) == Decimal("100")

    def test_to_usd_with_zero_rate_uses_default(self):
        assert FXConverter(0).to_usd(Decimal("72")) == Decimal("10")

    def test_to_cny(self):
        assert FXConverter(Decimal("7.25")).to_cny(Decimal("100")) == Decimal("725.00")
