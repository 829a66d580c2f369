"""Divisor catalog and style tests."""

import logging
from decimal import Decimal

from boxdesigner.services.catalog import (
    ABS_FALLBACK_DIVISOR,
    PRESETS_CM,
    STYLE_OPTIONS,
    DivisorProfile,
    divisor_list_for,
    get_style,
    resolve_divisor,
    safe_divisor_number,
)


class TestDivisorLists:
    def test_metric_profiles(self):
        ids = [p.id for p in divisor_list_for("cm")]
        assert ids == ["cm5000", "cm6000", "cm8000", "cm9000", "cm4000"]
        assert all(p.weight_unit == "kg" for p in divisor_list_for("cm"))

    def test_imperial_profiles(self):
        ids = [p.id for p in divisor_list_for("in")]
        assert ids == ["in139", "in166"]
        assert all(p.weight_unit == "lb" for p in divisor_list_for("in"))

    def test_unknown_units_use_metric(self):
        assert divisor_list_for("furlongs") == divisor_list_for("cm")


class TestResolveDivisor:
    def test_valid_id(self):
        sel = resolve_divisor("cm", "cm6000")
        assert sel.profile.id == "cm6000"
        assert sel.repaired is False
        assert sel.advisory is None

    def test_imperial_id_in_metric_falls_back(self):
        sel = resolve_divisor("cm", "in139")
        assert sel.profile.id == "cm5000"
        assert sel.repaired is True
        assert "auto-corrected" in sel.advisory

    def test_metric_id_in_imperial_falls_back(self):
        sel = resolve_divisor("in", "cm5000")
        assert sel.profile.id == "in139"
        assert sel.repaired is True

    def test_missing_id(self):
        assert resolve_divisor("cm", None).profile.id == "cm5000"

    def test_empty_catalog_uses_absolute_fallback(self):
        sel = resolve_divisor("in", "in139", catalog={})
        assert sel.profile == ABS_FALLBACK_DIVISOR
        assert sel.repaired is True

    def test_repair_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            resolve_divisor("cm", "in166")
        assert "in166" in caplog.text


class TestSafeDivisorNumber:
    def test_valid(self):
        assert safe_divisor_number(divisor_list_for("cm")[1], "cm") == Decimal("6000")

    def test_zero_divisor_metric(self):
        bad = DivisorProfile("bad", "Bad", Decimal("0"), "kg")
        assert safe_divisor_number(bad, "cm") == Decimal("5000")

    def test_negative_divisor_imperial(self):
        bad = DivisorProfile("bad", "Bad", Decimal("-1"), "lb")
        assert safe_divisor_number(bad, "in") == Decimal("139")

    def test_missing_profile(self):
        assert safe_divisor_number(None, "in") == Decimal("139")


class TestStyles:
    def test_style_catalog(self):
        assert [s.id for s in STYLE_OPTIONS] == ["ttm", "rett", "reft", "rsc", "rigid"]

    def test_lidded_styles(self):
        assert get_style("ttm").has_lid
        assert get_style("reft").has_lid
        assert not get_style("rsc").has_lid

    def test_unknown_style_defaults_to_first(self):
        assert get_style("nope").id == "ttm"

    def test_presets(self):
        medium = PRESETS_CM[1]
        assert (medium.length, medium.width, medium.height) == (Decimal("30"), Decimal("22"), Decimal("10"))
