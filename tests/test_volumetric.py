"""Box geometry and volumetric weight tests."""

from decimal import Decimal

from boxdesigner.services.units import UnitSystem
from boxdesigner.services.volumetric import (
    BoxDimensions,
    calculate_box,
    chargeable_to_kg,
    chargeable_weight,
    cross_profile_weights,
)


def medium_mailer(**kw) -> BoxDimensions:
    return BoxDimensions(
        length=Decimal("30"), width=Decimal("22"), height=Decimal("10"),
        board_mm=kw.pop("board_mm", Decimal("2")), **kw,
    )


class TestCalculateBox:
    def test_medium_mailer(self):
        m = calculate_box(medium_mailer(), Decimal("5000"))
        assert m.inner == (Decimal("29.6"), Decimal("21.6"), Decimal("9.6"))
        assert m.volume == Decimal("6600")
        assert m.volumetric_weight == Decimal("1.32")
        assert m.chargeable_weight == Decimal("1.32")

    def test_inner_volume(self):
        m = calculate_box(medium_mailer(), Decimal("5000"))
        assert m.inner_volume == Decimal("29.6") * Decimal("21.6") * Decimal("9.6")

    def test_surface_area(self):
        m = calculate_box(medium_mailer(), Decimal("5000"))
        assert m.surface_area == Decimal("2360")

    def test_inner_never_negative(self):
        dims = BoxDimensions(Decimal("1"), Decimal("1"), Decimal("1"), board_mm=Decimal("25"))
        m = calculate_box(dims, Decimal("5000"))
        assert m.inner == (Decimal("0"), Decimal("0"), Decimal("0"))
        assert m.inner_volume == Decimal("0")

    def test_imperial_board(self):
        dims = BoxDimensions(
            Decimal("10"), Decimal("10"), Decimal("10"),
            board_mm=Decimal("25.4"), units=UnitSystem.IMPERIAL,
        )
        assert calculate_box(dims, Decimal("139")).inner == (Decimal("8"), Decimal("8"), Decimal("8"))

    def test_invalid_divisor_treated_as_one(self):
        dims = medium_mailer()
        assert calculate_box(dims, 0).volumetric_weight == Decimal("6600")
        assert calculate_box(dims, "abc").volumetric_weight == Decimal("6600")
        assert calculate_box(dims, Decimal("-5")).volumetric_weight == Decimal("6600")

    def test_actual_weight_wins_when_heavier(self):
        m = calculate_box(medium_mailer(), Decimal("5000"), Decimal("5"))
        assert m.chargeable_weight == Decimal("5")


class TestChargeableWeight:
    def test_zero_actual_uses_volumetric(self):
        assert chargeable_weight(Decimal("0"), Decimal("1.32")) == Decimal("1.32")

    def test_negative_actual_uses_volumetric(self):
        assert chargeable_weight(Decimal("-1"), Decimal("1.32")) == Decimal("1.32")

    def test_lighter_actual(self):
        assert chargeable_weight(Decimal("1"), Decimal("1.32")) == Decimal("1.32")

    def test_heavier_actual(self):
        assert chargeable_weight(Decimal("2.5"), Decimal("1.32")) == Decimal("2.5")

    def test_non_positive_actual_never_counts(self):
        for actual in ("0", "-0.5", "-100"):
            assert chargeable_weight(Decimal(actual), Decimal("0.7")) == Decimal("0.7")


class TestConversions:
    def test_metric_is_identity(self):
        assert chargeable_to_kg("cm", Decimal("1.32")) == Decimal("1.32")

    def test_imperial_converts_pounds(self):
        assert chargeable_to_kg("in", Decimal("10")) == Decimal("4.5359237")

    def test_cross_profiles(self):
        rows = cross_profile_weights(Decimal("6600"), "cm")
        assert len(rows) == 5
        assert rows[0]["value"] == "1.32 kg"
        assert rows[1]["value"] == "1.10 kg"

    def test_cross_profiles_imperial(self):
        rows = cross_profile_weights(Decimal("1390"), "in")
        assert rows[0]["value"] == "10.00 lb"
