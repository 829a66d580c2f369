"""Saved setup tests."""

import json
import re
from decimal import Decimal

import pytest

from boxdesigner.models import KeyValueEntry
from boxdesigner.services.calculator import BoxInputs, calculate
from boxdesigner.services.setups import (
    SavedSetup,
    SetupRepository,
    build_setup,
    dumps,
    find,
    loads,
    new_setup_id,
    prepend,
    remove,
    rename,
)


def make_setup(name: str = "", existing: int = 0, **kw) -> SavedSetup:
    return build_setup(calculate(BoxInputs(**kw)), name=name, existing_count=existing)


class TestBuildSetup:
    def test_id_format(self):
        assert re.fullmatch(r"\d+_[0-9a-z]{6}", new_setup_id())

    def test_blank_name_numbered(self):
        assert make_setup("  ", existing=2).name == "Setup 3"

    def test_name_trimmed(self):
        assert make_setup("  Medium mailer ").name == "Medium mailer"

    def test_snapshot_uses_clamped_inputs(self):
        s = make_setup(length="abc", quantity="0")
        assert s.length == Decimal("0.01")
        assert s.quantity == 1

    def test_repaired_divisor_saved(self):
        s = make_setup(units="in", divisor_id="cm5000")
        assert s.divisor_id == "in139"

    def test_derived_results(self):
        s = make_setup()
        assert s.derived["shippingCNY"] == Decimal("133.12")
        assert s.derived["chargeableKg"] == Decimal("1.32")
        assert s.rates["perKgCNY"] == Decimal("50")


class TestCollection:
    def test_prepend_puts_newest_first(self):
        a, b = make_setup("A"), make_setup("B")
        assert [s.name for s in prepend([a], b)] == ["B", "A"]

    def test_save_then_delete_restores(self):
        existing = [make_setup("A"), make_setup("B")]
        new = make_setup("C")
        after = remove(prepend(existing, new), new.id)
        assert [s.id for s in after] == [s.id for s in existing]

    def test_remove_unknown_is_noop(self):
        existing = [make_setup("A")]
        assert remove(existing, "missing") == existing

    def test_rename(self):
        a, b = make_setup("A"), make_setup("B")
        out = rename([a, b], b.id, "Renamed")
        assert [s.name for s in out] == ["A", "Renamed"]
        assert out[1].id == b.id
        assert b.name == "B"

    def test_rename_unknown_is_noop(self):
        existing = [make_setup("A"), make_setup("B")]
        out = rename(existing, "missing", "X")
        assert [s.to_dict() for s in out] == [s.to_dict() for s in existing]

    def test_find(self):
        a = make_setup("A")
        assert find([a], a.id) is a
        assert find([a], "nope") is None


class TestSerialization:
    def test_round_trip(self):
        setups = [make_setup("A"), make_setup("B, with comma")]
        restored = loads(dumps(setups))
        assert [s.id for s in restored] == [s.id for s in setups]
        assert restored[1].name == "B, with comma"
        assert restored[0].derived["shippingCNY"] == 133.12

    def test_stored_keys(self):
        data = json.loads(dumps([make_setup("A")]))[0]
        for key in ("id", "name", "pricingMode", "styleId", "L", "W", "H", "boardMM",
                    "divisorId", "actualW", "qty", "priceUSD", "rates", "derived"):
            assert key in data

    def test_empty_or_missing(self):
        assert loads(None) == []
        assert loads("") == []

    def test_corrupt_json(self, caplog):
        assert loads("{not json") == []
        assert "not valid JSON" in caplog.text

    def test_not_a_list(self):
        assert loads('{"a": 1}') == []

    def test_malformed_rates_entry_skipped(self, caplog):
        good = json.loads(dumps([make_setup("Good")]))[0]
        raw = json.dumps([{"id": "1_abcdef", "name": "x", "rates": [1, 2]}, good])
        assert [s.name for s in loads(raw)] == ["Good"]
        assert "corrupt" in caplog.text

    def test_malformed_derived_entry_skipped(self, caplog):
        assert loads('[{"id": "1_abcdef", "name": "x", "derived": "oops"}]') == []
        assert "corrupt" in caplog.text

    def test_non_object_entry_skipped(self, caplog):
        assert loads('[1, "two"]') == []
        assert "not an object" in caplog.text

    def test_non_numeric_fields_fall_back(self):
        s = loads('[{"id": 7, "name": null, "L": "abc", "W": {}, "qty": "lots", "battery": "false"}]')[0]
        assert s.id == "7"
        assert s.name == ""
        assert s.length == Decimal("30")
        assert s.width == Decimal("22")
        assert s.quantity == 1
        assert s.battery is False

    def test_to_inputs_defaults(self):
        s = SavedSetup.from_dict({"id": "1_abcdef", "name": "Old"})
        inputs = s.to_inputs()
        assert inputs.country == "United States"
        assert inputs.pricing_mode == "sheet"
        assert inputs.per_kg_cny == Decimal("50")
        assert inputs.cny_per_usd == Decimal("7.20")

    def test_reload_recalculates_same_result(self):
        s = loads(dumps([make_setup(pricing_mode="manual", quantity=3)]))[0]
        c = calculate(s.to_inputs())
        assert c.shipping_cny == Decimal("100")
        assert c.normalized.costs.quantity == 3


class TestSetupRepository:
    @pytest.mark.asyncio
    async def test_empty(self, db_session):
        assert await SetupRepository(db_session).load_all() == []

    @pytest.mark.asyncio
    async def test_append_newest_first(self, db_session):
        repo = SetupRepository(db_session)
        await repo.append(make_setup("First"))
        await repo.append(make_setup("Second"))
        names = [s.name for s in await repo.load_all()]
        assert names == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_persisted_across_instances(self, db_session):
        s = make_setup("Kept")
        await SetupRepository(db_session).append(s)
        loaded = await SetupRepository(db_session).get(s.id)
        assert loaded.name == "Kept"

    @pytest.mark.asyncio
    async def test_remove(self, db_session):
        repo = SetupRepository(db_session)
        keep, drop = make_setup("Keep"), make_setup("Drop")
        await repo.append(keep)
        await repo.append(drop)
        assert await repo.remove(drop.id) is True
        assert [s.id for s in await repo.load_all()] == [keep.id]

    @pytest.mark.asyncio
    async def test_remove_unknown(self, db_session):
        repo = SetupRepository(db_session)
        await repo.append(make_setup("A"))
        assert await repo.remove("missing") is False
        assert len(await repo.load_all()) == 1

    @pytest.mark.asyncio
    async def test_rename(self, db_session):
        repo = SetupRepository(db_session)
        s = make_setup("Old")
        await repo.append(s)
        renamed = await repo.rename(s.id, "New")
        assert renamed.name == "New"
        assert (await repo.get(s.id)).name == "New"

    @pytest.mark.asyncio
    async def test_rename_unknown(self, db_session):
        repo = SetupRepository(db_session)
        await repo.append(make_setup("A"))
        assert await repo.rename("missing", "X") is None
        assert [s.name for s in await repo.load_all()] == ["A"]

    @pytest.mark.asyncio
    async def test_keys_are_isolated(self, db_session):
        await SetupRepository(db_session, key="box_setups_v3").append(make_setup("A"))
        assert await SetupRepository(db_session, key="box_setups_v2").load_all() == []

    @pytest.mark.asyncio
    async def test_corrupt_entry_does_not_block_mutations(self, db_session):
        db_session.add(KeyValueEntry(key="box_setups_v3", value='[{"id": "1_abcdef", "rates": "x"}]'))
        await db_session.commit()
        repo = SetupRepository(db_session)
        assert await repo.load_all() == []
        await repo.append(make_setup("Fresh"))
        assert [s.name for s in await repo.load_all()] == ["Fresh"]
