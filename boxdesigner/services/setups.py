"""Saved box setups.

A setup is a snapshot of every form input plus the results computed at save
time. The whole ordered collection (newest first) is persisted as a single
JSON document under a schema-versioned key and rewritten after each change.
"""

import json
import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from boxdesigner.config import get_settings
from boxdesigner.models import KeyValueEntry
from boxdesigner.services.calculator import BoxInputs, Calculation
from boxdesigner.services.units import clamp_quantity, to_bool, to_decimal

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def _number(value: Any, default: Any) -> Decimal:
    d = to_decimal(value)
    return Decimal(default) if d is None else d


def _text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


def new_setup_id() -> str:
    """``<epoch ms>_<6 base36 chars>``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{int(time.time() * 1000)}_{suffix}"


@dataclass
class SavedSetup:
    id: str
    name: str
    country: str = "United States"
    pricing_mode: str = "sheet"
    units: str = "cm"
    style_id: str = "ttm"
    length: Any = 30
    width: Any = 22
    height: Any = 10
    board_mm: Any = 2
    divisor_id: str = "cm5000"
    battery: bool = False
    actual_weight: Any = 0
    quantity: int = 1
    price_usd: Any = 0
    product_cost_usd: Any = 0
    variable_fee_pct: Any = 0
    refund_fee_pct: Any = 0
    rates: dict = field(default_factory=dict)
    derived: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "pricingMode": self.pricing_mode,
            "units": self.units,
            "styleId": self.style_id,
            "L": self.length,
            "W": self.width,
            "H": self.height,
            "boardMM": self.board_mm,
            "divisorId": self.divisor_id,
            "battery": self.battery,
            "actualW": self.actual_weight,
            "qty": self.quantity,
            "priceUSD": self.price_usd,
            "productCostUSD": self.product_cost_usd,
            "variableFeePct": self.variable_fee_pct,
            "refundFeePct": self.refund_fee_pct,
            "rates": dict(self.rates),
            "derived": dict(self.derived),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SavedSetup":
        """Rebuild a stored setup. Non-object ``rates``/``derived`` raise ValueError."""
        rates, derived = d.get("rates") or {}, d.get("derived") or {}
        if not isinstance(rates, dict) or not isinstance(derived, dict):
            raise ValueError(f"setup {d.get('id')!r} has malformed rates or derived results")
        return cls(
            id=_text(d.get("id"), ""),
            name=_text(d.get("name"), ""),
            country=_text(d.get("country"), "United States"),
            pricing_mode=_text(d.get("pricingMode"), "sheet"),
            units=_text(d.get("units"), "cm"),
            style_id=_text(d.get("styleId"), "ttm"),
            length=_number(d.get("L"), 30),
            width=_number(d.get("W"), 22),
            height=_number(d.get("H"), 10),
            board_mm=_number(d.get("boardMM"), 2),
            divisor_id=_text(d.get("divisorId"), "cm5000"),
            battery=to_bool(d.get("battery", False)),
            actual_weight=_number(d.get("actualW"), 0),
            quantity=clamp_quantity(d.get("qty", 1)),
            price_usd=_number(d.get("priceUSD"), 0),
            product_cost_usd=_number(d.get("productCostUSD"), 0),
            variable_fee_pct=_number(d.get("variableFeePct"), 0),
            refund_fee_pct=_number(d.get("refundFeePct"), 0),
            rates=dict(rates),
            derived=dict(derived),
        )

    def to_inputs(self) -> BoxInputs:
        """Form state to reload this setup into the calculator."""
        settings = get_settings()
        rates = self.rates or {}
        return BoxInputs(
            units=self.units,
            style_id=self.style_id,
            length=self.length,
            width=self.width,
            height=self.height,
            board_mm=self.board_mm,
            battery=self.battery,
            country=self.country,
            pricing_mode=self.pricing_mode,
            divisor_id=self.divisor_id,
            actual_weight=self.actual_weight,
            quantity=self.quantity,
            price_usd=self.price_usd,
            product_cost_usd=self.product_cost_usd,
            variable_fee_pct=self.variable_fee_pct,
            refund_fee_pct=self.refund_fee_pct,
            per_kg_cny=rates.get("perKgCNY", settings.default_per_kg_cny),
            min_charge_cny=rates.get("minChargeCNY", settings.default_min_charge_cny),
            cny_per_usd=rates.get("cnyPerUSD", settings.default_cny_per_usd),
        )


def build_setup(calc: Calculation, name: str = "", existing_count: int = 0) -> SavedSetup:
    """Snapshot of a calculation; blank names become ``Setup <n>``."""
    norm = calc.normalized
    raw = calc.inputs
    return SavedSetup(
        id=new_setup_id(),
        name=(name or "").strip() or f"Setup {existing_count + 1}",
        country=raw.country,
        pricing_mode=calc.shipping.mode.value,
        units=norm.units.value,
        style_id=raw.style_id,
        length=norm.dims.length,
        width=norm.dims.width,
        height=norm.dims.height,
        board_mm=norm.dims.board_mm,
        divisor_id=calc.divisor.profile.id,
        battery=to_bool(raw.battery),
        actual_weight=norm.actual_weight,
        quantity=norm.costs.quantity,
        price_usd=norm.costs.price_usd,
        product_cost_usd=norm.costs.product_cost_usd,
        variable_fee_pct=norm.costs.variable_fee_pct,
        refund_fee_pct=norm.costs.refund_fee_pct,
        rates={
            "perKgCNY": norm.rate.per_kg_cny,
            "minChargeCNY": norm.rate.min_charge_cny,
            "cnyPerUSD": norm.rate.cny_per_usd,
        },
        derived=calc.derived(),
    )


# ── Collection operations ───────────────────────────────

def prepend(setups: list[SavedSetup], setup: SavedSetup) -> list[SavedSetup]:
    return [setup, *setups]


def remove(setups: list[SavedSetup], setup_id: str) -> list[SavedSetup]:
    return [s for s in setups if s.id != setup_id]


def rename(setups: list[SavedSetup], setup_id: str, new_name: str) -> list[SavedSetup]:
    out = []
    for s in setups:
        if s.id == setup_id:
            s = SavedSetup.from_dict({**s.to_dict(), "name": new_name})
        out.append(s)
    return out


def find(setups: list[SavedSetup], setup_id: str) -> Optional[SavedSetup]:
    return next((s for s in setups if s.id == setup_id), None)


def dumps(setups: list[SavedSetup]) -> str:
    return json.dumps([s.to_dict() for s in setups], cls=DecimalEncoder, ensure_ascii=False)


def loads(raw: Optional[str]) -> list[SavedSetup]:
    """Parse a stored collection; unreadable data yields an empty list."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Saved setups are not valid JSON, starting empty: {e}")
        return []
    if not isinstance(data, list):
        logger.error("Saved setups document is not a list, starting empty")
        return []
    setups = []
    for i, d in enumerate(data):
        if not isinstance(d, dict):
            logger.error(f"Saved setup #{i} is not an object, skipping")
            continue
        try:
            setups.append(SavedSetup.from_dict(d))
        except (TypeError, ValueError) as e:
            logger.error(f"Saved setup #{i} is corrupt, skipping: {e}")
    return setups


class SetupRepository:
    """Saved setups stored under one key of the ``kv_entries`` table."""

    def __init__(self, db: AsyncSession, key: Optional[str] = None):
        self.db = db
        self.key = key or get_settings().saved_setups_key

    async def load_all(self) -> list[SavedSetup]:
        result = await self.db.execute(select(KeyValueEntry).where(KeyValueEntry.key == self.key))
        entry = result.scalar_one_or_none()
        return loads(entry.value if entry else None)

    async def _write(self, setups: list[SavedSetup]) -> None:
        result = await self.db.execute(select(KeyValueEntry).where(KeyValueEntry.key == self.key))
        entry = result.scalar_one_or_none()
        if entry is None:
            entry = KeyValueEntry(key=self.key, value="")
            self.db.add(entry)
        entry.value = dumps(setups)
        await self.db.commit()

    async def get(self, setup_id: str) -> Optional[SavedSetup]:
        return find(await self.load_all(), setup_id)

    async def append(self, setup: SavedSetup) -> list[SavedSetup]:
        setups = prepend(await self.load_all(), setup)
        await self._write(setups)
        logger.info(f"Saved setup {setup.id} ({setup.name})")
        return setups

    async def remove(self, setup_id: str) -> bool:
        setups = await self.load_all()
        kept = remove(setups, setup_id)
        if len(kept) == len(setups):
            return False
        await self._write(kept)
        logger.info(f"Deleted setup {setup_id}")
        return True

    async def rename(self, setup_id: str, new_name: str) -> Optional[SavedSetup]:
        setups = await self.load_all()
        if find(setups, setup_id) is None:
            return None
        setups = rename(setups, setup_id, new_name)
        await self._write(setups)
        return find(setups, setup_id)
