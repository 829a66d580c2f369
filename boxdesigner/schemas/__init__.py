"""Pydantic schemas for the box designer API."""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field

# Form values arrive unvalidated; the engine clamps them
RawNumber = Optional[Union[Decimal, float, int, str]]


# ── Calculation ─────────────────────────────────────────
class CalculateRequest(BaseModel):
    units: str = "cm"
    style_id: str = "ttm"
    length: RawNumber = 30
    width: RawNumber = 22
    height: RawNumber = 10
    board_mm: RawNumber = 2
    battery: bool = False
    country: str = "United States"
    pricing_mode: str = "sheet"
    divisor_id: Optional[str] = "cm5000"
    actual_weight: RawNumber = 0
    quantity: RawNumber = 1
    price_usd: RawNumber = 0
    product_cost_usd: RawNumber = 0
    variable_fee_pct: RawNumber = 0
    refund_fee_pct: RawNumber = 0
    per_kg_cny: RawNumber = Decimal("50")
    min_charge_cny: RawNumber = Decimal("0")
    cny_per_usd: RawNumber = Decimal("7.20")


class BracketOut(BaseModel):
    lo: float
    hi: float
    fee_per_kg: float
    item_fee: float


class ShippingOut(BaseModel):
    status: str
    mode: str
    billed_kg: float
    shipping_cny: float
    shipping_usd: float
    bracket: Optional[BracketOut] = None
    breakdown: str


class CrossProfileOut(BaseModel):
    id: str
    label: str
    value: str


class CalculationOut(BaseModel):
    units: str
    dim_unit: str
    volume_unit: str
    weight_unit: str
    style_name: str
    divisor_id: str
    divisor: float
    divisor_repaired: bool
    advisory: Optional[str] = None
    outer: list[float]
    inner: list[float]
    volume: float
    inner_volume: float
    surface_area: float
    volumetric_weight: float
    chargeable_weight: float
    chargeable_kg: float
    shipping: ShippingOut
    quantity: int
    shipping_per_unit_usd: float
    variable_fee_usd: float
    refund_fee_usd: float
    cost_per_unit_usd: float
    total_cost_usd: float
    margin_per_unit_usd: float
    cost_per_unit_cny: float
    cost_details: dict[str, float] = Field(default_factory=dict)
    cross_profiles: list[CrossProfileOut] = Field(default_factory=list)


# ── Saved setups ────────────────────────────────────────
class SetupCreate(CalculateRequest):
    name: str = ""


class SetupRename(BaseModel):
    name: str = Field(..., max_length=200)


class SetupOut(BaseModel):
    id: str
    name: str
    country: str
    pricing_mode: str
    units: str
    style_id: str
    length: float
    width: float
    height: float
    board_mm: float
    divisor_id: str
    battery: bool
    actual_weight: float
    quantity: int
    price_usd: float
    product_cost_usd: float
    variable_fee_pct: float
    refund_fee_pct: float
    rates: dict
    derived: dict


# ── Catalog ─────────────────────────────────────────────
class DivisorOut(BaseModel):
    id: str
    label: str
    divisor: float
    weight_unit: str


class StyleOut(BaseModel):
    id: str
    name: str
    note: str
    has_lid: bool


class PresetOut(BaseModel):
    name: str
    length: float
    width: float
    height: float


class RateSheetOut(BaseModel):
    country: str
    carrier: str
    currency: str
    min_weight_kg: float
    round_step_kg: float
    lines: dict[str, list[BracketOut]]
