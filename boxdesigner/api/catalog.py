"""Catalog API — divisor profiles, box styles, presets and rate sheets."""

from fastapi import APIRouter, HTTPException, Query

from boxdesigner.schemas import DivisorOut, PresetOut, RateSheetOut, StyleOut
from boxdesigner.services.catalog import PRESETS_CM, STYLE_OPTIONS, divisor_list_for
from boxdesigner.services.shipping import shipping_service

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/divisors", response_model=list[DivisorOut])
async def list_divisors(units: str = Query("cm", description="cm or in")):
    return [
        DivisorOut(id=p.id, label=p.label, divisor=float(p.divisor), weight_unit=p.weight_unit)
        for p in divisor_list_for(units)
    ]


@router.get("/styles", response_model=list[StyleOut])
async def list_styles():
    return [StyleOut(id=s.id, name=s.name, note=s.note, has_lid=s.has_lid) for s in STYLE_OPTIONS]


@router.get("/presets", response_model=list[PresetOut])
async def list_presets():
    return [
        PresetOut(name=p.name, length=float(p.length), width=float(p.width), height=float(p.height))
        for p in PRESETS_CM
    ]


@router.get("/rate-sheets", response_model=list[str])
async def list_rate_sheets():
    return shipping_service.supported_countries()


@router.get("/rate-sheets/{country}", response_model=RateSheetOut)
async def get_rate_sheet(country: str):
    sheet = shipping_service.get_sheet(country)
    if not sheet:
        raise HTTPException(404, "No rate sheet for this country")
    return RateSheetOut(
        country=sheet.country,
        carrier=sheet.carrier,
        currency=sheet.currency,
        min_weight_kg=float(sheet.min_weight_kg),
        round_step_kg=float(sheet.round_step_kg),
        lines={
            line.value: [
                {"lo": float(b.lo), "hi": float(b.hi), "fee_per_kg": float(b.fee_per_kg), "item_fee": float(b.item_fee)}
                for b in brackets
            ]
            for line, brackets in sheet.lines.items()
        },
    )
