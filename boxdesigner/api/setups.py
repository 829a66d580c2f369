"""Saved setups API."""

import json

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boxdesigner.api.calculator import calculation_out, to_inputs
from boxdesigner.database import get_db
from boxdesigner.schemas import CalculationOut, SetupCreate, SetupOut, SetupRename
from boxdesigner.services.calculator import calculate
from boxdesigner.services.export import ExportService
from boxdesigner.services.setups import DecimalEncoder, SavedSetup, SetupRepository, build_setup

router = APIRouter(prefix="/setups", tags=["setups"])


def setup_out(s: SavedSetup) -> SetupOut:
    d = json.loads(json.dumps(s.to_dict(), cls=DecimalEncoder))
    return SetupOut(
        id=d["id"],
        name=d["name"],
        country=d["country"],
        pricing_mode=d["pricingMode"],
        units=d["units"],
        style_id=d["styleId"],
        length=d["L"],
        width=d["W"],
        height=d["H"],
        board_mm=d["boardMM"],
        divisor_id=d["divisorId"],
        battery=d["battery"],
        actual_weight=d["actualW"],
        quantity=d["qty"],
        price_usd=d["priceUSD"],
        product_cost_usd=d["productCostUSD"],
        variable_fee_pct=d["variableFeePct"],
        refund_fee_pct=d["refundFeePct"],
        rates=d["rates"],
        derived=d["derived"],
    )


@router.get("/", response_model=list[SetupOut])
async def list_setups(db: AsyncSession = Depends(get_db)):
    return [setup_out(s) for s in await SetupRepository(db).load_all()]


@router.post("/", response_model=SetupOut, status_code=201)
async def save_setup(data: SetupCreate, db: AsyncSession = Depends(get_db)):
    repo = SetupRepository(db)
    existing = await repo.load_all()
    setup = build_setup(calculate(to_inputs(data)), name=data.name, existing_count=len(existing))
    await repo.append(setup)
    return setup_out(setup)


@router.get("/export.csv")
async def export_setups_csv(db: AsyncSession = Depends(get_db)):
    setups = await SetupRepository(db).load_all()
    if not setups:
        raise HTTPException(404, "No saved setups yet.")
    return Response(
        content=ExportService.setups_to_csv(setups),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="box_setups.csv"'},
    )


@router.get("/{setup_id}", response_model=SetupOut)
async def get_setup(setup_id: str, db: AsyncSession = Depends(get_db)):
    setup = await SetupRepository(db).get(setup_id)
    if not setup:
        raise HTTPException(404, "Setup not found")
    return setup_out(setup)


@router.get("/{setup_id}/calculation", response_model=CalculationOut)
async def load_setup(setup_id: str, db: AsyncSession = Depends(get_db)):
    """Recalculate a saved setup from its stored inputs."""
    setup = await SetupRepository(db).get(setup_id)
    if not setup:
        raise HTTPException(404, "Setup not found")
    return calculation_out(calculate(setup.to_inputs()))


@router.patch("/{setup_id}", response_model=SetupOut)
async def rename_setup(setup_id: str, data: SetupRename, db: AsyncSession = Depends(get_db)):
    setup = await SetupRepository(db).rename(setup_id, data.name)
    if not setup:
        raise HTTPException(404, "Setup not found")
    return setup_out(setup)


@router.delete("/{setup_id}", status_code=204)
async def delete_setup(setup_id: str, db: AsyncSession = Depends(get_db)):
    if not await SetupRepository(db).remove(setup_id):
        raise HTTPException(404, "Setup not found")
