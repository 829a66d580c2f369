"""Box calculation API — dimensions, volumetric weight, shipping and unit cost."""

from fastapi import APIRouter
from fastapi.responses import Response

from boxdesigner.schemas import CalculateRequest, CalculationOut
from boxdesigner.services.calculator import BoxInputs, Calculation, calculate, style_name
from boxdesigner.services.export import ExportService
from boxdesigner.services.preview import preview_renderer
from boxdesigner.services.setups import build_setup

router = APIRouter(prefix="/calculate", tags=["calculate"])


def to_inputs(data: CalculateRequest) -> BoxInputs:
    return BoxInputs(**data.model_dump(exclude={"name"}))


def calculation_out(calc: Calculation) -> CalculationOut:
    m = calc.metrics
    fee = calc.shipping
    econ = calc.economics
    units = calc.normalized.units
    bracket = None
    if fee.bracket is not None:
        bracket = {
            "lo": float(fee.bracket.lo),
            "hi": float(fee.bracket.hi),
            "fee_per_kg": float(fee.bracket.fee_per_kg),
            "item_fee": float(fee.bracket.item_fee),
        }
    return CalculationOut(
        units=units.value,
        dim_unit=units.value,
        volume_unit=units.volume_label,
        weight_unit=calc.weight_unit,
        style_name=style_name(calc.inputs.style_id),
        divisor_id=calc.divisor.profile.id,
        divisor=float(calc.divisor_number),
        divisor_repaired=calc.divisor.repaired,
        advisory=calc.divisor.advisory,
        outer=[float(v) for v in m.outer],
        inner=[float(v) for v in m.inner],
        volume=float(m.volume),
        inner_volume=float(m.inner_volume),
        surface_area=float(m.surface_area),
        volumetric_weight=float(m.volumetric_weight),
        chargeable_weight=float(m.chargeable_weight),
        chargeable_kg=float(calc.chargeable_kg),
        shipping={
            "status": fee.status.value,
            "mode": fee.mode.value,
            "billed_kg": float(fee.billed_kg),
            "shipping_cny": float(calc.shipping_cny),
            "shipping_usd": float(calc.shipping_usd),
            "bracket": bracket,
            "breakdown": fee.breakdown,
        },
        quantity=calc.normalized.costs.quantity,
        shipping_per_unit_usd=float(econ.shipping_per_unit_usd),
        variable_fee_usd=float(econ.variable_fee_usd),
        refund_fee_usd=float(econ.refund_fee_usd),
        cost_per_unit_usd=float(econ.cost_per_unit_usd),
        total_cost_usd=float(econ.total_cost_usd),
        margin_per_unit_usd=float(econ.margin_per_unit_usd),
        cost_per_unit_cny=float(calc.cost_per_unit_cny),
        cost_details={k: float(v) for k, v in econ.details.items()},
        cross_profiles=[
            {"id": r["id"], "label": r["label"], "value": r["value"]}
            for r in calc.cross_profiles
        ],
    )


@router.post("/", response_model=CalculationOut)
async def calculate_box(data: CalculateRequest):
    return calculation_out(calculate(to_inputs(data)))


@router.post("/export")
async def export_calculation(data: CalculateRequest, name: str = ""):
    """Current calculation as a downloadable JSON snapshot."""
    setup = build_setup(calculate(to_inputs(data)), name=name)
    filename = ExportService.json_filename(setup.name)
    return Response(
        content=ExportService.setup_to_json(setup),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/preview")
async def preview(data: CalculateRequest):
    """Isometric SVG preview of the (clamped) box."""
    dims = calculate(to_inputs(data)).normalized.dims
    rendered = preview_renderer.render(dims.length, dims.width, dims.height, data.style_id)
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{rendered.filename}"',
            "X-Preview-Renderer": rendered.renderer,
            "X-Preview-Enhanced-Available": "true" if preview_renderer.enhanced_available else "false",
        },
    )
