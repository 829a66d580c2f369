"""Box-Designer CLI tool.

Usage:
    python -m cli calc --length 30 --width 22 --height 10
    python -m cli calc --units in --length 12 --width 9 --height 4 --divisor in139
    python -m cli calc --mode manual --per-kg 50 --min-charge 0
    python -m cli calc --battery --qty 10 --price 19.99 --product-cost 3
    python -m cli divisors --units cm
    python -m cli sheet --country "United States"
    python -m cli preview --length 30 --width 22 --height 10 -o box.svg
    python -m cli setups list
    python -m cli setups save --name "Medium mailer" --length 30 --width 22 --height 10
    python -m cli setups load <id>
    python -m cli setups rename <id> "New name"
    python -m cli setups delete <id>
    python -m cli setups export -o box_setups.csv
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from boxdesigner.database import Base, async_session, engine
from boxdesigner.services.calculator import BoxInputs, calculate
from boxdesigner.services.catalog import divisor_list_for
from boxdesigner.services.export import ExportService
from boxdesigner.services.preview import preview_renderer
from boxdesigner.services.setups import SetupRepository, build_setup
from boxdesigner.services.shipping import shipping_service


def _add_box_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--units", choices=["cm", "in"], default="cm", help="Length unit")
    p.add_argument("--style", default="ttm", help="Box style id")
    p.add_argument("--length", "-L", default="30", help="Outer length")
    p.add_argument("--width", "-W", default="22", help="Outer width")
    p.add_argument("--height", "-H", default="10", help="Outer height")
    p.add_argument("--board-mm", default="2", help="Board thickness (mm)")
    p.add_argument("--divisor", default=None, help="Divisor profile id")
    p.add_argument("--actual", default="0", help="Actual weight (kg for cm, lb for in)")
    p.add_argument("--battery", action="store_true", help="Built-in battery line")
    p.add_argument("--country", default="United States", help="Destination country")
    p.add_argument("--mode", choices=["sheet", "manual"], default="sheet", help="Pricing mode")
    p.add_argument("--per-kg", default="50", help="Manual price per started kg (CNY)")
    p.add_argument("--min-charge", default="0", help="Manual minimum charge (CNY)")
    p.add_argument("--fx", default="7.20", help="CNY per USD")
    p.add_argument("--qty", default="1", help="Quantity")
    p.add_argument("--price", default="0", help="Selling price per unit (USD)")
    p.add_argument("--product-cost", default="0", help="Product cost per unit (USD)")
    p.add_argument("--variable-fee", default="0", help="Variable fee %% of price")
    p.add_argument("--refund-fee", default="0", help="Refund fee %% of price")


def inputs_from_args(args) -> BoxInputs:
    divisor = args.divisor or ("in139" if args.units == "in" else "cm5000")
    return BoxInputs(
        units=args.units,
        style_id=args.style,
        length=args.length,
        width=args.width,
        height=args.height,
        board_mm=args.board_mm,
        battery=args.battery,
        country=args.country,
        pricing_mode=args.mode,
        divisor_id=divisor,
        actual_weight=args.actual,
        quantity=args.qty,
        price_usd=args.price,
        product_cost_usd=args.product_cost,
        variable_fee_pct=args.variable_fee,
        refund_fee_pct=args.refund_fee,
        per_kg_cny=args.per_kg,
        min_charge_cny=args.min_charge,
        cny_per_usd=args.fx,
    )


def main():
    parser = argparse.ArgumentParser(
        prog="box-cli",
        description="Box-Designer CLI",
    )
    sub = parser.add_subparsers(dest="command", help="Top-level command")

    # ── Calculation ──────────────────────────────────────
    calc = sub.add_parser("calc", help="Calculate box, weight and shipping")
    _add_box_args(calc)

    divisors = sub.add_parser("divisors", help="List divisor profiles")
    divisors.add_argument("--units", choices=["cm", "in"], default="cm")

    sheet = sub.add_parser("sheet", help="Show a rate sheet")
    sheet.add_argument("--country", default="United States")

    preview = sub.add_parser("preview", help="Render an isometric SVG preview")
    _add_box_args(preview)
    preview.add_argument("--output", "-o", help="Output file path")

    # ── Saved setups ─────────────────────────────────────
    setups_parser = sub.add_parser("setups", help="Saved setups")
    setups_sub = setups_parser.add_subparsers(dest="action")

    setups_sub.add_parser("list", help="List saved setups")

    save = setups_sub.add_parser("save", help="Save the current setup")
    save.add_argument("--name", default="", help="Setup name")
    _add_box_args(save)

    rename = setups_sub.add_parser("rename", help="Rename a setup")
    rename.add_argument("id", help="Setup id")
    rename.add_argument("name", help="New name")

    load = setups_sub.add_parser("load", help="Recalculate a saved setup")
    load.add_argument("id", help="Setup id")

    delete = setups_sub.add_parser("delete", help="Delete a setup")
    delete.add_argument("id", help="Setup id")

    export = setups_sub.add_parser("export", help="Export saved setups as CSV")
    export.add_argument("--output", "-o", help="Output file path")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    handlers = {
        "calc": handle_calc,
        "divisors": handle_divisors,
        "sheet": handle_sheet,
        "preview": handle_preview,
        "setups": lambda a: asyncio.run(handle_setups(a)),
    }
    handler = handlers.get(args.command)
    if handler:
        handler(args)
    else:
        parser.print_help()


# ── Command Handlers ────────────────────────────────────

def handle_calc(args):
    print_calculation(calculate(inputs_from_args(args)))


def print_calculation(c):
    m = c.metrics
    u = c.normalized.units
    if c.divisor.advisory:
        print(f"⚠️  {c.divisor.advisory}")

    print(f"Box ({u.value}):")
    print(f"  Outer:           {' × '.join(f'{v:.2f}' for v in m.outer)}")
    print(f"  Inner:           {' × '.join(f'{v:.2f}' for v in m.inner)}")
    print(f"  Volume:          {m.volume:.2f} {u.volume_label}")
    print(f"  Surface Area:    {m.surface_area:.2f}")
    print(f"  Vol. Weight:     {m.volumetric_weight:.3f} {c.weight_unit}")
    print(f"  Chargeable:      {m.chargeable_weight:.3f} {c.weight_unit} ({c.chargeable_kg:.3f} kg)")
    print("Shipping:")
    if not c.shipping.ok:
        print(f"  ❌ {c.shipping.breakdown}")
    else:
        print(f"  {c.shipping.breakdown}")
    print(f"  CNY:             {c.shipping_cny:.2f}")
    print(f"  USD:             ${c.shipping_usd:.2f}")
    e = c.economics
    print(f"Unit Economics (qty {c.normalized.costs.quantity}):")
    print(f"  Product Cost:    ${e.details['product_cost_usd']}")
    print(f"  Variable Fee:    ${e.details['variable_fee_usd']}")
    print(f"  Refund Fee:      ${e.details['refund_fee_usd']}")
    print(f"  Shipping/Unit:   ${e.details['shipping_per_unit_usd']}")
    print(f"  Cost/Unit:       ${e.cost_per_unit_usd:.2f} (¥{c.cost_per_unit_cny:.2f})")
    print(f"  Total Cost:      ${e.total_cost_usd:.2f}")
    print("Other profiles:")
    for row in c.cross_profiles:
        print(f"  {row['label']:<32} {row['value']}")


def handle_divisors(args):
    for p in divisor_list_for(args.units):
        print(f"{p.id:<8} {p.label:<32} {p.divisor} → {p.weight_unit}")


def handle_sheet(args):
    sheet = shipping_service.get_sheet(args.country)
    if not sheet:
        print(f"No rate sheet for {args.country}. Available: {', '.join(shipping_service.supported_countries())}")
        return
    print(f"{sheet.carrier} {sheet.country} ({sheet.currency}) — min {sheet.min_weight_kg} kg, step {sheet.round_step_kg} kg")
    for line, brackets in sheet.lines.items():
        print(f"\n{line.value}")
        print(f"  {'Weight (kg)':<16} {'Fee/kg':<8} {'Item fee'}")
        print("  " + "-" * 34)
        for b in brackets:
            print(f"  {f'{b.lo}–{b.hi}':<16} {b.fee_per_kg:<8} {b.item_fee}")


def handle_preview(args):
    dims = calculate(inputs_from_args(args)).normalized.dims
    rendered = preview_renderer.render(dims.length, dims.width, dims.height, args.style)
    if args.output:
        Path(args.output).write_text(rendered.content, encoding="utf-8")
        print(f"Preview saved to {args.output}")
    else:
        print(rendered.content)


async def handle_setups(args):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with async_session() as db:
            repo = SetupRepository(db)

            if args.action == "list":
                setups = await repo.load_all()
                if not setups:
                    print("No saved setups yet.")
                    return
                for s in setups:
                    d = s.derived
                    print(f"{s.id:<22} {s.name:<24} {s.length}×{s.width}×{s.height} {s.units}  "
                          f"{float(d.get('shippingCNY', 0)):.2f} CNY")

            elif args.action == "save":
                existing = await repo.load_all()
                setup = build_setup(calculate(inputs_from_args(args)), args.name, len(existing))
                await repo.append(setup)
                print(f"✅ Saved {setup.name} ({setup.id})")

            elif args.action == "load":
                setup = await repo.get(args.id)
                if not setup:
                    print(f"Setup not found: {args.id}")
                    sys.exit(1)
                print(f"{setup.name} ({setup.id})")
                print_calculation(calculate(setup.to_inputs()))

            elif args.action == "rename":
                setup = await repo.rename(args.id, args.name)
                if not setup:
                    print(f"Setup not found: {args.id}")
                    sys.exit(1)
                print(f"✅ Renamed to {setup.name}")

            elif args.action == "delete":
                if not await repo.remove(args.id):
                    print(f"Setup not found: {args.id}")
                    sys.exit(1)
                print(f"✅ Deleted {args.id}")

            elif args.action == "export":
                setups = await repo.load_all()
                if not setups:
                    print("No saved setups yet.")
                    return
                content = ExportService.setups_to_csv(setups)
                if args.output:
                    Path(args.output).write_text(content, encoding="utf-8")
                    print(f"Exported {len(setups)} setup(s) to {args.output}")
                else:
                    print(content)

            else:
                print("Usage: box-cli setups {list|save|load|rename|delete|export}")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    main()
