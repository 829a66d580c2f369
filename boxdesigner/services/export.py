"""Data export: one setup as JSON, all saved setups as CSV."""

import csv
import io
import json
import re
from decimal import Decimal

from boxdesigner.services.setups import DecimalEncoder, SavedSetup

CSV_COLUMNS = [
    "name", "country", "pricingMode", "units", "styleId", "L", "W", "H", "boardMM",
    "divisorId", "battery", "qty", "priceUSD", "productCostUSD", "variableFeePct",
    "refundFeePct", "chargeableKg", "shippingCNY", "shippingUSD", "shippingPerUnitUSD",
    "costPerUnitUSD", "totalCostUSD", "breakdown",
]

_DERIVED_COLUMNS = (
    "chargeableKg", "shippingCNY", "shippingUSD", "shippingPerUnitUSD",
    "costPerUnitUSD", "totalCostUSD", "breakdown",
)


def _cell(v) -> object:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, Decimal):
        return float(v)
    return v


class ExportService:
    """Export saved setups."""

    @staticmethod
    def setup_row(setup: SavedSetup) -> dict:
        d = setup.to_dict()
        derived = d.get("derived") or {}
        row = {c: d.get(c) for c in CSV_COLUMNS if c not in _DERIVED_COLUMNS}
        for c in _DERIVED_COLUMNS:
            row[c] = derived.get(c, "")
        return row

    @staticmethod
    def setups_to_csv(setups: list[SavedSetup]) -> str:
        """CSV with a fixed header; embedded commas, quotes and newlines are quoted."""
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, extrasaction="ignore", lineterminator="\n")
        writer.writeheader()
        for s in setups:
            row = ExportService.setup_row(s)
            writer.writerow({k: _cell(v) for k, v in row.items()})
        return buf.getvalue().rstrip("\n")

    @staticmethod
    def setup_to_json(setup: SavedSetup) -> str:
        return json.dumps(setup.to_dict(), cls=DecimalEncoder, ensure_ascii=False, indent=2)

    @staticmethod
    def json_filename(name: str) -> str:
        return re.sub(r"\s+", "_", name) + ".json"
