"""
report.py - Numbers for the PDF/CSV report exports

The front end lays out the PDF; this module supplies the figures, the
parameter and cost values verbatim, and a CSV rendering.
"""
import csv
import io
from datetime import datetime, timezone
from typing import Any

from .schemas import (
    CATEGORIES,
    AggregationResult,
    CalculationInputs,
    RegionFilter,
    selected_regions,
)


def format_cost(cost: float) -> str:
    if cost >= 1e9:
        return f"€{cost / 1e9:.2f}B"
    if cost >= 1e6:
        return f"€{cost / 1e6:.2f}M"
    if cost >= 1e3:
        return f"€{cost / 1e3:.2f}K"
    return f"€{cost:.2f}"


def format_region_selection(region_filter: RegionFilter | None) -> str:
    regions = selected_regions(region_filter)
    if regions is None:
        return "All Local Authorities"
    if len(regions) == 1:
        return regions[0]
    return f"{len(regions)} Local Authorities Selected"


def build_report(result: AggregationResult, inputs: CalculationInputs) -> dict[str, Any]:
    categories = []
    for category in CATEGORIES:
        totals = result.categories[category]
        share = 100 * totals.length_km / result.total_length_km if result.total_length_km else 0.0
        categories.append({
            "category": category.value,
            "length_km": round(totals.length_km, 3),
            "length_percent": round(share, 1),
            "segment_count": totals.segment_count,
            "cost": round(totals.cost, 2),
            "cost_formatted": format_cost(totals.cost),
            "cost_per_sqm": inputs.costs.for_category(category),
        })

    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "region_selection": format_region_selection(inputs.region),
        "total_length_km": round(result.total_length_km, 3),
        "total_cost": round(result.total_cost, 2),
        "total_cost_formatted": format_cost(result.total_cost),
        "categories": categories,
        "parameters": inputs.parameters.model_dump(),
        "costs": inputs.costs.model_dump(),
    }


def render_csv(report: dict[str, Any]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)

    writer.writerow(["Pavement Maintenance Report"])
    writer.writerow(["Generated", report["generated_at"]])
    writer.writerow(["Local Authority", report["region_selection"]])
    writer.writerow(["Total Length (km)", report["total_length_km"]])
    writer.writerow(["Total Cost (EUR)", report["total_cost"]])
    writer.writerow([])

    writer.writerow(["Category", "Length (km)", "Length (%)", "Segments", "Cost (EUR)", "Cost per sqm (EUR)"])
    for row in report["categories"]:
        writer.writerow([
            row["category"],
            row["length_km"],
            row["length_percent"],
            row["segment_count"],
            row["cost"],
            row["cost_per_sqm"],
        ])
    writer.writerow([])

    writer.writerow(["Parameter", "Value"])
    for name, value in report["parameters"].items():
        writer.writerow([name, value])
    writer.writerow([])

    writer.writerow(["Cost Input", "EUR per sqm"])
    for name, value in report["costs"].items():
        writer.writerow([name, value])

    return buf.getvalue()
