"""
aggregation.py - Per-category length and cost totals over an in-memory network

Cost = length (km) × 1000 (m/km) × standard width (m) × €/m² for the category.
"""
from typing import Iterable

from config import SEGMENT_LENGTH_M, STANDARD_ROAD_WIDTH_M
from .classifier import classify_segments
from .schemas import (
    CATEGORIES,
    AggregationResult,
    CategoryTotals,
    CostInputs,
    MaintenanceCategory,
    MaintenanceParameters,
    RegionFilter,
    RoadSegment,
)


SEGMENT_LENGTH_KM = SEGMENT_LENGTH_M / 1000


def segment_cost(category: MaintenanceCategory, costs: CostInputs) -> float:
    """Cost of one nominal segment, e.g. 0.1 × 1000 × 7.5 × 60 = €45,000."""
    return SEGMENT_LENGTH_KM * 1000 * STANDARD_ROAD_WIDTH_M * costs.for_category(category)


def aggregate(
    segments: Iterable[RoadSegment],
    parameters: MaintenanceParameters,
    costs: CostInputs,
    region_filter: RegionFilter | None = "all",
) -> AggregationResult:
    """
    Classify every segment in the selected regions and sum length/cost
    per category. An empty selection gives an all-zero result.
    """
    lengths = {category: 0.0 for category in CATEGORIES}
    totals = {category: 0.0 for category in CATEGORIES}
    counts = {category: 0 for category in CATEGORIES}

    for _segment, category in classify_segments(segments, parameters, region_filter):
        lengths[category] += SEGMENT_LENGTH_KM
        totals[category] += segment_cost(category, costs)
        counts[category] += 1

    return AggregationResult.from_categories({
        category: CategoryTotals(
            length_km=lengths[category],
            cost=totals[category],
            segment_count=counts[category],
        )
        for category in CATEGORIES
    })
