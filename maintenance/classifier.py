"""
classifier.py - Assign each road segment exactly one maintenance category
"""
from typing import Iterable, Iterator

from .rules import DECISION_TABLE, FALLBACK_CATEGORY, evaluate
from .schemas import (
    MaintenanceCategory,
    MaintenanceParameters,
    RegionFilter,
    RoadSegment,
    selected_regions,
)


def classify(segment: RoadSegment, parameters: MaintenanceParameters) -> MaintenanceCategory:
    """
    Walk the decision table from most to least severe:
    Reconstruction → Overlay → Surface Restoration → Skid Resistance.
    Anything left over gets Routine Maintenance.
    """
    for category, condition in DECISION_TABLE:
        if evaluate(condition, segment, parameters):
            return category
    return FALLBACK_CATEGORY


def filter_by_region(
    segments: Iterable[RoadSegment],
    region_filter: RegionFilter | None,
) -> Iterator[RoadSegment]:
    regions = selected_regions(region_filter)
    if regions is None:
        return iter(segments)
    wanted = set(regions)
    return (s for s in segments if s.region in wanted)


def classify_segments(
    segments: Iterable[RoadSegment],
    parameters: MaintenanceParameters,
    region_filter: RegionFilter | None = None,
    category: MaintenanceCategory | None = None,
) -> Iterator[tuple[RoadSegment, MaintenanceCategory]]:
    """Yield (segment, category) pairs, optionally keeping a single category."""
    for segment in filter_by_region(segments, region_filter):
        assigned = classify(segment, parameters)
        if category is None or assigned == category:
            yield segment, assigned


def available_regions(segments: Iterable[RoadSegment]) -> list[str]:
    return sorted({s.region for s in segments if s.region})
