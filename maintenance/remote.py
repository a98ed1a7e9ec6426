"""
remote.py - Aggregation by counting matching records in a feature source

Each category is one WHERE clause; the five queries run concurrently.
A failed query propagates RemoteQueryError, there is no retry here.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from config import SEGMENT_LENGTH_M, STANDARD_ROAD_WIDTH_M
from .errors import RemoteQueryError
from .predicates import DEFAULT_SCHEMA, FieldSchema, combined_predicate
from .schemas import (
    CATEGORIES,
    AggregationResult,
    CategoryTotals,
    CostInputs,
    MaintenanceCategory,
    MaintenanceParameters,
    RegionFilter,
)

logger = logging.getLogger(__name__)


class LengthMode(str, Enum):
    FIXED = "fixed"        # every record counts as SEGMENT_LENGTH_M
    MEASURED = "measured"  # sum of the layer's length field


class FeatureSource(Protocol):
    async def query_count(self, where: str) -> int: ...

    async def query_length_sum(self, where: str) -> float: ...

    async def query_features(self, where: str, limit: int = 100) -> list[dict[str, Any]]: ...


async def category_totals(
    source: FeatureSource,
    category: MaintenanceCategory,
    parameters: MaintenanceParameters,
    costs: CostInputs,
    region_filter: RegionFilter | None,
    mode: LengthMode = LengthMode.FIXED,
    schema: FieldSchema = DEFAULT_SCHEMA,
) -> CategoryTotals:
    where = combined_predicate(parameters, region_filter, category, schema)
    cost_per_sqm = costs.for_category(category)
    try:
        count = await source.query_count(where)
        if mode == LengthMode.MEASURED:
            length_km = await source.query_length_sum(where) / 1000
            cost = length_km * 1000 * STANDARD_ROAD_WIDTH_M * cost_per_sqm
        else:
            length_km = count * (SEGMENT_LENGTH_M / 1000)
            cost = count * SEGMENT_LENGTH_M * STANDARD_ROAD_WIDTH_M * cost_per_sqm
    except RemoteQueryError:
        logger.warning("Remote query failed for %s | where=%s", category.value, where)
        raise
    return CategoryTotals(length_km=length_km, cost=cost, segment_count=count)


async def aggregate_remote(
    source: FeatureSource,
    parameters: MaintenanceParameters,
    costs: CostInputs,
    region_filter: RegionFilter | None = "all",
    mode: LengthMode = LengthMode.FIXED,
    schema: FieldSchema = DEFAULT_SCHEMA,
) -> AggregationResult:
    """Remote counterpart of aggregation.aggregate()."""
    mode = LengthMode(mode)
    totals = await asyncio.gather(*(
        category_totals(source, category, parameters, costs, region_filter, mode, schema)
        for category in CATEGORIES
    ))
    return AggregationResult.from_categories(dict(zip(CATEGORIES, totals)))
