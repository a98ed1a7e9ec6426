"""
segment_routes.py - Classified segments for the map, region list, WHERE clauses
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.dependencies import get_orchestrator
from maintenance.classifier import available_regions, classify, classify_segments
from maintenance.errors import RemoteQueryError
from maintenance.ingestion import segments_from_attributes
from maintenance.orchestrator import CalculationOrchestrator
from maintenance.predicates import combined_predicate
from maintenance.schemas import (
    CATEGORIES,
    ALL_REGIONS,
    MaintenanceCategory,
    MaintenanceParameters,
    RoadSegment,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/segments", tags=["Segments"])


class SegmentQuery(BaseModel):
    parameters: MaintenanceParameters = Field(default_factory=MaintenanceParameters)
    region: str | list[str] = ALL_REGIONS
    category: MaintenanceCategory | None = None
    limit: int = Field(default=500, ge=1, le=5000)
    offset: int = Field(default=0, ge=0)


def _item(s: RoadSegment, category: MaintenanceCategory) -> dict:
    return {
        "id": s.id,
        "region": s.region,
        "road_number": s.road_number,
        "iri": s.iri,
        "rut": s.rut,
        "psci": s.psci,
        "csc": s.csc,
        "mpd": s.mpd,
        "category": category.value,
    }


@router.get("/regions")
async def list_regions(orchestrator: CalculationOrchestrator = Depends(get_orchestrator)):
    return {"regions": available_regions(orchestrator.segments or [])}


@router.post("/query")
async def query_segments(
    query: SegmentQuery,
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    """
    Segments with their category, optionally a single category only.
    Served from the local dataset, or from the feature source when none is loaded.
    """
    if orchestrator.segments is None and orchestrator.remote is not None:
        where = combined_predicate(query.parameters, query.region, query.category, orchestrator.schema)
        try:
            records = await orchestrator.remote.query_features(where, query.offset + query.limit)
        except RemoteQueryError as exc:
            logger.warning("Segment query failed: %s", exc)
            raise HTTPException(status_code=502, detail="Feature source query failed") from exc
        segments = segments_from_attributes(records[query.offset:], orchestrator.schema)
        return {
            "total": None,
            "items": [_item(s, classify(s, query.parameters)) for s in segments],
        }

    rows = list(classify_segments(orchestrator.segments or [], query.parameters, query.region, query.category))
    return {
        "total": len(rows),
        "items": [_item(s, assigned) for s, assigned in rows[query.offset:query.offset + query.limit]],
    }


@router.post("/predicates")
async def segment_predicates(
    query: SegmentQuery,
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    """WHERE clause per category, exactly as sent to the feature source."""
    return {
        "region": combined_predicate(query.parameters, query.region, None, orchestrator.schema),
        "categories": {
            category.value: combined_predicate(query.parameters, query.region, category, orchestrator.schema)
            for category in CATEGORIES
        },
    }
