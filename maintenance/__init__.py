from .aggregation import aggregate, segment_cost
from .classifier import available_regions, classify, classify_segments
from .errors import MaintenanceError, RemoteQueryError
from .ingestion import load_segments, segments_from_attributes
from .orchestrator import CalculationOrchestrator, CalculationOutcome, CalculationStatus
from .predicates import (
    FieldSchema,
    all_category_predicates,
    category_predicate,
    combined_predicate,
    region_predicate,
)
from .remote import FeatureSource, LengthMode, aggregate_remote
from .schemas import (
    AggregationResult,
    CalculationInputs,
    CostInputs,
    MaintenanceCategory,
    MaintenanceParameters,
    RoadSegment,
)

__all__ = [
    "aggregate",
    "segment_cost",
    "available_regions",
    "classify",
    "classify_segments",
    "MaintenanceError",
    "RemoteQueryError",
    "load_segments",
    "segments_from_attributes",
    "CalculationOrchestrator",
    "CalculationOutcome",
    "CalculationStatus",
    "FieldSchema",
    "all_category_predicates",
    "category_predicate",
    "combined_predicate",
    "region_predicate",
    "FeatureSource",
    "LengthMode",
    "aggregate_remote",
    "AggregationResult",
    "CalculationInputs",
    "CostInputs",
    "MaintenanceCategory",
    "MaintenanceParameters",
    "RoadSegment",
]
