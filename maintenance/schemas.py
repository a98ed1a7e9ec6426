"""
schemas.py
==========
Pydantic v2 models shared by the classification engine and the API.

Segments, parameters and costs are frozen: every edit produces a new snapshot
that is consumed whole by one aggregation run.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


ALL_REGIONS = "all"

RegionFilter = Union[str, tuple[str, ...], list[str]]


# ──────────────────────────────────────────────────────────────────────────────
#  Categories
# ──────────────────────────────────────────────────────────────────────────────

class MaintenanceCategory(str, Enum):
    """Maintenance categories, declared from most to least severe."""

    ROAD_RECONSTRUCTION = "Road Reconstruction"
    STRUCTURAL_OVERLAY = "Structural Overlay"
    SURFACE_RESTORATION = "Surface Restoration"
    SKID_RESISTANCE = "Restoration of Skid Resistance"
    ROUTINE_MAINTENANCE = "Routine Maintenance"

    @property
    def cost_key(self) -> str:
        return _COST_KEYS[self]


_COST_KEYS = {
    MaintenanceCategory.ROAD_RECONSTRUCTION: "rr",
    MaintenanceCategory.STRUCTURAL_OVERLAY: "so",
    MaintenanceCategory.SURFACE_RESTORATION: "sr",
    MaintenanceCategory.SKID_RESISTANCE: "rs",
    MaintenanceCategory.ROUTINE_MAINTENANCE: "rm",
}

CATEGORIES: tuple[MaintenanceCategory, ...] = tuple(MaintenanceCategory)


# ──────────────────────────────────────────────────────────────────────────────
#  Inputs
# ──────────────────────────────────────────────────────────────────────────────

class RoadSegment(BaseModel):
    """One 100 m survey segment. Accepts the legacy `county`/`roadNumber` keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str]
    region: str = Field(validation_alias=AliasChoices("region", "county", "LA"))
    road_number: str | None = Field(
        default=None, validation_alias=AliasChoices("road_number", "roadNumber", "Route")
    )
    iri: float = Field(description="International Roughness Index (m/km).")
    rut: float = Field(description="Rut depth (mm).")
    psci: float = Field(description="Pavement Surface Condition Index, 1–10 (lower is worse).")
    csc: float = Field(description="Characteristic SCRIM Coefficient, 0–1.")
    mpd: float = Field(description="Mean Profile Depth (mm).")
    length_m: float | None = Field(
        default=None,
        validation_alias=AliasChoices("length_m", "Shape_Length"),
        description="Measured length; None means the nominal 100 m.",
    )


class MaintenanceParameters(BaseModel):
    """
    Threshold rules for the four non-default categories.

    Values are trusted: out-of-range thresholds still classify deterministically.
    """

    model_config = ConfigDict(frozen=True)

    # Road Reconstruction
    reconstruction_iri: float = Field(default=12, description="IRI at or above which the road is rebuilt.")
    reconstruction_rut: float = Field(default=40, description="Rut depth (mm) at or above which the road is rebuilt.")
    reconstruction_psci: float = Field(default=2, description="PSCI at or below which the road is rebuilt.")

    # Structural Overlay
    overlay_iri: float = 7
    overlay_rut: float = 20
    overlay_psci: float = 4

    # Surface Restoration
    restoration_psci_a: float = 5
    restoration_psci_b: float = 6
    restoration_iri: float = 6
    restoration_psci_c: float = 7

    # Restoration of Skid Resistance
    skid_psci_a: float = 7
    skid_psci_b: float = 8
    skid_csc: float = 0.35
    skid_psci_c: float = 9
    skid_mpd: float = 0.7

    def with_updates(self, **changes: float) -> "MaintenanceParameters":
        return self.model_validate({**self.model_dump(), **changes})


class CostInputs(BaseModel):
    """Unit rates in € per square metre, keyed by category short code."""

    model_config = ConfigDict(frozen=True)

    rr: float = Field(default=60, description="Road Reconstruction (€/m²).")
    so: float = Field(default=40, description="Structural Overlay (€/m²).")
    sr: float = Field(default=15, description="Surface Restoration (€/m²).")
    rs: float = Field(default=5, description="Restoration of Skid Resistance (€/m²).")
    rm: float = Field(default=1, description="Routine Maintenance (€/m²).")

    def for_category(self, category: MaintenanceCategory) -> float:
        return getattr(self, category.cost_key)

    def with_updates(self, **changes: float) -> "CostInputs":
        return self.model_validate({**self.model_dump(), **changes})


class CalculationInputs(BaseModel):
    """Immutable snapshot consumed by a single calculation run."""

    model_config = ConfigDict(frozen=True)

    parameters: MaintenanceParameters = Field(default_factory=MaintenanceParameters)
    costs: CostInputs = Field(default_factory=CostInputs)
    region: Union[str, tuple[str, ...]] = Field(
        default=ALL_REGIONS,
        description='"all", one local authority, or a list of local authorities.',
    )


# ──────────────────────────────────────────────────────────────────────────────
#  Results
# ──────────────────────────────────────────────────────────────────────────────

class CategoryTotals(BaseModel):
    length_km: float = 0.0
    cost: float = 0.0
    segment_count: int = 0


class AggregationResult(BaseModel):
    categories: dict[MaintenanceCategory, CategoryTotals]
    total_length_km: float = 0.0
    total_cost: float = 0.0

    @classmethod
    def zero(cls) -> "AggregationResult":
        return cls(categories={category: CategoryTotals() for category in CATEGORIES})

    @classmethod
    def from_categories(cls, categories: dict[MaintenanceCategory, CategoryTotals]) -> "AggregationResult":
        ordered = {category: categories.get(category, CategoryTotals()) for category in CATEGORIES}
        return cls(
            categories=ordered,
            total_length_km=sum(t.length_km for t in ordered.values()),
            total_cost=sum(t.cost for t in ordered.values()),
        )

    @property
    def total_segments(self) -> int:
        return sum(t.segment_count for t in self.categories.values())


def selected_regions(region_filter: RegionFilter | None) -> tuple[str, ...] | None:
    """Normalize a region filter; None means every region participates."""
    if region_filter is None:
        return None
    if isinstance(region_filter, str):
        return None if region_filter == ALL_REGIONS else (region_filter,)
    regions = tuple(region_filter)
    return regions or None
