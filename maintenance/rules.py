"""
rules.py - Maintenance decision table

One ordered table of (category, condition) pairs drives both the in-memory
classifier and the SQL predicate builder. Conditions are a small tagged
variant tree: Compare leaves combined with AllOf / AnyOf.
"""
import operator
from dataclasses import dataclass
from typing import Union

from .schemas import MaintenanceCategory, MaintenanceParameters, RoadSegment


OPERATORS = {
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class Compare:
    """`segment.<field> <op> parameters.<threshold>`"""
    field: str
    op: str
    threshold: str


@dataclass(frozen=True)
class AllOf:
    terms: tuple["Condition", ...]


@dataclass(frozen=True)
class AnyOf:
    terms: tuple["Condition", ...]


Condition = Union[Compare, AllOf, AnyOf]


def at_least(field: str, threshold: str) -> Compare:
    return Compare(field, ">=", threshold)


def at_most(field: str, threshold: str) -> Compare:
    return Compare(field, "<=", threshold)


# Priority order is table order; the first matching row wins.
DECISION_TABLE: tuple[tuple[MaintenanceCategory, Condition], ...] = (
    (
        MaintenanceCategory.ROAD_RECONSTRUCTION,
        AnyOf((
            at_least("iri", "reconstruction_iri"),
            at_least("rut", "reconstruction_rut"),
            at_most("psci", "reconstruction_psci"),
        )),
    ),
    (
        MaintenanceCategory.STRUCTURAL_OVERLAY,
        AnyOf((
            at_least("iri", "overlay_iri"),
            at_least("rut", "overlay_rut"),
            at_most("psci", "overlay_psci"),
        )),
    ),
    (
        MaintenanceCategory.SURFACE_RESTORATION,
        AnyOf((
            at_most("psci", "restoration_psci_a"),
            AllOf((at_most("psci", "restoration_psci_b"), at_least("iri", "restoration_iri"))),
            at_most("psci", "restoration_psci_c"),
        )),
    ),
    (
        MaintenanceCategory.SKID_RESISTANCE,
        AnyOf((
            at_most("psci", "skid_psci_a"),
            AllOf((at_most("psci", "skid_psci_b"), at_most("csc", "skid_csc"))),
            AllOf((at_most("psci", "skid_psci_c"), at_most("mpd", "skid_mpd"))),
        )),
    ),
)

FALLBACK_CATEGORY = MaintenanceCategory.ROUTINE_MAINTENANCE


def evaluate(condition: Condition, segment: RoadSegment, parameters: MaintenanceParameters) -> bool:
    if isinstance(condition, Compare):
        value = getattr(segment, condition.field)
        limit = getattr(parameters, condition.threshold)
        return OPERATORS[condition.op](value, limit)
    if isinstance(condition, AllOf):
        return all(evaluate(term, segment, parameters) for term in condition.terms)
    if isinstance(condition, AnyOf):
        return any(evaluate(term, segment, parameters) for term in condition.terms)
    raise TypeError(f"Unknown condition node: {condition!r}")


def own_condition(category: MaintenanceCategory) -> Condition | None:
    """The category's own rule, or None for the fallback category."""
    for row_category, condition in DECISION_TABLE:
        if row_category == category:
            return condition
    return None


def preceding_conditions(category: MaintenanceCategory) -> list[Condition]:
    """Rules of every category that outranks `category`."""
    preceding = []
    for row_category, condition in DECISION_TABLE:
        if row_category == category:
            break
        preceding.append(condition)
    return preceding
