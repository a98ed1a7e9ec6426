"""
predicates.py - SQL WHERE clauses equivalent to the classifier

Renders the decision table as boolean expressions a feature-query backend can
evaluate without custom code. Category k is selected by

    NOT (rule 1) AND ... AND NOT (rule k-1) AND (rule k)

and Routine Maintenance by the negation of all four rules. Thresholds are
interpolated as numeric literals and are not validated.
"""
from dataclasses import dataclass, field

from config import SURVEY_YEAR
from .rules import AllOf, AnyOf, Compare, Condition, own_condition, preceding_conditions
from .schemas import (
    CATEGORIES,
    MaintenanceCategory,
    MaintenanceParameters,
    RegionFilter,
    selected_regions,
)


MATCH_ALL = "1=1"


@dataclass(frozen=True)
class FieldSchema:
    """Column names of the external road survey layer."""
    region: str = "LA"
    object_id: str = "OBJECTID"
    route: str = "Route"
    length: str = "Shape_Length"
    measurements: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_survey_year(cls, year: int) -> "FieldSchema":
        return cls(measurements={
            "iri": f"AIRI_{year}",
            "rut": f"LRUT_{year}",
            "psci": f"PSCI_Class_{year}",
            "csc": f"CSC_Class_{year}",
            "mpd": f"MPD_{year}",
        })

    def column(self, segment_field: str) -> str:
        return self.measurements[segment_field]


DEFAULT_SCHEMA = FieldSchema.for_survey_year(SURVEY_YEAR)


def number_literal(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def string_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def render(condition: Condition, parameters: MaintenanceParameters, schema: FieldSchema = DEFAULT_SCHEMA) -> str:
    if isinstance(condition, Compare):
        threshold = getattr(parameters, condition.threshold)
        return f"{schema.column(condition.field)} {condition.op} {number_literal(threshold)}"
    if isinstance(condition, AllOf):
        return "(" + " AND ".join(render(t, parameters, schema) for t in condition.terms) + ")"
    if isinstance(condition, AnyOf):
        return "(" + " OR ".join(render(t, parameters, schema) for t in condition.terms) + ")"
    raise TypeError(f"Unknown condition node: {condition!r}")


def category_predicate(
    category: MaintenanceCategory,
    parameters: MaintenanceParameters,
    schema: FieldSchema = DEFAULT_SCHEMA,
) -> str:
    clauses = [f"NOT {render(c, parameters, schema)}" for c in preceding_conditions(category)]
    own = own_condition(category)
    if own is not None:
        clauses.append(render(own, parameters, schema))
    if len(clauses) == 1:
        return clauses[0]
    return "(" + " AND ".join(clauses) + ")"


def all_category_predicates(
    parameters: MaintenanceParameters,
    schema: FieldSchema = DEFAULT_SCHEMA,
) -> dict[MaintenanceCategory, str]:
    return {category: category_predicate(category, parameters, schema) for category in CATEGORIES}


def region_predicate(region_filter: RegionFilter | None, schema: FieldSchema = DEFAULT_SCHEMA) -> str:
    regions = selected_regions(region_filter)
    if regions is None:
        return MATCH_ALL
    if len(regions) == 1:
        return f"{schema.region} = {string_literal(regions[0])}"
    return f"{schema.region} IN ({', '.join(string_literal(r) for r in regions)})"


def combined_predicate(
    parameters: MaintenanceParameters,
    region_filter: RegionFilter | None,
    category: MaintenanceCategory | None = None,
    schema: FieldSchema = DEFAULT_SCHEMA,
) -> str:
    """Region filter AND category rule; the region filter alone without a category."""
    region = region_predicate(region_filter, schema)
    if category is None:
        return region
    rule = category_predicate(category, parameters, schema)
    if region == MATCH_ALL:
        return rule
    return f"{region} AND {rule}"
