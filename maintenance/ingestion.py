"""
ingestion.py - Load road survey segments from the static dataset or layer attributes

Records missing any of the five measurements are skipped. A SQL predicate
never matches a NULL measurement, so such a record belongs to no category.
"""
import csv
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from pydantic import TypeAdapter

from .predicates import DEFAULT_SCHEMA, FieldSchema
from .schemas import RoadSegment

logger = logging.getLogger(__name__)

_segment_list = TypeAdapter(list[RoadSegment])

MEASUREMENTS = ("iri", "rut", "psci", "csc", "mpd")


def parse_float(val, default=0.0):
    try:
        return float(val) if val not in (None, "") else default
    except (ValueError, TypeError):
        return default


def _measurements(lookup: Callable[[str], Any]) -> dict[str, float] | None:
    values = {name: parse_float(lookup(name), None) for name in MEASUREMENTS}
    if any(v is None for v in values.values()):
        return None
    return values


def load_segments_json(path: Path) -> list[RoadSegment]:
    """Parse the static road network document (a JSON array of segments)."""
    segments = _segment_list.validate_json(Path(path).read_bytes())
    logger.info("Loaded %d segments from %s", len(segments), path)
    return segments


def load_segments_csv(path: Path) -> list[RoadSegment]:
    segments = []
    incomplete = 0
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            region = (row.get("region") or row.get("county") or "").strip()
            if not region:
                continue
            measurements = _measurements(row.get)
            if measurements is None:
                incomplete += 1
                continue
            segment_id = (row.get("id") or "").strip() or i + 1
            segments.append(RoadSegment(
                id=int(segment_id) if str(segment_id).isdigit() else segment_id,
                region=region,
                road_number=(row.get("road_number") or row.get("roadNumber") or "").strip() or None,
                length_m=parse_float(row.get("length_m"), None),
                **measurements,
            ))
    if incomplete:
        logger.warning("Skipped %d rows with missing measurements in %s", incomplete, path)
    logger.info("Loaded %d segments from %s", len(segments), path)
    return segments


def load_segments(path: Path) -> list[RoadSegment]:
    if Path(path).suffix.lower() == ".csv":
        return load_segments_csv(path)
    return load_segments_json(path)


def segment_from_attributes(
    attributes: dict[str, Any], schema: FieldSchema = DEFAULT_SCHEMA
) -> RoadSegment | None:
    """Map one feature-layer attribute record onto a RoadSegment, or None when a measurement is NULL."""
    measurements = _measurements(lambda name: attributes.get(schema.column(name)))
    if measurements is None:
        return None
    route = attributes.get(schema.route)
    return RoadSegment(
        id=attributes[schema.object_id],
        region=str(attributes.get(schema.region) or ""),
        road_number=str(route) if route is not None else None,
        length_m=parse_float(attributes.get(schema.length), None),
        **measurements,
    )


def segments_from_attributes(records: Iterable[dict[str, Any]], schema: FieldSchema = DEFAULT_SCHEMA) -> list[RoadSegment]:
    segments = []
    incomplete = 0
    for record in records:
        segment = segment_from_attributes(record, schema)
        if segment is None:
            incomplete += 1
        else:
            segments.append(segment)
    if incomplete:
        logger.warning("Skipped %d feature records with missing measurements", incomplete)
    return segments
