"""Unit tests for remote (count-based) aggregation"""
import asyncio
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session

from maintenance.aggregation import aggregate
from maintenance.classifier import classify
from maintenance.errors import RemoteQueryError
from maintenance.ingestion import load_segments, segments_from_attributes
from maintenance.predicates import FieldSchema, category_predicate
from maintenance.remote import LengthMode, aggregate_remote
from maintenance.schemas import CATEGORIES, CostInputs, MaintenanceCategory as C, MaintenanceParameters
from maintenance.sources import SQLFeatureSource
from models.base import Base
from models.segment_models import RoadSurveySegment

from factories import SAMPLE_DATASET, make_segment, random_parameters, random_segment

DEFAULTS = MaintenanceParameters()
COSTS = CostInputs()
SCHEMA = FieldSchema.for_survey_year(2018)


def seed_table(db_path, segments, default_length_m=100.0):
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(RoadSurveySegment.from_segment(s, 2018, default_length_m) for s in segments)
        session.commit()
    engine.dispose()


def run_remote(db_path, *args, **kwargs):
    async def scenario():
        engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
        try:
            source = SQLFeatureSource(async_sessionmaker(engine, expire_on_commit=False))
            return await aggregate_remote(source, *args, schema=SCHEMA, **kwargs)
        finally:
            await engine.dispose()
    return asyncio.run(scenario())


def assert_results_match(remote, local):
    for category in CATEGORIES:
        assert remote.categories[category].segment_count == local.categories[category].segment_count
        assert remote.categories[category].length_km == pytest.approx(local.categories[category].length_km)
        assert remote.categories[category].cost == pytest.approx(local.categories[category].cost)
    assert remote.total_length_km == pytest.approx(local.total_length_km)
    assert remote.total_cost == pytest.approx(local.total_cost)


def test_remote_matches_local_on_sample_network(tmp_path):
    segments = load_segments(SAMPLE_DATASET)
    seed_table(tmp_path / "net.db", segments)
    for region in ("all", "Galway", ["Kildare", "Meath"], "Dún Laoghaire-Rathdown", "Nowhere"):
        remote = run_remote(tmp_path / "net.db", DEFAULTS, COSTS, region)
        assert_results_match(remote, aggregate(segments, DEFAULTS, COSTS, region))


@pytest.mark.parametrize("seed", range(5))
def test_remote_matches_local_on_random_network(tmp_path, seed):
    rng = random.Random(seed)
    segments = [random_segment(rng, i) for i in range(1, 151)]
    parameters = random_parameters(rng)
    seed_table(tmp_path / "net.db", segments)
    remote = run_remote(tmp_path / "net.db", parameters, COSTS, "all")
    assert_results_match(remote, aggregate(segments, parameters, COSTS, "all"))


def test_fixed_mode_cost_from_count(tmp_path):
    seed_table(tmp_path / "net.db", [make_segment(1, iri=13), make_segment(2, iri=13)])
    result = run_remote(tmp_path / "net.db", DEFAULTS, COSTS, "all")
    totals = result.categories[C.ROAD_RECONSTRUCTION]
    assert totals.segment_count == 2
    assert totals.length_km == pytest.approx(0.2)
    assert totals.cost == 2 * 100 * 7.5 * 60


def test_measured_mode_uses_shape_length(tmp_path):
    segments = [make_segment(1, iri=13, length_m=120.0), make_segment(2, iri=13, length_m=80.0),
                make_segment(3, length_m=250.0)]
    seed_table(tmp_path / "net.db", segments)
    result = run_remote(tmp_path / "net.db", DEFAULTS, COSTS, "all", LengthMode.MEASURED)
    assert result.categories[C.ROAD_RECONSTRUCTION].length_km == pytest.approx(0.2)
    assert result.categories[C.ROAD_RECONSTRUCTION].cost == pytest.approx(0.2 * 1000 * 7.5 * 60)
    assert result.categories[C.ROUTINE_MAINTENANCE].length_km == pytest.approx(0.25)
    assert result.total_length_km == pytest.approx(0.45)


def test_empty_table_gives_zero(tmp_path):
    seed_table(tmp_path / "net.db", [])
    result = run_remote(tmp_path / "net.db", DEFAULTS, COSTS, "all")
    assert result.total_length_km == 0 and result.total_cost == 0


def test_region_with_colon_is_not_a_bind_parameter(tmp_path):
    seed_table(tmp_path / "net.db", [make_segment(1, "Area:North", iri=13), make_segment(2, "Galway")])
    result = run_remote(tmp_path / "net.db", DEFAULTS, COSTS, "Area:North")
    assert result.total_segments == 1


class FailingSource:
    def __init__(self, fail_on: str):
        self.fail_on = fail_on
        self.queries = []

    async def query_count(self, where):
        self.queries.append(where)
        if self.fail_on in where:
            raise RemoteQueryError("backend unavailable", where)
        return 0

    async def query_length_sum(self, where):
        return 0.0

    async def query_features(self, where, limit=100):
        return []


def test_query_failure_propagates():
    source = FailingSource(fail_on="NOT")
    with pytest.raises(RemoteQueryError):
        asyncio.run(aggregate_remote(source, DEFAULTS, COSTS, "all", schema=SCHEMA))


def test_queries_are_issued_per_category():
    source = FailingSource(fail_on="never-matches")
    asyncio.run(aggregate_remote(source, DEFAULTS, COSTS, "Galway", schema=SCHEMA))
    assert len(source.queries) == len(CATEGORIES)
    assert all(q.startswith("LA = 'Galway' AND ") for q in source.queries)


def test_null_measurement_row_is_in_no_category(tmp_path):
    db_path = tmp_path / "net.db"
    seed_table(db_path, [make_segment(1, "Galway", iri=13)])
    engine = create_engine(f"sqlite:///{db_path}")
    with Session(engine) as session:
        row = RoadSurveySegment.from_segment(make_segment(2, "Galway"), 2018, 100.0)
        row.psci_class_2018 = None
        session.add(row)
        session.commit()
    engine.dispose()

    async def scenario():
        async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
        try:
            source = SQLFeatureSource(async_sessionmaker(async_engine, expire_on_commit=False))
            records = await source.query_features("1=1")
            rr_count = await source.query_count(category_predicate(C.ROAD_RECONSTRUCTION, DEFAULTS, SCHEMA))
            return records, rr_count
        finally:
            await async_engine.dispose()

    records, rr_count = asyncio.run(scenario())
    assert len(records) == 2
    listed = segments_from_attributes(records, SCHEMA)
    assert [s.id for s in listed] == [1]
    assert [classify(s, DEFAULTS) for s in listed] == [C.ROAD_RECONSTRUCTION]
    assert rr_count == 1
