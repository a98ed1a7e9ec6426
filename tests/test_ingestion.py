"""Unit tests for dataset loading and seeding"""
import json

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from maintenance.ingestion import (
    load_segments,
    load_segments_json,
    segment_from_attributes,
    segments_from_attributes,
)
from maintenance.predicates import FieldSchema
from models.segment_models import RoadSurveySegment
from scripts.seed_segments import run_sync

from factories import SAMPLE_DATASET, make_segment


def test_sample_dataset_uses_legacy_keys():
    segments = load_segments(SAMPLE_DATASET)
    assert len(segments) == 20
    first = segments[0]
    assert first.region == "Galway"
    assert first.road_number == "R101"
    assert first.iri == 13.0


def test_json_accepts_current_keys(tmp_path):
    path = tmp_path / "network.json"
    path.write_text(json.dumps([
        {"id": "A-1", "region": "Meath", "iri": 2, "rut": 3, "psci": 8, "csc": 0.5, "mpd": 1.0, "length_m": 95.5},
    ]))
    [segment] = load_segments_json(path)
    assert segment.id == "A-1"
    assert segment.length_m == 95.5
    assert segment.road_number is None


def test_json_missing_measurement_is_rejected(tmp_path):
    path = tmp_path / "network.json"
    path.write_text(json.dumps([{"id": 1, "county": "Meath", "iri": 2}]))
    with pytest.raises(ValidationError):
        load_segments_json(path)


def test_csv_loading_skips_rows_without_region(tmp_path):
    path = tmp_path / "network.csv"
    path.write_text(
        "id,county,roadNumber,iri,rut,psci,csc,mpd\n"
        "1,Galway,R101,13,10,8,0.5,0.9\n"
        "2,,R101,1,1,9,0.9,1.5\n"
        "3,Meath,,1,1,9,0.6,1.5\n",
        encoding="utf-8",
    )
    segments = load_segments(path)
    assert [s.id for s in segments] == [1, 3]
    assert segments[1].road_number is None


def test_csv_rows_with_missing_measurements_are_skipped(tmp_path):
    path = tmp_path / "network.csv"
    path.write_text(
        "id,county,roadNumber,iri,rut,psci,csc,mpd\n"
        "1,Galway,R101,13,10,8,0.5,0.9\n"
        "2,Meath,,1,1,,0.6,1.5\n"
        "3,Meath,,1,1,9,n/a,1.5\n",
        encoding="utf-8",
    )
    assert [s.id for s in load_segments(path)] == [1]


def test_attributes_with_null_measurement_are_skipped():
    schema = FieldSchema.for_survey_year(2018)
    complete = {
        "OBJECTID": 1, "LA": "Galway", "Route": "R101", "Shape_Length": 100.0,
        "AIRI_2018": 2.0, "LRUT_2018": 3.0, "PSCI_Class_2018": 8, "CSC_Class_2018": 0.5, "MPD_2018": 1.0,
    }
    null_psci = {**complete, "OBJECTID": 2, "PSCI_Class_2018": None}
    missing_mpd = {k: v for k, v in complete.items() if k != "MPD_2018"}
    assert segment_from_attributes(null_psci, schema) is None
    segments = segments_from_attributes([complete, null_psci, missing_mpd], schema)
    assert [s.id for s in segments] == [1]


def test_segments_are_immutable():
    segment = make_segment()
    with pytest.raises(ValidationError):
        segment.iri = 5.0


def test_from_segment_rejects_unknown_survey_year():
    with pytest.raises(ValueError):
        RoadSurveySegment.from_segment(make_segment(), survey_year=2020)


def test_seed_replaces_table_contents(tmp_path):
    db_path = tmp_path / "seed.db"
    url = f"sqlite:///{db_path}"
    assert run_sync(SAMPLE_DATASET, url) == 20
    assert run_sync(SAMPLE_DATASET, url) == 20

    engine = create_engine(url)
    with Session(engine) as session:
        assert session.execute(select(func.count()).select_from(RoadSurveySegment)).scalar() == 20
        row = session.get(RoadSurveySegment, 1)
        assert row.local_authority == "Galway"
        assert row.airi_2018 == 13.0
        assert row.shape_length == 100.0
        assert row.to_attributes()["AIRI_2018"] == 13.0
    engine.dispose()


def test_seed_missing_dataset(tmp_path):
    assert run_sync(tmp_path / "missing.json", f"sqlite:///{tmp_path / 'x.db'}") == 0
