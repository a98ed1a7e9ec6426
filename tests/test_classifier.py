"""Unit tests for segment classification"""
import pytest

from maintenance.classifier import available_regions, classify, classify_segments
from maintenance.schemas import MaintenanceCategory as C, MaintenanceParameters

from factories import make_segment

DEFAULTS = MaintenanceParameters()


def test_high_iri_alone_triggers_reconstruction():
    s = make_segment(iri=13, rut=10, psci=8, csc=0.5, mpd=0.9)
    assert classify(s, DEFAULTS) == C.ROAD_RECONSTRUCTION


def test_good_segment_is_routine_maintenance():
    s = make_segment(iri=1, rut=1, psci=9, csc=0.9, mpd=1.5)
    assert classify(s, DEFAULTS) == C.ROUTINE_MAINTENANCE


@pytest.mark.parametrize(
    "measurements, expected",
    [
        ({"rut": 40}, C.ROAD_RECONSTRUCTION),
        ({"psci": 2}, C.ROAD_RECONSTRUCTION),
        ({"iri": 7}, C.STRUCTURAL_OVERLAY),
        ({"rut": 20}, C.STRUCTURAL_OVERLAY),
        ({"psci": 4}, C.STRUCTURAL_OVERLAY),
        ({"psci": 5}, C.SURFACE_RESTORATION),
        ({"psci": 6, "iri": 6}, C.SURFACE_RESTORATION),
        ({"psci": 7}, C.SURFACE_RESTORATION),
        ({"psci": 8, "csc": 0.35}, C.SKID_RESISTANCE),
        ({"psci": 9, "mpd": 0.7}, C.SKID_RESISTANCE),
    ],
)
def test_thresholds_are_inclusive(measurements, expected):
    values = {"iri": 1, "rut": 1, "psci": 9, "csc": 0.9, "mpd": 1.5, **measurements}
    assert classify(make_segment(**values), DEFAULTS) == expected


def test_just_outside_thresholds_falls_through():
    s = make_segment(iri=6.99, rut=19.99, psci=9, csc=0.36, mpd=0.71)
    assert classify(s, DEFAULTS) == C.ROUTINE_MAINTENANCE


def test_surface_restoration_psci_c_catches_low_iri():
    s = make_segment(iri=5.5, psci=6)
    assert classify(s, DEFAULTS) == C.SURFACE_RESTORATION
    # without the psci_c catch-all, psci 6 with low iri drops to the skid rule
    assert classify(s, DEFAULTS.with_updates(restoration_psci_c=5)) == C.SKID_RESISTANCE


def test_reconstruction_outranks_overlay():
    s = make_segment(iri=12.5, rut=25, psci=3)
    assert classify(s, DEFAULTS) == C.ROAD_RECONSTRUCTION


def test_overlay_outranks_surface_restoration():
    s = make_segment(iri=8, psci=5)
    assert classify(s, DEFAULTS) == C.STRUCTURAL_OVERLAY


def test_surface_restoration_outranks_skid_resistance():
    s = make_segment(psci=5, csc=0.1, mpd=0.1)
    assert classify(s, DEFAULTS) == C.SURFACE_RESTORATION


def test_parameter_change_moves_segment():
    s = make_segment(iri=10)
    assert classify(s, DEFAULTS) == C.STRUCTURAL_OVERLAY
    assert classify(s, DEFAULTS.with_updates(reconstruction_iri=10)) == C.ROAD_RECONSTRUCTION


def test_nan_measurement_is_deterministic():
    s = make_segment(iri=float("nan"), rut=1, psci=9, csc=0.9, mpd=1.5)
    assert classify(s, DEFAULTS) == classify(s, DEFAULTS) == C.ROUTINE_MAINTENANCE


def test_classify_segments_filters_region_and_category():
    segments = [
        make_segment(1, "Galway", iri=13),
        make_segment(2, "Galway"),
        make_segment(3, "Meath", iri=13),
    ]
    rows = list(classify_segments(segments, DEFAULTS, "Galway", C.ROAD_RECONSTRUCTION))
    assert [s.id for s, _ in rows] == [1]
    rows = list(classify_segments(segments, DEFAULTS, ["Galway", "Meath"]))
    assert [c for _, c in rows] == [C.ROAD_RECONSTRUCTION, C.ROUTINE_MAINTENANCE, C.ROAD_RECONSTRUCTION]


def test_available_regions_sorted_unique():
    segments = [make_segment(1, "Meath"), make_segment(2, "Galway"), make_segment(3, "Meath")]
    assert available_regions(segments) == ["Galway", "Meath"]
