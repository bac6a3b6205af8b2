"""Tests for the column resolver."""

from __future__ import annotations

from kart_telemetry.telemetry.columns import (
    CHANNEL_SYNONYMS,
    REQUIRED_CHANNELS,
    clean_field,
    resolve_columns,
    split_fields,
)


def test_clean_field_strips_whitespace_and_quotes():
    assert clean_field('  "GPS Speed" ') == "GPS Speed"
    assert clean_field("'RPM'") == "RPM"
    assert clean_field("\tTime") == "Time"


def test_split_fields_cleans_every_field():
    assert split_fields('"Time", "Distance" ,Speed') == ["Time", "Distance", "Speed"]


def test_resolves_minimal_header():
    cols = resolve_columns(["Time", "Distance", "Speed"])
    assert cols == {"time": 0, "distance": 1, "speed": 2}


def test_first_candidate_wins_when_several_present():
    # "GPS Speed" is listed before "Speed"
    cols = resolve_columns(["Time", "Distance", "Speed", "GPS Speed"])
    assert cols["speed"] == 3


def test_distance_prefers_gps_distance_column():
    cols = resolve_columns(["Time", "Distance", "Distance on GPS Speed"])
    assert cols["distance"] == 2


def test_matching_is_case_sensitive():
    cols = resolve_columns(["Time", "Distance", "GPS SPEED"])
    assert "speed" not in cols


def test_quoted_headers_resolve():
    cols = resolve_columns(['"Time"', '"Distance"', '"GPS LatAcc"', "'RPM'"])
    assert cols["lateral_accel"] == 2
    assert cols["rpm"] == 3


def test_unmatched_channels_are_absent_not_errors():
    cols = resolve_columns(["Time", "Distance", "Mystery Channel"])
    assert set(cols) == {"time", "distance"}


def test_duplicate_header_uses_first_column():
    cols = resolve_columns(["Time", "Distance", "RPM", "RPM"])
    assert cols["rpm"] == 2


def test_alternate_vocabulary():
    cols = resolve_columns(["time", "distance", "T_Water", "T_Exhaust", "GPS_Satellites"])
    assert cols["water_temp"] == 2
    assert cols["exhaust_temp"] == 3
    assert cols["satellite_count"] == 4


def test_required_channels_are_in_synonym_table():
    channels = {name for name, _kind, _candidates in CHANNEL_SYNONYMS}
    assert REQUIRED_CHANNELS <= channels
