"""Tests for the metadata extractor."""

from __future__ import annotations

import datetime

import pytest

from kart_telemetry.telemetry.metadata import SessionMetadata, extract_metadata, parse_date


def test_track_line():
    meta = extract_metadata(["Track,Circuit Osona"])
    assert meta.track == "Circuit Osona"


def test_session_key_maps_to_track():
    meta = extract_metadata(["Session,Kartodromo Lucas Guerrero"])
    assert meta.track == "Kartodromo Lucas Guerrero"


def test_keys_are_case_insensitive():
    meta = extract_metadata(["RACER,Ana Lopez", "vehicle,Rotax Max"])
    assert meta.racer == "Ana Lopez"
    assert meta.vehicle == "Rotax Max"


def test_colon_separated_lines():
    meta = extract_metadata(["Racer: Ana Lopez", "Championship: Winter Cup"])
    assert meta.racer == "Ana Lopez"
    assert meta.championship == "Winter Cup"


def test_colon_value_keeps_its_commas():
    meta = extract_metadata(["Racer: Lopez, Ana", "Vehicle: Rotax, Max"])
    assert meta.racer == "Lopez, Ana"
    assert meta.vehicle == "Rotax, Max"


def test_session_name_is_separate_from_track():
    meta = extract_metadata(["Session,Osona", "Session Name,Heat 2"])
    assert meta.track == "Osona"
    assert meta.session_name == "Heat 2"


def test_values_are_cleaned_of_quotes():
    meta = extract_metadata(['"Track","  Circuit Osona "'])
    assert meta.track == "Circuit Osona"


def test_unknown_keys_and_short_lines_are_ignored():
    meta = extract_metadata(["Format,AiM CSV File", "just some text", "Time,10:47"])
    assert meta == SessionMetadata()


def test_empty_value_leaves_field_unset():
    meta = extract_metadata(["Vehicle,"])
    assert meta.vehicle is None


def test_later_line_overrides_earlier():
    meta = extract_metadata(["Track,Old Name", "Track,New Name"])
    assert meta.track == "New Name"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def test_date_spanning_several_comma_fields():
    meta = extract_metadata(["Date,Saturday, March 15, 2025"])
    assert meta.date == datetime.date(2025, 3, 15)


def test_quoted_date():
    meta = extract_metadata(['"Date","Saturday, March 15, 2025"'])
    assert meta.date == datetime.date(2025, 3, 15)


def test_colon_separated_date():
    meta = extract_metadata(["Date: Saturday, March 15, 2025"])
    assert meta.date == datetime.date(2025, 3, 15)


@pytest.mark.parametrize("raw", ["15/03/2025", "2025-03-15", ""])
def test_unparseable_date_is_unset_not_fatal(raw):
    meta = extract_metadata([f"Date,{raw}", "Track,Osona"])
    assert meta.date is None
    assert meta.track == "Osona"


def test_parse_date_format():
    assert parse_date("Sunday, June 1, 2025") == datetime.date(2025, 6, 1)
    assert parse_date("June 1 2025") is None
