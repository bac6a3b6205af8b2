"""Tests for SampleDecoder."""

from __future__ import annotations

import pytest

from kart_telemetry.telemetry.columns import resolve_columns
from kart_telemetry.telemetry.decoder import (
    FIELD_COUNT_MISMATCH,
    INVALID_GPS_FIX,
    MISSING_DISTANCE,
    MISSING_TIME,
    RowRejected,
    SampleDecoder,
)

HEADERS = ["Time", "Distance", "GPS Speed", "RPM", "GPS Latitude", "GPS Longitude", "GPS LatAcc"]


@pytest.fixture
def decoder() -> SampleDecoder:
    return SampleDecoder(resolve_columns(HEADERS), len(HEADERS))


def row(**overrides) -> list[str]:
    """Return a valid data row for HEADERS with selected fields replaced."""
    values = {
        "Time": "1.25",
        "Distance": "17.5",
        "GPS Speed": "62.3",
        "RPM": "11200",
        "GPS Latitude": "41.9012",
        "GPS Longitude": "2.2574",
        "GPS LatAcc": "-0.92",
    }
    values.update(overrides)
    return [values[h] for h in HEADERS]


# ---------------------------------------------------------------------------
# Valid rows
# ---------------------------------------------------------------------------


def test_decodes_all_resolved_channels(decoder):
    p = decoder.decode(row())
    assert p.time == pytest.approx(1.25)
    assert p.distance == pytest.approx(17.5)
    assert p.speed == pytest.approx(62.3)
    assert p.rpm == 11200
    assert p.latitude == pytest.approx(41.9012)
    assert p.longitude == pytest.approx(2.2574)
    assert p.lateral_accel == pytest.approx(-0.92)


def test_unresolved_channels_are_none(decoder):
    p = decoder.decode(row())
    assert p.water_temp is None
    assert p.longitudinal_accel is None


def test_quoted_values_are_cleaned(decoder):
    p = decoder.decode(row(**{"GPS Speed": '"58.0"'}))
    assert p.speed == pytest.approx(58.0)


# ---------------------------------------------------------------------------
# Degraded optional channels
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("raw", ["", "n/a", "1,5", "nan", "inf"])
def test_bad_optional_value_degrades_to_none(decoder, raw):
    p = decoder.decode(row(**{"GPS Speed": raw}))
    assert p.speed is None
    assert p.time == pytest.approx(1.25)


def test_integer_channel_rejects_decimal_text(decoder):
    p = decoder.decode(row(RPM="11200.0"))
    assert p.rpm is None


# ---------------------------------------------------------------------------
# Rejected rows
# ---------------------------------------------------------------------------


def test_field_count_mismatch_rejects_row(decoder):
    with pytest.raises(RowRejected) as exc_info:
        decoder.decode(row()[:-1])
    assert exc_info.value.reason == FIELD_COUNT_MISMATCH


def test_extra_field_rejects_row(decoder):
    with pytest.raises(RowRejected):
        decoder.decode(row() + ["extra"])


def test_missing_time_rejects_row(decoder):
    with pytest.raises(RowRejected) as exc_info:
        decoder.decode(row(Time=""))
    assert exc_info.value.reason == MISSING_TIME


def test_unparseable_distance_rejects_row(decoder):
    with pytest.raises(RowRejected) as exc_info:
        decoder.decode(row(Distance="abc"))
    assert exc_info.value.reason == MISSING_DISTANCE


def test_zero_zero_gps_fix_rejects_row(decoder):
    with pytest.raises(RowRejected) as exc_info:
        decoder.decode(row(**{"GPS Latitude": "0", "GPS Longitude": "0.0"}))
    assert exc_info.value.reason == INVALID_GPS_FIX


def test_single_zero_coordinate_is_kept(decoder):
    p = decoder.decode(row(**{"GPS Latitude": "0", "GPS Longitude": ""}))
    assert p.latitude == 0
    assert p.longitude is None
    assert not p.has_valid_gps


def test_header_without_distance_rejects_every_row():
    headers = ["Time", "Speed", "RPM"]
    decoder = SampleDecoder(resolve_columns(headers), len(headers))
    with pytest.raises(RowRejected) as exc_info:
        decoder.decode(["0.0", "50", "9000"])
    assert exc_info.value.reason == MISSING_DISTANCE
