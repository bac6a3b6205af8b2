"""SessionService: configuration reaches every component."""

from __future__ import annotations

import pytest

from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.csv_parser import MissingHeadersError
from kart_telemetry.web.service import LapNotFoundError, SessionService


def test_default_thresholds(export_bytes):
    events = SessionService(AnalysisConfig()).lap_events(export_bytes, 1)
    assert len(events.braking_zones) == 1
    assert len(events.corners) == 1


def test_config_thresholds_are_applied(export_bytes):
    config = AnalysisConfig(braking_decel_threshold_g=1.0, corner_lateral_threshold_g=1.2)
    events = SessionService(config).lap_events(export_bytes, 1)
    assert events.braking_zones == []
    assert events.corners == []


def test_power_band_from_config(export_bytes):
    config = AnalysisConfig(power_band_min_rpm=0, power_band_max_rpm=20_000)
    summary = SessionService(config).summarize(export_bytes)
    assert all(lap.stats.power_band_pct == pytest.approx(100.0) for lap in summary.laps)


def test_unknown_lap_raises_lookup_error(export_bytes):
    with pytest.raises(LookupError):
        SessionService(AnalysisConfig()).delta(export_bytes, 1, 4)
    assert issubclass(LapNotFoundError, LookupError)


def test_parse_errors_propagate():
    with pytest.raises(MissingHeadersError):
        SessionService(AnalysisConfig()).summarize(b"nothing here\n")
