"""Lap analysis: braking zones, corners, lap-to-lap delta and statistics."""

from kart_telemetry.analysis.braking import BrakingZoneDetector
from kart_telemetry.analysis.corners import CornerDetector
from kart_telemetry.analysis.delta import DeltaCalculator, cumulative_delta, interpolate_time
from kart_telemetry.analysis.models import (
    BrakingZone,
    Corner,
    DeltaPoint,
    LapStats,
    SessionStats,
)
from kart_telemetry.analysis.stats import format_lap_time, lap_stats, session_stats

__all__ = [
    "BrakingZone",
    "BrakingZoneDetector",
    "Corner",
    "CornerDetector",
    "DeltaCalculator",
    "DeltaPoint",
    "LapStats",
    "SessionStats",
    "cumulative_delta",
    "format_lap_time",
    "interpolate_time",
    "lap_stats",
    "session_stats",
]
