"""Pydantic response schemas for the HTTP API."""

from __future__ import annotations

import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class SessionInfo(BaseModel):
    session_id: str
    track: str | None = None
    racer: str | None = None
    vehicle: str | None = None
    championship: str | None = None
    session_name: str | None = None
    date: datetime.date | None = None


class ParseDiagnostics(BaseModel):
    total_rows: int
    decoded_rows: int
    skipped_rows: int
    skip_reasons: dict[str, int]
    beacon_count: int


class LapStatsOut(BaseModel):
    max_speed: float | None = None
    avg_speed: float | None = None
    min_speed: float | None = None
    max_rpm: int | None = None
    avg_rpm: float | None = None
    min_rpm: int | None = None
    max_lateral_g: float | None = None
    max_longitudinal_g: float | None = None
    peak_g_force: float | None = None
    avg_exhaust_temp: float | None = None
    avg_water_temp: float | None = None
    power_band_pct: float | None = None


class LapSummary(BaseModel):
    number: int
    duration: float
    formatted_time: str
    sample_count: int
    stats: LapStatsOut


class SessionStatsOut(BaseModel):
    lap_count: int
    best_lap_number: int | None = None
    best_lap_time: float | None = None
    average_lap_time: float | None = None
    total_duration: float
    lap_time_std_dev: float
    consistency_score: float
    outlier_laps: list[int]
    avg_deviation_from_best: float
    total_distance: float


class ParseResponse(BaseModel):
    session: SessionInfo
    laps: list[LapSummary]
    best_lap: int | None = None
    stats: SessionStatsOut
    diagnostics: ParseDiagnostics


class BrakingZoneOut(BaseModel):
    start_index: int
    end_index: int
    start_distance: float
    end_distance: float
    duration: float
    entry_speed: float
    min_speed: float
    peak_deceleration: float
    rating: str


class CornerOut(BaseModel):
    start_index: int
    end_index: int
    entry_distance: float
    exit_distance: float
    entry_speed: float
    apex_speed: float
    exit_speed: float
    peak_lateral_g: float
    direction: str
    apex_radius_m: float | None = None


class LapEventsResponse(BaseModel):
    lap_number: int
    braking_zones: list[BrakingZoneOut]
    corners: list[CornerOut]


class DeltaPointOut(BaseModel):
    distance: float
    delta: float
    reference_elapsed: float
    comparison_elapsed: float
    reference_time: float


class DeltaResponse(BaseModel):
    reference_lap: int
    comparison_lap: int
    deltas: list[DeltaPointOut]
    cumulative_delta: float
    gains: list[DeltaPointOut]
    losses: list[DeltaPointOut]
