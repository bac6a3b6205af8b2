"""Telemetry data models."""

from __future__ import annotations

import datetime
import math
import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TelemetryPoint:
    """A single sample from the kart data logger.

    ``time`` and ``distance`` are always present.  Every other channel is
    ``None`` when the export does not carry it or the field failed to parse;
    absent values are never replaced by 0.
    """

    time: float
    """Seconds since session start."""

    distance: float
    """Metres since session start."""

    speed: float | None = None
    """GPS speed in km/h."""

    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    """Metres."""

    satellite_count: int | None = None
    heading: float | None = None
    """Degrees."""

    position_accuracy: float | None = None
    """Metres."""

    speed_accuracy: float | None = None
    """km/h."""

    lateral_accel: float | None = None
    """Lateral acceleration in G.  Positive = right-hand corner."""

    longitudinal_accel: float | None = None
    """Longitudinal acceleration in G.  Negative = braking."""

    slope: float | None = None
    """Track slope in %."""

    yaw_rate: float | None = None
    """deg/s."""

    turn_radius: float | None = None
    """Metres."""

    rpm: int | None = None
    exhaust_temp: float | None = None
    """°C."""

    water_temp: float | None = None
    """°C."""

    accel_x: float | None = None
    accel_y: float | None = None
    accel_z: float | None = None
    gyro_x: float | None = None
    gyro_y: float | None = None
    gyro_z: float | None = None
    logger_temp: float | None = None
    """Logger internal temperature, °C."""

    battery_voltage: float | None = None
    """Internal battery, volts."""

    @property
    def g_force(self) -> float | None:
        """Combined lateral/longitudinal G, or ``None`` if either is absent."""
        if self.lateral_accel is None or self.longitudinal_accel is None:
            return None
        return math.hypot(self.lateral_accel, self.longitudinal_accel)

    @property
    def coordinate(self) -> tuple[float, float] | None:
        """``(latitude, longitude)`` when both are present."""
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    @property
    def has_valid_gps(self) -> bool:
        """True if both coordinates are present and neither is exactly 0."""
        return (
            self.latitude is not None
            and self.longitude is not None
            and self.latitude != 0
            and self.longitude != 0
        )


@dataclass(frozen=True)
class Lap:
    """One lap: an ordered, non-empty run of samples.

    ``duration`` is ``points[-1].time - points[0].time`` for laps produced by
    :class:`~kart_telemetry.telemetry.segmenter.LapSegmenter`.
    """

    number: int
    """1-based lap number, sequential within the session."""

    duration: float
    """Lap time in seconds."""

    points: tuple[TelemetryPoint, ...]

    @classmethod
    def from_points(cls, number: int, points: list[TelemetryPoint]) -> Lap:
        """Build a lap whose duration spans its first to last sample."""
        pts = tuple(points)
        duration = pts[-1].time - pts[0].time if pts else 0.0
        return cls(number=number, duration=duration, points=pts)

    @property
    def start_time(self) -> float:
        return self.points[0].time

    @property
    def end_time(self) -> float:
        return self.points[-1].time


@dataclass(frozen=True)
class Session:
    """A parsed export: metadata plus laps in lap-number order."""

    laps: tuple[Lap, ...]
    date: datetime.date | None = None
    track: str | None = None
    racer: str | None = None
    vehicle: str | None = None
    championship: str | None = None
    session_name: str | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    """Random identifier for storage collaborators; not derived from the data."""

    @property
    def lap_count(self) -> int:
        return len(self.laps)

    @property
    def best_lap(self) -> Lap | None:
        """Shortest lap (first one on ties), ``None`` for a session without laps."""
        return min(self.laps, key=lambda lap: lap.duration, default=None)

    def get_lap(self, number: int) -> Lap | None:
        """Return the lap with lap number *number*, or ``None``."""
        for lap in self.laps:
            if lap.number == number:
                return lap
        return None

    def all_points(self) -> list[TelemetryPoint]:
        """All samples of all laps, flattened in lap order."""
        return [p for lap in self.laps for p in lap.points]
