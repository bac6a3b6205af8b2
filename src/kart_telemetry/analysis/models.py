"""Analysis result models.

All of these are derived from a lap's samples on demand and are never stored
on their own; re-run the detectors after re-parsing a file.
"""

from __future__ import annotations

from dataclasses import dataclass

_G = 9.81  # m/s² per G, as used for the apex radius estimate
_KPH_TO_MPS = 1 / 3.6


@dataclass(frozen=True)
class BrakingZone:
    """One braking zone within a lap.

    The zone opens on ``start_index`` and closes on ``end_index`` (the first
    sample that no longer satisfied the braking condition, or the last
    usable sample of the lap).
    """

    start_index: int
    end_index: int

    start_distance: float
    """Distance at the opening sample, metres."""

    end_distance: float
    """Distance at the closing sample, metres."""

    start_time: float
    end_time: float

    entry_speed: float
    """Speed at the opening sample, km/h."""

    min_speed: float
    """Lowest speed seen while the zone was open, km/h.  Always ``<= entry_speed``."""

    peak_deceleration: float
    """Largest |longitudinal G| seen while the zone was open."""

    @property
    def distance_span(self) -> float:
        return self.end_distance - self.start_distance

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def speed_loss(self) -> float:
        return self.entry_speed - self.min_speed

    @property
    def rating(self) -> str:
        """Coarse quality label from the peak deceleration."""
        if self.peak_deceleration > 1.2:
            return "Excellent"
        if self.peak_deceleration > 0.8:
            return "Good"
        return "Needs Improvement"


@dataclass(frozen=True)
class Corner:
    """One corner detected from lateral acceleration."""

    start_index: int
    end_index: int
    entry_distance: float
    exit_distance: float

    entry_speed: float
    """Speed when the corner opened, km/h."""

    apex_speed: float
    """Minimum speed while the corner was open, km/h."""

    exit_speed: float
    """Speed at the sample that closed the corner, km/h."""

    peak_lateral_g: float
    """Largest |lateral G| while the corner was open."""

    direction: str
    """``'right'`` if the triggering lateral G was positive, else ``'left'``."""

    apex_distance: float
    """Distance of the minimum-speed sample, metres."""

    apex_lateral_g: float
    """|lateral G| at the minimum-speed sample."""

    @property
    def apex_radius_m(self) -> float | None:
        """Turn radius estimate ``v² / (g · a_lat)`` at the apex, metres."""
        if self.apex_lateral_g <= 0:
            return None
        v = self.apex_speed * _KPH_TO_MPS
        return v * v / (_G * self.apex_lateral_g)


@dataclass(frozen=True)
class DeltaPoint:
    """Time delta between two laps at one lap distance.

    ``distance`` and the ``*_elapsed`` times are measured from the first sample
    of their lap.  ``delta > 0`` means the comparison lap is slower at this point.
    """

    distance: float
    """Distance from the start of the reference lap, metres."""

    delta: float
    """``comparison_elapsed - reference_elapsed``, seconds."""

    reference_elapsed: float
    comparison_elapsed: float

    reference_time: float
    """Session clock ``time`` of the reference sample, unchanged."""

    @property
    def is_gaining(self) -> bool:
        return self.delta < 0

    @property
    def is_losing(self) -> bool:
        return self.delta > 0


@dataclass(frozen=True)
class LapStats:
    """Per-lap channel statistics.

    A statistic is ``None`` when no sample of the lap carries the channel.
    """

    lap_number: int
    duration: float
    sample_count: int
    max_speed: float | None
    avg_speed: float | None
    min_speed: float | None
    max_rpm: int | None
    avg_rpm: float | None
    min_rpm: int | None
    max_lateral_g: float | None
    max_longitudinal_g: float | None
    peak_g_force: float | None
    avg_exhaust_temp: float | None
    avg_water_temp: float | None
    power_band_pct: float | None
    """Share of RPM-carrying samples inside the power band, 0-100."""


@dataclass(frozen=True)
class SessionStats:
    """Lap-time consistency summary for a whole session."""

    lap_count: int
    best_lap_number: int | None
    best_lap_time: float | None
    average_lap_time: float | None
    total_duration: float
    lap_time_std_dev: float
    consistency_score: float
    """0-100, higher is more consistent.  0 with fewer than two laps."""

    outlier_laps: tuple[int, ...]
    """Lap numbers slower than mean + 2 standard deviations."""

    avg_deviation_from_best: float
    total_distance: float
