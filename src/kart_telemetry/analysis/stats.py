"""Per-lap channel statistics and session-level lap-time consistency."""

from __future__ import annotations

import math
from collections.abc import Iterable

from kart_telemetry.analysis.models import LapStats, SessionStats
from kart_telemetry.telemetry.models import Lap, Session


def _present(values: Iterable[float | int | None]) -> list:
    return [v for v in values if v is not None]


def _mean(values: list) -> float | None:
    return sum(values) / len(values) if values else None


def _max_abs(values: list) -> float | None:
    return max(abs(v) for v in values) if values else None


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def format_lap_time(seconds: float) -> str:
    """Format a lap time as ``M:SS.mmm``.

    >>> format_lap_time(65.4321)
    '1:05.432'
    """
    minutes, millis = divmod(int(round(seconds * 1000)), 60_000)
    return "%d:%02d.%03d" % (minutes, millis // 1000, millis % 1000)


def lap_stats(
    lap: Lap,
    power_band_min_rpm: int = 10000,
    power_band_max_rpm: int = 13500,
) -> LapStats:
    """Aggregate the channels of one lap.

    Absent values are left out of every aggregate; a statistic whose channel
    is absent on all samples is ``None``.

    Raises:
        ValueError: If the lap has no samples.
    """
    if not lap.points:
        raise ValueError(f"Cannot compute statistics: lap {lap.number} has no samples")

    speeds = _present(p.speed for p in lap.points)
    rpms = _present(p.rpm for p in lap.points)
    lat = _present(p.lateral_accel for p in lap.points)
    lon = _present(p.longitudinal_accel for p in lap.points)
    g_forces = _present(p.g_force for p in lap.points)

    power_band_pct = None
    if rpms:
        in_band = sum(1 for r in rpms if power_band_min_rpm <= r <= power_band_max_rpm)
        power_band_pct = 100.0 * in_band / len(rpms)

    return LapStats(
        lap_number=lap.number,
        duration=lap.duration,
        sample_count=len(lap.points),
        max_speed=max(speeds) if speeds else None,
        avg_speed=_mean(speeds),
        min_speed=min(speeds) if speeds else None,
        max_rpm=max(rpms) if rpms else None,
        avg_rpm=_mean(rpms),
        min_rpm=min(rpms) if rpms else None,
        max_lateral_g=_max_abs(lat),
        max_longitudinal_g=_max_abs(lon),
        peak_g_force=max(g_forces) if g_forces else None,
        avg_exhaust_temp=_mean(_present(p.exhaust_temp for p in lap.points)),
        avg_water_temp=_mean(_present(p.water_temp for p in lap.points)),
        power_band_pct=power_band_pct,
    )


def session_stats(session: Session) -> SessionStats:
    """Lap-time consistency summary over every lap of *session*.

    The standard deviation is the population one.  The consistency score is
    ``100 * (1 - 2 * std / mean)`` clamped to 0-100, and 0 with fewer than
    two laps.
    """
    laps = [lap for lap in session.laps if lap.points]
    if not laps:
        return SessionStats(
            lap_count=0,
            best_lap_number=None,
            best_lap_time=None,
            average_lap_time=None,
            total_duration=0.0,
            lap_time_std_dev=0.0,
            consistency_score=0.0,
            outlier_laps=(),
            avg_deviation_from_best=0.0,
            total_distance=0.0,
        )

    durations = [lap.duration for lap in laps]
    best = min(laps, key=lambda lap: lap.duration)
    mean = sum(durations) / len(durations)
    std = math.sqrt(sum((d - mean) ** 2 for d in durations) / len(durations))

    consistency = 0.0
    if len(laps) >= 2 and mean > 0:
        consistency = min(max(100.0 * (1.0 - 2.0 * std / mean), 0.0), 100.0)

    return SessionStats(
        lap_count=len(laps),
        best_lap_number=best.number,
        best_lap_time=best.duration,
        average_lap_time=mean,
        total_duration=sum(durations),
        lap_time_std_dev=std,
        consistency_score=consistency,
        outlier_laps=tuple(lap.number for lap in laps if lap.duration > mean + 2 * std),
        avg_deviation_from_best=sum(d - best.duration for d in durations) / len(durations),
        total_distance=max(lap.points[-1].distance for lap in laps),
    )
