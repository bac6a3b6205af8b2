"""Distance-aligned time delta between two laps.

Both laps are measured from their own first sample (lap-relative distance and
elapsed time), so laps cut from one continuous session clock line up.  For
every reference sample the comparison lap's elapsed time at the same lap
distance is interpolated, giving ``delta = comparison_elapsed - reference_elapsed``
(positive = comparison slower at that point).
"""

from __future__ import annotations

import bisect
from collections.abc import Sequence

from kart_telemetry.analysis.models import DeltaPoint
from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.models import Lap, TelemetryPoint


def _is_sorted(values: list[float]) -> bool:
    return all(a <= b for a, b in zip(values, values[1:]))


def _interpolate(
    distances: list[float],
    times: list[float],
    monotonic: bool,
    distance: float,
) -> float:
    """Time at *distance* over the parallel *distances* / *times* series."""
    if monotonic:
        hi = bisect.bisect_left(distances, distance)
        lo = bisect.bisect_right(distances, distance) - 1
        before = lo if lo >= 0 else None
        after = hi if hi < len(distances) else None
    else:
        # last index with d <= distance, first index with d >= distance
        before = next((i for i in reversed(range(len(distances))) if distances[i] <= distance), None)
        after = next((i for i, d in enumerate(distances) if d >= distance), None)

    if before is None or after is None:
        nearest = min(range(len(distances)), key=lambda i: abs(distances[i] - distance))
        return times[nearest]
    if distances[before] == distance:
        return times[before]
    span = distances[after] - distances[before]
    if span == 0:
        return times[before]
    ratio = (distance - distances[before]) / span
    return times[before] + ratio * (times[after] - times[before])


def interpolate_time(points: Sequence[TelemetryPoint], distance: float) -> float:
    """Time at *distance*, linearly interpolated between bracketing samples.

    The bracket is the last sample with ``distance <= target`` and the first
    with ``distance >= target``.  Falls back to the nearest sample when the
    target lies outside the range covered by *points*.

    Raises:
        ValueError: If *points* is empty.
    """
    if not points:
        raise ValueError("Cannot interpolate time in an empty lap")
    distances = [p.distance for p in points]
    times = [p.time for p in points]
    return _interpolate(distances, times, _is_sorted(distances), distance)


def cumulative_delta(deltas: Sequence[DeltaPoint]) -> float:
    """Delta at the end of the lap (0.0 for an empty series)."""
    return deltas[-1].delta if deltas else 0.0


class DeltaCalculator:
    """Compute the time delta of a comparison lap against a reference lap.

    Args:
        significance_s: Minimum sample-to-sample change in delta reported by
            :meth:`significant_deltas`.
        max_significant: How many gains / losses :meth:`significant_deltas` keeps.
    """

    def __init__(self, significance_s: float = 0.1, max_significant: int = 5) -> None:
        self.significance_s = significance_s
        self.max_significant = max_significant

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> DeltaCalculator:
        return cls(significance_s=config.delta_significance_s)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(self, reference: Lap, comparison: Lap) -> list[DeltaPoint]:
        """Return one :class:`DeltaPoint` per reference sample, in reference order.

        Raises:
            ValueError: If *comparison* has no samples.
        """
        if not comparison.points:
            raise ValueError(
                f"Cannot compute delta: comparison lap {comparison.number} has no samples"
            )
        if not reference.points:
            return []

        comp_d0 = comparison.points[0].distance
        comp_t0 = comparison.points[0].time
        comp_distances = [p.distance - comp_d0 for p in comparison.points]
        comp_times = [p.time - comp_t0 for p in comparison.points]
        monotonic = _is_sorted(comp_distances)

        ref_d0 = reference.points[0].distance
        ref_t0 = reference.points[0].time
        result: list[DeltaPoint] = []
        for ref in reference.points:
            distance = ref.distance - ref_d0
            ref_time = ref.time - ref_t0
            comp_time = _interpolate(comp_distances, comp_times, monotonic, distance)
            result.append(DeltaPoint(
                distance=distance,
                delta=comp_time - ref_time,
                reference_elapsed=ref_time,
                comparison_elapsed=comp_time,
                reference_time=ref.time,
            ))
        return result

    def significant_deltas(
        self, deltas: Sequence[DeltaPoint]
    ) -> tuple[list[DeltaPoint], list[DeltaPoint]]:
        """Return ``(gains, losses)`` where the delta jumps between samples.

        A gain is a point where the delta dropped by more than
        ``significance_s`` since the previous point; a loss is the opposite.
        Both lists are sorted by |delta| descending and truncated.
        """
        gains: list[DeltaPoint] = []
        losses: list[DeltaPoint] = []
        for prev, cur in zip(deltas, deltas[1:]):
            change = cur.delta - prev.delta
            if change < -self.significance_s:
                gains.append(cur)
            elif change > self.significance_s:
                losses.append(cur)

        gains.sort(key=lambda d: abs(d.delta), reverse=True)
        losses.sort(key=lambda d: abs(d.delta), reverse=True)
        return gains[: self.max_significant], losses[: self.max_significant]
