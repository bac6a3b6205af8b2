"""Lap segmentation: split a continuous sample stream into laps.

Two strategies, chosen by beacon availability:

* **Beacon-bounded**: lap boundaries are the recorded transponder crossing
  times.  The first sample at or after a crossing starts the next lap.
* **Heuristic**: without beacons, a lap ends where the odometer resets
  (distance goes backwards) or the clock jumps by more than ``lap_gap_s``.
  Candidate laps not longer than ``min_lap_duration_s`` are dropped (pit lane,
  partial out-laps) and the survivors are numbered 1, 2, 3, ... without gaps.
  If every candidate is too short, all samples form a single lap.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.models import Lap, TelemetryPoint

_logger = logging.getLogger(__name__)


class LapSegmenter:
    """Partition ordered samples into :class:`Lap` objects.

    Args:
        lap_gap_s: A time jump larger than this between consecutive samples
            closes the current lap (heuristic mode only).
        min_lap_duration_s: Heuristic candidates with ``duration <=`` this are
            discarded, not merged into a neighbour.
    """

    def __init__(self, lap_gap_s: float = 5.0, min_lap_duration_s: float = 10.0) -> None:
        self.lap_gap_s = lap_gap_s
        self.min_lap_duration_s = min_lap_duration_s

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> LapSegmenter:
        return cls(lap_gap_s=config.lap_gap_s, min_lap_duration_s=config.min_lap_duration_s)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def segment(
        self,
        points: Sequence[TelemetryPoint],
        beacon_times: Sequence[float] | None = None,
    ) -> list[Lap]:
        """Split *points* into laps; beacon mode when *beacon_times* is non-empty."""
        if not points:
            return []
        if beacon_times:
            return self.split_by_beacons(points, beacon_times)
        return self.split_by_heuristics(points)

    def split_by_beacons(
        self,
        points: Sequence[TelemetryPoint],
        beacon_times: Sequence[float],
    ) -> list[Lap]:
        """Close a lap each time the sample clock reaches the next beacon time.

        Every beacon-bounded lap is kept, however short.  A sample that passes
        several beacons at once closes at most one (non-empty) lap.
        """
        beacons = sorted(beacon_times)
        chunks: list[list[TelemetryPoint]] = []
        current: list[TelemetryPoint] = []
        next_beacon = 0

        for point in points:
            crossed = False
            while next_beacon < len(beacons) and point.time >= beacons[next_beacon]:
                next_beacon += 1
                crossed = True
            if crossed and current:
                chunks.append(current)
                current = []
            current.append(point)

        if current:
            chunks.append(current)

        return [Lap.from_points(n, chunk) for n, chunk in enumerate(chunks, start=1)]

    def split_by_heuristics(self, points: Sequence[TelemetryPoint]) -> list[Lap]:
        """Split on odometer resets / time gaps and drop short candidates."""
        candidates: list[list[TelemetryPoint]] = []
        current: list[TelemetryPoint] = []

        for i, point in enumerate(points):
            current.append(point)
            if i + 1 < len(points):
                nxt = points[i + 1]
                distance_reset = nxt.distance < point.distance
                time_gap = nxt.time - point.time > self.lap_gap_s
                if distance_reset or time_gap:
                    candidates.append(current)
                    current = []

        if current:
            candidates.append(current)

        laps: list[Lap] = []
        for chunk in candidates:
            duration = chunk[-1].time - chunk[0].time
            if duration <= self.min_lap_duration_s:
                _logger.debug(
                    "Dropping short lap candidate: %.3fs, %d samples starting at t=%.3f",
                    duration, len(chunk), chunk[0].time,
                )
                continue
            laps.append(Lap.from_points(len(laps) + 1, chunk))

        if not laps:
            # Nothing long enough: keep the whole stream rather than an empty session
            _logger.debug("All lap candidates too short; keeping %d samples as lap 1", len(points))
            laps.append(Lap.from_points(1, list(points)))
        return laps
