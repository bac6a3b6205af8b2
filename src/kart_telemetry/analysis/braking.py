"""Braking-zone detection.

A single left-to-right scan over one lap.  A zone opens on the first sample
that satisfies the braking condition and closes on the first later sample
that does not.  Two conditions are supported:

  - ``deceleration``: ``longitudinal_accel < -decel_threshold_g``
  - ``speed_drop``: the speed falls by more than ``speed_drop_kmh`` to the
    next sample *and* ``longitudinal_accel < -min_decel_g``

Samples missing ``speed`` or ``longitudinal_accel`` are skipped: they neither
open nor close a zone.
"""

from __future__ import annotations

from dataclasses import dataclass

from kart_telemetry.analysis.models import BrakingZone
from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.models import Lap, TelemetryPoint

DECELERATION = "deceleration"
SPEED_DROP = "speed_drop"


@dataclass
class _OpenZone:
    start_index: int
    start: TelemetryPoint
    entry_speed: float
    min_speed: float
    peak_deceleration: float

    def update(self, speed: float, lon_g: float) -> None:
        self.min_speed = min(self.min_speed, speed)
        self.peak_deceleration = max(self.peak_deceleration, abs(lon_g))

    def close(self, end_index: int, end: TelemetryPoint) -> BrakingZone:
        return BrakingZone(
            start_index=self.start_index,
            end_index=end_index,
            start_distance=self.start.distance,
            end_distance=end.distance,
            start_time=self.start.time,
            end_time=end.time,
            entry_speed=self.entry_speed,
            min_speed=self.min_speed,
            peak_deceleration=self.peak_deceleration,
        )


def _open(index: int, point: TelemetryPoint, speed: float, lon_g: float) -> _OpenZone:
    return _OpenZone(index, point, speed, speed, abs(lon_g))


class BrakingZoneDetector:
    """Find braking zones in a lap.

    Args:
        mode: ``"deceleration"`` or ``"speed_drop"`` (see module docstring).
        decel_threshold_g: Deceleration (G, positive) that opens a zone in
            ``deceleration`` mode.
        speed_drop_kmh: Sample-to-sample speed loss required in ``speed_drop`` mode.
        min_decel_g: Deceleration that must accompany the speed loss in
            ``speed_drop`` mode.

    A zone still open at the end of the lap is closed on the last usable sample.
    """

    def __init__(
        self,
        mode: str = DECELERATION,
        decel_threshold_g: float = 0.5,
        speed_drop_kmh: float = 5.0,
        min_decel_g: float = 0.3,
    ) -> None:
        if mode not in (DECELERATION, SPEED_DROP):
            raise ValueError(f"Unknown braking detection mode: {mode!r}")
        self.mode = mode
        self.decel_threshold_g = decel_threshold_g
        self.speed_drop_kmh = speed_drop_kmh
        self.min_decel_g = min_decel_g

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> BrakingZoneDetector:
        return cls(
            mode=config.braking_mode,
            decel_threshold_g=config.braking_decel_threshold_g,
            speed_drop_kmh=config.braking_speed_drop_kmh,
            min_decel_g=config.braking_min_decel_g,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(self, lap: Lap) -> list[BrakingZone]:
        """Return the braking zones of *lap* in track order.

        Raises:
            ValueError: If the lap has no samples.
        """
        if not lap.points:
            raise ValueError(f"Cannot detect braking zones: lap {lap.number} has no samples")
        if self.mode == SPEED_DROP:
            return self._scan_speed_drop(lap.points)
        return self._scan_deceleration(lap.points)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _scan_deceleration(self, points: tuple[TelemetryPoint, ...]) -> list[BrakingZone]:
        zones: list[BrakingZone] = []
        zone: _OpenZone | None = None
        last_valid = -1

        for i, p in enumerate(points):
            if p.speed is None or p.longitudinal_accel is None:
                continue
            last_valid = i
            if p.longitudinal_accel < -self.decel_threshold_g:
                if zone is None:
                    zone = _open(i, p, p.speed, p.longitudinal_accel)
                else:
                    zone.update(p.speed, p.longitudinal_accel)
            elif zone is not None:
                zones.append(zone.close(i, p))
                zone = None

        if zone is not None:
            zones.append(zone.close(last_valid, points[last_valid]))
        return zones

    def _scan_speed_drop(self, points: tuple[TelemetryPoint, ...]) -> list[BrakingZone]:
        zones: list[BrakingZone] = []
        zone: _OpenZone | None = None
        last_valid = -1

        for i in range(len(points) - 1):
            cur, nxt = points[i], points[i + 1]
            if cur.speed is None or nxt.speed is None or cur.longitudinal_accel is None:
                continue
            last_valid = i + 1
            braking = (
                nxt.speed - cur.speed < -self.speed_drop_kmh
                and cur.longitudinal_accel < -self.min_decel_g
            )
            if braking:
                if zone is None:
                    zone = _open(i, cur, cur.speed, cur.longitudinal_accel)
                else:
                    zone.update(cur.speed, cur.longitudinal_accel)
            elif zone is not None:
                zones.append(zone.close(i, cur))
                zone = None

        if zone is not None:
            zones.append(zone.close(last_valid, points[last_valid]))
        return zones
