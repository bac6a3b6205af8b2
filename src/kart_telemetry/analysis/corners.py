"""Corner detection from lateral acceleration.

A corner is open while ``|lateral_accel| > lateral_threshold_g`` (and, when
``max_speed_kmh`` is set, ``speed < max_speed_kmh``).  The apex is the
slowest sample of the open stretch; the exit speed is taken from the sample
that closes it.
"""

from __future__ import annotations

from dataclasses import dataclass

from kart_telemetry.analysis.models import Corner
from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.models import Lap, TelemetryPoint

RIGHT = "right"
LEFT = "left"


@dataclass
class _OpenCorner:
    start_index: int
    entry: TelemetryPoint
    entry_speed: float
    direction: str
    apex: TelemetryPoint
    apex_speed: float
    peak_lateral_g: float

    def update(self, p: TelemetryPoint, speed: float, lat_g: float) -> None:
        if speed < self.apex_speed:
            self.apex_speed = speed
            self.apex = p
        self.peak_lateral_g = max(self.peak_lateral_g, abs(lat_g))

    def close(self, end_index: int, end: TelemetryPoint, exit_speed: float) -> Corner:
        return Corner(
            start_index=self.start_index,
            end_index=end_index,
            entry_distance=self.entry.distance,
            exit_distance=end.distance,
            entry_speed=self.entry_speed,
            apex_speed=self.apex_speed,
            exit_speed=exit_speed,
            peak_lateral_g=self.peak_lateral_g,
            direction=self.direction,
            apex_distance=self.apex.distance,
            apex_lateral_g=abs(self.apex.lateral_accel or 0.0),
        )


class CornerDetector:
    """Detect corners in a lap.

    Args:
        lateral_threshold_g: |lateral G| above which the kart is cornering.
        max_speed_kmh: Optional speed gate; samples at or above it never count
            as cornering (filters fast sweepers).  ``None`` disables the gate.
    """

    def __init__(
        self,
        lateral_threshold_g: float = 0.8,
        max_speed_kmh: float | None = None,
    ) -> None:
        self.lateral_threshold_g = lateral_threshold_g
        self.max_speed_kmh = max_speed_kmh

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> CornerDetector:
        return cls(
            lateral_threshold_g=config.corner_lateral_threshold_g,
            max_speed_kmh=config.corner_max_speed_kmh,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(self, lap: Lap) -> list[Corner]:
        """Return the corners of *lap* in track order.

        Samples without ``speed`` or ``lateral_accel`` are skipped.  A corner
        still open at the end of the lap exits on the last usable sample.

        Raises:
            ValueError: If the lap has no samples.
        """
        if not lap.points:
            raise ValueError(f"Cannot detect corners: lap {lap.number} has no samples")

        corners: list[Corner] = []
        corner: _OpenCorner | None = None
        last_valid = -1

        for i, p in enumerate(lap.points):
            if p.speed is None or p.lateral_accel is None:
                continue
            last_valid = i
            if self._is_cornering(p.speed, p.lateral_accel):
                if corner is None:
                    direction = RIGHT if p.lateral_accel > 0 else LEFT
                    corner = _OpenCorner(
                        i, p, p.speed, direction, p, p.speed, abs(p.lateral_accel)
                    )
                else:
                    corner.update(p, p.speed, p.lateral_accel)
            elif corner is not None:
                corners.append(corner.close(i, p, p.speed))
                corner = None

        if corner is not None:
            end = lap.points[last_valid]
            corners.append(corner.close(last_valid, end, end.speed))
        return corners

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _is_cornering(self, speed: float, lat_g: float) -> bool:
        if abs(lat_g) <= self.lateral_threshold_g:
            return False
        return self.max_speed_kmh is None or speed < self.max_speed_kmh
