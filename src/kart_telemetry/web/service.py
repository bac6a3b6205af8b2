"""SessionService: wraps parsing and analysis for the HTTP API."""

from __future__ import annotations

from kart_telemetry.analysis.braking import BrakingZoneDetector
from kart_telemetry.analysis.corners import CornerDetector
from kart_telemetry.analysis.delta import DeltaCalculator, cumulative_delta
from kart_telemetry.analysis.models import DeltaPoint, LapStats
from kart_telemetry.analysis.stats import format_lap_time, lap_stats, session_stats
from kart_telemetry.config import AnalysisConfig, load_config
from kart_telemetry.telemetry.csv_parser import CSVSessionParser, ParseResult
from kart_telemetry.telemetry.models import Lap, Session
from kart_telemetry.web.schemas import (
    BrakingZoneOut,
    CornerOut,
    DeltaPointOut,
    DeltaResponse,
    LapEventsResponse,
    LapStatsOut,
    LapSummary,
    ParseDiagnostics,
    ParseResponse,
    SessionInfo,
    SessionStatsOut,
)


class LapNotFoundError(LookupError):
    """Requested lap number does not exist in the parsed session."""


class SessionService:
    """Stateless façade: every call re-parses the export bytes it is given.

    Parameters
    ----------
    config:
        Threshold configuration.  Defaults to :func:`load_config` (``KART_*``
        environment variables over the built-in defaults).
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self.config = config if config is not None else load_config()
        self._parser = CSVSessionParser.from_config(self.config)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def summarize(self, data: bytes) -> ParseResponse:
        """Parse *data* and summarise the session and every lap.

        Raises
        ------
        ParseError
            If the export cannot be parsed.
        """
        result = self._parser.parse_detailed(data)
        session = result.session
        best = session.best_lap
        stats = session_stats(session)

        return ParseResponse(
            session=_session_info(session),
            laps=[self._lap_summary(lap) for lap in session.laps],
            best_lap=best.number if best is not None else None,
            stats=SessionStatsOut(
                lap_count=stats.lap_count,
                best_lap_number=stats.best_lap_number,
                best_lap_time=stats.best_lap_time,
                average_lap_time=stats.average_lap_time,
                total_duration=stats.total_duration,
                lap_time_std_dev=stats.lap_time_std_dev,
                consistency_score=stats.consistency_score,
                outlier_laps=list(stats.outlier_laps),
                avg_deviation_from_best=stats.avg_deviation_from_best,
                total_distance=stats.total_distance,
            ),
            diagnostics=_diagnostics(result),
        )

    def lap_events(self, data: bytes, lap_number: int) -> LapEventsResponse:
        """Braking zones and corners of one lap.

        Raises
        ------
        ParseError
            If the export cannot be parsed.
        LapNotFoundError
            If *lap_number* is not in the session.
        """
        lap = _require_lap(self._parser.parse(data), lap_number)
        zones = BrakingZoneDetector.from_config(self.config).detect(lap)
        corners = CornerDetector.from_config(self.config).detect(lap)

        return LapEventsResponse(
            lap_number=lap.number,
            braking_zones=[
                BrakingZoneOut(
                    start_index=z.start_index,
                    end_index=z.end_index,
                    start_distance=z.start_distance,
                    end_distance=z.end_distance,
                    duration=z.duration,
                    entry_speed=z.entry_speed,
                    min_speed=z.min_speed,
                    peak_deceleration=z.peak_deceleration,
                    rating=z.rating,
                )
                for z in zones
            ],
            corners=[
                CornerOut(
                    start_index=c.start_index,
                    end_index=c.end_index,
                    entry_distance=c.entry_distance,
                    exit_distance=c.exit_distance,
                    entry_speed=c.entry_speed,
                    apex_speed=c.apex_speed,
                    exit_speed=c.exit_speed,
                    peak_lateral_g=c.peak_lateral_g,
                    direction=c.direction,
                    apex_radius_m=c.apex_radius_m,
                )
                for c in corners
            ],
        )

    def delta(self, data: bytes, reference: int, comparison: int) -> DeltaResponse:
        """Distance-aligned delta of lap *comparison* against lap *reference*.

        Raises
        ------
        ParseError
            If the export cannot be parsed.
        LapNotFoundError
            If either lap is not in the session.
        """
        session = self._parser.parse(data)
        ref_lap = _require_lap(session, reference)
        comp_lap = _require_lap(session, comparison)

        calc = DeltaCalculator.from_config(self.config)
        deltas = calc.calculate(ref_lap, comp_lap)
        gains, losses = calc.significant_deltas(deltas)

        return DeltaResponse(
            reference_lap=reference,
            comparison_lap=comparison,
            deltas=[_delta_out(d) for d in deltas],
            cumulative_delta=cumulative_delta(deltas),
            gains=[_delta_out(d) for d in gains],
            losses=[_delta_out(d) for d in losses],
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _lap_summary(self, lap: Lap) -> LapSummary:
        stats = lap_stats(
            lap,
            power_band_min_rpm=self.config.power_band_min_rpm,
            power_band_max_rpm=self.config.power_band_max_rpm,
        )
        return LapSummary(
            number=lap.number,
            duration=lap.duration,
            formatted_time=format_lap_time(lap.duration),
            sample_count=len(lap.points),
            stats=_stats_out(stats),
        )


def _require_lap(session: Session, number: int) -> Lap:
    lap = session.get_lap(number)
    if lap is None:
        raise LapNotFoundError(
            f"Lap {number} not found (session has {session.lap_count} laps)"
        )
    return lap


def _session_info(session: Session) -> SessionInfo:
    return SessionInfo(
        session_id=session.session_id,
        track=session.track,
        racer=session.racer,
        vehicle=session.vehicle,
        championship=session.championship,
        session_name=session.session_name,
        date=session.date,
    )


def _diagnostics(result: ParseResult) -> ParseDiagnostics:
    return ParseDiagnostics(
        total_rows=result.total_rows,
        decoded_rows=result.decoded_rows,
        skipped_rows=result.skipped_rows,
        skip_reasons=dict(result.skip_reasons),
        beacon_count=len(result.beacon_times),
    )


def _stats_out(stats: LapStats) -> LapStatsOut:
    return LapStatsOut(
        max_speed=stats.max_speed,
        avg_speed=stats.avg_speed,
        min_speed=stats.min_speed,
        max_rpm=stats.max_rpm,
        avg_rpm=stats.avg_rpm,
        min_rpm=stats.min_rpm,
        max_lateral_g=stats.max_lateral_g,
        max_longitudinal_g=stats.max_longitudinal_g,
        peak_g_force=stats.peak_g_force,
        avg_exhaust_temp=stats.avg_exhaust_temp,
        avg_water_temp=stats.avg_water_temp,
        power_band_pct=stats.power_band_pct,
    )


def _delta_out(d: DeltaPoint) -> DeltaPointOut:
    return DeltaPointOut(
        distance=d.distance,
        delta=d.delta,
        reference_elapsed=d.reference_elapsed,
        comparison_elapsed=d.comparison_elapsed,
        reference_time=d.reference_time,
    )
