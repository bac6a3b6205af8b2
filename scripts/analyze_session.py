"""Kart session report: parse a logger CSV export and print a lap analysis.

Usage:
  python scripts/analyze_session.py \\
      --file session.csv \\
      --lap 3 \\
      --ref-lap 1

Without --lap the best lap is analysed.  Thresholds come from KART_*
environment variables (or a .env file), see kart_telemetry.config.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from kart_telemetry.analysis.braking import BrakingZoneDetector
from kart_telemetry.analysis.corners import CornerDetector
from kart_telemetry.analysis.delta import DeltaCalculator, cumulative_delta
from kart_telemetry.analysis.stats import format_lap_time, lap_stats, session_stats
from kart_telemetry.config import load_config
from kart_telemetry.telemetry.csv_parser import CSVSessionParser, ParseError
from kart_telemetry.telemetry.models import Lap, Session


def _fmt(value: float | None, spec: str = ".1f") -> str:
    return "-" if value is None else format(value, spec)


def _pick_lap(session: Session, number: int | None, label: str) -> Lap:
    lap = session.best_lap if number is None else session.get_lap(number)
    if lap is None:
        print(f"  [!] {label} {number} not found ({session.lap_count} laps)", file=sys.stderr)
        sys.exit(1)
    return lap


def _print_session(session: Session, skipped: int, total: int) -> None:
    print(f"Track     : {session.track or '-'}")
    print(f"Racer     : {session.racer or '-'}")
    print(f"Vehicle   : {session.vehicle or '-'}")
    print(f"Session   : {session.session_name or '-'}")
    print(f"Date      : {session.date.isoformat() if session.date else '-'}")
    print(f"Rows      : {total - skipped} decoded / {skipped} skipped")
    print()


def _print_laps(session: Session, power_band: tuple[int, int]) -> None:
    best = session.best_lap
    print(f"{'Lap':>4}  {'Time':>10}  {'Samples':>7}  {'Vmax':>6}  {'Vavg':>6}  {'RPMmax':>6}  {'Band%':>5}")
    for lap in session.laps:
        s = lap_stats(lap, *power_band)
        marker = " *" if best is not None and lap.number == best.number else ""
        print(
            f"{lap.number:>4}  {format_lap_time(lap.duration):>10}  {s.sample_count:>7}  "
            f"{_fmt(s.max_speed):>6}  {_fmt(s.avg_speed):>6}  {_fmt(s.max_rpm, 'd'):>6}  "
            f"{_fmt(s.power_band_pct, '.0f'):>5}{marker}"
        )

    stats = session_stats(session)
    print()
    print(f"Best lap      : {stats.best_lap_number}  ({format_lap_time(stats.best_lap_time or 0.0)})")
    print(f"Consistency   : {stats.consistency_score:.1f} / 100  (std {stats.lap_time_std_dev:.3f}s)")
    if stats.outlier_laps:
        print(f"Outlier laps  : {', '.join(str(n) for n in stats.outlier_laps)}")
    print()


def main() -> None:
    ap = argparse.ArgumentParser(description="Analyse a kart data-logger CSV export")
    ap.add_argument("--file", required=True, help="CSV export path")
    ap.add_argument("--lap", type=int, default=None, help="Lap to analyse (default: best lap)")
    ap.add_argument("--ref-lap", type=int, default=None, help="Reference lap for the delta summary")
    ap.add_argument("--env-file", default=None, help="Optional .env file with KART_* overrides")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log skipped rows")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.env_file)

    try:
        result = CSVSessionParser.from_config(config).parse_detailed(Path(args.file).read_bytes())
    except (OSError, ParseError) as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)

    session = result.session
    _print_session(session, result.skipped_rows, result.total_rows)
    _print_laps(session, (config.power_band_min_rpm, config.power_band_max_rpm))

    lap = _pick_lap(session, args.lap, "Lap")

    # ------------------------------------------------------------------
    # Braking zones
    # ------------------------------------------------------------------
    zones = BrakingZoneDetector.from_config(config).detect(lap)
    print(f"Lap {lap.number}: {len(zones)} braking zones")
    for z in zones:
        print(
            f"  {z.start_distance:7.0f}m  {z.entry_speed:5.1f} -> {z.min_speed:5.1f} km/h  "
            f"{z.peak_deceleration:.2f}G  {z.duration:.2f}s  {z.rating}"
        )

    # ------------------------------------------------------------------
    # Corners
    # ------------------------------------------------------------------
    corners = CornerDetector.from_config(config).detect(lap)
    print(f"Lap {lap.number}: {len(corners)} corners")
    for c in corners:
        print(
            f"  {c.entry_distance:7.0f}m  {c.direction:<5}  apex {c.apex_speed:5.1f} km/h  "
            f"{c.peak_lateral_g:.2f}G  radius {_fmt(c.apex_radius_m)}m"
        )

    # ------------------------------------------------------------------
    # Delta
    # ------------------------------------------------------------------
    if args.ref_lap is not None:
        ref = _pick_lap(session, args.ref_lap, "Reference lap")
        calc = DeltaCalculator.from_config(config)
        deltas = calc.calculate(ref, lap)
        gains, losses = calc.significant_deltas(deltas)
        total = cumulative_delta(deltas)
        sign = "+" if total >= 0 else ""
        print()
        print(f"Delta lap {lap.number} vs {ref.number}: {sign}{total:.3f}s")
        for label, points in (("Gains", gains), ("Losses", losses)):
            for d in points:
                print(f"  {label:<6} {d.distance:7.0f}m  {d.delta:+.3f}s")


if __name__ == "__main__":
    main()
