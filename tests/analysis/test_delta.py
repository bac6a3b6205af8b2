"""Tests for DeltaCalculator and distance interpolation."""

from __future__ import annotations

import pytest

from kart_telemetry.analysis.delta import DeltaCalculator, cumulative_delta, interpolate_time
from kart_telemetry.analysis.models import DeltaPoint
from kart_telemetry.telemetry.models import Lap, TelemetryPoint

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------


def make_lap(number: int, times: list[float], distances: list[float]) -> Lap:
    points = [TelemetryPoint(time=t, distance=d) for t, d in zip(times, distances)]
    return Lap.from_points(number, points)


def make_deltas(values: list[float]) -> list[DeltaPoint]:
    return [
        DeltaPoint(
            distance=float(i),
            delta=v,
            reference_elapsed=float(i),
            comparison_elapsed=float(i) + v,
            reference_time=float(i),
        )
        for i, v in enumerate(values)
    ]


@pytest.fixture
def calc() -> DeltaCalculator:
    return DeltaCalculator()


# ---------------------------------------------------------------------------
# interpolate_time
# ---------------------------------------------------------------------------


class TestInterpolateTime:
    POINTS = make_lap(1, [0.0, 1.0, 3.0], [0.0, 10.0, 20.0]).points

    def test_linear_between_samples(self):
        assert interpolate_time(self.POINTS, 15.0) == pytest.approx(2.0)

    def test_exact_sample_distance(self):
        assert interpolate_time(self.POINTS, 10.0) == pytest.approx(1.0)

    def test_outside_range_uses_nearest_sample(self):
        assert interpolate_time(self.POINTS, -5.0) == pytest.approx(0.0)
        assert interpolate_time(self.POINTS, 50.0) == pytest.approx(3.0)

    def test_duplicate_distances_use_sample_time(self):
        points = make_lap(1, [0.0, 1.0, 2.0], [0.0, 10.0, 10.0]).points
        assert interpolate_time(points, 10.0) in (1.0, 2.0)

    def test_non_monotonic_distances(self):
        points = make_lap(1, [0.0, 1.0, 2.0, 3.0], [0.0, 20.0, 10.0, 30.0]).points
        # last d <= 15 is (2.0, 10), first d >= 15 is (1.0, 20)
        assert interpolate_time(points, 15.0) == pytest.approx(1.5)

    def test_empty_points_raise(self):
        with pytest.raises(ValueError):
            interpolate_time((), 1.0)


# ---------------------------------------------------------------------------
# DeltaCalculator.calculate
# ---------------------------------------------------------------------------


class TestCalculate:
    def test_lap_against_itself_is_zero(self, calc):
        lap = make_lap(1, [0.0, 0.4, 1.1, 1.9, 2.6], [0.0, 5.0, 12.0, 20.0, 27.0])
        deltas = calc.calculate(lap, lap)
        assert len(deltas) == len(lap.points)
        assert all(d.delta == pytest.approx(0.0) for d in deltas)

    def test_slower_comparison_gives_positive_delta(self, calc):
        ref = make_lap(1, [0.0, 1.0, 2.0], [0.0, 10.0, 20.0])
        comp = make_lap(2, [0.0, 1.5, 3.0], [0.0, 10.0, 20.0])

        deltas = calc.calculate(ref, comp)

        assert [d.delta for d in deltas] == pytest.approx([0.0, 0.5, 1.0])
        assert all(not d.is_gaining for d in deltas)
        assert deltas[-1].is_losing

    def test_one_point_per_reference_sample_in_order(self, calc):
        ref = make_lap(1, [0.0, 0.5, 1.0, 1.5], [0.0, 5.0, 10.0, 15.0])
        comp = make_lap(2, [0.0, 2.0], [0.0, 20.0])

        deltas = calc.calculate(ref, comp)

        assert [d.distance for d in deltas] == [0.0, 5.0, 10.0, 15.0]
        assert [d.comparison_elapsed for d in deltas] == pytest.approx([0.0, 0.5, 1.0, 1.5])

    def test_reference_beyond_comparison_uses_nearest(self, calc):
        ref = make_lap(1, [0.0, 1.0, 2.0], [0.0, 10.0, 30.0])
        comp = make_lap(2, [0.0, 1.2], [0.0, 12.0])
        deltas = calc.calculate(ref, comp)
        assert deltas[-1].comparison_elapsed == pytest.approx(1.2)

    def test_laps_on_one_session_clock_are_aligned(self, calc):
        # Lap 2 starts 40 s and 500 m into the session, and is 1 s slower at the line
        ref = make_lap(1, [0.0, 20.0, 40.0], [0.0, 250.0, 500.0])
        comp = make_lap(2, [40.0, 60.5, 81.0], [500.0, 750.0, 1000.0])

        deltas = calc.calculate(ref, comp)

        assert [d.distance for d in deltas] == [0.0, 250.0, 500.0]
        assert [d.delta for d in deltas] == pytest.approx([0.0, 0.5, 1.0])

    def test_elapsed_times_are_lap_relative(self, calc):
        ref = make_lap(2, [40.0, 60.0, 80.0], [500.0, 750.0, 1000.0])
        comp = make_lap(3, [80.0, 100.5, 121.0], [1000.0, 1250.0, 1500.0])

        deltas = calc.calculate(ref, comp)

        assert [d.reference_time for d in deltas] == pytest.approx([40.0, 60.0, 80.0])
        assert [d.reference_elapsed for d in deltas] == pytest.approx([0.0, 20.0, 40.0])
        assert [d.comparison_elapsed for d in deltas] == pytest.approx([0.0, 20.5, 41.0])

    def test_empty_comparison_raises(self, calc):
        ref = make_lap(1, [0.0, 1.0], [0.0, 10.0])
        empty = Lap(number=2, duration=0.0, points=())
        with pytest.raises(ValueError, match="comparison lap 2"):
            calc.calculate(ref, empty)

    def test_empty_reference_gives_empty_series(self, calc):
        comp = make_lap(2, [0.0, 1.0], [0.0, 10.0])
        assert calc.calculate(Lap(number=1, duration=0.0, points=()), comp) == []


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def test_cumulative_delta():
    assert cumulative_delta(make_deltas([0.0, 0.2, -0.1])) == pytest.approx(-0.1)
    assert cumulative_delta([]) == 0.0


def test_significant_deltas(calc):
    deltas = make_deltas([0.0, 0.05, 0.3, 0.35, 0.1, -0.2, -0.15])
    gains, losses = calc.significant_deltas(deltas)

    assert [d.delta for d in gains] == pytest.approx([-0.2, 0.1])
    assert [d.delta for d in losses] == pytest.approx([0.3])


def test_significant_deltas_truncated():
    calc = DeltaCalculator(significance_s=0.1, max_significant=2)
    deltas = make_deltas([0.0, 0.5, 1.0, 1.5, 2.0])
    _, losses = calc.significant_deltas(deltas)
    assert [d.delta for d in losses] == pytest.approx([2.0, 1.5])
