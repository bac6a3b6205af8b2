"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from kart_telemetry.web.app import app

LAP_STARTS = (0, 30, 62)
LAST_TIME = 95


def _row(t: int) -> str:
    start = max(s for s in LAP_STARTS if s <= t)
    tau = t - start
    lon_g = -0.9 if tau in (10, 11) else 0.1
    lat_g = 1.1 if tau in (15, 16, 17) else 0.2
    speed = 70 - 10 * (tau in (11, 12)) - 15 * (tau == 16)
    return f"{t},{tau * 12.0},{speed},{10500 + tau * 50},{lat_g},{lon_g}"


def make_export() -> bytes:
    """Three beacon-bounded laps (29 s, 31 s, 33 s), each with one braking zone and one corner."""
    lines = [
        "Format,AiM CSV File",
        "Track,Circuit Osona",
        "Racer,Ana Lopez",
        "Date,Saturday, March 15, 2025",
        "Beacon Markers,30.0,62.0",
        "",
        "Time,Distance on GPS Speed,GPS Speed,RPM,GPS LatAcc,GPS LonAcc",
        "s,m,km/h,rpm,g,g",
    ]
    lines += [_row(t) for t in range(LAST_TIME + 1)]
    lines.append("garbage,row")
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def export_bytes() -> bytes:
    return make_export()
