"""FastAPI application: a thin stateless layer over parsing and analysis.

Every endpoint except ``/health`` takes the raw export file as the request body.
"""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request

from kart_telemetry.telemetry.csv_parser import ParseError
from kart_telemetry.web.schemas import (
    DeltaResponse,
    HealthResponse,
    LapEventsResponse,
    ParseResponse,
)
from kart_telemetry.web.service import LapNotFoundError, SessionService

load_dotenv()  # loads .env from project root; must run before KART_* vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

_VERSION = "0.1.0"

app = FastAPI(title="Kart Telemetry", version=_VERSION)


async def _body(request: Request) -> bytes:
    data = await request.body()
    if not data:
        raise HTTPException(status_code=422, detail="Request body is empty")
    return data


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=_VERSION)


@app.post("/api/sessions/parse", response_model=ParseResponse)
async def parse_session(request: Request) -> ParseResponse:
    """Parse an export and return metadata, laps, statistics and diagnostics."""
    data = await _body(request)
    try:
        return SessionService().summarize(data)
    except (ParseError, ValueError) as exc:
        raise _unprocessable(exc) from exc


@app.post("/api/sessions/laps/{lap_number}/events", response_model=LapEventsResponse)
async def lap_events(lap_number: int, request: Request) -> LapEventsResponse:
    """Braking zones and corners of one lap."""
    data = await _body(request)
    try:
        return SessionService().lap_events(data, lap_number)
    except LapNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ParseError, ValueError) as exc:
        raise _unprocessable(exc) from exc


@app.post("/api/sessions/delta", response_model=DeltaResponse)
async def lap_delta(reference: int, comparison: int, request: Request) -> DeltaResponse:
    """Delta of lap ``comparison`` against lap ``reference``."""
    data = await _body(request)
    try:
        return SessionService().delta(data, reference, comparison)
    except LapNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ParseError, ValueError) as exc:
        raise _unprocessable(exc) from exc
