"""SampleDecoder — converts one split CSV row to a TelemetryPoint."""

from __future__ import annotations

import math

from kart_telemetry.telemetry.columns import CHANNEL_SYNONYMS, clean_field
from kart_telemetry.telemetry.models import TelemetryPoint

# Row rejection reasons (keys of ParseResult.skip_reasons)
FIELD_COUNT_MISMATCH = "field_count_mismatch"
MISSING_TIME = "missing_time"
MISSING_DISTANCE = "missing_distance"
INVALID_GPS_FIX = "invalid_gps_fix"


class RowRejected(Exception):
    """Raised by :meth:`SampleDecoder.decode` for a row that must be skipped."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def _parse_float(raw: str) -> float | None:
    """Plain decimal parse; ``None`` for empty, malformed or non-finite input."""
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_int(raw: str) -> int | None:
    """Plain integer parse; ``"12.0"`` is not an integer and gives ``None``."""
    try:
        return int(raw)
    except ValueError:
        return None


_PARSERS = {float: _parse_float, int: _parse_int}


class SampleDecoder:
    """Decodes data rows against one resolved header.

    Parameters
    ----------
    columns:
        ``{channel: column_index}`` from :func:`~kart_telemetry.telemetry.columns.resolve_columns`.
    field_count:
        Number of fields in the header row; rows of any other width are rejected.

    Optional channels degrade to ``None`` on a bad value; only a missing
    ``time`` / ``distance``, a wrong field count or a ``(0, 0)`` GPS fix
    reject the whole row.  The decoder holds no per-row state, so one instance
    can decode rows from several threads.
    """

    def __init__(self, columns: dict[str, int], field_count: int) -> None:
        self._field_count = field_count
        self._plan: tuple[tuple[str, int, type], ...] = tuple(
            (channel, columns[channel], kind)
            for channel, kind, _ in CHANNEL_SYNONYMS
            if channel in columns
        )

    def decode(self, fields: list[str]) -> TelemetryPoint:
        """Return a :class:`TelemetryPoint` for *fields* or raise :class:`RowRejected`."""
        if len(fields) != self._field_count:
            raise RowRejected(FIELD_COUNT_MISMATCH)

        kwargs: dict = {}
        for channel, idx, kind in self._plan:
            kwargs[channel] = _PARSERS[kind](clean_field(fields[idx]))

        if kwargs.get("time") is None:
            raise RowRejected(MISSING_TIME)
        if kwargs.get("distance") is None:
            raise RowRejected(MISSING_DISTANCE)

        # A fix is only judged when both coordinates decoded
        lat = kwargs.get("latitude")
        lon = kwargs.get("longitude")
        if lat is not None and lon is not None and lat == 0 and lon == 0:
            raise RowRejected(INVALID_GPS_FIX)

        return TelemetryPoint(**kwargs)
