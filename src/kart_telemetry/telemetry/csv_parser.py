"""CSVSessionParser — end-to-end parse of a data-logger CSV export.

Expected (best-effort) file shape::

    <metadata lines: "Key,Value" or "Key: Value">    (0-13 lines)
    <optional: "Beacon Markers,t1,t2,t3,...">
    <header line: "Time,Distance,...">
    <units line>                                      (always skipped)
    <data line>*

Only three conditions abort a parse: undecodable bytes, no header row, and no
decodable data row.  Everything else (bad rows, missing channels, missing
beacon line or metadata) is absorbed and counted.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from kart_telemetry.config import AnalysisConfig
from kart_telemetry.telemetry.columns import clean_field, resolve_columns, split_fields
from kart_telemetry.telemetry.decoder import RowRejected, SampleDecoder
from kart_telemetry.telemetry.metadata import SessionMetadata, extract_metadata
from kart_telemetry.telemetry.models import Lap, Session, TelemetryPoint
from kart_telemetry.telemetry.segmenter import LapSegmenter

_logger = logging.getLogger(__name__)

_ENCODINGS = ("utf-8", "iso-8859-1", "ascii")
_BEACON_TOKEN = "beacon markers"
_TIME_HEADERS = frozenset({"time"})


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ParseError(Exception):
    """Base class for fatal parse failures."""


class InvalidFormatError(ParseError):
    """The byte stream could not be decoded as text."""


class MissingHeadersError(ParseError):
    """No header row starting with a time column was found."""


class NoValidDataError(ParseError):
    """The file has a header but not a single decodable data row."""


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class ParseResult:
    """A parsed :class:`Session` plus row-level diagnostics.

    ``decoded_rows + skipped_rows == total_rows`` always holds.
    """

    session: Session
    total_rows: int
    decoded_rows: int
    skip_reasons: dict[str, int] = field(default_factory=dict)
    beacon_times: list[float] = field(default_factory=list)

    @property
    def skipped_rows(self) -> int:
        return self.total_rows - self.decoded_rows


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def decode_text(data: bytes) -> str:
    """Decode *data* trying UTF-8, ISO-8859-1 then ASCII.

    Raises:
        InvalidFormatError: If no encoding accepts the bytes.
    """
    for encoding in _ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise InvalidFormatError("File is not valid UTF-8, ISO-8859-1 or ASCII text")


def parse_beacon_markers(line: str) -> list[float]:
    """Return the crossing times listed after the marker token, ascending.

    Tokens that are not numbers are ignored.
    """
    times: list[float] = []
    for token in line.split(",")[1:]:
        try:
            times.append(float(clean_field(token)))
        except ValueError:
            continue
    return sorted(times)


def find_beacon_line(lines: list[str]) -> int | None:
    """Index of the first line mentioning beacon markers, or ``None``."""
    for i, line in enumerate(lines):
        if _BEACON_TOKEN in line.lower():
            return i
    return None


def find_header_index(lines: list[str], min_columns: int = 3) -> int | None:
    """Index of the first line whose first field is a time column.

    The line must also have at least *min_columns* fields, so a short
    metadata line such as ``Time,10:47`` is not mistaken for the header.
    """
    for i, line in enumerate(lines):
        fields = line.split(",")
        if clean_field(fields[0]).lower() in _TIME_HEADERS and len(fields) >= min_columns:
            return i
    return None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class CSVSessionParser:
    """Parses logger CSV export bytes into a :class:`Session`.

    Args:
        segmenter: Lap segmenter to use; defaults to the canonical thresholds.
        metadata_line_limit: How many leading lines may hold metadata.
        header_min_columns: Minimum field count of the header row.

    The parser keeps no state between calls; one instance may be shared.
    """

    def __init__(
        self,
        segmenter: LapSegmenter | None = None,
        metadata_line_limit: int = 13,
        header_min_columns: int = 3,
    ) -> None:
        self.segmenter = segmenter or LapSegmenter()
        self.metadata_line_limit = metadata_line_limit
        self.header_min_columns = header_min_columns

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> CSVSessionParser:
        return cls(
            segmenter=LapSegmenter.from_config(config),
            metadata_line_limit=config.metadata_line_limit,
            header_min_columns=config.header_min_columns,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, data: bytes) -> Session:
        """Parse *data* and return the :class:`Session`.

        Raises:
            InvalidFormatError: Undecodable bytes.
            MissingHeadersError: No header row found.
            NoValidDataError: Zero valid data rows.
        """
        return self.parse_detailed(data).session

    def parse_detailed(self, data: bytes) -> ParseResult:
        """Like :meth:`parse` but also return row counts and skip reasons."""
        text = decode_text(data)
        lines = [ln.strip() for ln in text.splitlines()]
        lines = [ln for ln in lines if ln]

        beacon_times: list[float] = []
        beacon_idx = find_beacon_line(lines)
        if beacon_idx is not None:
            beacon_times = parse_beacon_markers(lines[beacon_idx])
            _logger.debug("Beacon markers on line %d: %d times", beacon_idx + 1, len(beacon_times))

        header_idx = find_header_index(lines, self.header_min_columns)
        if header_idx is None:
            raise MissingHeadersError("CSV header row not found (expected a line starting with 'Time')")

        # Metadata lives above the header only
        metadata = extract_metadata(lines[: min(self.metadata_line_limit, header_idx)])

        headers = split_fields(lines[header_idx])
        columns = resolve_columns(headers)
        decoder = SampleDecoder(columns, len(headers))

        # The line right after the header holds units
        data_lines = lines[header_idx + 2:]
        points, skip_reasons = self._decode_rows(decoder, data_lines)

        if not points:
            raise NoValidDataError(
                f"No valid telemetry data found ({len(data_lines)} data rows, all rejected)"
            )

        laps = self.segmenter.segment(points, beacon_times)
        session = self._build_session(metadata, laps)

        skipped = len(data_lines) - len(points)
        _logger.info(
            "Parsed %d samples (%d rows skipped) into %d laps",
            len(points), skipped, len(laps),
        )
        return ParseResult(
            session=session,
            total_rows=len(data_lines),
            decoded_rows=len(points),
            skip_reasons=skip_reasons,
            beacon_times=beacon_times,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _decode_rows(
        self,
        decoder: SampleDecoder,
        data_lines: list[str],
    ) -> tuple[list[TelemetryPoint], dict[str, int]]:
        points: list[TelemetryPoint] = []
        reasons: Counter[str] = Counter()
        for offset, line in enumerate(data_lines):
            try:
                points.append(decoder.decode(line.split(",")))
            except RowRejected as exc:
                reasons[exc.reason] += 1
                _logger.debug("Skipping data row %d: %s", offset + 1, exc.reason)
        return points, dict(reasons)

    @staticmethod
    def _build_session(metadata: SessionMetadata, laps: list[Lap]) -> Session:
        return Session(
            laps=tuple(laps),
            date=metadata.date,
            track=metadata.track,
            racer=metadata.racer,
            vehicle=metadata.vehicle,
            championship=metadata.championship,
            session_name=metadata.session_name,
        )
