"""Telemetry ingestion: CSV export → samples → laps.

Public API
----------
TelemetryPoint      - single logger sample (immutable)
Lap / Session       - segmented laps and the parsed session
CSVSessionParser    - export bytes → Session (or ParseResult with diagnostics)
LapSegmenter        - ordered samples → laps (beacon or heuristic)
SampleDecoder       - one CSV row → TelemetryPoint
resolve_columns     - header text → canonical channel indices
extract_metadata    - preamble lines → SessionMetadata
ParseError          - base of InvalidFormatError / MissingHeadersError / NoValidDataError
"""

from kart_telemetry.telemetry.columns import CHANNEL_SYNONYMS, resolve_columns
from kart_telemetry.telemetry.csv_parser import (
    CSVSessionParser,
    InvalidFormatError,
    MissingHeadersError,
    NoValidDataError,
    ParseError,
    ParseResult,
)
from kart_telemetry.telemetry.decoder import RowRejected, SampleDecoder
from kart_telemetry.telemetry.metadata import SessionMetadata, extract_metadata
from kart_telemetry.telemetry.models import Lap, Session, TelemetryPoint
from kart_telemetry.telemetry.segmenter import LapSegmenter

__all__ = [
    "CHANNEL_SYNONYMS",
    "CSVSessionParser",
    "InvalidFormatError",
    "Lap",
    "LapSegmenter",
    "MissingHeadersError",
    "NoValidDataError",
    "ParseError",
    "ParseResult",
    "RowRejected",
    "SampleDecoder",
    "Session",
    "SessionMetadata",
    "TelemetryPoint",
    "extract_metadata",
    "resolve_columns",
]
