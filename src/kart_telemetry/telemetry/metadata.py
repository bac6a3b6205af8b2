"""Metadata extractor for the free-form ``key,value`` lines above the header row."""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from kart_telemetry.telemetry.columns import clean_field

# lower-cased key → SessionMetadata attribute (first match wins)
METADATA_KEYS: tuple[tuple[str, str], ...] = (
    ("session", "track"),
    ("track", "track"),
    ("racer", "racer"),
    ("vehicle", "vehicle"),
    ("championship", "championship"),
    ("session name", "session_name"),
    ("date", "date"),
)

DATE_FORMAT = "%A, %B %d, %Y"
"""Export date format, e.g. ``Saturday, March 15, 2025``."""


@dataclass
class SessionMetadata:
    """Session-level facts found in the export preamble."""

    track: str | None = None
    racer: str | None = None
    vehicle: str | None = None
    championship: str | None = None
    session_name: str | None = None
    date: datetime.date | None = None


def parse_date(raw: str) -> datetime.date | None:
    """Parse an export date; ``None`` when it does not match :data:`DATE_FORMAT`."""
    try:
        return datetime.datetime.strptime(raw.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def _split_key_value(line: str) -> tuple[str, str, str] | None:
    """Return ``(key, first_value, full_remainder)`` or ``None`` for a non key/value line.

    A colon in the first comma field marks a ``Key: Value`` line; its value
    may itself contain commas (``Date: Saturday, March 15, 2025``).
    """
    parts = line.split(",")
    if ":" in parts[0]:
        key, first = line.split(":", 1)
        remainder = first
    elif len(parts) > 1:
        key, first = parts[0], parts[1]
        remainder = ",".join(parts[1:])
    else:
        return None
    return clean_field(key).lower(), clean_field(first), clean_field(remainder.strip().strip(","))


def extract_metadata(lines: list[str]) -> SessionMetadata:
    """Scan *lines* for recognised keys and return the collected metadata.

    Keys are matched case-insensitively against :data:`METADATA_KEYS`; unknown
    keys are ignored and a later line overrides an earlier one.  Values are
    cleaned of whitespace and quotes, and empty values leave the field unset.
    An unparseable date is left unset.
    """
    lookup = dict(METADATA_KEYS)
    meta = SessionMetadata()
    for line in lines:
        kv = _split_key_value(line)
        if kv is None:
            continue
        key, value, remainder = kv
        attr = lookup.get(key)
        if attr is None:
            continue
        if attr == "date":
            # "Date,Saturday, March 15, 2025" spans several comma fields
            meta.date = parse_date(remainder) or parse_date(value)
        else:
            setattr(meta, attr, value or None)
    return meta
