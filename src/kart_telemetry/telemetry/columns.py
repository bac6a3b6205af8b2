"""Column resolver — maps exporter header text to canonical channels.

Different logger firmware versions and export locales name the same channel
differently (``"GPS Speed"``, ``"Speed"``, ``"speed"``).  The synonym table
below is ordered: for each channel the first candidate found in the header
wins.
"""

from __future__ import annotations

_QUOTE_CHARS = " \t\"'"

# canonical channel     value type   header candidates (first match wins)
CHANNEL_SYNONYMS: tuple[tuple[str, type, tuple[str, ...]], ...] = (
    ("time",               float, ("Time", "time")),
    ("distance",           float, ("Distance on GPS Speed", "Distance", "distance")),
    ("logger_temp",        float, ("Logger Temperature", "LoggerTemp", "logger_temp")),
    ("battery_voltage",    float, ("Internal Batt", "InternalBattery", "battery")),
    ("speed",              float, ("GPS Speed", "Speed", "speed")),
    ("satellite_count",    int,   ("GPS Nsat", "GPS_Satellites", "Satellites", "satellites")),
    ("latitude",           float, ("GPS Latitude", "GPS_Latitude", "Latitude", "latitude")),
    ("longitude",          float, ("GPS Longitude", "GPS_Longitude", "Longitude", "longitude")),
    ("altitude",           float, ("GPS Altitude", "GPS_Altitude", "Altitude", "altitude")),
    ("heading",            float, ("GPS Heading", "GPS_Heading", "Heading", "heading")),
    ("slope",              float, ("GPS Slope", "GPS_Slope", "Slope", "slope")),
    ("lateral_accel",      float, ("GPS LatAcc", "GPS_LatAcc", "LatAcc", "lat_acc")),
    ("longitudinal_accel", float, ("GPS LonAcc", "GPS_LonAcc", "LonAcc", "lon_acc")),
    ("yaw_rate",           float, ("GPS Gyro", "GPS_Gyro", "Gyro", "gyro")),
    ("turn_radius",        float, ("GPS Radius", "GPS_Radius", "Radius", "radius")),
    ("position_accuracy",  float, ("GPS PosAccuracy", "GPS_PosAccuracy", "PosAccuracy",
                                   "pos_accuracy")),
    ("speed_accuracy",     float, ("GPS SpdAccuracy", "GPS_SpeedAccuracy", "SpeedAccuracy",
                                   "speed_accuracy")),
    ("rpm",                int,   ("RPM", "rpm")),
    ("exhaust_temp",       float, ("Exhaust Temp", "T_Exhaust", "ExhaustTemp", "exhaust_temp")),
    ("water_temp",         float, ("Water Temp", "T_Water", "WaterTemp", "water_temp")),
    ("accel_x",            float, ("AccelerometerX", "AccX", "acc_x")),
    ("accel_y",            float, ("AccelerometerY", "AccY", "acc_y")),
    ("accel_z",            float, ("AccelerometerZ", "AccZ", "acc_z")),
    ("gyro_x",             float, ("GyroX", "gyro_x")),
    ("gyro_y",             float, ("GyroY", "gyro_y")),
    ("gyro_z",             float, ("GyroZ", "gyro_z")),
)

REQUIRED_CHANNELS: frozenset[str] = frozenset({"time", "distance"})


def clean_field(raw: str) -> str:
    """Strip surrounding whitespace and quote characters from one CSV field."""
    return raw.strip(_QUOTE_CHARS)


def split_fields(line: str) -> list[str]:
    """Split *line* on every comma and clean each field.

    Commas inside quotes are not protected; logger exports never quote them.
    """
    return [clean_field(f) for f in line.split(",")]


def resolve_columns(headers: list[str]) -> dict[str, int]:
    """Return ``{channel: column_index}`` for every channel found in *headers*.

    Matching is exact and case-sensitive after cleaning.  Channels without any
    matching header are simply missing from the result.  When the same header
    text appears twice the first column is used.
    """
    index: dict[str, int] = {}
    for i, header in enumerate(headers):
        index.setdefault(clean_field(header), i)

    resolved: dict[str, int] = {}
    for channel, _kind, candidates in CHANNEL_SYNONYMS:
        for candidate in candidates:
            if candidate in index:
                resolved[channel] = index[candidate]
                break
    return resolved
