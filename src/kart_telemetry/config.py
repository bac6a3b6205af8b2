"""Analysis thresholds: one configuration surface for every heuristic.

The logger exports seen in the wild were processed with slightly different
thresholds over time (0.5 G vs 0.8 G for cornering, for instance).  The
defaults below are the canonical set; override them per call site or through
``KART_*`` environment variables (a ``.env`` file is honoured).
"""

from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

_ENV_PREFIX = "KART_"


class AnalysisConfig(BaseModel):
    """Validated set of parser, segmenter and detector thresholds."""

    # File parser
    metadata_line_limit: int = Field(default=13, ge=0)
    header_min_columns: int = Field(default=3, ge=1)

    # Lap segmenter
    lap_gap_s: float = Field(default=5.0, gt=0)
    min_lap_duration_s: float = Field(default=10.0, ge=0)

    # Braking-zone detector
    braking_mode: Literal["deceleration", "speed_drop"] = "deceleration"
    braking_decel_threshold_g: float = Field(default=0.5, gt=0)
    braking_speed_drop_kmh: float = Field(default=5.0, gt=0)
    braking_min_decel_g: float = Field(default=0.3, ge=0)

    # Corner detector
    corner_lateral_threshold_g: float = Field(default=0.8, gt=0)
    corner_max_speed_kmh: float | None = Field(default=None, gt=0)

    # Statistics
    power_band_min_rpm: int = Field(default=10_000, ge=0)
    power_band_max_rpm: int = Field(default=13_500, ge=0)
    delta_significance_s: float = Field(default=0.1, gt=0)

    @model_validator(mode="after")
    def _check_power_band(self) -> AnalysisConfig:
        if self.power_band_min_rpm > self.power_band_max_rpm:
            raise ValueError("power_band_min_rpm must not exceed power_band_max_rpm")
        return self


def load_config(env_file: str | None = None) -> AnalysisConfig:
    """Build an :class:`AnalysisConfig` from defaults plus ``KART_*`` env vars.

    ``KART_MIN_LAP_DURATION_S=12`` overrides ``min_lap_duration_s`` and so on.
    Empty values are ignored.  Raises :class:`pydantic.ValidationError` when an
    override does not validate.
    """
    load_dotenv(env_file)
    overrides: dict[str, str] = {}
    for name in AnalysisConfig.model_fields:
        raw = os.environ.get(_ENV_PREFIX + name.upper(), "").strip()
        if raw:
            overrides[name] = raw
    return AnalysisConfig(**overrides)
