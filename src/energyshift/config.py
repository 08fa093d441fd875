from __future__ import annotations

"""Configuration utilities for energyshift.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the dataset description, resampling
rules, decomposition and detection parameters, and output options.  Instances
can be populated from environment variables (``ENERGYSHIFT_`` prefix, ``__``
between nested keys) or from YAML/JSON files with matching nested keys.
"""

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource

try:  # pragma: no cover - optional dependency
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None

from .core.changepoint import PENALTIES
from .ingest.resample import check_freq


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class DatasetSettings(SectionModel):
    """Where the raw readings live and how their columns are named."""

    path: str | None = None
    timestamp_column: str = "datestamp"
    value_column: str = "energy"
    timezone: str = "UTC"


class ResampleSettings(SectionModel):
    """Rules for binning raw readings into an evenly spaced series."""

    freq: str = "W"
    how: Literal["sum", "mean"] = "sum"
    drop_partial: bool = True
    fill: Literal["interpolate", "zero", "error"] = "interpolate"

    @field_validator("freq")
    @classmethod
    def _fixed_width(cls, value: str) -> str:
        return check_freq(value)


class DecompositionSettings(SectionModel):
    """Seasonal decomposition parameters."""

    period: int = Field(default=52, ge=2)
    enabled: bool = True


class DetectionSettings(SectionModel):
    """Changepoint search parameters."""

    penalty: str = "MBIC"
    pen_value: float | None = None
    min_seg_len: int = Field(default=2, ge=1)

    @field_validator("penalty")
    @classmethod
    def _known_penalty(cls, value: str) -> str:
        for name in PENALTIES:
            if value.strip().lower() == name.lower():
                return name
        if value.strip().lower() == "hq":
            return "Hannan-Quinn"
        raise ValueError(f"unknown penalty {value!r}; expected one of {', '.join(PENALTIES)}")


class ReportSettings(SectionModel):
    """Where and how analysis results are written."""

    output: str | None = None
    format: Literal["json", "csv"] = "json"


class VizSettings(SectionModel):
    """Configuration for the plotting helpers."""

    title: str = "Weekly energy consumption"
    ylabel: str = "Energy"
    save: str | None = None


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    resample: ResampleSettings = Field(default_factory=ResampleSettings)
    decomposition: DecompositionSettings = Field(default_factory=DecompositionSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    viz: VizSettings = Field(default_factory=VizSettings)

    model_config = SettingsConfigDict(
        env_prefix="ENERGYSHIFT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        class LenientEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LenientEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file.

    Values from the file take precedence over environment variables.
    """

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required to load YAML files")
        data: Any = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings(**data)
