"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``RECRUIT_FORECASTER_*`` prefix, plus
                                    ``PUBLIC_DATA_API_KEY``

Entry point: ``load_config(config_path=None) -> AppConfig``

The public-data API key is plain configuration: commands that need the
external API check ``is_publicdata_configured(config)`` and construct their
client explicitly from ``config.publicdata``. Nothing builds a client lazily
at import time.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from recruit_forecaster.utils.time_utils import MAX_WINDOW_MONTHS

# ── Sub-config models ─────────────────────────────────────────────────────────


class PredictionConfig(BaseModel):
    """Forecast window and result-size settings."""

    model_config = ConfigDict(frozen=True)

    window_months: int = 3
    extended_window_months: int = 10
    top_n: int = 50
    extended_top_n: int = 100

    @field_validator("window_months", "extended_window_months")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if not 0 <= v <= MAX_WINDOW_MONTHS:
            raise ValueError(
                f"Forecast window must be in [0, {MAX_WINDOW_MONTHS}] months, got {v}."
            )
        return v

    @field_validator("top_n", "extended_top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top-N must be >= 1, got {v}.")
        return v


class HistoryConfig(BaseModel):
    """Where posting histories come from and how far back they reach."""

    model_config = ConfigDict(frozen=True)

    postings_file: str = "data/postings.csv"
    lookback_years: int = 3

    @field_validator("lookback_years")
    @classmethod
    def validate_lookback(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"lookback_years must be >= 1, got {v}.")
        return v


class PublicDataConfig(BaseModel):
    """Government recruitment API (data.go.kr) settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://apis.data.go.kr/1051000/recruitment"
    api_key: Optional[str] = None
    page_size: int = 100
    max_pages: int = 10
    request_delay_s: float = 0.5
    timeout_s: float = 30.0

    @field_validator("page_size", "max_pages")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v


class OutputConfig(BaseModel):
    """Filesystem locations for exported reports."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/forecaster.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Every CLI command receives an ``AppConfig`` built by ``load_config()``.
    """

    model_config = ConfigDict(frozen=True)

    prediction: PredictionConfig = PredictionConfig()
    history: HistoryConfig = HistoryConfig()
    publicdata: PublicDataConfig = PublicDataConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


def is_publicdata_configured(config: AppConfig) -> bool:
    """Return ``True`` if the public-data API key is present and non-blank."""
    key = config.publicdata.api_key
    return bool(key and key.strip())


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply environment overrides to the raw config dict.

    Supported overrides:
      RECRUIT_FORECASTER_POSTINGS_FILE → raw["history"]["postings_file"]
      RECRUIT_FORECASTER_LOG_LEVEL     → raw["logging"]["level"]
      RECRUIT_FORECASTER_DEBUG         → raw["debug"]
      PUBLIC_DATA_API_KEY              → raw["publicdata"]["api_key"]
    """
    if postings_file := os.environ.get("RECRUIT_FORECASTER_POSTINGS_FILE"):
        raw.setdefault("history", {})["postings_file"] = postings_file

    if log_level := os.environ.get("RECRUIT_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("RECRUIT_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if api_key := os.environ.get("PUBLIC_DATA_API_KEY"):
        raw.setdefault("publicdata", {})["api_key"] = api_key

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        prediction=PredictionConfig(**raw.get("prediction", {})),
        history=HistoryConfig(**raw.get("history", {})),
        publicdata=PublicDataConfig(**raw.get("publicdata", {})),
        output=OutputConfig(**raw.get("output", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
