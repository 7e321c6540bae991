"""
Configuration Management Module

This module handles environment variables, configuration files,
and settings for the OrgPulse analytics engine.
"""

__version__ = "0.1.0"
__author__ = "OrgPulse Team"

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from analytics.exceptions import ConfigError, InvalidWindow
from analytics.windows import validate_threshold, validate_window

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).parent / "analytics.yml"

# Environment variable -> (section, key, type)
ENV_OVERRIDES = {
    "ORGPULSE_RISK_WINDOW_DAYS": ("risk", "window_days", int),
    "ORGPULSE_RISK_THRESHOLD_PERCENT": ("risk", "threshold_percent", float),
    "ORGPULSE_NEGATIVE_MEAN_THRESHOLD": ("classifier", "negative_mean_threshold", float),
    "ORGPULSE_TREND_PERIOD_DAYS": ("trend", "period_days", int),
    "ORGPULSE_CACHE_TTL_SECONDS": ("cache", "ttl_seconds", float),
}


@dataclass(frozen=True)
class AnalyticsSettings:
    """Immutable analytics configuration."""

    window_days: int = 30
    threshold_percent: float = 40.0
    negative_mean_threshold: float = 2.0
    ignore_out_of_range: bool = True
    period_days: int = 30
    cache_ttl_seconds: float = 45.0
    cache_max_entries: int = 1024
    warmer_interval_seconds: int = 60
    warmer_organization_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        validate_window(self.window_days, "window_days")
        validate_window(self.period_days, "period_days")
        object.__setattr__(self, "threshold_percent", validate_threshold(self.threshold_percent))

        if not 1.0 <= self.negative_mean_threshold <= 5.0:
            raise ConfigError(
                f"negative_mean_threshold must be within [1, 5], got {self.negative_mean_threshold}"
            )
        if self.cache_ttl_seconds < 0:
            raise ConfigError(f"cache ttl_seconds must be >= 0, got {self.cache_ttl_seconds}")
        if self.cache_max_entries <= 0:
            raise ConfigError(f"cache max_entries must be > 0, got {self.cache_max_entries}")
        if self.warmer_interval_seconds <= 0:
            raise ConfigError(
                f"warmer interval_seconds must be > 0, got {self.warmer_interval_seconds}"
            )


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Analytics configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Analytics configuration must be a mapping, got {type(data).__name__}")
    return data


def _apply_env_overrides(data: Dict[str, Any]) -> None:
    for env_name, (section, key, cast) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            value = cast(raw)
        except ValueError as e:
            raise ConfigError(f"{env_name}={raw!r} is not a valid {cast.__name__}") from e
        data.setdefault(section, {})[key] = value


def load_analytics_config(path: Optional[Path] = None) -> AnalyticsSettings:
    """
    Load analytics settings from YAML with environment overrides.

    Args:
        path: Optional config file path. Defaults to $ORGPULSE_CONFIG or config/analytics.yml

    Returns:
        Validated AnalyticsSettings
    """
    config_path = Path(path or os.getenv("ORGPULSE_CONFIG") or DEFAULT_CONFIG_PATH)
    data = _read_config_file(config_path)
    _apply_env_overrides(data)

    risk = data.get("risk") or {}
    classifier = data.get("classifier") or {}
    trend = data.get("trend") or {}
    cache = data.get("cache") or {}
    warmer = data.get("warmer") or {}

    defaults = AnalyticsSettings()
    try:
        return AnalyticsSettings(
            window_days=risk.get("window_days", defaults.window_days),
            threshold_percent=risk.get("threshold_percent", defaults.threshold_percent),
            negative_mean_threshold=float(
                classifier.get("negative_mean_threshold", defaults.negative_mean_threshold)
            ),
            ignore_out_of_range=bool(
                classifier.get("ignore_out_of_range", defaults.ignore_out_of_range)
            ),
            period_days=trend.get("period_days", defaults.period_days),
            cache_ttl_seconds=float(cache.get("ttl_seconds", defaults.cache_ttl_seconds)),
            cache_max_entries=int(cache.get("max_entries", defaults.cache_max_entries)),
            warmer_interval_seconds=int(
                warmer.get("interval_seconds", defaults.warmer_interval_seconds)
            ),
            warmer_organization_ids=tuple(
                int(org_id) for org_id in warmer.get("organization_ids") or ()
            ),
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, InvalidWindow):
            raise
        raise ConfigError(f"Invalid analytics configuration in {config_path}: {e}") from e


def get_database_url() -> str:
    """Get database URL from environment variables."""
    return os.getenv("DATABASE_URL", "sqlite:///orgpulse.db")


def is_production() -> bool:
    """Check if running in production environment."""
    return os.getenv("ENVIRONMENT", "development").lower() == "production"
