"""Runtime configuration resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_ENV_PREFIX = "HOTEL_PLANNING_"


def _env(name: str, default: str) -> str:
    return os.getenv(f"{_ENV_PREFIX}{name}", default)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(f"{_ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(f"{_ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Immutable settings snapshot.

    Tests derive variants with ``dataclasses.replace`` instead of mutating
    the cached instance.
    """

    app_name: str
    app_version: str
    log_level: str
    default_commission_percent: float
    disparity_stable_threshold_percent: float
    forecast_horizon_days: int
    forecast_baseline_window: int
    forecast_random_seed: int
    max_upload_bytes: int
    allowed_upload_suffixes: tuple[str, ...]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    suffixes = tuple(
        item.strip().lower()
        for item in _env("ALLOWED_UPLOAD_SUFFIXES", ".xlsx,.csv").split(",")
        if item.strip()
    )
    return Settings(
        app_name=_env("APP_NAME", "Hotel Planning Analytics"),
        app_version=_env("APP_VERSION", "0.1.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        default_commission_percent=_env_float("DEFAULT_COMMISSION_PERCENT", 15.0),
        disparity_stable_threshold_percent=_env_float("DISPARITY_STABLE_THRESHOLD", 5.0),
        forecast_horizon_days=_env_int("FORECAST_HORIZON_DAYS", 30),
        forecast_baseline_window=_env_int("FORECAST_BASELINE_WINDOW", 30),
        forecast_random_seed=_env_int("FORECAST_RANDOM_SEED", 42),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        allowed_upload_suffixes=suffixes,
    )
