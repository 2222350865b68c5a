"""
Centralized configuration for the eqbal planner.

Grid constants are part of the placement contract and are not overridable.
Session defaults (balances, starting events, time period) come from
config/timeline.yaml. Override via environment variables where marked.
"""

import logging
import os
from pathlib import Path

import yaml

from eqbal import paths

logger = logging.getLogger(__name__)

# ============================================================
# Placement grid
# ============================================================

STEP: float = 0.01
"""Placement granularity. Every searched position lies on this grid."""

PRECISION: int = 2
"""Decimal places returned positions are rounded to (matches STEP)."""

RESOLVER_RADIUS: float = 1.0
"""How far the nearest-valid resolver probes each way before falling back."""

# ============================================================
# Timeline
# ============================================================

TIME_PERIOD: float = float(os.environ.get("EQBAL_TIME_PERIOD", "5"))
"""Upper bound of every balance's range [0, TIME_PERIOD]."""

DEFAULT_BALANCES: list[str] = ["eq", "bal", "pill", "salve", "pipe"]

DEFAULT_EVENTS: list[dict] = [
    {
        "name": "cast windlance",
        "req": ["eq", "bal"],
        "consumes": ["eq"],
        "duration": 1.5,
    },
]

# ============================================================
# Runtime
# ============================================================

LOG_LEVEL: str = os.environ.get("EQBAL_LOG_LEVEL", "INFO")

API_PORT: int = int(os.environ.get("EQBAL_API_PORT", "8420"))

CORS_ORIGINS: list[str] = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
]


def _load_yaml(config_path: Path) -> dict:
    """Load YAML config, return empty dict on failure."""
    if not config_path.exists():
        logger.warning("Timeline config not found at %s, using defaults", config_path)
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.error("Failed to load timeline config: %s", exc)
        return {}
    if not isinstance(data, dict):
        logger.error("Timeline config at %s is not a mapping, using defaults", config_path)
        return {}
    return data


def load_timeline_config(config_path: Path | None = None) -> dict:
    """
    Resolve session defaults.

    Precedence: EQBAL_TIME_PERIOD env var > YAML file > built-in defaults.

    Returns:
        {"time_period": float, "balances": [...], "events": [...]}
    """
    if config_path is None:
        config_path = paths.config_path()
    raw = _load_yaml(config_path)

    time_period = float(raw.get("time_period", TIME_PERIOD))
    env_period = os.environ.get("EQBAL_TIME_PERIOD")
    if env_period:
        time_period = float(env_period)

    return {
        "time_period": time_period,
        "balances": list(raw.get("balances") or DEFAULT_BALANCES),
        "events": list(raw.get("events") or DEFAULT_EVENTS),
    }
