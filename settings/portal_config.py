# portal_config.py — Pipeline configuration
# Defaults plus environment overrides for the result browser core
"""
portal_config.py — Portal Configuration

Configuration for the inference pipeline. Defaults live in module constants;
load_config() applies environment overrides:

    PORTAL_HISTOGRAM_BINS       histogram bin count (default 8)
    PORTAL_BUCKET_DECIMALS      grouped-count rounding (default 2)
    PORTAL_MAX_EXTRA_FIELDS     extra fields on a record card (default 4)
    PORTAL_MAX_SEARCH_LENGTH    search box cap (default 200)
    PORTAL_DEFAULT_RECORD_ID    record opened on first load (default none)
    LOG_LEVEL                   logging level (default INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

DEFAULT_HISTOGRAM_BINS = 8
DEFAULT_BUCKET_DECIMALS = 2
DEFAULT_MAX_EXTRA_FIELDS = 4
DEFAULT_MAX_SEARCH_LENGTH = 200
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class PortalConfig:
    """Configuration for one pipeline run."""
    histogram_bins: int = DEFAULT_HISTOGRAM_BINS
    bucket_decimals: int = DEFAULT_BUCKET_DECIMALS
    max_extra_fields: int = DEFAULT_MAX_EXTRA_FIELDS
    max_search_length: int = DEFAULT_MAX_SEARCH_LENGTH
    default_record_id: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read a non-negative int from the environment, keeping default on bad input."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%r: must be >= %d", name, raw, minimum)
        return default
    return value


def load_config() -> PortalConfig:
    """
    Build a PortalConfig from the environment.

    Returns:
        PortalConfig with overrides applied
    """
    record_id = os.environ.get("PORTAL_DEFAULT_RECORD_ID", "").strip() or None

    return PortalConfig(
        histogram_bins=_env_int("PORTAL_HISTOGRAM_BINS", DEFAULT_HISTOGRAM_BINS, minimum=1),
        bucket_decimals=_env_int("PORTAL_BUCKET_DECIMALS", DEFAULT_BUCKET_DECIMALS),
        max_extra_fields=_env_int("PORTAL_MAX_EXTRA_FIELDS", DEFAULT_MAX_EXTRA_FIELDS),
        max_search_length=_env_int("PORTAL_MAX_SEARCH_LENGTH", DEFAULT_MAX_SEARCH_LENGTH, minimum=1),
        default_record_id=record_id,
        log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def configure_logging(config: PortalConfig | None = None) -> int:
    """
    Apply the configured log level to the root logger.

    Returns:
        The numeric level applied (unknown names fall back to INFO)
    """
    config = config or load_config()
    level = getattr(logging, config.log_level, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)
    return level
