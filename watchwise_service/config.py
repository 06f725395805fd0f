"""Application configuration"""

import json
import os
from pathlib import Path


def _get_config_value(key: str, default: str | None = None) -> str | None:
    """
    Get configuration value from environment or local.settings.json.

    Priority:
    1. Environment variable
    2. local.settings.json (Values.key)
    3. Default value

    Args:
        key: Configuration key name
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # Try environment variable first
    value = os.getenv(key)
    if value:
        return value

    # Try local.settings.json
    project_root = Path(__file__).resolve().parent.parent
    local_settings_path = project_root / "local.settings.json"

    if local_settings_path.exists():
        try:
            with open(local_settings_path) as f:
                settings = json.load(f)
                value = settings.get("Values", {}).get(key)
                if value:
                    return value
        except (json.JSONDecodeError, KeyError):
            pass

    return default


def _get_number(key: str, default: float) -> float:
    """Read a numeric setting, falling back to the default on bad input."""
    raw = _get_config_value(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_database_url() -> str | None:
    """
    Get database URL for the bookmark store.

    Returns:
        Database connection string
    """
    return _get_config_value("DATABASE_URL", default="sqlite:///watchwise.db")


def get_omdb_api_key() -> str | None:
    """Get the OMDb API key (None when not configured)."""
    return _get_config_value("OMDB_API_KEY")


def get_omdb_base_url() -> str | None:
    """Get the OMDb base URL."""
    return _get_config_value("OMDB_BASE_URL", default="https://www.omdbapi.com/")


def get_recommendation_service_url() -> str | None:
    """
    Get the ML recommendation service URL.

    Returns:
        Service URL (default: http://localhost:8000)
    """
    return _get_config_value("ML_MODEL_ENDPOINT", default="http://localhost:8000")


def get_metadata_cache_ttl() -> float:
    """TTL in seconds for successful metadata lookups (default 30 minutes)."""
    return _get_number("METADATA_CACHE_TTL", 30 * 60)


def get_recommendation_cache_ttl() -> float:
    """TTL in seconds for recommendation responses (default 10 minutes)."""
    return _get_number("RECOMMENDATION_CACHE_TTL", 10 * 60)


def get_http_timeout() -> float:
    """Timeout in seconds applied to every upstream request."""
    return _get_number("HTTP_TIMEOUT", 10)


def get_batch_max_workers() -> int:
    """Number of concurrent metadata lookups in a batch."""
    return max(1, int(_get_number("BATCH_MAX_WORKERS", 5)))
