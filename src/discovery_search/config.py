"""Configuration persistence — load and save search settings."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from discovery_search.models import (
    CONFIG_APP_NAME,
    DISCOVERY_DEFAULT_PER_PAGE,
    DISCOVERY_PER_PAGE_LIMIT,
    NEAR_BOTTOM_OFFSET,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                Rule                        Handler
#   ───────────────────  ──────────────────────────  ─────────────────────
#   per_page             1 ≤ x ≤ 100                 _coerce_per_page
#   debounce_interval    0 ≤ x ≤ 5.0 seconds         _coerce_interval
#   api_delay_interval   0 ≤ x ≤ 5.0 seconds         _coerce_interval
#   request_timeout      x > 0 seconds               _coerce_timeout
#   near_bottom_offset   x ≥ 0                       _dict_to_config
#   scalar fields        type-checked via _safe_get  _dict_to_config
#
CONFIG_FILENAME = "config.json"
DEFAULT_BASE_URL = "https://api.example.com/v1"
DEFAULT_USER_AGENT = "discovery-search/1.0"
DEFAULT_DEBOUNCE_INTERVAL = 0.3
DEFAULT_REQUEST_TIMEOUT = 15.0
MAX_INTERVAL_SECONDS = 5.0


@dataclass(slots=True)
class SearchConfig:
    """User-tunable settings for the search screen."""

    base_url: str = DEFAULT_BASE_URL
    debounce_interval: float = DEFAULT_DEBOUNCE_INTERVAL
    api_delay_interval: float = 0.0
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    per_page: int = DISCOVERY_DEFAULT_PER_PAGE
    near_bottom_offset: int = NEAR_BOTTOM_OFFSET
    user_agent: str = DEFAULT_USER_AGENT
    version: int = 1


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/discovery-search/config.json
    - macOS: ~/Library/Application Support/discovery-search/config.json
    - Windows: %APPDATA%/discovery-search/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    Booleans are rejected even where an int is expected.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type) or isinstance(value, bool):
        return default
    return value


def _coerce_per_page(value: Any) -> int:
    """Validate and clamp the page size requested from the discovery API."""
    if not isinstance(value, int) or isinstance(value, bool):
        return DISCOVERY_DEFAULT_PER_PAGE
    return max(1, min(value, DISCOVERY_PER_PAGE_LIMIT))


def _coerce_interval(value: Any, default: float) -> float:
    """Clamp a debounce/delay interval to [0, MAX_INTERVAL_SECONDS]."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return default
    return max(0.0, min(float(value), MAX_INTERVAL_SECONDS))


def _coerce_timeout(value: Any) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        return DEFAULT_REQUEST_TIMEOUT
    return float(value)


def _config_to_dict(config: SearchConfig) -> dict[str, Any]:
    """Serialize SearchConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "base_url": config.base_url,
        "debounce_interval": _coerce_interval(
            config.debounce_interval, DEFAULT_DEBOUNCE_INTERVAL
        ),
        "api_delay_interval": _coerce_interval(config.api_delay_interval, 0.0),
        "request_timeout": _coerce_timeout(config.request_timeout),
        "per_page": _coerce_per_page(config.per_page),
        "near_bottom_offset": max(0, config.near_bottom_offset),
        "user_agent": config.user_agent,
    }


def _dict_to_config(data: dict[str, Any]) -> SearchConfig:
    """Deserialize a dictionary to SearchConfig with type validation."""
    base_url = _safe_get(data, "base_url", DEFAULT_BASE_URL, str).strip() or DEFAULT_BASE_URL
    near_bottom_offset = _safe_get(data, "near_bottom_offset", NEAR_BOTTOM_OFFSET, int)
    return SearchConfig(
        base_url=base_url,
        debounce_interval=_coerce_interval(
            data.get("debounce_interval", DEFAULT_DEBOUNCE_INTERVAL), DEFAULT_DEBOUNCE_INTERVAL
        ),
        api_delay_interval=_coerce_interval(data.get("api_delay_interval", 0.0), 0.0),
        request_timeout=_coerce_timeout(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
        per_page=_coerce_per_page(data.get("per_page", DISCOVERY_DEFAULT_PER_PAGE)),
        near_bottom_offset=max(0, near_bottom_offset),
        user_agent=_safe_get(data, "user_agent", DEFAULT_USER_AGENT, str) or DEFAULT_USER_AGENT,
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> SearchConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return SearchConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return SearchConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return SearchConfig()

    if not isinstance(data, dict):
        logger.warning("Config file root is not an object, using defaults")
        return SearchConfig()
    return _dict_to_config(data)


def save_config(config: SearchConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BASE_URL",
    "SearchConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
