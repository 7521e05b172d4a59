# Config
"""
Configuration for the price content MCP server.
Values come from the environment (optionally a local .env file).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from price_content.utils.errors import ConfigurationError

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{raw}'", {"config_name": name})


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'", {"config_name": name}) from e


class Settings:
    def __init__(self) -> None:
        # Logging
        self.log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
        self.dev_mode = _env_bool("DEV_MODE", False)
        log_file = os.getenv("LOG_FILE_PATH")
        self.log_file_path = Path(log_file) if log_file else None

        # Server identity
        self.server_name = os.getenv("PRICE_CONTENT_SERVER_NAME") or "price-content-server"
        self.server_version = "0.1.0"

        # Extraction
        self.script_marker = os.getenv("PRICE_CONTENT_SCRIPT_MARKER") or "__NEXT_DATA__"
        self.record_path = os.getenv("PRICE_CONTENT_RECORD_PATH") or "props.pageProps.mass"
        self.compact_rank_limit = _env_number("PRICE_CONTENT_COMPACT_RANK_LIMIT", 15, int)

        # Fetching
        self.request_timeout: Optional[float] = _env_number("PRICE_CONTENT_REQUEST_TIMEOUT", None, float)
        self.force_json_content_type = _env_bool("PRICE_CONTENT_FORCE_JSON_CONTENT_TYPE", True)

        self._validate()

    def _validate(self) -> None:
        if any(not part for part in self.record_path.split(".")):
            raise ConfigurationError(
                f"record_path '{self.record_path}' is not a dotted key path",
                {"config_name": "record_path"},
            )
        if self.compact_rank_limit < 0:
            raise ConfigurationError("compact_rank_limit must not be negative", {"config_name": "compact_rank_limit"})
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive", {"config_name": "request_timeout"})

    def get_log_file_path(self) -> Optional[Path]:
        if self.log_file_path:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        return self.log_file_path


# Singleton instance
_settings = None

def get_settings():
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
