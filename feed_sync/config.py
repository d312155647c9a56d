"""Configuration for feed_sync.

Settings are read from FEED_SYNC_* environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from feed_sync.errors import InvalidInput

DEFAULT_USER_AGENT = "FeedSync/1.0 (Feed Subscription Sync)"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class SyncConfig:
    """Settings for the sync pipeline and its collaborators."""

    name: str = "feed_sync"
    log_level: str = "INFO"
    store_backend: str = "memory"
    db_path: Optional[str] = None
    fetch_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    reprocess_on_parse_failure: bool = False

    def store_options(self) -> dict:
        """Keyword options passed to the storage backend factory."""
        if self.store_backend == "sqlite" and self.db_path:
            return {"db_path": self.db_path}
        return {}


def _get_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise InvalidInput(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise InvalidInput(f"{key} must be positive, got {raw!r}")
    return value


def _get_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidInput(f"{key} must be a boolean, got {raw!r}")


def load_config() -> SyncConfig:
    """Build a SyncConfig from the environment.

    Returns:
        SyncConfig with defaults for any unset variable

    Raises:
        InvalidInput: If a numeric or boolean setting cannot be parsed
    """
    defaults = SyncConfig()
    return SyncConfig(
        name=os.environ.get("FEED_SYNC_NAME", defaults.name),
        log_level=os.environ.get("FEED_SYNC_LOG_LEVEL", defaults.log_level).upper(),
        store_backend=os.environ.get("FEED_SYNC_STORE", defaults.store_backend),
        db_path=os.environ.get("FEED_SYNC_DB_PATH") or None,
        fetch_timeout=_get_float("FEED_SYNC_FETCH_TIMEOUT", defaults.fetch_timeout),
        user_agent=os.environ.get("FEED_SYNC_USER_AGENT", defaults.user_agent),
        reprocess_on_parse_failure=_get_bool(
            "FEED_SYNC_REPROCESS_ON_PARSE_FAILURE", defaults.reprocess_on_parse_failure
        ),
    )


_config: Optional[SyncConfig] = None


def get_config() -> SyncConfig:
    """Get or create the process-wide configuration."""
    global _config

    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next get_config reloads it."""
    global _config
    _config = None
