"""Single entry point for loggers used across feed_sync."""

import logging
from typing import Optional

from feed_sync.config import SyncConfig
from feed_sync.logging_config import setup_logging


class UnifiedLogger:
    """Hands out stdlib loggers once the package handler is configured."""

    _initialized = False

    @classmethod
    def initialize_default(cls, config: Optional[SyncConfig] = None) -> None:
        setup_logging(config)
        cls._initialized = True

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for a module.

        Modules under feed_sync inherit the package handler, so callers pass
        __name__ and never configure handlers themselves.
        """
        return logging.getLogger(name)

    @classmethod
    def reset(cls) -> None:
        cls._initialized = False
