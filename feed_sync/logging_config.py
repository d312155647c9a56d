"""Logging setup for feed_sync."""

import logging
import sys
from typing import Optional

from feed_sync.config import SyncConfig, get_config
from feed_sync.log_system.correlation import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(correlation_id)s] %(message)s"

logger = logging.getLogger("feed_sync")


def setup_logging(config: Optional[SyncConfig] = None) -> logging.Logger:
    """Configure the feed_sync logger hierarchy.

    Installs a single stderr handler carrying the correlation id filter.
    Calling it again only updates the level.

    Args:
        config: Optional configuration (uses get_config() if not provided)

    Returns:
        The package logger
    """
    if config is None:
        config = get_config()

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    if not any(getattr(h, "_feed_sync_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        handler._feed_sync_handler = True
        logger.addHandler(handler)
        logger.propagate = False

    return logger
