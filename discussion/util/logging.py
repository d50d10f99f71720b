"""Standard library logging, routed into Logfire.

The view itself logs through logfire directly. httpx and httpcore log through
the standard library, so their records are forwarded to Logfire as well and
connection problems show up next to the stream's retry spans.
"""

import logging

import logfire

from discussion.config import Settings

# Per-request chatter from the transport; the stream span already covers it
_NOISY_LOGGERS = ("httpcore", "hpack")


def log_level(settings: Settings) -> int:
    """Level for the current environment."""
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "production":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Forward standard library log records to Logfire.

    Replaces any handlers already installed on the root logger.

    Args:
        settings: Application settings
    """
    level = log_level(settings)

    logging.basicConfig(
        level=level,
        handlers=[logfire.LogfireLoggingHandler()],
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger("httpx").setLevel(level)
    logging.getLogger("discussion").setLevel(level)

    logfire.debug(
        "Logging configured",
        environment=settings.environment,
        level=logging.getLevelName(level),
    )
