"""Logging configuration for webttfb."""

import logging
import os
import sys

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(value: str | None, default: int = logging.INFO) -> int:
    """Map a level name to a logging constant (case-insensitive)."""
    if not value:
        return default
    return LOG_LEVELS.get(value.strip().upper(), default)


def configure_logging(default_level: int = logging.INFO) -> int:
    """Configure application-wide logging.

    Respects WEBTTFB_LOG_LEVEL environment variable, falling back to
    default_level for missing or unknown values. Logs to stderr so the
    report on stdout stays clean.

    Environment Variables:
        WEBTTFB_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        # Debug level for troubleshooting probes
        $ WEBTTFB_LOG_LEVEL=DEBUG webttfb -d example.com

    Returns:
        The effective log level.
    """
    log_level = resolve_log_level(os.environ.get("WEBTTFB_LOG_LEVEL"), default_level)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured: level=%s", logging.getLevelName(log_level))
    return log_level
