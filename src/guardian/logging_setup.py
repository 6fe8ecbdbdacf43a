"""Logging configuration."""

from __future__ import annotations

import logging

from guardian.constants import LOG_FORMAT, LOG_FORMAT_JSON, LogLevel


def setup_logging(level: LogLevel | str = LogLevel.INFO, json_format: bool = False) -> None:
    """Configure root logging once for command-line use."""
    level_name = level.value if isinstance(level, LogLevel) else str(level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT_JSON if json_format else LOG_FORMAT,
        force=True,
    )
