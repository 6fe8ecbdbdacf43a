"""Interval and period string parsing."""

from __future__ import annotations

import logging
import re

from guardian.constants import UNIT_MS
from guardian.errors import ParseError

logger = logging.getLogger(__name__)

_INTERVAL_PATTERN = re.compile(r"([0-9]+)([a-zA-Z]+)")


def parse_interval(value: str) -> int:
    """
    Parse an interval string such as ``15s``, ``1m``, ``4h`` or ``1d``.

    Args:
        value: String of the form ``<positive integer><unit>``.

    Returns:
        Duration in milliseconds.

    Raises:
        ParseError: If the format, amount or unit is invalid.
    """
    if not isinstance(value, str):
        raise ParseError(f"Interval must be a string, got: {value!r}", value=value)

    match = _INTERVAL_PATTERN.fullmatch(value)
    if not match:
        raise ParseError(f"Invalid interval format: {value!r}", value=value)

    amount = int(match.group(1))
    unit = match.group(2)

    if amount <= 0:
        raise ParseError(f"Interval amount must be positive, got: {value!r}", value=value)
    if unit not in UNIT_MS:
        raise ParseError(f"Unknown interval unit {unit!r} in {value!r}", value=value)

    return amount * UNIT_MS[unit]


def parse_interval_or_default(value: str | None, default: str) -> int:
    """Parse ``value``, falling back to ``default`` when it is invalid."""
    if value is None:
        return parse_interval(default)
    try:
        return parse_interval(value)
    except ParseError as e:
        logger.warning(f"{e.message}; using default {default}")
        return parse_interval(default)
