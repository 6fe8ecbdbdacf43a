"""Guardian exceptions.

Hierarchy:
    GuardianError (base)
    ├── ParseError      - unrecognised interval/period string
    ├── DataError       - malformed upstream payload
    └── TransportError  - network failure or non-success response

Only ParseError is raised by the core transforms; DataError and
TransportError are raised by decoders and by caller-supplied fetchers and
are turned into a sample-data fallback by the refresh cycle.
"""

from __future__ import annotations

from typing import Any


class GuardianError(Exception):
    """Base exception for Guardian."""

    def __init__(self, message: str, code: str = "GUARDIAN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
        }


class ParseError(GuardianError):
    """Interval or period string could not be parsed."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message, code="PARSE_ERROR")
        self.value = value


class DataError(GuardianError):
    """Upstream payload is unusable."""

    def __init__(self, message: str, endpoint: str | None = None):
        super().__init__(message, code="DATA_ERROR")
        self.endpoint = endpoint


class TransportError(GuardianError):
    """Request failed before a payload could be decoded."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message, code="TRANSPORT_ERROR")
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.status is not None:
            data["status"] = self.status
        return data
