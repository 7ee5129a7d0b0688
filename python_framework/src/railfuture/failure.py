"""
Failure description — structured error information for the failure track.

Every failed Result carries a FailureDescription: an ErrorCode naming the
kind of failure plus a human-readable message, the originating exception
(if any), and the moment it was recorded.

Enum + frozen dataclass gives equality, hashing and repr for free, and
Enum members are singleton-comparable with `is`.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    Grouped by the stage of a fetch-then-parse chain that produces them:
    - Transport: TRANSPORT_ERROR, NO_DATA
    - Decoding: PARSE_ERROR
    - Composition: TRANSFORM_ERROR, VALIDATION_ERROR, NOT_FOUND
    - Anything else: UNKNOWN_ERROR
    """

    # --- Transport ---
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    """The underlying fetch failed (network, timeout, HTTP status)."""

    NO_DATA = "NO_DATA"
    """The fetch completed but delivered no payload."""

    # --- Decoding ---
    PARSE_ERROR = "PARSE_ERROR"
    """The payload was received but did not have the expected shape."""

    # --- Composition ---
    TRANSFORM_ERROR = "TRANSFORM_ERROR"
    """A map step produced no value (or raised) for its input."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """A required value was absent."""

    NOT_FOUND = "NOT_FOUND"
    """A lookup inside a parsed value found nothing."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unexpected/unclassified failures."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.NO_DATA, "No data")
    >>> desc.code
    <ErrorCode.NO_DATA: 'NO_DATA'>
    >>> desc.message
    'No data'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> FailureDescription:
        """Keyword-free factory, handy as a callback target."""
        return FailureDescription(code=code, message=message, exception=exception)

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__))
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
