"""
Convenience factory methods for common Result failures.

One factory per stage of a fetch-then-parse chain, plus exception mapping,
so call sites read as the failure they describe:

    from railfuture.result_failures import ResultFailures

    # Instead of:
    Result.failure(ErrorCode.NO_DATA, "No data")

    # Write:
    ResultFailures.no_data()
"""

from __future__ import annotations

import json

from railfuture.failure import ErrorCode
from railfuture.result import Result


class ResultFailures:
    """Factory methods for the failure taxonomy, plus exception mapping."""

    @staticmethod
    def transport_error(message: str, exception: BaseException | None = None) -> Result:
        """The underlying fetch failed."""
        return Result.failure(ErrorCode.TRANSPORT_ERROR, message, exception)

    @staticmethod
    def no_data(message: str = "No data") -> Result:
        """The fetch succeeded but delivered an empty payload."""
        return Result.failure(ErrorCode.NO_DATA, message)

    @staticmethod
    def parse_error(message: str, exception: BaseException | None = None) -> Result:
        """The payload did not match the expected shape."""
        return Result.failure(ErrorCode.PARSE_ERROR, message, exception)

    @staticmethod
    def transform_error(message: str, exception: BaseException | None = None) -> Result:
        """A composed step produced no value."""
        return Result.failure(ErrorCode.TRANSFORM_ERROR, message, exception)

    @staticmethod
    def not_found(resource_type: str, identifier: str) -> Result:
        return Result.failure(
            ErrorCode.NOT_FOUND,
            f"{resource_type} not found with identifier: {identifier}",
        )

    @staticmethod
    def from_exception(message: str, exception: BaseException) -> Result:
        """
        Auto-map a Python exception to the appropriate ErrorCode.

        Mapping:
          - json.JSONDecodeError, UnicodeDecodeError → PARSE_ERROR
          - ValueError, TypeError → TRANSFORM_ERROR
          - LookupError → NOT_FOUND
          - TimeoutError, ConnectionError, OSError → TRANSPORT_ERROR
          - Everything else → UNKNOWN_ERROR
        """
        code = _map_exception_to_code(exception)
        return Result.failure(code, message, exception)

    @staticmethod
    def from_exception_auto(exception: BaseException) -> Result:
        """Map exception using its own message."""
        code = _map_exception_to_code(exception)
        return Result.failure(code, str(exception), exception)


def _map_exception_to_code(exception: BaseException) -> ErrorCode:
    """Map a Python exception type to the most appropriate ErrorCode."""
    # JSONDecodeError and UnicodeDecodeError are ValueErrors: match them first.
    match exception:
        case json.JSONDecodeError() | UnicodeDecodeError():
            return ErrorCode.PARSE_ERROR
        case ValueError() | TypeError():
            return ErrorCode.TRANSFORM_ERROR
        case LookupError():
            return ErrorCode.NOT_FOUND
        case TimeoutError() | ConnectionError() | OSError():
            return ErrorCode.TRANSPORT_ERROR
        case _:
            return ErrorCode.UNKNOWN_ERROR
