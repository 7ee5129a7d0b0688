"""
Test assertions for Result and Future values.

Expressive assert helpers that produce clear failure messages.

Usage in tests:
    from railfuture import FutureAssertions, ResultAssertions

    def test_load_details():
        result = FutureAssertions.await_result(webservice.load(resource))
        details = ResultAssertions.assert_success(result)
        assert details.title == "T"

    def test_bad_payload():
        result = FutureAssertions.assert_completed(webservice.load(bad_resource))
        ResultAssertions.assert_failure(result, ErrorCode.PARSE_ERROR)
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

from railfuture.failure import ErrorCode, FailureDescription
from railfuture.future import Future
from railfuture.result import Result

T = TypeVar("T")


class ResultAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_success(result: Result[T], message: str = "") -> T:
        """
        Assert the Result is a Success and return the value.

            value = ResultAssertions.assert_success(result)
        """
        context = f" — {message}" if message else ""
        assert result.is_success(), (
            f"Expected Success but got Failure("
            f"{result.error().code.value}: {result.error().message!r}){context}"
        )
        return result.value()

    @staticmethod
    def assert_failure(
        result: Result[T],
        expected_code: ErrorCode | None = None,
        message: str = "",
    ) -> FailureDescription:
        """
        Assert the Result is a Failure, optionally checking the error code.

            error = ResultAssertions.assert_failure(result, ErrorCode.PARSE_ERROR)
        """
        context = f" — {message}" if message else ""
        assert result.is_failure(), (
            f"Expected Failure but got Success({result.value()!r}){context}"
        )
        error = result.error()
        if expected_code is not None:
            assert error.code == expected_code, (
                f"Expected error code {expected_code.value} "
                f"but got {error.code.value}: {error.message!r}{context}"
            )
        return error

    @staticmethod
    def assert_failure_message_contains(result: Result[T], substring: str) -> None:
        """Assert that the failure message contains the given substring (case-insensitive)."""
        assert result.is_failure(), (
            f"Expected Failure but got Success({result.value()!r})"
        )
        error = result.error()
        assert substring.lower() in error.message.lower(), (
            f"Expected failure message to contain {substring!r} "
            f"but message was: {error.message!r}"
        )

    @staticmethod
    def assert_success_value(result: Result[T], expected_value: Any) -> None:
        """Assert the Result is a Success with the specific value."""
        value = ResultAssertions.assert_success(result)
        assert value == expected_value, (
            f"Expected success value {expected_value!r} but got {value!r}"
        )


class FutureAssertions:
    """Assertions for futures, including ones completed on other threads."""

    @staticmethod
    def assert_pending(future: Future[T]) -> None:
        assert not future.is_completed(), f"Expected a pending Future but got {future!r}"

    @staticmethod
    def assert_completed(future: Future[T]) -> Result[T]:
        """Assert the future has already settled and return its Result."""
        result = future.result()
        assert result is not None, "Expected a completed Future but it is still pending"
        return result

    @staticmethod
    def await_result(future: Future[T], timeout: float = 5.0) -> Result[T]:
        """
        Block until the future settles and return its Result.

        Fails the test if nothing arrives within `timeout` seconds.
        """
        settled = threading.Event()
        box: list[Result[T]] = []

        def _capture(result: Result[T]) -> None:
            box.append(result)
            settled.set()

        future.on_result(_capture)
        assert settled.wait(timeout), f"Future did not complete within {timeout}s"
        return box[0]
