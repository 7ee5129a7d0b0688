"""
Result — the settled outcome of every Future and every fallible step.

A Result[T] is either Success(value: T) or Failure(error: FailureDescription).
Transformations never raise on the failure track: .map() and .flat_map()
forward a Failure unchanged, so only the success path has to be written.

    ┌───────────┐    map     ┌───────────┐  flat_map  ┌──────────┐
    │  fetch    │──Success───│  parse    │──Success───│  lookup  │──→ Result[T]
    └─────┬─────┘            └─────┬─────┘            └─────┬────┘
          │ Failure                │ Failure                │ Failure
          └────────────────────────┴────────────────────────┴──→ Result[T]

Design choices:
  - @dataclass subclasses of a common base instead of a single tagged class
  - match/case for every branch (case Success(v) / case Failure(err))
  - Success(None) is rejected: absence is always spelled Failure
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    List,
    Optional,
    TypeVar,
)

from railfuture.failure import ErrorCode, FailureDescription

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Result(Generic[T]):
    """
    Tagged union of Success(value) and Failure(error).

    Exactly one branch is populated and the instance is immutable.

    Usage:
        >>> Result.success(42).map(lambda x: x * 2).value()
        84

        >>> Result.wrap(None, "missing").is_failure()
        True
    """

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        return isinstance(self, Failure)

    def value(self) -> T:
        """
        Extract the success value. Raises ValueError if called on a Failure.

        Prefer .either() or match/case for safe access.
        """
        match self:
            case Success(v):
                return v
            case Failure(err):
                raise ValueError(f"Cannot get value from a Failure: {err.message}")
        raise TypeError("unreachable")  # pragma: no cover

    def error(self) -> FailureDescription:
        """
        Extract the failure description. Raises ValueError if called on a Success.

        Prefer .either() or match/case for safe access.
        """
        match self:
            case Failure(err):
                return err
            case Success(v):
                raise ValueError(f"Cannot get error from a Success: {v}")
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Core Transformations ────────────────────────

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        """
        Apply one of two functions depending on the state.

            result.either(
                on_success=lambda details: details.title,
                on_failure=lambda err: f"Error: {err.message}",
            )
        """
        match self:
            case Success(v):
                return on_success(v)
            case Failure(err):
                return on_failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """
        Transform the success value. Failure passes through untouched
        and the mapper is never called. A mapper returning None yields
        Failure(TRANSFORM_ERROR), the same as Future.map.

            Result.success(5).map(lambda x: x * 2)  # → Success(10)
            Result.failure(...).map(lambda x: x * 2)  # → same Failure
        """
        match self:
            case Success(v):
                return Result.wrap(
                    mapper(v),
                    FailureDescription(
                        code=ErrorCode.TRANSFORM_ERROR,
                        message=f"mapper returned None for {v!r}",
                    ),
                )
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def map_failure(
        self, mapper: Callable[[FailureDescription], FailureDescription]
    ) -> Result[T]:
        """Transform the failure description. Passes through success unchanged."""
        match self:
            case Success(_):
                return self
            case Failure(err):
                return Failure(mapper(err))
        raise TypeError("unreachable")  # pragma: no cover

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """
        Chain a Result-returning function. Short-circuits on failure.

            Result.success(episodes).flat_map(lambda eps: first_episode(eps))
        """
        match self:
            case Success(v):
                return mapper(v)
            case Failure(err):
                return Failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def ensure(
        self,
        predicate: Callable[[T], bool],
        error: FailureDescription | ErrorCode,
        message: str = "",
    ) -> Result[T]:
        """
        Validate the success value against a condition.
        Short-circuits on existing failure.

            Result.success(episodes).ensure(
                lambda eps: len(eps) > 0,
                ErrorCode.NOT_FOUND, "Episode list is empty"
            )
        """
        if isinstance(error, ErrorCode):
            error = FailureDescription(code=error, message=message)

        return self.flat_map(
            lambda v: Result.success(v) if predicate(v) else Result.failure_from(error)
        )

    # ──────────────────────── Side Effects ────────────────────────

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run a side effect on the success value without altering the Result."""
        match self:
            case Success(v):
                action(v)
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Run a side effect on failure without altering the Result."""
        match self:
            case Failure(err):
                action(err)
        return self

    # ──────────────────────── Recovery ────────────────────────

    def recover(self, recovery_fn: Callable[[FailureDescription], T]) -> Result[T]:
        match self:
            case Success(_):
                return self
            case Failure(err):
                return Success(recovery_fn(err))
        raise TypeError("unreachable")  # pragma: no cover

    def get_or_else(self, default: T) -> T:
        match self:
            case Success(v):
                return v
            case _:
                return default

    def get_or_else_get(self, fallback: Callable[[FailureDescription], T]) -> T:
        return self.either(lambda v: v, fallback)

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure_from(error: FailureDescription) -> Result[T]:
        return Failure(error)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> Result[T]:
        """
        Create a failed Result with error code, message, and optional exception.

            Result.failure(ErrorCode.NO_DATA, "No data")
            Result.failure(ErrorCode.TRANSPORT_ERROR, "Connection refused", ex)
        """
        return Failure(FailureDescription(code=code, message=message, exception=exception))

    @staticmethod
    def wrap(
        value: Optional[T],
        else_cause: FailureDescription | str,
    ) -> Result[T]:
        """
        Turn a "value or absence" into a Result.

        Success(value) when the value is present, otherwise Failure carrying
        else_cause. A bare string cause is recorded as VALIDATION_ERROR.

            Result.wrap(parse(body), FailureDescription(ErrorCode.PARSE_ERROR, "bad body"))
            Result.wrap(config.get("url"), "url is required")
        """
        if value is not None:
            return Success(value)
        if isinstance(else_cause, str):
            else_cause = FailureDescription(code=ErrorCode.VALIDATION_ERROR, message=else_cause)
        return Failure(else_cause)

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Create a Result from a computation that may raise.

        Any Exception becomes Result.failure(error_code, error_message, exc),
        so adapters never leak exceptions into a chain.

            return Result.from_computation(
                lambda: json.loads(body),
                ErrorCode.PARSE_ERROR,
                "Malformed JSON",
            )
        """
        try:
            return Result.success(computation())
        except Exception as e:
            return Result.failure(error_code, error_message, e)

    @staticmethod
    def all_of(results: List[Result[T]]) -> Result[List[T]]:
        """
        Collect a list of Results into a Result of list.
        Returns the first failure encountered, or Success with all values.
        """
        values: list[T] = []
        for r in results:
            match r:
                case Success(v):
                    values.append(v)
                case Failure(err):
                    return Failure(err)
        return Success(values)

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        """Allow truthiness check: `if result: ...` succeeds only on Success."""
        return self.is_success()

    def __repr__(self) -> str:
        match self:
            case Success(v):
                return f"Success({v!r})"
            case Failure(err):
                return f"Failure({err.code.value}: {err.message!r})"
        raise TypeError("unreachable")  # pragma: no cover

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        match (self, other):
            case (Success(a), Success(b)):
                return a == b
            case (Failure(a), Failure(b)):
                return a.code == b.code and a.message == b.message
            case _:
                return False


@dataclass(frozen=True, slots=True)
class Success(Result[T]):
    """The success track — wraps a value of type T."""

    _value: T

    def __init__(self, value: T) -> None:
        if value is None:
            raise TypeError("Success value must not be None")
        object.__setattr__(self, "_value", value)

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Success):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Success", self._value))


# Enable structural pattern matching: case Success(value)
Success.__match_args__ = ("_value",)


@dataclass(frozen=True, slots=True)
class Failure(Result[T]):
    """The failure track — wraps a FailureDescription."""

    _error: FailureDescription

    def __init__(self, error: FailureDescription) -> None:
        if error is None:
            raise TypeError("Failure error must not be None")
        object.__setattr__(self, "_error", error)

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Failure):
            return self._error.code == other._error.code and self._error.message == other._error.message
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Failure", self._error.code, self._error.message))


# Enable structural pattern matching: case Failure(error)
Failure.__match_args__ = ("_error",)
