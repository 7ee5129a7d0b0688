"""
Future — a single-assignment asynchronous Result with callback dispatch.

A Future[T] starts pending and settles exactly once with a Result[T].
The producer receives a one-shot completion sink when the future is
constructed; consumers register callbacks with .on_result() or derive new
futures with .map() / .map_result() / .flat_map().

    Future(start)            start(complete) runs synchronously, may hand
        │                    `complete` to a worker thread
        ▼
    ┌────────────┐  complete(result)  ┌──────────────────┐
    │  Pending   │───────────────────▶│ Completed(result)│
    │ [cb1, cb2] │  cb1(result),      │  (queue dropped) │
    └────────────┘  cb2(result)       └──────────────────┘

Failures travel through derived futures the same way they travel through
Result.map / Result.flat_map: once a stage fails, no later transform runs
and the same FailureDescription reaches the end of the chain.

Completing a future twice is a broken producer, not a failed computation:
it raises FutureAlreadyCompletedError instead of producing a Failure.

Thread model: no threads are created here. The completion sink may be
called from any thread; state transitions are serialized by a per-future
lock and callbacks always run outside of it, on the completing thread (or
on the registering thread when the future has already settled).

Depth limit: completing a pending chain dispatches stage by stage on the
same stack, a few frames per derived future. A chain of several hundred
stages hung off a still-pending future raises RecursionError when it
completes. Stages derived from an already-completed future run at once
and do not nest.
"""

from __future__ import annotations

import reprlib
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar

from railfuture.failure import FailureDescription
from railfuture.result import Failure, Result, Success
from railfuture.result_failures import ResultFailures

T = TypeVar("T")
U = TypeVar("U")

Callback = Callable[[Result[T]], None]
CompletionSink = Callable[[Result[T]], None]


class FutureAlreadyCompletedError(AssertionError):
    """Raised when a producer calls the completion sink more than once."""


# ──────────────────────── State machine ────────────────────────


@dataclass(slots=True)
class _Pending(Generic[T]):
    callbacks: list[Callback[T]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _Completed(Generic[T]):
    result: Result[T]


class Future(Generic[T]):
    """
    Single-assignment container for an asynchronous Result.

    Usage:
        >>> seen = []
        >>> Future.successful(2).map(lambda x: x * 10).on_result(seen.append)
        >>> seen
        [Success(20)]

    Producers wrap their work in a start routine:

        def start(complete):
            executor.submit(work).add_done_callback(
                lambda f: complete(Result.success(f.result()))
            )

        future = Future(start)
    """

    def __init__(self, start: Callable[[CompletionSink[T]], Any]) -> None:
        self._lock = threading.Lock()
        self._state: _Pending[T] | _Completed[T] = _Pending()
        start(self._complete)

    # ──────────────────────── Completion ────────────────────────

    def _complete(self, result: Result[T]) -> None:
        """
        Settle the future and dispatch every queued callback in order.

        Raises FutureAlreadyCompletedError on a second call. A callback that
        raises does not stop dispatch: every queued callback still runs, then
        the first exception is re-raised to the completing caller.
        """
        if not isinstance(result, Result):
            raise TypeError(f"Future must be completed with a Result, got {type(result).__name__}")

        with self._lock:
            match self._state:
                case _Completed(previous):
                    raise FutureAlreadyCompletedError(
                        f"Future already completed with {previous!r}; refusing {result!r}"
                    )
                case _Pending(callbacks):
                    self._state = _Completed(result)

        first_error: Exception | None = None
        for callback in callbacks:
            try:
                callback(result)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    # ──────────────────────── Observation ────────────────────────

    def on_result(self, callback: Callback[T]) -> None:
        """
        Deliver the outcome to `callback` exactly once.

        Already completed: the callback runs immediately, on this thread.
        Still pending: it is queued behind earlier registrations and runs
        when the producer completes the future.
        """
        with self._lock:
            match self._state:
                case _Pending(callbacks):
                    callbacks.append(callback)
                    return
                case _Completed(result):
                    pass
        callback(result)

    def is_completed(self) -> bool:
        with self._lock:
            return isinstance(self._state, _Completed)

    def result(self) -> Optional[Result[T]]:
        """The cached outcome, or None while the future is pending."""
        with self._lock:
            match self._state:
                case _Completed(result):
                    return result
        return None

    # ──────────────────────── Composition ────────────────────────

    def map(self, transform: Callable[[T], Optional[U]]) -> Future[U]:
        """
        Derive a future from the success value.

        A transform returning None fails the derived future with
        TRANSFORM_ERROR naming the transform and the offending value.
        A failure upstream is forwarded unchanged and the transform is
        never called.

            webservice.load(resource).map(lambda episodes: episodes[0] if episodes else None)
        """
        return Future(partial(self._derive, partial(_map_step, transform)))

    def map_result(self, transform: Callable[[T], Result[U]]) -> Future[U]:
        """
        Derive a future through a fallible transform.

        Unlike .map(), the transform returns its own Result, so the failure
        it reports (code and message) reaches the derived future intact.
        """
        return Future(partial(self._derive, partial(_map_result_step, transform)))

    def flat_map(self, transform: Callable[[T], Future[U]]) -> Future[U]:
        """
        Sequence a dependent asynchronous step.

        On success, `transform(value)` starts the next future and its
        eventual outcome becomes the derived future's outcome. On failure,
        the derived future fails immediately and `transform` is not called.

            (
                webservice.load(all_episodes(base_url))
                .flat_map(lambda episodes: webservice.load(episode_details(base_url, episodes[0])))
            )
        """
        return Future(partial(self._derive, partial(_flat_map_step, transform)))

    def peek(self, action: Callable[[T], Any]) -> Future[T]:
        """Run a side effect on the success value; the outcome is passed through."""
        return Future(partial(self._derive, partial(_peek_step, action)))

    def _derive(
        self,
        step: Callable[[CompletionSink[U], Result[T]], None],
        complete: CompletionSink[U],
    ) -> None:
        # The child never references its parent: the parent only holds
        # `step` bound to the child's sink, and drops it after dispatch.
        self.on_result(partial(step, complete))

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def from_result(result: Result[T]) -> Future[T]:
        """A future that is already completed with `result`."""
        return Future(lambda complete: complete(result))

    @staticmethod
    def successful(value: T) -> Future[T]:
        return Future.from_result(Success(value))

    @staticmethod
    def failed(error: FailureDescription) -> Future[T]:
        return Future.from_result(Failure(error))

    # ──────────────────────── Dunder methods ────────────────────────

    def __repr__(self) -> str:
        with self._lock:
            state = self._state
        match state:
            case _Completed(result):
                return f"Future(completed={result!r})"
            case _Pending(callbacks):
                return f"Future(pending, callbacks={len(callbacks)})"
        raise TypeError("unreachable")  # pragma: no cover


# ──────────────────────── Continuation steps ────────────────────────
#
# Each step receives the derived future's sink and the parent's outcome.
# Transforms are called inside try/except so that a raising transform still
# completes the derived future; the sink itself is always called outside
# of it, otherwise an exception from a downstream callback would be
# mistaken for a transform failure and complete the future a second time.


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


def _transform_raised(transform: Callable[..., Any], value: Any, exc: Exception) -> Result[Any]:
    return ResultFailures.transform_error(
        f"{_describe(transform)} raised {type(exc).__name__} for {reprlib.repr(value)}: {exc}",
        exc,
    )


def _map_step(
    transform: Callable[[T], Optional[U]],
    complete: CompletionSink[U],
    result: Result[T],
) -> None:
    match result:
        case Success(value):
            try:
                mapped = transform(value)
            except Exception as exc:
                outcome = _transform_raised(transform, value, exc)
            else:
                if mapped is None:
                    outcome = ResultFailures.transform_error(
                        f"failed to transform {reprlib.repr(value)} with {_describe(transform)}"
                    )
                else:
                    outcome = Result.success(mapped)
            complete(outcome)
        case Failure(error):
            complete(Failure(error))


def _map_result_step(
    transform: Callable[[T], Result[U]],
    complete: CompletionSink[U],
    result: Result[T],
) -> None:
    match result:
        case Success(value):
            try:
                outcome = transform(value)
            except Exception as exc:
                outcome = _transform_raised(transform, value, exc)
            complete(outcome)
        case Failure(error):
            complete(Failure(error))


def _flat_map_step(
    transform: Callable[[T], Future[U]],
    complete: CompletionSink[U],
    result: Result[T],
) -> None:
    match result:
        case Success(value):
            try:
                dependent = transform(value)
            except Exception as exc:
                complete(_transform_raised(transform, value, exc))
                return
            dependent.on_result(complete)
        case Failure(error):
            complete(Failure(error))


def _peek_step(
    action: Callable[[T], Any],
    complete: CompletionSink[T],
    result: Result[T],
) -> None:
    match result:
        case Success(value):
            try:
                action(value)
            except Exception as exc:
                complete(_transform_raised(action, value, exc))
                return
    complete(result)
