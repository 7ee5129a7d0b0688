"""
Tests for Future — single-assignment async Result with callback dispatch.

Tests cover:
  - Construction (start routine runs synchronously, receives the sink)
  - Single completion (second completion is a fatal contract violation)
  - Callback ordering and late registration
  - map / map_result / flat_map / peek composition
  - Error short-circuiting across composed steps
  - Completion from another thread
"""

from __future__ import annotations

import gc
import threading
import weakref
from typing import Callable

import pytest

from railfuture import (
    ErrorCode,
    FailureDescription,
    Future,
    FutureAlreadyCompletedError,
    FutureAssertions,
    Result,
    ResultAssertions,
)


def _manual() -> tuple[Future, Callable[[Result], None]]:
    """A pending future plus its completion sink, for driving tests by hand."""
    sinks: list[Callable[[Result], None]] = []
    future = Future(sinks.append)
    return future, sinks[0]


def _error(message: str = "boom") -> FailureDescription:
    return FailureDescription(ErrorCode.TRANSPORT_ERROR, message)


# ═══════════════════════════════════════════════════════════════
# 1. Construction & Completion
# ═══════════════════════════════════════════════════════════════


class TestConstruction:
    def test_start_runs_synchronously_during_construction(self):
        calls: list[str] = []
        Future(lambda complete: calls.append("started"))
        assert calls == ["started"]

    def test_new_future_is_pending(self):
        future, _ = _manual()
        FutureAssertions.assert_pending(future)
        assert future.result() is None

    def test_start_may_complete_immediately(self):
        future = Future(lambda complete: complete(Result.success(1)))
        assert future.is_completed()
        assert future.result() == Result.success(1)

    def test_factories_are_pre_completed(self):
        assert Future.successful("x").result() == Result.success("x")
        error = _error()
        assert Future.failed(error).result().error() is error
        assert Future.from_result(Result.success(3)).result() == Result.success(3)


class TestSingleCompletion:
    def test_second_completion_is_rejected(self):
        """
        GIVEN a producer that calls the completion sink twice
        WHEN the second call happens
        THEN FutureAlreadyCompletedError is raised and the first result is kept.
        """
        future, complete = _manual()
        complete(Result.success(1))
        with pytest.raises(FutureAlreadyCompletedError, match="already completed"):
            complete(Result.success(2))
        assert future.result() == Result.success(1)

    def test_double_completion_inside_start_is_rejected(self):
        def start(complete):
            complete(Result.success(1))
            complete(Result.success(2))

        with pytest.raises(FutureAlreadyCompletedError):
            Future(start)

    def test_double_completion_is_an_assertion_error_not_a_failure(self):
        assert issubclass(FutureAlreadyCompletedError, AssertionError)

    def test_callbacks_do_not_fire_again_on_rejected_completion(self):
        future, complete = _manual()
        seen: list[Result] = []
        future.on_result(seen.append)
        complete(Result.success(1))
        with pytest.raises(FutureAlreadyCompletedError):
            complete(Result.failure_from(_error()))
        assert seen == [Result.success(1)]

    def test_completion_requires_a_result(self):
        _, complete = _manual()
        with pytest.raises(TypeError, match="must be completed with a Result"):
            complete(42)


# ═══════════════════════════════════════════════════════════════
# 2. Callback dispatch
# ═══════════════════════════════════════════════════════════════


class TestCallbackOrdering:
    def test_callbacks_fire_in_registration_order(self):
        """
        GIVEN callbacks C1, C2, C3 registered before completion
        WHEN the future completes
        THEN they run in order C1, C2, C3, each exactly once.
        """
        future, complete = _manual()
        order: list[str] = []
        future.on_result(lambda r: order.append("C1"))
        future.on_result(lambda r: order.append("C2"))
        future.on_result(lambda r: order.append("C3"))
        assert order == []

        complete(Result.success("done"))

        assert order == ["C1", "C2", "C3"]

    def test_all_callbacks_receive_the_same_result(self):
        future, complete = _manual()
        seen: list[Result] = []
        future.on_result(seen.append)
        future.on_result(seen.append)
        result = Result.success(7)
        complete(result)
        assert seen == [result, result]
        assert seen[0] is seen[1]

    def test_callbacks_run_within_the_completion_call(self):
        future, complete = _manual()
        seen: list[Result] = []
        future.on_result(seen.append)
        complete(Result.success(1))
        assert len(seen) == 1

    def test_raising_callback_does_not_starve_later_callbacks(self):
        """
        GIVEN C1 that raises, then a .map() child, then C2
        WHEN the future completes
        THEN the child and C2 still complete, and C1's error reaches the completer.
        """
        future, complete = _manual()

        def observer_bug(result):
            raise RuntimeError("observer bug")

        future.on_result(observer_bug)
        child = future.map(lambda v: v + 1)
        seen: list[Result] = []
        future.on_result(seen.append)

        with pytest.raises(RuntimeError, match="observer bug"):
            complete(Result.success(1))

        assert future.is_completed()
        ResultAssertions.assert_success_value(FutureAssertions.assert_completed(child), 2)
        assert seen == [Result.success(1)]

    def test_first_callback_error_is_the_one_raised(self):
        future, complete = _manual()

        def fail_with(message):
            def callback(result):
                raise ValueError(message)
            return callback

        future.on_result(fail_with("first"))
        future.on_result(fail_with("second"))

        with pytest.raises(ValueError, match="first"):
            complete(Result.success(1))


class TestLateRegistration:
    def test_late_callback_runs_immediately_with_cached_result(self):
        """
        GIVEN an already completed future
        WHEN a callback is registered
        THEN it runs synchronously, before on_result returns.
        """
        future, complete = _manual()
        complete(Result.success("cached"))
        seen: list[Result] = []
        future.on_result(seen.append)
        assert seen == [Result.success("cached")]

    def test_callback_registered_during_dispatch_runs_immediately(self):
        future, complete = _manual()
        seen: list[str] = []
        future.on_result(lambda r: future.on_result(lambda inner: seen.append("nested")))
        complete(Result.success(1))
        assert seen == ["nested"]


# ═══════════════════════════════════════════════════════════════
# 3. map
# ═══════════════════════════════════════════════════════════════


class TestMap:
    @pytest.mark.parametrize("value", [1, "x", [1, 2], {"id": "42"}])
    def test_map_identity_keeps_value(self, value):
        result = FutureAssertions.assert_completed(Future.successful(value).map(lambda v: v))
        ResultAssertions.assert_success_value(result, value)

    def test_map_transforms_value(self):
        result = FutureAssertions.assert_completed(Future.successful(2).map(lambda v: v * 10))
        ResultAssertions.assert_success_value(result, 20)

    def test_map_waits_for_pending_parent(self):
        parent, complete = _manual()
        child = parent.map(lambda v: v + 1)
        FutureAssertions.assert_pending(child)
        complete(Result.success(1))
        ResultAssertions.assert_success_value(FutureAssertions.assert_completed(child), 2)

    def test_map_none_fails_with_transform_error_naming_value(self):
        def first_episode(episodes):
            return None

        result = FutureAssertions.assert_completed(Future.successful([1, 2]).map(first_episode))
        ResultAssertions.assert_failure(result, ErrorCode.TRANSFORM_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "failed to transform")
        ResultAssertions.assert_failure_message_contains(result, "[1, 2]")
        ResultAssertions.assert_failure_message_contains(result, "first_episode")

    def test_map_error_short_circuits(self):
        """
        GIVEN a future pre-completed with Failure(e)
        WHEN composed with .map(f)
        THEN the result is the same Failure(e) and f is never invoked.
        """
        calls: list[object] = []
        error = _error()
        result = FutureAssertions.assert_completed(Future.failed(error).map(calls.append))
        assert result.error() is error
        assert calls == []

    def test_map_transform_raising_becomes_failure(self):
        result = FutureAssertions.assert_completed(Future.successful(0).map(lambda v: 1 / v))
        error = ResultAssertions.assert_failure(result, ErrorCode.TRANSFORM_ERROR)
        assert isinstance(error.exception, ZeroDivisionError)

    def test_map_calls_transform_once_for_many_observers(self):
        calls: list[int] = []
        parent, complete = _manual()
        child = parent.map(lambda v: calls.append(v) or v)
        child.on_result(lambda r: None)
        child.on_result(lambda r: None)
        complete(Result.success(5))
        assert calls == [5]


class TestMapResult:
    def test_map_result_keeps_transform_failure(self):
        def pick(values: list[int]) -> Result[int]:
            return Result.failure(ErrorCode.NOT_FOUND, "empty list")

        result = FutureAssertions.assert_completed(Future.successful([]).map_result(pick))
        ResultAssertions.assert_failure(result, ErrorCode.NOT_FOUND)
        ResultAssertions.assert_failure_message_contains(result, "empty list")

    def test_map_result_success(self):
        result = FutureAssertions.assert_completed(
            Future.successful(3).map_result(lambda v: Result.success(v * 2))
        )
        ResultAssertions.assert_success_value(result, 6)

    def test_map_result_short_circuits(self):
        calls: list[object] = []
        error = _error()
        result = FutureAssertions.assert_completed(Future.failed(error).map_result(calls.append))
        assert result.error() is error
        assert calls == []


# ═══════════════════════════════════════════════════════════════
# 4. flat_map
# ═══════════════════════════════════════════════════════════════


class TestFlatMap:
    def test_flat_map_sequences_dependent_future(self):
        """
        GIVEN future A completing Success(1) and a transform producing B completing Success("x")
        WHEN A.flat_map(transform)
        THEN the result completes Success("x").
        """
        a = Future.successful(1)
        result = FutureAssertions.assert_completed(a.flat_map(lambda v: Future.successful("x")))
        ResultAssertions.assert_success_value(result, "x")

    def test_flat_map_passes_value_to_transform(self):
        seen: list[int] = []

        def next_step(value: int) -> Future[str]:
            seen.append(value)
            return Future.successful(str(value))

        Future.successful(41).flat_map(next_step)
        assert seen == [41]

    def test_flat_map_forwards_dependent_failure(self):
        error = _error("details fetch failed")
        result = FutureAssertions.assert_completed(
            Future.successful(1).flat_map(lambda v: Future.failed(error))
        )
        assert result.error() is error

    def test_flat_map_error_propagates_without_transform(self):
        """
        GIVEN future A completing Failure(e)
        WHEN A.flat_map(transform)
        THEN the result completes Failure(e) and transform is never invoked.
        """
        calls: list[object] = []
        error = _error()

        def transform(value):
            calls.append(value)
            return Future.successful(value)

        result = FutureAssertions.assert_completed(Future.failed(error).flat_map(transform))
        assert result.error() is error
        assert calls == []

    def test_flat_map_waits_for_both_stages(self):
        first, complete_first = _manual()
        second, complete_second = _manual()
        chained = first.flat_map(lambda v: second)

        FutureAssertions.assert_pending(chained)
        complete_first(Result.success(1))
        FutureAssertions.assert_pending(chained)
        complete_second(Result.success("x"))

        ResultAssertions.assert_success_value(FutureAssertions.assert_completed(chained), "x")

    def test_flat_map_transform_raising_becomes_failure(self):
        def broken(value):
            raise KeyError("id")

        result = FutureAssertions.assert_completed(Future.successful({}).flat_map(broken))
        ResultAssertions.assert_failure(result, ErrorCode.TRANSFORM_ERROR)


class TestChainErrorPropagation:
    def test_error_in_middle_skips_every_later_step(self):
        calls: list[str] = []
        error = FailureDescription(ErrorCode.PARSE_ERROR, "bad list")

        def step(name: str):
            def run(value):
                calls.append(name)
                return value
            return run

        result = FutureAssertions.assert_completed(
            Future.successful(1)
            .map(step("a"))
            .flat_map(lambda v: Future.failed(error))
            .map(step("b"))
            .flat_map(lambda v: Future.successful(step("c")(v)))
            .map_result(lambda v: Result.success(step("d")(v)))
        )

        assert result.error() is error
        assert calls == ["a"]


class TestChainDepth:
    def test_long_chain_on_completed_future_does_not_nest(self):
        """
        GIVEN an already-completed future
        WHEN 3000 .map() stages are derived one after another
        THEN each stage settles immediately and the final value is correct.
        """
        future = Future.successful(0)
        for _ in range(3000):
            future = future.map(lambda v: v + 1)
        ResultAssertions.assert_success_value(FutureAssertions.assert_completed(future), 3000)


class TestPeek:
    def test_peek_sees_success_and_passes_it_through(self):
        seen: list[int] = []
        result = FutureAssertions.assert_completed(Future.successful(9).peek(seen.append))
        assert seen == [9]
        ResultAssertions.assert_success_value(result, 9)

    def test_peek_skips_failure(self):
        seen: list[int] = []
        error = _error()
        result = FutureAssertions.assert_completed(Future.failed(error).peek(seen.append))
        assert seen == []
        assert result.error() is error


# ═══════════════════════════════════════════════════════════════
# 5. Threads & lifetime
# ═══════════════════════════════════════════════════════════════


class TestCrossThreadCompletion:
    def test_completion_from_worker_thread_reaches_callbacks(self):
        def start(complete):
            threading.Thread(target=lambda: complete(Result.success("from worker"))).start()

        future = Future(start).map(str.upper)
        result = FutureAssertions.await_result(future)
        ResultAssertions.assert_success_value(result, "FROM WORKER")

    def test_concurrent_registration_fires_each_callback_once(self):
        future, complete = _manual()
        hits: list[int] = []
        lock = threading.Lock()
        barrier = threading.Barrier(9)

        def register(n: int) -> None:
            barrier.wait()
            for _ in range(50):
                future.on_result(lambda r, n=n: _append(lock, hits, n))

        def _append(lk: threading.Lock, target: list[int], n: int) -> None:
            with lk:
                target.append(n)

        threads = [threading.Thread(target=register, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        barrier.wait()
        complete(Result.success(1))
        for t in threads:
            t.join()

        assert len(hits) == 8 * 50


class TestLifetime:
    def test_completed_parent_does_not_keep_child_alive(self):
        parent, complete = _manual()
        child = parent.map(lambda v: v)
        complete(Result.success(1))
        ref = weakref.ref(child)
        del child
        gc.collect()
        assert ref() is None

    def test_child_does_not_keep_parent_alive(self):
        parent = Future(lambda complete: None)
        child = parent.map(lambda v: v)
        ref = weakref.ref(parent)
        del parent
        gc.collect()
        assert ref() is None
        assert child is not None


class TestRepr:
    def test_repr_pending_and_completed(self):
        future, complete = _manual()
        future.on_result(lambda r: None)
        assert repr(future) == "Future(pending, callbacks=1)"
        complete(Result.success(1))
        assert repr(future) == "Future(completed=Success(1))"
