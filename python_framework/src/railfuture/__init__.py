"""
railfuture — Result and Future combinators for callback-based async chains.

Explicit, composable error handling that also works across asynchronous
steps: a Future settles once with a Result, and failures short-circuit
through every derived future.

    from railfuture import Future, Result

    def fetch(address: str) -> Future[bytes]:
        return Future(lambda complete: complete(Result.success(b"[]")))

    details = (
        fetch("http://localhost:8000/episodes.json")
        .map(parse_episodes)
        .flat_map(lambda episodes: fetch(details_address(episodes[0])))
    )
    details.on_result(print)
"""

from railfuture.result import Result, Success, Failure
from railfuture.failure import ErrorCode, FailureDescription
from railfuture.future import Future, FutureAlreadyCompletedError
from railfuture.result_failures import ResultFailures
from railfuture.assertions import FutureAssertions, ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "Future",
    "FutureAlreadyCompletedError",
    "ResultFailures",
    "ResultAssertions",
    "FutureAssertions",
]

__version__ = "1.0.0"
