"""
HTTP adapter — raw GET requests via httpx, delivered as Futures.

Adapter layer — implements the Transport port. Each fetch() submits exactly
one GET to a thread pool and returns a pending Future; the worker thread
completes it when the response (or the error) arrives.

Outcomes:
  - 2xx with a non-empty body → Success((body, ResponseMetadata))
  - 2xx with an empty body    → Failure(NO_DATA)
  - network error, timeout, non-2xx status → Failure(TRANSPORT_ERROR)

All HTTP errors are captured into Result failures — no exceptions
leak to the composition layer. No retries: one call, one request.
"""

from __future__ import annotations

import concurrent.futures
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from types import TracebackType

import httpx
import structlog
from railfuture.future import CompletionSink, Future
from railfuture.result import Result
from railfuture.result_failures import ResultFailures

from episode_fetcher.domain.models import ResponseMetadata
from episode_fetcher.domain.ports import FetchedPayload

log = structlog.get_logger()


class HttpTransport:
    """
    Fetch raw bytes over HTTP GET on a background executor.

    Implements the Transport port. The client and executor are injected so
    tests (and callers sharing a pool) control their lifetime; use
    HttpTransport.create() to get a self-owned pair.
    """

    def __init__(self, client: httpx.Client, executor: Executor) -> None:
        self._client = client
        self._executor = executor

    @classmethod
    def create(cls, timeout: float = 30.0, max_workers: int = 4) -> HttpTransport:
        """Build a transport with its own httpx.Client and thread pool."""
        return cls(
            client=httpx.Client(timeout=timeout, follow_redirects=True),
            executor=ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="http-transport"),
        )

    def fetch(self, address: str) -> Future[FetchedPayload]:
        """
        Start one GET of `address` and return its pending Future.

        The Future is completed from an executor thread with
        Success((body, metadata)) or a TRANSPORT_ERROR / NO_DATA failure.
        """
        log.info("transport.fetch_started", address=address)
        return Future(partial(self._start_fetch, address))

    def close(self) -> None:
        """Wait for in-flight requests, then release the pool and the client."""
        self._executor.shutdown(wait=True)
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ──────────────────────── Internals ────────────────────────

    def _start_fetch(self, address: str, complete: CompletionSink[FetchedPayload]) -> None:
        try:
            work = self._executor.submit(self._do_get, address)
        except RuntimeError as e:
            # Executor already shut down.
            log.error("transport.fetch_rejected", address=address, error=str(e))
            complete(ResultFailures.transport_error(f"GET {address} not started: {e}", e))
            return
        work.add_done_callback(partial(_deliver, address, complete))

    def _do_get(self, address: str) -> Result[FetchedPayload]:
        """HTTP GET on a worker thread — httpx errors become failures."""
        try:
            response = self._client.get(address)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.warning("transport.fetch_failed", address=address, error=str(e))
            return ResultFailures.transport_error(f"GET {address} failed: {e}", e)

        body = response.content
        if not body:
            log.warning("transport.no_data", address=address, status_code=response.status_code)
            return ResultFailures.no_data(f"No data received from {address}")

        metadata = ResponseMetadata(
            url=str(response.url),
            status_code=response.status_code,
            headers=dict(response.headers),
        )
        log.info(
            "transport.fetch_completed",
            address=address,
            status_code=response.status_code,
            size_bytes=len(body),
        )
        return Result.success((body, metadata))


def _deliver(
    address: str,
    complete: CompletionSink[FetchedPayload],
    work: concurrent.futures.Future[Result[FetchedPayload]],
) -> None:
    """Done-callback of the executor job: hand its Result to the Future."""
    try:
        result = work.result()
    except Exception as e:
        log.error("transport.worker_failed", address=address, error=str(e))
        result = ResultFailures.from_exception(f"GET {address} failed: {e}", e)
    complete(result)
