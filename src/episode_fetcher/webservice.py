"""
Webservice — binds a Transport to Resources.

load(resource) fetches the resource's address and parses the body:

  transport.fetch(address)          Future[(bytes, metadata)]
    → map_result(parse body)        Future[A]

Transport failures pass through unchanged; a parse returning None becomes
Failure(PARSE_ERROR) naming the address. Multi-step flows chain further
load() calls with .flat_map().
"""

from __future__ import annotations

from functools import partial
from typing import TypeVar

import structlog
from railfuture.future import Future
from railfuture.result import Result
from railfuture.result_failures import ResultFailures

from episode_fetcher.domain.ports import FetchedPayload, Transport
from episode_fetcher.resource import Resource

A = TypeVar("A")

log = structlog.get_logger()


class Webservice:
    """Load Resources through an injected Transport."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def load(self, resource: Resource[A]) -> Future[A]:
        """Fetch `resource.address`, then parse the body with `resource.parse`."""
        log.info("webservice.load_started", address=resource.address)
        return self._transport.fetch(resource.address).map_result(partial(_parse_payload, resource))


def _parse_payload(resource: Resource[A], payload: FetchedPayload) -> Result[A]:
    body, _metadata = payload
    parsed = resource.parse(body)
    if parsed is None:
        log.warning("webservice.parse_failed", address=resource.address, size_bytes=len(body))
        return ResultFailures.parse_error(f"failed to parse response from {resource.address}")
    return Result.success(parsed)
