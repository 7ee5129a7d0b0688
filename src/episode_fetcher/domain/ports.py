"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the application needs (contracts) without specifying
HOW it's done (implementation). Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy
the contract simply by implementing the methods — no inheritance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from railfuture.future import Future

from episode_fetcher.domain.models import ResponseMetadata

type FetchedPayload = tuple[bytes, ResponseMetadata]


@runtime_checkable
class Transport(Protocol):
    """
    Port: perform one raw fetch of an address.

    Returns a Future that settles exactly once:
      - Success((body, metadata)) when a non-empty payload was retrieved
      - Failure(TRANSPORT_ERROR) when the fetch itself failed
      - Failure(NO_DATA) when the fetch delivered an empty payload

    Each call starts exactly one I/O operation; implementations do not retry.
    """

    def fetch(self, address: str) -> Future[FetchedPayload]: ...
