"""
Resource — a declarative description of one fetchable, parsable value.

A Resource pairs an address with a pure parse function from raw bytes to a
typed value (or None when the bytes don't describe one). It carries no
mutable state, so the same Resource can be loaded any number of times.

    Resource(address, parse)                      # bytes → A | None
    Resource.from_json(address, parse_json)       # bytes → JSON → A | None
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

A = TypeVar("A")
B = TypeVar("B")


@dataclass(frozen=True, slots=True)
class Resource(Generic[A]):
    """
    Address plus parse function for a value of type A.

    `parse` must be side-effect free and must return None, not raise,
    when the payload does not have the expected shape.
    """

    address: str
    parse: Callable[[bytes], Optional[A]]

    @classmethod
    def from_json(cls, address: str, parse_json: Callable[[Any], Optional[A]]) -> Resource[A]:
        """
        Resource whose payload is JSON.

        Malformed JSON (or non-UTF-8 bytes) parses to None; otherwise the
        decoded value is handed to `parse_json`.
        """
        return cls(address=address, parse=_JsonParser(parse_json))

    def map(self, transform: Callable[[A], Optional[B]]) -> Resource[B]:
        """Same address; the parsed value is post-processed by `transform`."""
        return Resource(address=self.address, parse=_ThenParser(self.parse, transform))


@dataclass(frozen=True, slots=True)
class _JsonParser(Generic[A]):
    parse_json: Callable[[Any], Optional[A]]

    def __call__(self, data: bytes) -> Optional[A]:
        try:
            decoded = json.loads(data)
        except ValueError:
            return None
        return self.parse_json(decoded)


@dataclass(frozen=True, slots=True)
class _ThenParser(Generic[A, B]):
    first: Callable[[bytes], Optional[A]]
    then: Callable[[A], Optional[B]]

    def __call__(self, data: bytes) -> Optional[B]:
        parsed = self.first(data)
        if parsed is None:
            return None
        return self.then(parsed)
