"""
Domain models — immutable value objects for episodes and fetch metadata.

These are pure value objects with no behavior beyond self-validation.
Each JSON-backed model knows how to build itself from a decoded JSON value
and returns None (never raises) when the value does not have the expected
shape; the Resource layer turns that None into a PARSE_ERROR failure.

All models are frozen dataclasses (immutable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

type JSONDictionary = dict[str, Any]


def _string_fields(obj: Any, *names: str) -> tuple[str, ...] | None:
    """Return the named fields if obj is a JSON object holding all of them as strings."""
    if not isinstance(obj, dict):
        return None
    values = tuple(obj.get(name) for name in names)
    if not all(isinstance(value, str) for value in values):
        return None
    return values  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class Episode:
    """
    One entry of the episode list (`GET <base>/episodes.json`).

    Both fields are required strings:
        {"id": "42", "title": "Networking"}
    """

    id: str
    title: str

    @classmethod
    def from_json(cls, obj: Any) -> Episode | None:
        fields = _string_fields(obj, "id", "title")
        if fields is None:
            return None
        episode_id, title = fields
        return cls(id=episode_id, title=title)


@dataclass(frozen=True, slots=True)
class EpisodeDetails:
    """
    Full details of one episode (`GET <base>/episodes/<id>.json`).

        {"title": "Networking", "description": "Loading resources"}
    """

    title: str
    description: str

    @classmethod
    def from_json(cls, obj: Any) -> EpisodeDetails | None:
        fields = _string_fields(obj, "title", "description")
        if fields is None:
            return None
        title, description = fields
        return cls(title=title, description=description)


@dataclass(frozen=True, slots=True)
class ResponseMetadata:
    """
    What the transport learned about a response besides its body.

    Carried next to the raw bytes in a successful fetch; parsers ignore it.
    """

    url: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")
