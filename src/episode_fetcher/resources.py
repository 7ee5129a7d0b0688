"""
Episode resources — where episode data lives and how to parse it.

  GET <base>/episodes.json       → [{"id": str, "title": str}, ...]
  GET <base>/episodes/<id>.json  → {"title": str, "description": str}

A payload with a missing or mistyped field parses to None, so loading it
fails with PARSE_ERROR; one bad list element fails the whole list.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from episode_fetcher.domain.models import Episode, EpisodeDetails
from episode_fetcher.resource import Resource


def _join(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path}"


def _parse_episode_list(json_value: Any) -> list[Episode] | None:
    if not isinstance(json_value, list):
        return None
    episodes: list[Episode] = []
    for item in json_value:
        episode = Episode.from_json(item)
        if episode is None:
            return None
        episodes.append(episode)
    return episodes


def all_episodes(base_url: str) -> Resource[list[Episode]]:
    """The episode list."""
    return Resource.from_json(_join(base_url, "episodes.json"), _parse_episode_list)


def episode_details(base_url: str, episode: Episode) -> Resource[EpisodeDetails]:
    """Details of one episode; the address is derived from its id."""
    return Resource.from_json(
        _join(base_url, f"episodes/{quote(episode.id, safe='')}.json"),
        EpisodeDetails.from_json,
    )
