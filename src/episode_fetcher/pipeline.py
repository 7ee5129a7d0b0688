"""
Pipeline — the two-step dependent fetch, composed with Futures.

  load(all_episodes)
    → pick episodes[index]
      → load(episode_details(episode))

Each stage settles a Future with a Result. Failures short-circuit
automatically: a failed list fetch or parse means the details are never
requested.
"""

from __future__ import annotations

import structlog
from railfuture.future import Future
from railfuture.result_failures import ResultFailures

from episode_fetcher.domain.models import Episode, EpisodeDetails
from episode_fetcher.resources import all_episodes, episode_details
from episode_fetcher.webservice import Webservice

log = structlog.get_logger()


def _load_details(
    webservice: Webservice,
    base_url: str,
    index: int,
    episodes: list[Episode],
) -> Future[EpisodeDetails]:
    """Second stage: load details of the chosen episode, or fail NOT_FOUND."""
    if not 0 <= index < len(episodes):
        log.warning("pipeline.episode_missing", index=index, available=len(episodes))
        return Future.from_result(ResultFailures.not_found("Episode", f"index {index}"))
    episode = episodes[index]
    log.info("pipeline.episode_selected", episode_id=episode.id, title=episode.title)
    return webservice.load(episode_details(base_url, episode))


def load_episode_details(
    webservice: Webservice,
    base_url: str,
    index: int = 0,
) -> Future[EpisodeDetails]:
    """
    Load the episode list, then the details of the episode at `index`.

    Returns a Future that settles with Success(EpisodeDetails), or with the
    failure of the first stage that failed (transport, parse, or NOT_FOUND
    for an index outside the list).
    """
    return webservice.load(all_episodes(base_url)).flat_map(
        lambda episodes: _load_details(webservice, base_url, index, episodes)
    )
