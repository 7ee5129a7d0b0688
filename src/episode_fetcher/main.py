"""
Application entry point — wires dependencies and runs the episode pipeline.

Composition root: creates the concrete transport, injects it into the
Webservice, starts the two-step fetch and waits for its single Result.

This is the ONLY place where concrete classes are instantiated.
Everything else depends on the Transport protocol.

Responsibilities:
  1. Load and validate configuration from environment
  2. Configure structlog
  3. Create the HTTP transport and the Webservice
  4. Run load_episode_details and block until it settles
  5. Print the details (exit 0) or log the failure (exit 1)
"""

from __future__ import annotations

import logging
import sys
import threading

import structlog
from railfuture.result import Failure, Result, Success

from episode_fetcher import __version__
from episode_fetcher.adapters.http_transport import HttpTransport
from episode_fetcher.config import AppSettings
from episode_fetcher.domain.models import EpisodeDetails
from episode_fetcher.pipeline import load_episode_details
from episode_fetcher.webservice import Webservice


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured logging.

    Colored, human-readable console output on stderr, so stdout carries only
    the fetched result. Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def run(settings: AppSettings, transport: HttpTransport) -> Result[EpisodeDetails]:
    """Run the pipeline on `transport` and block until its Result arrives."""
    settled = threading.Event()
    outcome: list[Result[EpisodeDetails]] = []

    def _on_result(result: Result[EpisodeDetails]) -> None:
        outcome.append(result)
        settled.set()

    load_episode_details(
        Webservice(transport),
        base_url=settings.http.base_url,
        index=settings.episode_index,
    ).on_result(_on_result)

    # Each fetch settles within the transport timeout and every queued callback runs.
    settled.wait()
    return outcome[0]


def main() -> None:
    """Wire dependencies, fetch the episode details and print them."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        base_url=settings.http.base_url,
        episode_index=settings.episode_index,
    )

    with HttpTransport.create(
        timeout=settings.http.timeout_seconds,
        max_workers=settings.http.max_workers,
    ) as transport:
        result = run(settings, transport)

    match result:
        case Success(details):
            log.info("app.result", title=details.title)
            print(details.title)  # noqa: T201
            print(details.description)  # noqa: T201
        case Failure(error):
            log.error("app.failed", code=error.code.value, failure=error.message)
            sys.exit(1)


if __name__ == "__main__":
    main()
