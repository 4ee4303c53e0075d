"""Terminal tools for a running CenterStage API.

``centerstage-present`` fetches a project's approved submissions and cycles
through them on stdout, re-polling in the background the same way the browser
presentation page does. ``centerstage-review`` watches a project's review queue
and prints a line whenever new submissions are waiting.
"""

import argparse
import asyncio
import logging
import os
import random
import sys
from collections.abc import Callable
from uuid import UUID

from centerstage.adapters.centerstage_client import (
    CenterStageClient,
    HttpxCenterStageClient,
    ReviewClient,
)
from centerstage.app_logging import configure_logging
from centerstage.domain.submissions import Submission, SubmissionStatus
from centerstage.services.presentation import PresentationPoller
from centerstage.services.review import NewPendingNotification, ReviewQueuePoller
from centerstage.services.slideshow import (
    SlideshowRunner,
    SlideshowSequencer,
    scaled_font_size,
)

_logger = logging.getLogger(__name__)

HOLDING_MESSAGE = "Waiting for submissions..."


def render_slide(sequencer: SlideshowSequencer) -> str:
    """Return the text shown for the current slide."""
    current = sequencer.current
    if current is None:
        return HOLDING_MESSAGE
    size = scaled_font_size(current.comment, sequencer.config.font_size)
    byline = current.full_name
    if current.social_handle:
        byline = f"{byline} (@{current.social_handle.lstrip('@')})"
    lines = [f'"{current.comment}"', f"  - {byline}", f"  [{size:g}px]"]
    if current.photo_url:
        lines.append(f"  photo: {current.photo_url}")
    if current.video_url:
        lines.append(f"  video: {current.video_url}")
    return "\n".join(lines)


async def run_presentation(
    client: CenterStageClient,
    slug: str,
    poll_seconds: float = 30,
    run_for: float | None = None,
    output: Callable[[str], None] = print,
    rng: random.Random | None = None,
) -> SlideshowSequencer:
    """Show a project's slideshow until cancelled or ``run_for`` elapses."""
    project, config = await client.fetch_public_project(slug)
    submissions = await client.fetch_approved(project.id)
    _logger.info(
        "Presenting %s with %s approved submissions", project.slug, len(submissions)
    )
    sequencer = SlideshowSequencer(config, submissions, rng=rng or random.Random())
    shown: dict[str, str | None] = {"text": None}

    def show(runner: SlideshowRunner) -> None:
        text = render_slide(runner.sequencer)
        if shown["text"] == text:
            return
        shown["text"] = text
        output(text)

    runner = SlideshowRunner(sequencer, on_change=show)

    async def fetch_approved() -> list[Submission]:
        return await client.fetch_approved(project.id)

    poller = PresentationPoller(fetch_approved, runner, interval_seconds=poll_seconds)
    runner.start()
    poller.start()
    try:
        if run_for is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(run_for)
    finally:
        await poller.stop()
        runner.stop()
    return sequencer


def build_parser() -> argparse.ArgumentParser:
    """Return the command line parser."""
    parser = argparse.ArgumentParser(
        prog="centerstage-present",
        description="Show a CenterStage project's approved submissions.",
    )
    parser.add_argument("slug", help="project slug")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="CenterStage API base URL",
    )
    parser.add_argument(
        "--poll-seconds",
        type=float,
        default=30,
        help="seconds between submission refreshes",
    )
    parser.add_argument(
        "--run-for",
        type=float,
        default=None,
        help="stop after this many seconds",
    )
    parser.add_argument("--verbose", action="store_true", help="log debug output")
    return parser


async def _present(args: argparse.Namespace) -> None:
    client = HttpxCenterStageClient.create(args.base_url)
    try:
        await run_presentation(
            client, args.slug, poll_seconds=args.poll_seconds, run_for=args.run_for
        )
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    """Run the terminal presentation."""
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        asyncio.run(_present(args))
    except KeyboardInterrupt:
        return 0
    except Exception:
        _logger.exception("Presentation stopped")
        return 1
    return 0


def format_notification(notification: NewPendingNotification) -> str:
    """Return the line printed when new submissions arrive."""
    noun = "submission" if notification.delta == 1 else "submissions"
    return (
        f"{notification.delta} new {noun} waiting for review "
        f"({notification.pending} pending)"
    )


async def watch_review_queue(
    client: ReviewClient,
    project_id: UUID,
    poll_seconds: float = 12,
    run_for: float | None = None,
    output: Callable[[str], None] = print,
) -> ReviewQueuePoller:
    """Poll a project's review counts until cancelled or ``run_for`` elapses."""

    async def fetch_counts() -> dict[str, int]:
        return await client.fetch_counts(project_id)

    async def fetch_list(status: SubmissionStatus) -> list[Submission]:
        return await client.fetch_list(project_id, status)

    poller = ReviewQueuePoller(
        fetch_counts,
        fetch_list,
        on_notification=lambda notification: output(
            format_notification(notification)
        ),
        interval_seconds=poll_seconds,
    )
    await poller.refresh_list()
    output(f"{len(poller.submissions)} pending submissions")
    poller.start()
    try:
        if run_for is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(run_for)
    finally:
        await poller.stop()
    return poller


def build_review_parser() -> argparse.ArgumentParser:
    """Return the review watcher's command line parser."""
    parser = argparse.ArgumentParser(
        prog="centerstage-review",
        description="Watch a CenterStage project's review queue.",
    )
    parser.add_argument("project_id", type=UUID, help="project id")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="CenterStage API base URL",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("CENTERSTAGE_TOKEN"),
        help="admin access token (defaults to $CENTERSTAGE_TOKEN)",
    )
    parser.add_argument(
        "--poll-seconds",
        type=float,
        default=12,
        help="seconds between count polls",
    )
    parser.add_argument(
        "--run-for",
        type=float,
        default=None,
        help="stop after this many seconds",
    )
    parser.add_argument("--verbose", action="store_true", help="log debug output")
    return parser


async def _review(args: argparse.Namespace) -> None:
    client = HttpxCenterStageClient.create(args.base_url, access_token=args.token)
    try:
        await watch_review_queue(
            client,
            args.project_id,
            poll_seconds=args.poll_seconds,
            run_for=args.run_for,
        )
    finally:
        await client.close()


def review_main(argv: list[str] | None = None) -> int:
    """Run the review queue watcher."""
    args = build_review_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    if not args.token:
        _logger.error("An access token is required (--token or CENTERSTAGE_TOKEN)")
        return 2
    try:
        asyncio.run(_review(args))
    except KeyboardInterrupt:
        return 0
    except Exception:
        _logger.exception("Review watcher stopped")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
