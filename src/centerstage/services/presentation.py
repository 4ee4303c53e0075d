"""Keeps a running presentation's submission list fresh."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from centerstage.domain.submissions import Submission
from centerstage.services.slideshow import SlideshowRunner

_logger = logging.getLogger(__name__)

ApprovedFetcher = Callable[[], Awaitable[list[Submission]]]


@dataclass
class PresentationPoller:
    """Re-fetches approved submissions on a fixed interval.

    Each successful fetch replaces the runner's list wholesale. A failed fetch
    is logged and the previous list stays on screen.
    """

    fetch_approved: ApprovedFetcher
    runner: SlideshowRunner
    interval_seconds: float = 30
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    async def refresh_once(self) -> bool:
        """Fetch once and apply the result; return False when the fetch failed."""
        try:
            submissions = await self.fetch_approved()
        except Exception:
            _logger.exception("Error polling for submissions")
            return False
        self.runner.refresh(submissions)
        return True

    async def run(self) -> None:
        """Poll until cancelled; the first fetch happens after one interval."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.refresh_once()

    def start(self) -> asyncio.Task[None]:
        """Start polling in the background on the running loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
