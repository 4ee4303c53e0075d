"""Review queue: status tabs, filtering and new-submission polling."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Literal
from uuid import UUID

from centerstage.domain.submissions import Submission, SubmissionStatus
from centerstage.services.submissions import SubmissionService

_logger = logging.getLogger(__name__)

DateRange = Literal["all", "today", "last_7_days", "last_30_days", "custom"]
DATE_RANGES: tuple[DateRange, ...] = (
    "all",
    "today",
    "last_7_days",
    "last_30_days",
    "custom",
)

_END_OF_DAY = time(23, 59, 59, 999000)
_UNSET = object()


@dataclass(frozen=True)
class SubmissionFilter:
    """Free-text and date filter applied to one review tab."""

    query: str = ""
    date_range: DateRange = "all"
    start: date | None = None
    end: date | None = None
    tz: tzinfo = UTC

    def bounds(self, now: datetime) -> tuple[datetime | None, datetime | None]:
        """Return the inclusive ``created_at`` bounds for this filter."""
        local_now = now.astimezone(self.tz)
        if self.date_range == "today":
            midnight = datetime.combine(local_now.date(), time.min, tzinfo=self.tz)
            return midnight, None
        if self.date_range == "last_7_days":
            return now - timedelta(days=7), None
        if self.date_range == "last_30_days":
            return now - timedelta(days=30), None
        if self.date_range == "custom":
            lower = (
                datetime.combine(self.start, time.min, tzinfo=self.tz)
                if self.start
                else None
            )
            upper = (
                datetime.combine(self.end, _END_OF_DAY, tzinfo=self.tz)
                if self.end
                else None
            )
            return lower, upper
        return None, None

    def matches_text(self, submission: Submission) -> bool:
        """Return True when the query appears in the name, handle or comment."""
        needle = self.query.strip().lower()
        if not needle:
            return True
        haystacks = (
            submission.full_name,
            submission.social_handle or "",
            submission.comment,
        )
        return any(needle in value.lower() for value in haystacks)

    def apply(
        self, submissions: Iterable[Submission], now: datetime | None = None
    ) -> list[Submission]:
        """Return the submissions that pass both the text and date filters."""
        lower, upper = self.bounds(now or datetime.now(tz=UTC))
        results = []
        for submission in submissions:
            if not self.matches_text(submission):
                continue
            if lower is not None and submission.created_at < lower:
                continue
            if upper is not None and submission.created_at > upper:
                continue
            results.append(submission)
        return results


@dataclass
class ReviewQueueService:
    """Serves review tabs and inline edits for administrators."""

    submission_service: SubmissionService

    def list_tab(
        self,
        project_id: UUID,
        status: SubmissionStatus,
        submission_filter: SubmissionFilter | None = None,
        now: datetime | None = None,
    ) -> list[Submission]:
        """Return one status tab, newest first, after filtering."""
        submissions = self.submission_service.list_by_status(project_id, status)
        if submission_filter is None:
            return submissions
        return submission_filter.apply(submissions, now)

    def counts(self, project_id: UUID) -> dict[str, int]:
        """Return per-status badge counts."""
        return self.submission_service.counts_by_status(project_id)

    def update_display_attributes(
        self,
        submission_id: UUID,
        display_mode: object = _UNSET,
        custom_timing: object = _UNSET,
    ) -> Submission:
        """Change how an approved submission appears in the slideshow.

        ``custom_timing`` must be a whole number of seconds between 1 and 30,
        or ``None`` to fall back to the project duration.
        """
        payload: dict[str, object] = {}
        if display_mode is not _UNSET:
            payload["display_mode"] = display_mode
        if custom_timing is not _UNSET:
            payload["custom_timing"] = custom_timing
        return self.submission_service.update(submission_id, payload)


@dataclass(frozen=True)
class NewPendingNotification:
    """Raised to the listener when new pending submissions arrived."""

    delta: int
    pending: int


CountsFetcher = Callable[[], Awaitable[dict[str, int]]]
ListFetcher = Callable[[SubmissionStatus], Awaitable[list[Submission]]]


@dataclass
class ReviewQueuePoller:
    """Keeps review counts fresh and announces new pending submissions.

    Polling is best effort: two polls may overlap, so notifications can be
    duplicated or missed and every refresh simply re-fetches. Responses to a
    list request that was superseded by a newer one are dropped.
    """

    fetch_counts: CountsFetcher
    fetch_list: ListFetcher
    on_notification: Callable[[NewPendingNotification], None] | None = None
    interval_seconds: float = 12
    active_tab: SubmissionStatus = "pending"
    counts: dict[str, int] = field(default_factory=dict)
    submissions: list[Submission] = field(default_factory=list)
    _last_pending: int | None = field(default=None, init=False, repr=False)
    _list_generation: int = field(default=0, init=False, repr=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    async def select_tab(self, status: SubmissionStatus) -> None:
        """Switch the active tab and load it."""
        self.active_tab = status
        await self.refresh_list()

    async def refresh_list(self) -> None:
        """Load the active tab, discarding the result if a newer load began."""
        self._list_generation += 1
        generation = self._list_generation
        status = self.active_tab
        try:
            submissions = await self.fetch_list(status)
        except Exception:
            _logger.exception("Failed to load review tab %s", status)
            return
        if generation != self._list_generation:
            _logger.debug("Dropping stale review list for %s", status)
            return
        self.submissions = submissions

    async def poll_once(self) -> NewPendingNotification | None:
        """Refresh counts once and notify when the pending count grew."""
        try:
            counts = await self.fetch_counts()
        except Exception:
            _logger.warning("Failed to poll submission counts", exc_info=True)
            return None
        self.counts = counts
        pending = counts.get("pending", 0)
        previous = self._last_pending
        self._last_pending = pending
        if previous is None or pending <= previous:
            return None
        notification = NewPendingNotification(delta=pending - previous, pending=pending)
        _logger.info("New pending submissions: %s", notification.delta)
        if self.on_notification is not None:
            self.on_notification(notification)
        if self.active_tab == "pending":
            await self.refresh_list()
        return notification

    async def run(self) -> None:
        """Poll until cancelled."""
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)

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
