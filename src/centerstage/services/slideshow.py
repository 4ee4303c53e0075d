"""Slideshow sequencing for the public presentation display."""

import asyncio
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Literal, Protocol
from uuid import UUID

from centerstage.domain.projects import PresentationConfig
from centerstage.domain.submissions import Submission

_logger = logging.getLogger(__name__)

LONG_COMMENT_CHARS = 250
MEDIUM_COMMENT_CHARS = 150
TRANSITION_OVERLAP_SECONDS = 1.0

SlideshowMode = Literal["showing", "holding"]


def font_scale(comment: str) -> float:
    """Return the font size multiplier for a comment of this length."""
    if len(comment) > LONG_COMMENT_CHARS:
        return 0.5
    if len(comment) > MEDIUM_COMMENT_CHARS:
        return 0.75
    return 1.0


def scaled_font_size(comment: str, font_size: int) -> float:
    """Return the rendered font size for a comment."""
    return font_size * font_scale(comment)


def shuffled(items: Iterable[Submission], rng: random.Random) -> list[Submission]:
    """Return a uniform random permutation using Fisher-Yates."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


@dataclass(frozen=True)
class SlideTransition:
    """An outgoing slide animating out while the incoming one animates in."""

    outgoing: Submission | None
    incoming: Submission | None


@dataclass
class SlideshowSequencer:
    """Tracks which approved submission is on screen and which comes next.

    With ``randomize_order`` the list is shuffled once when the sequencer is
    created; refreshed lists keep that order and append unseen submissions.
    Submissions shown in ``once`` mode are remembered for the whole run and
    never come back until a new sequencer is created.
    """

    config: PresentationConfig
    submissions: list[Submission] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random)
    current_index: int = 0
    outgoing: Submission | None = None
    shown_once: set[UUID] = field(default_factory=set)
    video_durations: dict[UUID, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.config.randomize_order:
            self.submissions = shuffled(self.submissions, self.rng)
        else:
            self.submissions = list(self.submissions)
        self._clamp()

    def active_set(self) -> list[Submission]:
        """Return the submissions still eligible for display, in order."""
        return [
            submission
            for submission in self.submissions
            if not (
                submission.display_mode == "once" and submission.id in self.shown_once
            )
        ]

    @property
    def mode(self) -> SlideshowMode:
        """Return ``holding`` when nothing is left to show."""
        return "showing" if self.active_set() else "holding"

    @property
    def current(self) -> Submission | None:
        """Return the slide on screen, or None while holding."""
        active = self.active_set()
        if not active:
            return None
        return active[min(self.current_index, len(active) - 1)]

    def base_duration(self, submission: Submission) -> int:
        """Return the configured seconds for a slide before video is known."""
        return submission.custom_timing or self.config.transition_duration

    def duration_for(self, submission: Submission) -> float:
        """Return how long a slide stays on screen.

        With ``allow_video_finish`` a video longer than the base duration is
        allowed to play to the end.
        """
        base = self.base_duration(submission)
        if not (self.config.allow_video_finish and submission.has_video):
            return base
        video = self.video_durations.get(submission.id)
        if video is not None and video > base:
            return video
        return base

    def record_video_duration(self, submission_id: UUID, seconds: float) -> None:
        """Store the playback length discovered for a slide's video."""
        self.video_durations[submission_id] = seconds

    def advance(self) -> SlideTransition | None:
        """Move to the next slide when the current one's time is up.

        A ``once`` slide is added to the shown set before the next index is
        chosen, so it drops out of the active set immediately.
        """
        active = self.active_set()
        if not active:
            return None
        index = min(self.current_index, len(active) - 1)
        leaving = active[index]
        if leaving.display_mode == "once":
            self.shown_once.add(leaving.id)
        remaining = self.active_set()
        if not remaining:
            self.current_index = 0
            self.outgoing = leaving
            return SlideTransition(outgoing=leaving, incoming=None)
        if len(remaining) < len(active):
            next_index = index % len(remaining)
        else:
            next_index = (index + 1) % len(remaining)
        return self._move_to(next_index, leaving)

    def next(self) -> SlideTransition | None:
        """Step forward without marking the current slide as shown."""
        active = self.active_set()
        if not active:
            return None
        index = min(self.current_index, len(active) - 1)
        return self._move_to((index + 1) % len(active), active[index])

    def previous(self) -> SlideTransition | None:
        """Step back one slide."""
        active = self.active_set()
        if not active:
            return None
        index = min(self.current_index, len(active) - 1)
        return self._move_to((index - 1) % len(active), active[index])

    def finish_transition(self) -> None:
        """Drop the outgoing slide once its exit animation is over."""
        self.outgoing = None

    def replace_submissions(self, submissions: Iterable[Submission]) -> None:
        """Swap in a freshly fetched list and clamp the index into range."""
        fetched = list(submissions)
        if self.config.randomize_order:
            position = {item.id: pos for pos, item in enumerate(self.submissions)}
            known = sorted(
                (item for item in fetched if item.id in position),
                key=lambda item: position[item.id],
            )
            fresh = [item for item in fetched if item.id not in position]
            fetched = known + fresh
        self.submissions = fetched
        self._clamp()

    def _move_to(self, index: int, leaving: Submission) -> SlideTransition:
        self.current_index = index
        self.outgoing = leaving
        return SlideTransition(outgoing=leaving, incoming=self.current)

    def _clamp(self) -> None:
        size = len(self.active_set())
        if size == 0:
            self.current_index = 0
        elif self.current_index >= size:
            self.current_index = size - 1


class Timer(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None:
        """Cancel the callback if it has not run."""


Scheduler = Callable[[float, Callable[[], None]], Timer]


@dataclass
class SlideshowRunner:
    """Drives a sequencer with timers.

    The slide timer is armed with the duration known at that moment and only
    re-armed when a longer video duration arrives before it fires. ``stop``
    cancels every outstanding timer.
    """

    sequencer: SlideshowSequencer
    on_change: Callable[["SlideshowRunner"], None] | None = None
    overlap_seconds: float = TRANSITION_OVERLAP_SECONDS
    call_later: Scheduler | None = None
    clock: Callable[[], float] | None = None
    _slide_timer: Timer | None = field(default=None, init=False, repr=False)
    _overlap_timer: Timer | None = field(default=None, init=False, repr=False)
    _armed_for: UUID | None = field(default=None, init=False, repr=False)
    _armed_at: float = field(default=0.0, init=False, repr=False)
    _armed_duration: float = field(default=0.0, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)

    def start(self) -> None:
        """Begin showing slides, binding to the running event loop if needed."""
        if self.call_later is None or self.clock is None:
            loop = asyncio.get_running_loop()
            self.call_later = self.call_later or loop.call_later
            self.clock = self.clock or loop.time
        self._running = True
        self._arm()
        self._notify()

    def stop(self) -> None:
        """Cancel all timers."""
        self._running = False
        for timer in (self._slide_timer, self._overlap_timer):
            if timer is not None:
                timer.cancel()
        self._slide_timer = None
        self._overlap_timer = None
        self._armed_for = None

    @property
    def armed_duration(self) -> float | None:
        """Return the duration the pending slide timer was armed with."""
        return self._armed_duration if self._slide_timer is not None else None

    def report_video_duration(self, submission_id: UUID, seconds: float) -> None:
        """Accept a video length discovered after the slide mounted."""
        self.sequencer.record_video_duration(submission_id, seconds)
        if self._slide_timer is None or self._armed_for != submission_id:
            return
        current = self.sequencer.current
        if current is None or current.id != submission_id:
            return
        duration = self.sequencer.duration_for(current)
        if duration <= self._armed_duration:
            return
        elapsed = self._now() - self._armed_at
        _logger.debug(
            "Extending slide %s from %ss to %ss",
            submission_id,
            self._armed_duration,
            duration,
        )
        self._set_slide_timer(current, duration, max(duration - elapsed, 0.0))

    def refresh(self, submissions: Iterable[Submission]) -> None:
        """Replace the working list, resuming from holding when possible."""
        self.sequencer.replace_submissions(submissions)
        if not self._running:
            return
        current = self.sequencer.current
        if current is None:
            self._cancel_slide_timer()
        elif self._slide_timer is None or self._armed_for != current.id:
            self._arm()
        self._notify()

    def next(self) -> None:
        """Manually skip forward."""
        self._apply(self.sequencer.next())

    def previous(self) -> None:
        """Manually step back."""
        self._apply(self.sequencer.previous())

    def _on_slide_timer(self) -> None:
        self._slide_timer = None
        self._apply(self.sequencer.advance())

    def _apply(self, transition: SlideTransition | None) -> None:
        if transition is not None and transition.outgoing is not None:
            self._schedule_overlap_clear()
        if self._running:
            self._arm()
        self._notify()

    def _arm(self) -> None:
        self._cancel_slide_timer()
        current = self.sequencer.current
        if current is None:
            return
        duration = self.sequencer.duration_for(current)
        self._armed_at = self._now()
        self._set_slide_timer(current, duration, duration)

    def _set_slide_timer(
        self, current: Submission, duration: float, delay: float
    ) -> None:
        self._cancel_slide_timer()
        self._armed_for = current.id
        self._armed_duration = duration
        self._slide_timer = self._schedule(delay, self._on_slide_timer)

    def _schedule_overlap_clear(self) -> None:
        if self._overlap_timer is not None:
            self._overlap_timer.cancel()

        def clear() -> None:
            self._overlap_timer = None
            self.sequencer.finish_transition()
            self._notify()

        self._overlap_timer = self._schedule(self.overlap_seconds, clear)

    def _cancel_slide_timer(self) -> None:
        if self._slide_timer is not None:
            self._slide_timer.cancel()
        self._slide_timer = None
        self._armed_for = None

    def _schedule(self, delay: float, callback: Callable[[], None]) -> Timer:
        if self.call_later is None:
            raise RuntimeError("SlideshowRunner.start() has not been called")
        return self.call_later(delay, callback)

    def _now(self) -> float:
        if self.clock is None:
            raise RuntimeError("SlideshowRunner.start() has not been called")
        return self.clock()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)
