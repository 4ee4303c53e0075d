"""Tests for slideshow sequencing and timing."""

import random
from uuid import uuid4

from centerstage.domain.projects import PresentationConfig
from centerstage.services.slideshow import (
    SlideshowRunner,
    SlideshowSequencer,
    font_scale,
    scaled_font_size,
    shuffled,
)
from tests.conftest import FakeScheduler, make_submission

CONFIG = PresentationConfig(project_id=uuid4(), transition_duration=5)


def make_runner(
    sequencer: SlideshowSequencer, scheduler: FakeScheduler
) -> SlideshowRunner:
    return SlideshowRunner(
        sequencer, call_later=scheduler.call_later, clock=scheduler.clock
    )


def test_active_set_skips_shown_once_submissions() -> None:
    a = make_submission(full_name="A")
    b = make_submission(full_name="B", display_mode="once")
    c = make_submission(full_name="C")
    sequencer = SlideshowSequencer(CONFIG, [a, b, c], shown_once={b.id})

    assert sequencer.active_set() == [a, c]


def test_durations() -> None:
    config = PresentationConfig(
        project_id=uuid4(), transition_duration=5, allow_video_finish=True
    )
    custom = make_submission(custom_timing=10)
    plain = make_submission()
    long_video = make_submission(video_url="https://cdn.example.com/a.mp4")
    short_video = make_submission(video_url="https://cdn.example.com/b.mp4")
    sequencer = SlideshowSequencer(config, [custom, plain, long_video, short_video])
    sequencer.record_video_duration(long_video.id, 8)
    sequencer.record_video_duration(short_video.id, 3)

    assert sequencer.duration_for(custom) == 10
    assert sequencer.duration_for(plain) == 5
    assert sequencer.duration_for(long_video) == 8
    assert sequencer.duration_for(short_video) == 5


def test_video_duration_ignored_without_allow_video_finish() -> None:
    video = make_submission(video_url="https://cdn.example.com/a.mp4")
    sequencer = SlideshowSequencer(CONFIG, [video])
    sequencer.record_video_duration(video.id, 20)

    assert sequencer.duration_for(video) == 5


def test_font_scaling_by_comment_length() -> None:
    assert scaled_font_size("x" * 300, 24) == 12
    assert scaled_font_size("x" * 200, 24) == 18
    assert scaled_font_size("x" * 50, 24) == 24
    assert font_scale("x" * 250) == 0.75
    assert font_scale("x" * 150) == 1.0


def test_advance_wraps_around() -> None:
    a, b = make_submission(full_name="A"), make_submission(full_name="B")
    sequencer = SlideshowSequencer(CONFIG, [a, b])

    transition = sequencer.advance()

    assert transition is not None
    assert transition.outgoing == a
    assert transition.incoming == b
    sequencer.advance()
    assert sequencer.current == a


def test_once_slide_is_retired_and_next_slide_follows_it() -> None:
    a = make_submission(full_name="A")
    b = make_submission(full_name="B", display_mode="once")
    c = make_submission(full_name="C")
    sequencer = SlideshowSequencer(CONFIG, [a, b, c], current_index=1)

    transition = sequencer.advance()

    assert transition is not None
    assert transition.outgoing == b
    assert sequencer.current == c
    assert sequencer.active_set() == [a, c]


def test_last_once_slide_enters_holding() -> None:
    only = make_submission(display_mode="once")
    sequencer = SlideshowSequencer(CONFIG, [only])

    transition = sequencer.advance()

    assert transition is not None
    assert transition.incoming is None
    assert sequencer.mode == "holding"
    assert sequencer.current is None
    assert sequencer.advance() is None


def test_single_repeat_slide_stays() -> None:
    only = make_submission()
    sequencer = SlideshowSequencer(CONFIG, [only])

    sequencer.advance()

    assert sequencer.current == only
    assert sequencer.mode == "showing"


def test_manual_navigation_does_not_retire_once_slides() -> None:
    a = make_submission(full_name="A", display_mode="once")
    b = make_submission(full_name="B")
    c = make_submission(full_name="C")
    sequencer = SlideshowSequencer(CONFIG, [a, b, c])

    sequencer.previous()
    assert sequencer.current == c
    sequencer.next()
    assert sequencer.current == a
    assert sequencer.shown_once == set()


def test_replace_submissions_clamps_index() -> None:
    items = [make_submission() for _ in range(3)]
    sequencer = SlideshowSequencer(CONFIG, items, current_index=2)

    sequencer.replace_submissions(items[:1])

    assert sequencer.current_index == 0
    assert sequencer.current == items[0]

    sequencer.replace_submissions([])
    assert sequencer.mode == "holding"


def test_randomized_order_is_kept_across_refreshes() -> None:
    config = PresentationConfig(project_id=uuid4(), randomize_order=True)
    items = [make_submission(full_name=str(i)) for i in range(6)]
    sequencer = SlideshowSequencer(config, items, rng=random.Random(7))
    order = [item.id for item in sequencer.submissions]
    newcomer = make_submission(full_name="new")

    sequencer.replace_submissions([*items, newcomer])

    assert [item.id for item in sequencer.submissions] == [*order, newcomer.id]


def test_shuffled_is_a_permutation() -> None:
    items = [make_submission() for _ in range(10)]

    result = shuffled(items, random.Random(1))

    assert sorted(item.id for item in result) == sorted(item.id for item in items)


def test_runner_advances_and_clears_overlap() -> None:
    a, b = make_submission(full_name="A"), make_submission(full_name="B")
    sequencer = SlideshowSequencer(CONFIG, [a, b])
    scheduler = FakeScheduler()
    changes: list[str] = []
    runner = make_runner(sequencer, scheduler)
    runner.on_change = lambda r: changes.append(
        r.sequencer.current.full_name if r.sequencer.current else "-"
    )

    runner.start()
    scheduler.advance(4.5)
    assert sequencer.current == a

    scheduler.advance(0.5)
    assert sequencer.current == b
    assert sequencer.outgoing == a

    scheduler.advance(1)
    assert sequencer.outgoing is None
    assert changes[:2] == ["A", "B"]


def test_runner_uses_custom_timing() -> None:
    a = make_submission(full_name="A", custom_timing=12)
    b = make_submission(full_name="B")
    sequencer = SlideshowSequencer(CONFIG, [a, b])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    assert runner.armed_duration == 12
    scheduler.advance(11)
    assert sequencer.current == a
    scheduler.advance(1)
    assert sequencer.current == b


def test_runner_extends_slide_for_longer_video() -> None:
    config = PresentationConfig(
        project_id=uuid4(), transition_duration=5, allow_video_finish=True
    )
    video = make_submission(video_url="https://cdn.example.com/a.mp4")
    other = make_submission()
    sequencer = SlideshowSequencer(config, [video, other])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    scheduler.advance(2)
    runner.report_video_duration(video.id, 8)

    assert runner.armed_duration == 8
    scheduler.advance(5.5)
    assert sequencer.current == video
    scheduler.advance(0.5)
    assert sequencer.current == other


def test_runner_ignores_shorter_video() -> None:
    config = PresentationConfig(
        project_id=uuid4(), transition_duration=5, allow_video_finish=True
    )
    video = make_submission(video_url="https://cdn.example.com/a.mp4")
    sequencer = SlideshowSequencer(config, [video, make_submission()])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    runner.report_video_duration(video.id, 3)

    assert runner.armed_duration == 5
    assert len(scheduler.pending) == 1


def test_runner_resumes_from_holding_on_refresh() -> None:
    sequencer = SlideshowSequencer(CONFIG, [])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    assert runner.armed_duration is None

    first = make_submission()
    runner.refresh([first])

    assert sequencer.current == first
    assert runner.armed_duration == 5


def test_runner_refresh_keeps_timer_for_same_slide() -> None:
    a, b = make_submission(full_name="A"), make_submission(full_name="B")
    sequencer = SlideshowSequencer(CONFIG, [a])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    scheduler.advance(3)
    runner.refresh([a, b])
    scheduler.advance(2)

    assert sequencer.current == b


def test_runner_stop_cancels_timers() -> None:
    sequencer = SlideshowSequencer(CONFIG, [make_submission(), make_submission()])
    scheduler = FakeScheduler()
    runner = make_runner(sequencer, scheduler)

    runner.start()
    scheduler.advance(5)
    runner.stop()

    assert scheduler.pending == []
    assert runner.armed_duration is None
