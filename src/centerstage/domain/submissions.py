"""Domain models for public submissions."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID

SubmissionStatus = Literal["pending", "approved", "declined", "archived", "deleted"]
DisplayMode = Literal["once", "repeat"]

SUBMISSION_STATUSES: tuple[SubmissionStatus, ...] = (
    "pending",
    "approved",
    "declined",
    "archived",
    "deleted",
)
DISPLAY_MODES: tuple[DisplayMode, ...] = ("once", "repeat")
DEFAULT_DISPLAY_MODE: DisplayMode = "repeat"


@dataclass(frozen=True)
class Submission:
    """A comment, photo or video submitted against a project."""

    id: UUID
    project_id: UUID
    full_name: str
    comment: str
    status: SubmissionStatus
    created_at: datetime
    social_handle: str | None = None
    email: str | None = None
    photo_url: str | None = None
    video_url: str | None = None
    display_mode: DisplayMode = DEFAULT_DISPLAY_MODE
    custom_timing: int | None = None
    reviewed_at: datetime | None = None
    reviewed_by: UUID | None = None

    @property
    def has_video(self) -> bool:
        """Return True when the submission carries a video."""
        return bool(self.video_url)


def empty_status_counts() -> dict[str, int]:
    """Return a zeroed count for every submission status."""
    return {status: 0 for status in SUBMISSION_STATUSES}
