"""Domain models for projects and their presentation settings."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID

ProjectStatus = Literal["active", "archived", "deleted"]
AnimationStyle = Literal["fade", "slide", "zoom"]

PROJECT_STATUSES: tuple[ProjectStatus, ...] = ("active", "archived", "deleted")


@dataclass(frozen=True)
class Project:
    """A branded project collecting submissions."""

    id: UUID
    name: str
    client_name: str
    slug: str
    status: ProjectStatus
    created_by: UUID | None
    created_at: datetime
    archived_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Return True when the project serves its public pages."""
        return self.status == "active"


@dataclass(frozen=True)
class PresentationConfig:
    """Display settings for a project's public presentation."""

    project_id: UUID
    font_family: str = "Inter"
    font_size: int = 24
    text_color: str = "#FFFFFF"
    outline_color: str = "#000000"
    background_color: str = "#1a1a1a"
    background_image_url: str | None = None
    transition_duration: int = 5
    animation_style: AnimationStyle = "fade"
    layout_template: str = "standard"
    randomize_order: bool = False
    allow_video_finish: bool = False
