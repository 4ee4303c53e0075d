"""Row parsing shared by the Supabase repositories and the HTTP client.

The public API serializes records with the same column names as the database
rows, so one set of parsers serves both.
"""

from datetime import datetime
from uuid import UUID

from centerstage.domain.projects import PresentationConfig, Project
from centerstage.domain.submissions import DEFAULT_DISPLAY_MODE, Submission


def parse_submission(row: dict[str, object]) -> Submission:
    """Build a submission from a row."""
    custom_timing = row.get("custom_timing")
    return Submission(
        id=UUID(str(row["id"])),
        project_id=UUID(str(row["project_id"])),
        full_name=str(row["full_name"]),
        comment=str(row["comment"]),
        status=row["status"],
        created_at=datetime.fromisoformat(str(row["created_at"])),
        social_handle=row.get("social_handle") or None,
        email=row.get("email") or None,
        photo_url=row.get("photo_url") or None,
        video_url=row.get("video_url") or None,
        display_mode=row.get("display_mode") or DEFAULT_DISPLAY_MODE,
        custom_timing=int(custom_timing) if custom_timing is not None else None,
        reviewed_at=_optional_datetime(row.get("reviewed_at")),
        reviewed_by=_optional_uuid(row.get("reviewed_by")),
    )


def parse_project(row: dict[str, object]) -> Project:
    """Build a project from a row."""
    return Project(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        client_name=str(row["client_name"]),
        slug=str(row["slug"]),
        status=row.get("status") or "active",
        created_by=_optional_uuid(row.get("created_by")),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        archived_at=_optional_datetime(row.get("archived_at")),
    )


def parse_config(row: dict[str, object]) -> PresentationConfig:
    """Build a presentation config, filling missing columns with defaults."""
    defaults = PresentationConfig(project_id=UUID(str(row["project_id"])))
    return PresentationConfig(
        project_id=defaults.project_id,
        font_family=str(row.get("font_family") or defaults.font_family),
        font_size=int(row.get("font_size") or defaults.font_size),
        text_color=str(row.get("text_color") or defaults.text_color),
        outline_color=str(row.get("outline_color") or defaults.outline_color),
        background_color=str(row.get("background_color") or defaults.background_color),
        background_image_url=row.get("background_image_url") or None,
        transition_duration=int(
            row.get("transition_duration") or defaults.transition_duration
        ),
        animation_style=row.get("animation_style") or defaults.animation_style,
        layout_template=str(row.get("layout_template") or defaults.layout_template),
        randomize_order=bool(row.get("randomize_order", False)),
        allow_video_finish=bool(row.get("allow_video_finish", False)),
    )


def _optional_datetime(value: object) -> datetime | None:
    return datetime.fromisoformat(str(value)) if value else None


def _optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None
