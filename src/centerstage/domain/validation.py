"""Pydantic input models shared by the HTTP layer and the services.

The API validates request bodies with these models for fast feedback and the
services validate again before persisting, so both layers always apply the
same rules.
"""

from typing import Annotated, Literal, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from centerstage.domain.slugs import is_valid_slug
from centerstage.domain.submissions import DisplayMode, SubmissionStatus
from centerstage.errors import ValidationError

HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}$")]
CustomTiming = Annotated[int, Field(strict=True, ge=1, le=30)]
ProjectName = Annotated[str, Field(min_length=2, max_length=100)]

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class _InputModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SubmissionInput(_InputModel):
    """Public submission form payload."""

    full_name: str = Field(min_length=2, max_length=100)
    social_handle: str | None = Field(default=None, max_length=30)
    email: str | None = Field(
        default=None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )
    comment: str = Field(min_length=10, max_length=500)
    photo_url: HttpUrl | None = None
    video_url: HttpUrl | None = None

    blank_optionals_to_none = field_validator(
        "social_handle", "email", "photo_url", "video_url", mode="before"
    )(_blank_to_none)

    def to_record(self) -> dict[str, object]:
        """Return the payload as column values."""
        return {
            "full_name": self.full_name,
            "social_handle": self.social_handle,
            "email": self.email,
            "comment": self.comment,
            "photo_url": str(self.photo_url) if self.photo_url else None,
            "video_url": str(self.video_url) if self.video_url else None,
        }


class SubmissionUpdate(_InputModel):
    """Admin update of a submission's status or display attributes."""

    status: SubmissionStatus | None = None
    display_mode: DisplayMode | None = None
    custom_timing: CustomTiming | None = None

    def changes(self) -> dict[str, object]:
        """Return only the fields the caller actually supplied.

        ``custom_timing`` may be explicitly cleared with ``None``; the other
        fields are dropped when unset or null.
        """
        values = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in values.items()
            if value is not None or key == "custom_timing"
        }


class ProjectInput(_InputModel):
    """Payload for creating a project."""

    name: ProjectName
    client_name: ProjectName
    slug: str | None = Field(default=None, min_length=2, max_length=100)

    blank_slug_to_none = field_validator("slug", mode="before")(_blank_to_none)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_slug(value):
            raise ValueError("Slug must be lowercase, alphanumeric, and hyphens only")
        return value


class ProjectUpdate(_InputModel):
    """Payload for editing a project."""

    name: ProjectName | None = None
    client_name: ProjectName | None = None
    slug: str | None = Field(default=None, min_length=2, max_length=100)
    status: Literal["active", "archived", "deleted"] | None = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_slug(value):
            raise ValueError("Slug must be lowercase, alphanumeric, and hyphens only")
        return value

    def changes(self) -> dict[str, object]:
        """Return the supplied, non-null fields."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PresentationConfigInput(_InputModel):
    """Presentation settings for a project."""

    font_family: str = Field(default="Inter", min_length=1)
    font_size: int = Field(default=24, ge=16, le=72)
    text_color: HexColor = "#FFFFFF"
    outline_color: HexColor = "#000000"
    background_color: HexColor = "#1a1a1a"
    background_image_url: HttpUrl | None = None
    transition_duration: int = Field(default=5, ge=1, le=30)
    animation_style: Literal["fade", "slide", "zoom"] = "fade"
    layout_template: str = Field(default="standard", min_length=1)
    randomize_order: bool = False
    allow_video_finish: bool = False

    blank_image_to_none = field_validator("background_image_url", mode="before")(
        _blank_to_none
    )

    def changes(self) -> dict[str, object]:
        """Return the supplied fields as column values."""
        return self.model_dump(mode="json", exclude_unset=True)

    def to_record(self) -> dict[str, object]:
        """Return every field, defaults included, as column values."""
        return self.model_dump(mode="json")


def validate_input(model: type[_ModelT], payload: object) -> _ModelT:
    """Validate a payload, raising ``ValidationError`` with field details."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", exclude_unset=True)
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ValidationError(f"Invalid {_describe(model)}", details) from exc


def _describe(model: type[BaseModel]) -> str:
    names = {
        SubmissionInput: "submission data",
        SubmissionUpdate: "update data",
        ProjectInput: "project data",
        ProjectUpdate: "project data",
        PresentationConfigInput: "presentation config",
    }
    return names.get(model, "input")
