"""Unauthenticated endpoints for submitters and presentation displays."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Body, Request, status

from centerstage.api.serializers import (
    config_payload,
    project_payload,
    submission_payload,
)
from centerstage.config import presentation_url, submission_url
from centerstage.errors import RateLimitedError, ValidationError
from centerstage.services.rate_limit import client_identifier

if TYPE_CHECKING:
    from centerstage.containers import AppContainer

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/public/projects/{slug}")
async def public_project(slug: str, request: Request) -> dict[str, object]:
    """Return an active project's branding and presentation settings."""
    container: AppContainer = request.app.state.container
    project, config = container.project_service.get_public(slug)
    base_url = container.settings.public_base_url
    return {
        "project": project_payload(project),
        "config": config_payload(config),
        "submission_url": submission_url(base_url, project.slug),
        "presentation_url": presentation_url(base_url, project.slug),
    }


@router.post("/api/submissions", status_code=status.HTTP_201_CREATED)
async def create_submission(
    request: Request, payload: dict[str, object] = Body(...)
) -> dict[str, object]:
    """Accept a public submission, subject to the per-client rate limit."""
    container: AppContainer = request.app.state.container
    limiter = container.rate_limiter
    identifier = client_identifier(request.headers)
    result = limiter.check(identifier)
    if not result.allowed:
        retry_after = limiter.retry_after_seconds(result)
        _logger.warning("Submission rate limit exceeded: client=%s", identifier)
        raise RateLimitedError(result.reset_time, retry_after)
    project_id = _parse_project_id(payload.get("project_id"))
    submission = container.submission_service.create(
        project_id, payload.get("submission") or {}
    )
    return {"success": True, "submission": submission_payload(submission)}


@router.get("/api/presentations/{project_id}/submissions")
async def presentation_submissions(
    project_id: UUID, request: Request
) -> dict[str, object]:
    """Return the approved submissions a presentation should display."""
    container: AppContainer = request.app.state.container
    submissions = container.submission_service.list_approved(project_id)
    return {
        "success": True,
        "submissions": [submission_payload(item) for item in submissions],
    }


def _parse_project_id(raw: object) -> UUID:
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise ValidationError(
            "Project ID is required",
            [{"field": "project_id", "message": "A valid project id is required"}],
        ) from exc
