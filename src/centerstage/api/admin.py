"""Admin API endpoints behind bearer token auth."""

from __future__ import annotations

from datetime import UTC, date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Body, Depends, Query, Request, status

from centerstage.api.auth import get_current_user, require_super_admin
from centerstage.api.serializers import (
    assignment_payload,
    config_payload,
    project_payload,
    recent_submission_payload,
    stats_payload,
    submission_payload,
    user_payload,
)
from centerstage.domain.users import UserRecord  # noqa: TC001
from centerstage.errors import ValidationError
from centerstage.services.review import DATE_RANGES, SubmissionFilter

if TYPE_CHECKING:
    from centerstage.containers import AppContainer

router = APIRouter(prefix="/api", tags=["admin"])


@router.get("/projects")
async def list_projects(
    request: Request, user: UserRecord = Depends(get_current_user)
) -> list[dict[str, object]]:
    """Return the projects the signed-in user may manage."""
    container: AppContainer = request.app.state.container
    if user.is_super_admin:
        projects = container.project_service.list_projects()
    else:
        project_ids = container.user_service.accessible_project_ids(user.id)
        projects = container.project_service.list_projects(project_ids)
    pending = container.dashboard_service.pending_counts(
        [project.id for project in projects]
    )
    return [
        {**project_payload(project), "pending_count": pending.get(project.id, 0)}
        for project in projects
    ]


@router.get("/dashboard")
async def dashboard(
    request: Request, user: UserRecord = Depends(get_current_user)
) -> dict[str, object]:
    """Return headline counts and the newest pending submissions."""
    container: AppContainer = request.app.state.container
    project_ids = container.user_service.accessible_project_ids(user.id)
    stats = container.dashboard_service.stats(project_ids)
    recent = container.dashboard_service.recent_pending(project_ids)
    return {
        "stats": stats_payload(stats),
        "recent_pending": [recent_submission_payload(item) for item in recent],
    }


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: Request,
    payload: dict[str, object] = Body(...),
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Create a project with its presentation config."""
    container: AppContainer = request.app.state.container
    project, config = container.project_service.create(
        payload.get("project") or {},
        payload.get("presentation_config"),
        created_by=user.id,
    )
    if not user.is_super_admin:
        container.user_service.assign(user.id, project.id, user.id)
    return {
        "project": project_payload(project),
        "presentation_config": config_payload(config),
    }


@router.get("/projects/{project_id}")
async def get_project(
    project_id: UUID,
    request: Request,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Return a project and its presentation config."""
    container: AppContainer = request.app.state.container
    project = container.project_service.get(project_id)
    container.user_service.require_project_access(user.id, project_id)
    config = container.project_service.get_config(project_id)
    return {
        "project": project_payload(project),
        "presentation_config": config_payload(config),
    }


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: UUID,
    request: Request,
    payload: dict[str, object] = Body(...),
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Edit project details and/or presentation settings."""
    container: AppContainer = request.app.state.container
    project = container.project_service.get(project_id)
    container.user_service.require_project_access(user.id, project_id)
    config = None
    if payload.get("project"):
        project = container.project_service.update(project_id, payload["project"])
    if payload.get("presentation_config"):
        config = container.project_service.update_config(
            project_id, payload["presentation_config"]
        )
    return {
        "project": project_payload(project),
        "presentation_config": config_payload(config) if config else None,
    }


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: UUID,
    request: Request,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Soft-delete a project."""
    container: AppContainer = request.app.state.container
    container.project_service.get(project_id)
    container.user_service.require_project_access(user.id, project_id)
    project = container.project_service.soft_delete(project_id)
    return project_payload(project)


@router.post("/projects/{project_id}/archive")
async def archive_project(
    project_id: UUID,
    request: Request,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Archive a project."""
    container: AppContainer = request.app.state.container
    container.project_service.get(project_id)
    container.user_service.require_project_access(user.id, project_id)
    project = container.project_service.archive(project_id)
    return project_payload(project)


@router.delete("/projects/{project_id}/permanent-delete")
async def permanently_delete_project(
    project_id: UUID,
    request: Request,
    payload: dict[str, object] | None = Body(default=None),
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Erase a project after the caller typed its exact name."""
    container: AppContainer = request.app.state.container
    container.project_service.get(project_id)
    container.user_service.require_project_access(user.id, project_id)
    confirmation = (payload or {}).get("confirmation")
    container.project_service.permanent_delete(
        project_id, confirmation if isinstance(confirmation, str) else None
    )
    return {"success": True, "message": "Project permanently deleted"}


@router.get("/projects/{project_id}/submissions")
async def list_project_submissions(  # noqa: PLR0913
    project_id: UUID,
    request: Request,
    status_filter: str = Query(default="pending", alias="status"),
    q: str = "",
    date_range: str = "all",
    start: date | None = None,
    end: date | None = None,
    tz: str | None = None,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Return one review tab, optionally filtered by text and date.

    ``tz`` names the reviewer's IANA time zone; day boundaries default to UTC.
    """
    container: AppContainer = request.app.state.container
    container.user_service.require_project_access(user.id, project_id)
    if date_range not in DATE_RANGES:
        raise ValidationError(
            "Invalid date range",
            [{"field": "date_range", "message": f"unknown range {date_range!r}"}],
        )
    submission_filter = SubmissionFilter(
        query=q,
        date_range=date_range,
        start=start,
        end=end,
        tz=_parse_timezone(tz) if tz else UTC,
    )
    submissions = container.review_service.list_tab(
        project_id, status_filter, submission_filter
    )
    return {"submissions": [submission_payload(item) for item in submissions]}


@router.get("/submissions/counts")
async def submission_counts(
    request: Request,
    project_id: UUID,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Return per-status counts for a project."""
    container: AppContainer = request.app.state.container
    container.user_service.require_project_access(user.id, project_id)
    return {"counts": container.review_service.counts(project_id)}


@router.patch("/submissions/{submission_id}")
async def update_submission(
    submission_id: UUID,
    request: Request,
    payload: dict[str, object] = Body(...),
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Change a submission's status or display attributes."""
    container: AppContainer = request.app.state.container
    current = container.submission_service.get(submission_id)
    container.user_service.require_project_access(user.id, current.project_id)
    submission = container.submission_service.update(
        submission_id, payload, reviewer_id=user.id
    )
    return {"success": True, "submission": submission_payload(submission)}


@router.delete("/submissions/{submission_id}")
async def hard_delete_submission(
    submission_id: UUID,
    request: Request,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, object]:
    """Permanently erase a submission that is already soft-deleted."""
    container: AppContainer = request.app.state.container
    current = container.submission_service.get(submission_id)
    container.user_service.require_project_access(user.id, current.project_id)
    container.submission_service.hard_delete(submission_id)
    return {"success": True, "message": "Submission permanently deleted"}


@router.get("/users", dependencies=[Depends(require_super_admin)])
async def list_users(request: Request) -> list[dict[str, object]]:
    """Return every account."""
    container: AppContainer = request.app.state.container
    return [user_payload(user) for user in container.user_service.list_users()]


@router.post(
    "/users",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_super_admin)],
)
async def create_user(
    request: Request, payload: dict[str, object] = Body(...)
) -> dict[str, object]:
    """Create an account and return its one-time password."""
    container: AppContainer = request.app.state.container
    user, password = container.user_service.create_user(
        str(payload.get("email") or ""),
        str(payload.get("name") or ""),
        str(payload.get("role") or "admin"),
    )
    return {"user": user_payload(user), "password": password}


@router.get("/users/{user_id}", dependencies=[Depends(require_super_admin)])
async def get_user(user_id: UUID, request: Request) -> dict[str, object]:
    """Return one account."""
    container: AppContainer = request.app.state.container
    return user_payload(container.user_service.get(user_id))


@router.patch("/users/{user_id}", dependencies=[Depends(require_super_admin)])
async def update_user(
    user_id: UUID, request: Request, payload: dict[str, object] = Body(...)
) -> dict[str, object]:
    """Edit account details."""
    container: AppContainer = request.app.state.container
    user = container.user_service.update_user(
        user_id,
        email=_optional_str(payload.get("email")),
        name=_optional_str(payload.get("name")),
        role=_optional_str(payload.get("role")),
    )
    return user_payload(user)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: UUID,
    request: Request,
    acting_user: UserRecord = Depends(require_super_admin),
) -> dict[str, object]:
    """Remove an account other than your own."""
    container: AppContainer = request.app.state.container
    container.user_service.delete_user(user_id, acting_user.id)
    return {"success": True}


@router.post("/users/{user_id}/password", dependencies=[Depends(require_super_admin)])
async def reset_password(
    user_id: UUID,
    request: Request,
    payload: dict[str, object] | None = Body(default=None),
) -> dict[str, object]:
    """Set a chosen password, or generate one when none is given."""
    container: AppContainer = request.app.state.container
    password = _optional_str((payload or {}).get("password"))
    if password:
        container.user_service.set_password(user_id, password)
    else:
        password = container.user_service.reset_password(user_id)
    return {"password": password}


@router.get(
    "/users/{user_id}/projects", dependencies=[Depends(require_super_admin)]
)
async def list_assignments(user_id: UUID, request: Request) -> list[dict[str, object]]:
    """Return a user's project assignments."""
    container: AppContainer = request.app.state.container
    assignments = container.user_service.list_assignments(user_id)
    return [assignment_payload(assignment) for assignment in assignments]


@router.put("/users/{user_id}/projects")
async def replace_assignments(
    user_id: UUID,
    request: Request,
    payload: dict[str, object] = Body(...),
    acting_user: UserRecord = Depends(require_super_admin),
) -> list[dict[str, object]]:
    """Replace every assignment of a user with the given project ids."""
    container: AppContainer = request.app.state.container
    raw_ids = payload.get("project_ids")
    if not isinstance(raw_ids, list):
        raise ValidationError(
            "project_ids must be an array",
            [{"field": "project_ids", "message": "Expected a list of ids"}],
        )
    try:
        project_ids = [UUID(str(raw)) for raw in raw_ids]
    except ValueError as exc:
        raise ValidationError(
            "project_ids must be an array",
            [{"field": "project_ids", "message": "Invalid project id"}],
        ) from exc
    assignments = container.user_service.set_assignments(
        user_id, project_ids, acting_user.id
    )
    return [assignment_payload(assignment) for assignment in assignments]


@router.post(
    "/users/{user_id}/projects/{project_id}", status_code=status.HTTP_201_CREATED
)
async def assign_project(
    user_id: UUID,
    project_id: UUID,
    request: Request,
    acting_user: UserRecord = Depends(require_super_admin),
) -> dict[str, object]:
    """Grant a user access to one project."""
    container: AppContainer = request.app.state.container
    assignment = container.user_service.assign(user_id, project_id, acting_user.id)
    return assignment_payload(assignment)


@router.delete(
    "/users/{user_id}/projects/{project_id}",
    dependencies=[Depends(require_super_admin)],
)
async def unassign_project(
    user_id: UUID, project_id: UUID, request: Request
) -> dict[str, object]:
    """Revoke a user's access to one project."""
    container: AppContainer = request.app.state.container
    container.user_service.unassign(user_id, project_id)
    return {"success": True}


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _parse_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(
            "Invalid time zone",
            [{"field": "tz", "message": f"unknown time zone {name!r}"}],
        ) from exc
