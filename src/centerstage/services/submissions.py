"""Submission lifecycle rules."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from centerstage.domain.submissions import (
    SUBMISSION_STATUSES,
    Submission,
    SubmissionStatus,
    empty_status_counts,
)
from centerstage.domain.validation import (
    SubmissionInput,
    SubmissionUpdate,
    validate_input,
)
from centerstage.errors import NotFoundError, ValidationError
from centerstage.services.projects import ProjectRepository

_logger = logging.getLogger(__name__)


class SubmissionRepository(Protocol):
    """Persistence interface for submissions."""

    def create_submission(
        self, project_id: UUID, values: dict[str, object]
    ) -> Submission:
        """Insert a submission row and return it."""

    def get_submission(self, submission_id: UUID) -> Submission | None:
        """Return a submission by id, if present."""

    def list_by_status(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        """Return a project's submissions in one status, newest first."""

    def list_statuses(self, project_id: UUID) -> list[str]:
        """Return the status of every submission in a project."""

    def list_by_projects(
        self,
        project_ids: list[UUID],
        status: SubmissionStatus,
        limit: int | None = None,
    ) -> list[Submission]:
        """Return submissions in one status across projects, newest first."""

    def update_submission(
        self, submission_id: UUID, values: dict[str, object]
    ) -> Submission | None:
        """Apply column updates and return the row, or None when missing."""

    def delete_submission(self, submission_id: UUID) -> None:
        """Permanently remove a submission row."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SubmissionService:
    """Creates submissions and moves them between statuses.

    Any enumerated status may replace any other; the service does not keep a
    transition graph. Only permanent deletion checks the current status.
    """

    repository: SubmissionRepository
    project_repository: ProjectRepository
    clock: Callable[[], datetime] = field(default=_utcnow)

    def create(self, project_id: UUID, payload: object) -> Submission:
        """Validate a public submission and store it as pending."""
        data = validate_input(SubmissionInput, payload)
        project = self.project_repository.get_project(project_id)
        if project is None or not project.is_active:
            raise NotFoundError("project", project_id)
        values = data.to_record()
        values["status"] = "pending"
        submission = self.repository.create_submission(project_id, values)
        _logger.info(
            "Submission created: id=%s project_id=%s", submission.id, project_id
        )
        return submission

    def get(self, submission_id: UUID) -> Submission:
        """Return a submission or raise ``NotFoundError``."""
        submission = self.repository.get_submission(submission_id)
        if submission is None:
            raise NotFoundError("submission", submission_id)
        return submission

    def list_by_status(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        """Return one status tab for a project, newest first."""
        _require_status(status)
        return self.repository.list_by_status(project_id, status)

    def list_approved(self, project_id: UUID) -> list[Submission]:
        """Return the submissions an active project's presentation shows."""
        project = self.project_repository.get_project(project_id)
        if project is None or not project.is_active:
            raise NotFoundError("project", project_id)
        return self.repository.list_by_status(project_id, "approved")

    def pending_counts(self, project_ids: list[UUID]) -> dict[UUID, int]:
        """Count pending submissions per project, zero for projects without any."""
        counts = {project_id: 0 for project_id in project_ids}
        if not project_ids:
            return counts
        for submission in self.repository.list_by_projects(project_ids, "pending"):
            counts[submission.project_id] = counts.get(submission.project_id, 0) + 1
        return counts

    def count_in_status(
        self, project_ids: list[UUID], status: SubmissionStatus
    ) -> int:
        """Count submissions in one status across projects."""
        if not project_ids:
            return 0
        return len(self.repository.list_by_projects(project_ids, status))

    def recent_pending(
        self, project_ids: list[UUID], limit: int = 10
    ) -> list[Submission]:
        """Return the newest pending submissions across projects."""
        if not project_ids:
            return []
        return self.repository.list_by_projects(project_ids, "pending", limit=limit)

    def counts_by_status(self, project_id: UUID) -> dict[str, int]:
        """Count a project's submissions per status in a single pass."""
        counts = empty_status_counts()
        for status in self.repository.list_statuses(project_id):
            if status in counts:
                counts[status] += 1
        return counts

    def update(
        self, submission_id: UUID, payload: object, reviewer_id: UUID | None = None
    ) -> Submission:
        """Apply a validated admin update.

        Status changes stamp ``reviewed_at`` and, when known, ``reviewed_by``.
        """
        changes = validate_input(SubmissionUpdate, payload).changes()
        if "status" in changes:
            changes["reviewed_at"] = self.clock().isoformat()
            if reviewer_id is not None:
                changes["reviewed_by"] = str(reviewer_id)
        if not changes:
            return self.get(submission_id)
        updated = self.repository.update_submission(submission_id, changes)
        if updated is None:
            raise NotFoundError("submission", submission_id)
        return updated

    def transition(
        self,
        submission_id: UUID,
        new_status: SubmissionStatus,
        reviewer_id: UUID | None = None,
    ) -> Submission:
        """Move a submission to ``new_status`` regardless of its current one."""
        _require_status(new_status)
        updated = self.update(submission_id, {"status": new_status}, reviewer_id)
        _logger.info(
            "Submission status changed: id=%s status=%s", submission_id, new_status
        )
        return updated

    def hard_delete(self, submission_id: UUID) -> None:
        """Erase a submission that is already soft-deleted."""
        submission = self.get(submission_id)
        if submission.status != "deleted":
            raise ValidationError(
                "Can only permanently delete submissions that are already in "
                "deleted status",
                [{"field": "status", "message": f"status is {submission.status}"}],
            )
        self.repository.delete_submission(submission_id)
        _logger.info("Submission permanently deleted: id=%s", submission_id)


def _require_status(status: str) -> None:
    if status not in SUBMISSION_STATUSES:
        raise ValidationError(
            "Invalid submission status",
            [{"field": "status", "message": f"unknown status {status!r}"}],
        )
