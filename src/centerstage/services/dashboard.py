"""Admin dashboard summaries across the projects a user can manage."""

from dataclasses import dataclass
from uuid import UUID

from centerstage.domain.projects import Project
from centerstage.domain.submissions import Submission
from centerstage.services.projects import ProjectService
from centerstage.services.submissions import SubmissionService

RECENT_PENDING_LIMIT = 10


@dataclass(frozen=True)
class DashboardStats:
    """Headline counts for the dashboard."""

    total_projects: int
    active_projects: int
    pending_submissions: int
    approved_submissions: int


@dataclass(frozen=True)
class RecentSubmission:
    """A pending submission together with the project it belongs to."""

    submission: Submission
    project: Project


@dataclass
class DashboardService:
    """Builds dashboard figures for a set of accessible projects."""

    project_service: ProjectService
    submission_service: SubmissionService

    def stats(self, project_ids: list[UUID]) -> DashboardStats:
        """Return project and submission totals for the given projects."""
        projects = self.project_service.list_projects(project_ids)
        ids = [project.id for project in projects]
        return DashboardStats(
            total_projects=len(projects),
            active_projects=sum(1 for project in projects if project.is_active),
            pending_submissions=self.submission_service.count_in_status(
                ids, "pending"
            ),
            approved_submissions=self.submission_service.count_in_status(
                ids, "approved"
            ),
        )

    def recent_pending(
        self, project_ids: list[UUID], limit: int = RECENT_PENDING_LIMIT
    ) -> list[RecentSubmission]:
        """Return the newest pending submissions with their projects."""
        projects = {
            project.id: project
            for project in self.project_service.list_projects(project_ids)
        }
        submissions = self.submission_service.recent_pending(
            list(projects), limit=limit
        )
        return [
            RecentSubmission(submission=item, project=projects[item.project_id])
            for item in submissions
            if item.project_id in projects
        ]

    def pending_counts(self, project_ids: list[UUID]) -> dict[UUID, int]:
        """Return the pending badge count for each project."""
        return self.submission_service.pending_counts(project_ids)
