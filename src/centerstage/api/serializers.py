"""JSON shapes for domain records."""

from dataclasses import asdict

from centerstage.domain.projects import PresentationConfig, Project
from centerstage.domain.submissions import Submission
from centerstage.domain.users import ProjectAssignment, UserRecord
from centerstage.services.dashboard import DashboardStats, RecentSubmission


def submission_payload(submission: Submission) -> dict[str, object]:
    """Return a submission as a row-shaped dict."""
    return asdict(submission)


def project_payload(project: Project) -> dict[str, object]:
    """Return a project as a row-shaped dict."""
    return asdict(project)


def config_payload(config: PresentationConfig) -> dict[str, object]:
    """Return a presentation config as a row-shaped dict."""
    return asdict(config)


def user_payload(user: UserRecord) -> dict[str, object]:
    """Return a user without the password hash."""
    data = asdict(user)
    data.pop("password_hash")
    return data


def assignment_payload(assignment: ProjectAssignment) -> dict[str, object]:
    """Return a project assignment as a row-shaped dict."""
    return asdict(assignment)


def stats_payload(stats: DashboardStats) -> dict[str, object]:
    """Return dashboard counts."""
    return asdict(stats)


def recent_submission_payload(item: RecentSubmission) -> dict[str, object]:
    """Return a pending submission with a short summary of its project."""
    return {
        **submission_payload(item.submission),
        "project": {
            "id": item.project.id,
            "name": item.project.name,
            "slug": item.project.slug,
        },
    }
