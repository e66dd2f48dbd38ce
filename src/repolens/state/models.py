"""Data models for analysis job state."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from repolens.analysis.models import FinalReport


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """Lifecycle status of an analysis job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class AnalysisJob:
    """A submitted repository analysis.

    Records are immutable snapshots; the registry publishes a new record for
    every transition so readers never observe a half-applied update.
    """

    repository_url: str
    include_github_issues: bool = False
    id: str = field(default_factory=lambda: uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    current_step: str | None = None
    repository_name: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    results: FinalReport | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert job to the JSON shape served to clients."""
        data = {
            "id": self.id,
            "repositoryUrl": self.repository_url,
            "includeGitHubIssues": self.include_github_issues,
            "status": self.status.value,
            "progress": self.progress,
            "createdAt": self.created_at.isoformat(),
        }
        if self.current_step is not None:
            data["currentStep"] = self.current_step
        if self.repository_name is not None:
            data["repositoryName"] = self.repository_name
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at.isoformat()
        if self.results is not None:
            data["results"] = self.results.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data
