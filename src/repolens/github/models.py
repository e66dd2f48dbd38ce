"""Data models for GitHub entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so snapshots always compare."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class IssueState(str, Enum):
    """GitHub issue state."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class GitHubComment:
    """A comment on a GitHub issue."""

    id: int
    body: str
    author: str = "unknown"
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "body": self.body,
            "author": self.author,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class GitHubIssue:
    """Snapshot of a GitHub issue taken once per analysis."""

    id: int
    number: int
    title: str
    body: str = ""
    state: IssueState = IssueState.OPEN
    labels: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: str = "unknown"
    url: str = ""
    comments: tuple[GitHubComment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Convert issue to its JSON representation."""
        return {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "body": self.body,
            "state": self.state.value,
            "labels": list(self.labels),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "author": self.author,
            "url": self.url,
            "comments": [comment.to_dict() for comment in self.comments],
        }
