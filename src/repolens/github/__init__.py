"""GitHub integration module for repolens."""

from repolens.github.client import (
    GitHubClient,
    GitHubClientError,
    RateLimitError,
    RepositoryNotFoundError,
)
from repolens.github.models import GitHubComment, GitHubIssue, IssueState

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "RateLimitError",
    "RepositoryNotFoundError",
    "GitHubComment",
    "GitHubIssue",
    "IssueState",
]
