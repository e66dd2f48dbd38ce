"""GitHub issue-tracker client wrapping PyGithub."""

import logging
import os
import re
import time

from github import Auth, Github, GithubException, RateLimitExceededException
from github.Issue import Issue
from github.Repository import Repository

from repolens.github.models import GitHubComment, GitHubIssue, IssueState, as_utc


logger = logging.getLogger(__name__)

MAX_ISSUES_PER_REPO = 50
MAX_COMMENTS_PER_ISSUE = 10


class GitHubClientError(Exception):
    """Raised when GitHub operations fail."""


class RepositoryNotFoundError(GitHubClientError):
    """Raised when the repository does not exist or is not accessible."""


class RateLimitError(GitHubClientError):
    """Raised when the GitHub API rate limit is exhausted or access is denied."""


class GitHubClient:
    """Read-only GitHub client used to snapshot repository issues."""

    def __init__(
        self,
        token: str | None = None,
        repo_name: str | None = None,
        request_delay: float = 0.1,
    ):
        self.token = token or os.getenv("GITHUB_TOKEN") or None
        # Public repositories can be read anonymously, at a lower rate limit
        if self.token:
            self._github = Github(auth=Auth.Token(self.token))
        else:
            self._github = Github()
        self._repo_name = repo_name
        self._repo: Repository | None = None
        self.request_delay = request_delay

    # ------------------------------------------------------------------
    # Repository helpers
    # ------------------------------------------------------------------

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            if not self._repo_name:
                raise GitHubClientError("Repository name not set.")
            try:
                self._repo = self._github.get_repo(self._repo_name)
            except GithubException as e:
                raise self._translate_error(e) from e
        return self._repo

    @classmethod
    def from_url(cls, repository_url: str, token: str | None = None) -> "GitHubClient":
        """Create a client bound to the repository behind a GitHub URL."""
        owner, name = cls.parse_repo_url(repository_url)
        return cls(token=token, repo_name=f"{owner}/{name}")

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def fetch_issues(
        self,
        max_issues: int = MAX_ISSUES_PER_REPO,
        max_comments: int = MAX_COMMENTS_PER_ISSUE,
    ) -> list[GitHubIssue]:
        """Fetch recently updated issues (open and closed) with their comments.

        Pull requests returned by the issues endpoint are skipped, so fewer
        than ``max_issues`` records may come back.

        Args:
            max_issues: Number of issue-endpoint entries to inspect
            max_comments: Maximum comments fetched per issue

        Returns:
            List of issue snapshots

        Raises:
            RepositoryNotFoundError: If the repository cannot be found
            RateLimitError: If the API refuses the request
            GitHubClientError: For any other API failure
        """
        logger.info(f"Fetching issues for {self._repo_name}")
        issues: list[GitHubIssue] = []

        try:
            listing = self.repo.get_issues(state="all", sort="updated", direction="desc")
            for issue in listing[:max_issues]:
                if issue.pull_request is not None:
                    continue

                issues.append(self._to_issue(issue, self._fetch_comments(issue, max_comments)))

                if self.request_delay:
                    time.sleep(self.request_delay)
        except GithubException as e:
            raise self._translate_error(e) from e

        logger.info(f"Fetched {len(issues)} issues for {self._repo_name}")
        return issues

    def _fetch_comments(self, issue: Issue, max_comments: int) -> tuple[GitHubComment, ...]:
        try:
            return tuple(
                GitHubComment(
                    id=comment.id,
                    body=comment.body or "",
                    author=comment.user.login if comment.user else "unknown",
                    created_at=as_utc(comment.created_at),
                )
                for comment in issue.get_comments()[:max_comments]
            )
        except GithubException as e:
            logger.warning(f"Failed to fetch comments for issue #{issue.number}: {e}")
            return ()

    @staticmethod
    def _to_issue(issue: Issue, comments: tuple[GitHubComment, ...]) -> GitHubIssue:
        return GitHubIssue(
            id=issue.id,
            number=issue.number,
            title=issue.title or "",
            body=issue.body or "",
            state=IssueState(issue.state),
            labels=tuple(label.name or "" for label in issue.labels),
            created_at=as_utc(issue.created_at),
            updated_at=as_utc(issue.updated_at),
            author=issue.user.login if issue.user else "unknown",
            url=issue.html_url,
            comments=comments,
        )

    @staticmethod
    def _translate_error(error: GithubException) -> GitHubClientError:
        if isinstance(error, RateLimitExceededException) or error.status == 403:
            return RateLimitError(
                "GitHub API rate limit exceeded or insufficient permissions. "
                "Please provide a GitHub token."
            )
        if error.status == 404:
            return RepositoryNotFoundError(
                "Repository not found or not accessible. "
                "Make sure the repository exists and is public."
            )
        return GitHubClientError(f"Failed to fetch repository issues: {error}")

    # ------------------------------------------------------------------
    # Utils
    # ------------------------------------------------------------------

    @staticmethod
    def parse_repo_url(url: str) -> tuple[str, str]:
        match = re.search(r"github\.com/([^/]+)/([^/?#]+)", url)
        if not match:
            raise GitHubClientError(f"Invalid GitHub URL: {url}")
        owner, repo = match.group(1), match.group(2)
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return owner, repo
