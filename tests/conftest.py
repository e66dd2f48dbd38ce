"""Pytest fixtures for repolens tests."""

from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock


VALID_REVIEW = (
    '{"score": 82, "complexity": "low", "maintainability": 78, '
    '"issues": [{"line": 3, "type": "security", "severity": "high", '
    '"message": "Hardcoded secret", "suggestion": "Load secrets from the environment"}], '
    '"suggestions": ["Add docstrings"]}'
)


@pytest.fixture
def mock_llm_provider():
    """Mock LLM provider returning a well-formed file review."""
    from repolens.llm.provider import LLMResponse

    provider = AsyncMock()
    provider.complete.return_value = LLMResponse(
        content=VALID_REVIEW,
        model="test-model",
        usage={"prompt_tokens": 100, "completion_tokens": 200},
        raw_response={},
    )
    return provider


@pytest.fixture
def no_sleep():
    """Awaitable stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_code_file():
    """Factory for CodeFile records."""
    from repolens.code.discovery import CodeFile

    def _make(relative_path: str, content: str = "print('hello')\n") -> CodeFile:
        extension = "." + relative_path.rsplit(".", 1)[-1] if "." in relative_path else ""
        return CodeFile(
            path=f"/tmp/checkout/{relative_path}",
            relative_path=relative_path,
            content=content,
            extension=extension,
            size=len(content.encode()),
        )

    return _make


@pytest.fixture
def make_issue():
    """Factory for GitHubIssue snapshots."""
    from repolens.github.models import GitHubIssue, IssueState

    def _make(
        number: int = 1,
        title: str = "Something is wrong",
        body: str = "",
        labels: tuple[str, ...] = (),
        state: IssueState = IssueState.OPEN,
        created_at: datetime | None = None,
    ) -> GitHubIssue:
        return GitHubIssue(
            id=1000 + number,
            number=number,
            title=title,
            body=body,
            state=state,
            labels=labels,
            created_at=created_at or datetime(2024, 1, number % 28 + 1, tzinfo=timezone.utc),
            updated_at=created_at or datetime(2024, 1, number % 28 + 1, tzinfo=timezone.utc),
            author="octocat",
            url=f"https://github.com/owner/repo/issues/{number}",
        )

    return _make


@pytest.fixture
def mock_github_client(make_issue):
    """Mock issue-tracker client."""
    client = MagicMock()
    client.fetch_issues.return_value = [
        make_issue(1, "App crash on startup", "Exception in main.py"),
        make_issue(2, "Add dark mode", labels=("feature",)),
    ]
    return client
