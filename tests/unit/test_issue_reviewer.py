"""Unit tests for the per-issue review agent."""

import pytest
from unittest.mock import AsyncMock, patch

from repolens.agents import AgentContext, IssueReviewAgent
from repolens.llm.provider import LLMResponse


@pytest.fixture
def files(make_code_file):
    return [
        make_code_file("src/auth/login.py", "def login(user):\n    # TODO rate limit\n    return user"),
        make_code_file("src/billing.py", "def charge():\n    pass"),
    ]


class TestIssueReviewAgent:
    """Tests for IssueReviewAgent."""

    @pytest.mark.asyncio
    async def test_review_correlates_issue(self, make_issue, files):
        agent = IssueReviewAgent(AgentContext())
        issue = make_issue(
            title="Login crash",
            body="Calling login raises an error",
            labels=("bug",),
        )

        analysis = await agent.review(issue, files)

        assert analysis.category == "bug"
        assert analysis.priority == "critical"
        assert analysis.estimated_effort == "medium"
        assert analysis.related_files == ["src/auth/login.py"]
        assert analysis.code_context[0].file_path == "src/auth/login.py"
        assert analysis.suggestions[0].description == "Add proper error handling and validation"

    @pytest.mark.asyncio
    async def test_correlation_failure_gives_fallback(self, make_issue, files):
        agent = IssueReviewAgent(AgentContext())
        issue = make_issue(title="Docs are outdated", labels=("documentation",))

        with patch(
            "repolens.agents.issue_reviewer.find_related_files",
            side_effect=RuntimeError("bad regex"),
        ):
            analysis = await agent.review(issue, files)

        assert analysis.category == "documentation"
        assert analysis.related_files == []
        assert analysis.estimated_effort == "medium"
        assert analysis.suggestions[0].type == "documentation"
        assert analysis.suggestions[0].description == "Manual investigation required for this issue"

    @pytest.mark.asyncio
    async def test_llm_pass_adds_suggestions(self, make_issue, files):
        provider = AsyncMock()
        provider.complete.return_value = LLMResponse(
            content='{"estimatedEffort": "low", "suggestions": [{"type": "testing", '
                    '"description": "Add a login regression test", "reasoning": "No coverage"}]}',
            model="test-model",
        )
        agent = IssueReviewAgent(AgentContext(llm_provider=provider), use_llm=True)

        analysis = await agent.review(make_issue(title="login", body=""), files)

        assert analysis.estimated_effort == "low"
        assert analysis.suggestions[-1].description == "Add a login regression test"
        prompt = provider.complete.call_args.args[0][1].content
        assert "src/auth/login.py:1" in prompt

    @pytest.mark.asyncio
    async def test_llm_failure_keeps_heuristics(self, make_issue, files):
        provider = AsyncMock()
        provider.complete.return_value = LLMResponse(content="not json", model="test-model")
        agent = IssueReviewAgent(AgentContext(llm_provider=provider), use_llm=True)

        analysis = await agent.review(make_issue(title="login", body="error"), files)

        assert analysis.suggestions[0].description == "Add proper error handling and validation"
        assert analysis.estimated_effort == "medium"

    @pytest.mark.asyncio
    async def test_llm_not_called_by_default(self, make_issue, files, mock_llm_provider):
        agent = IssueReviewAgent(AgentContext(llm_provider=mock_llm_provider))

        await agent.review(make_issue(title="login"), files)

        mock_llm_provider.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_review_all_sorted_and_paced(self, make_issue, files, no_sleep):
        agent = IssueReviewAgent(AgentContext(), sleep=no_sleep)
        issues = [
            make_issue(1, title="Cosmetic spacing"),
            make_issue(2, title="Crash on login"),
            make_issue(3, title="Add export"),
            make_issue(4, title="Production outage"),
        ]

        analyses = await agent.review_all(issues, files)

        assert [a.issue.number for a in analyses] == [2, 4, 3, 1]
        assert [a.priority for a in analyses] == ["critical", "high", "medium", "low"]
        no_sleep.assert_awaited_once_with(2.0)
