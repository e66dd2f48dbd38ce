"""Per-issue review agent correlating GitHub issues with the codebase."""

import asyncio
from typing import Awaitable, Callable, Sequence

from repolens.agents.base import AgentContext, BaseAgent
from repolens.analysis.batching import ISSUE_BATCH_DELAY, ISSUE_BATCH_SIZE, run_in_batches
from repolens.analysis.correlator import (
    categorize_issue,
    estimate_effort,
    extract_code_context,
    find_related_files,
    heuristic_suggestions,
    prioritize_issue,
    sort_analyses,
)
from repolens.analysis.models import CodeContext, IssueAnalysis, IssueSuggestion
from repolens.code.discovery import CodeFile
from repolens.github.models import GitHubIssue
from repolens.llm.schemas import decode_issue_review
from repolens.prompts import ISSUE_REVIEW_PROMPT, ISSUE_REVIEW_SYSTEM_PROMPT, NO_CODE_CONTEXT
from repolens.state.registry import CancellationToken


def fallback_analysis(issue: GitHubIssue) -> IssueAnalysis:
    """Basic analysis used when correlating an issue fails."""
    return IssueAnalysis(
        issue=issue,
        category=categorize_issue(issue),
        priority=prioritize_issue(issue),
        estimated_effort="medium",
        related_files=[],
        code_context=[],
        suggestions=[
            IssueSuggestion(
                type="documentation",
                description="Manual investigation required for this issue",
                reasoning="Automated analysis failed - requires human review",
            )
        ],
    )


def format_code_context(contexts: Sequence[CodeContext]) -> str:
    if not contexts:
        return NO_CODE_CONTEXT
    return "\n\n".join(
        f"{context.file_path}:{context.line_number}\n" + "\n".join(context.context_lines)
        for context in contexts
    )


class IssueReviewAgent(BaseAgent):
    """Agent that classifies issues and links them to related code.

    Classification and correlation are rule based. With ``use_llm`` the
    reviewer model is also asked for extra suggestions; that pass is
    best-effort and never changes category or priority.
    """

    def __init__(
        self,
        context: AgentContext,
        use_llm: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the agent.

        Args:
            context: Agent context; the provider is only needed with use_llm
            use_llm: Whether to ask the reviewer model for extra suggestions
            sleep: Awaitable used for the pause between batches
        """
        super().__init__(context)
        self.use_llm = use_llm
        self.sleep = sleep

    async def review(self, issue: GitHubIssue, files: Sequence[CodeFile]) -> IssueAnalysis:
        """Analyze one issue against the discovered files.

        Returns:
            The issue analysis; the fallback analysis if correlation fails
        """
        try:
            related = find_related_files(issue, files)
            contexts = extract_code_context(issue, related)
            suggestions = heuristic_suggestions(issue, contexts)
            effort = estimate_effort(issue)
        except Exception as e:
            self._log_error(f"Error analyzing issue #{issue.number}: {e}")
            return fallback_analysis(issue)

        if self.use_llm and self.llm is not None:
            try:
                text = await self._complete(
                    ISSUE_REVIEW_SYSTEM_PROMPT,
                    ISSUE_REVIEW_PROMPT.format(
                        number=issue.number,
                        title=issue.title,
                        labels=", ".join(issue.labels) or "none",
                        body=issue.body or "(no description)",
                        code_context=format_code_context(contexts),
                    ),
                )
                payload = decode_issue_review(text)
                suggestions.extend(item.to_suggestion() for item in payload.suggestions)
                if payload.estimated_effort is not None:
                    effort = payload.estimated_effort
            except Exception as e:
                self._log_warning(f"Reviewer suggestions unavailable for issue #{issue.number}: {e}")

        return IssueAnalysis(
            issue=issue,
            category=categorize_issue(issue),
            priority=prioritize_issue(issue),
            estimated_effort=effort,
            related_files=[code_file.relative_path for code_file in related],
            code_context=contexts,
            suggestions=suggestions,
        )

    async def review_all(
        self,
        issues: Sequence[GitHubIssue],
        files: Sequence[CodeFile],
        cancel_token: CancellationToken | None = None,
    ) -> list[IssueAnalysis]:
        """Analyze issues in paced batches.

        Returns:
            Analyses ordered by priority, then newest issue first

        Raises:
            AnalysisCancelledError: If cancelled between batches
        """
        self._log_info(f"Analyzing {len(issues)} issues against codebase...")
        analyses = await run_in_batches(
            issues,
            lambda issue: self.review(issue, files),
            batch_size=ISSUE_BATCH_SIZE,
            delay=ISSUE_BATCH_DELAY,
            cancel_token=cancel_token,
            on_error=lambda issue, _: fallback_analysis(issue),
            sleep=self.sleep,
            label="issue",
        )
        self._log_info("Issue analysis completed")
        return sort_analyses(analyses)
