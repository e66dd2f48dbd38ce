"""Reviewer agents for repolens with LangChain integration."""

from repolens.agents.base import BaseAgent, AgentContext
from repolens.agents.file_reviewer import FileReviewAgent, truncate_content
from repolens.agents.issue_reviewer import IssueReviewAgent, fallback_analysis

__all__ = [
    # Base
    "BaseAgent",
    "AgentContext",
    # File review
    "FileReviewAgent",
    "truncate_content",
    # Issue review
    "IssueReviewAgent",
    "fallback_analysis",
]
