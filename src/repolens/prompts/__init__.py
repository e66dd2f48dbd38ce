"""Prompt templates for repolens reviewers."""

from repolens.prompts.templates import (
    FILE_REVIEW_PROMPT,
    FILE_REVIEW_SYSTEM_PROMPT,
    ISSUE_REVIEW_PROMPT,
    ISSUE_REVIEW_SYSTEM_PROMPT,
    NO_CODE_CONTEXT,
)

__all__ = [
    "FILE_REVIEW_PROMPT",
    "FILE_REVIEW_SYSTEM_PROMPT",
    "ISSUE_REVIEW_PROMPT",
    "ISSUE_REVIEW_SYSTEM_PROMPT",
    "NO_CODE_CONTEXT",
]
