"""Pydantic schemas and decoders for structured reviewer output.

Reviewer responses are parsed strictly as JSON. A decoder either returns a
validated payload with defaults applied, or raises
:class:`MalformedResponseError`; callers turn that into a fallback result.
"""

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from repolens.analysis.models import FileVerdict, Finding, IssueSuggestion


DEFAULT_SCORE = 70
DEFAULT_MAINTAINABILITY = 70


class MalformedResponseError(ValueError):
    """Raised when reviewer output is empty, not JSON, or off-schema."""


class _ReviewerModel(BaseModel):
    """Base for reviewer payloads: null fields fall back to their defaults."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class FindingPayload(_ReviewerModel):
    """A single issue found during file review."""

    type: Literal["security", "performance", "quality", "style", "bug"] = Field(
        description="Issue category"
    )
    severity: Literal["low", "medium", "high", "critical"] = Field(description="Issue severity")
    message: str = Field(description="Brief description of the issue")
    suggestion: str = Field(default="", description="How to fix it")
    line: int | None = Field(default=None, description="Line number if applicable")

    def to_finding(self) -> Finding:
        return Finding(
            type=self.type,
            severity=self.severity,
            message=self.message,
            suggestion=self.suggestion,
            line=self.line,
        )


class FileReviewPayload(_ReviewerModel):
    """Structured review of one file."""

    score: int = Field(default=DEFAULT_SCORE, ge=0, le=100)
    complexity: Literal["low", "medium", "high"] = "medium"
    maintainability: int = Field(default=DEFAULT_MAINTAINABILITY, ge=0, le=100)
    issues: list[FindingPayload] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @field_validator("score", "maintainability", mode="before")
    @classmethod
    def _round_scores(cls, value: Any) -> Any:
        if isinstance(value, float):
            return round(value)
        return value

    def to_verdict(self, file_path: str) -> FileVerdict:
        return FileVerdict(
            file_path=file_path,
            score=self.score,
            issues=tuple(issue.to_finding() for issue in self.issues),
            suggestions=tuple(self.suggestions),
            complexity=self.complexity,
            maintainability=self.maintainability,
        )


class IssueSuggestionPayload(_ReviewerModel):
    """A suggestion proposed by the reviewer for a GitHub issue."""

    type: Literal["code_change", "new_file", "documentation", "testing", "refactor"]
    description: str
    reasoning: str = ""
    file_path: str | None = None
    line_number: int | None = None
    code_snippet: str | None = None
    suggested_change: str | None = None

    def to_suggestion(self) -> IssueSuggestion:
        return IssueSuggestion(
            type=self.type,
            description=self.description,
            reasoning=self.reasoning,
            file_path=self.file_path,
            line_number=self.line_number,
            code_snippet=self.code_snippet,
            suggested_change=self.suggested_change,
        )


class IssueReviewPayload(_ReviewerModel):
    """Structured reviewer output for one GitHub issue."""

    suggestions: list[IssueSuggestionPayload] = Field(default_factory=list)
    estimated_effort: Literal["low", "medium", "high"] | None = None


def _load_object(text: str | None) -> dict:
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from reviewer")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Reviewer response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Reviewer response must be a JSON object, got {type(data).__name__}"
        )
    return data


def decode_file_review(text: str | None) -> FileReviewPayload:
    """Decode a file review response.

    Raises:
        MalformedResponseError: If the response cannot be used
    """
    data = _load_object(text)
    try:
        return FileReviewPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Reviewer response does not match schema: {e}") from e


def decode_issue_review(text: str | None) -> IssueReviewPayload:
    """Decode an issue review response.

    Raises:
        MalformedResponseError: If the response cannot be used
    """
    data = _load_object(text)
    try:
        return IssueReviewPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Reviewer response does not match schema: {e}") from e
