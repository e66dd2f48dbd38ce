"""Data models for file verdicts, issue analyses and the final report."""

from dataclasses import dataclass, field
from typing import Literal

from repolens.github.models import GitHubIssue


FindingType = Literal["security", "performance", "quality", "style", "bug"]
Severity = Literal["low", "medium", "high", "critical"]
Complexity = Literal["low", "medium", "high"]
RiskLevel = Literal["low", "medium", "high", "critical"]

IssueCategory = Literal["bug", "feature", "enhancement", "documentation", "question", "other"]
IssuePriority = Literal["low", "medium", "high", "critical"]
Effort = Literal["low", "medium", "high"]
SuggestionType = Literal["code_change", "new_file", "documentation", "testing", "refactor"]


FALLBACK_SCORE = 60
FALLBACK_MESSAGE = "Unable to analyze this file automatically"
FALLBACK_FIX = "Manual review recommended"
FALLBACK_SUGGESTION = "Review this file manually for potential improvements"


@dataclass(frozen=True)
class Finding:
    """A single observation reported for one file."""

    type: FindingType
    severity: Severity
    message: str
    suggestion: str = ""
    line: int | None = None

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class FileVerdict:
    """Review outcome for one file."""

    file_path: str
    score: int
    issues: tuple[Finding, ...] = ()
    suggestions: tuple[str, ...] = ()
    complexity: Complexity = "medium"
    maintainability: int = 70

    @classmethod
    def fallback(cls, file_path: str) -> "FileVerdict":
        """Verdict used when the reviewer could not produce one."""
        return cls(
            file_path=file_path,
            score=FALLBACK_SCORE,
            issues=(
                Finding(
                    type="quality",
                    severity="medium",
                    message=FALLBACK_MESSAGE,
                    suggestion=FALLBACK_FIX,
                ),
            ),
            suggestions=(FALLBACK_SUGGESTION,),
            complexity="medium",
            maintainability=FALLBACK_SCORE,
        )

    def to_dict(self) -> dict:
        return {
            "filePath": self.file_path,
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": list(self.suggestions),
            "complexity": self.complexity,
            "maintainability": self.maintainability,
        }


@dataclass(frozen=True)
class CategoryScore:
    """Score and highlights for one report category."""

    score: int
    issues: int
    critical_issues: int
    suggestions: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "issues": self.issues,
            "criticalIssues": self.critical_issues,
            "suggestions": list(self.suggestions),
            "details": list(self.details),
        }


@dataclass(frozen=True)
class Categories:
    code_quality: CategoryScore
    security: CategoryScore
    performance: CategoryScore
    maintainability: CategoryScore

    def to_dict(self) -> dict:
        return {
            "codeQuality": self.code_quality.to_dict(),
            "security": self.security.to_dict(),
            "performance": self.performance.to_dict(),
            "maintainability": self.maintainability.to_dict(),
        }


@dataclass(frozen=True)
class Recommendations:
    immediate: list[str]
    short_term: list[str]
    long_term: list[str]

    def to_dict(self) -> dict:
        return {
            "immediate": list(self.immediate),
            "shortTerm": list(self.short_term),
            "longTerm": list(self.long_term),
        }


@dataclass(frozen=True)
class ReportOverview:
    total_files: int
    lines_of_code: int
    overall_score: int
    risk_level: RiskLevel
    repository_name: str

    def to_dict(self) -> dict:
        return {
            "totalFiles": self.total_files,
            "linesOfCode": self.lines_of_code,
            "overallScore": self.overall_score,
            "riskLevel": self.risk_level,
            "repositoryName": self.repository_name,
        }


# ----------------------------------------------------------------------
# GitHub issue analysis
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class CodeContext:
    """A window of lines that looks related to an issue."""

    file_path: str
    line_number: int
    context_lines: list[str]
    relevance_score: int

    def to_dict(self) -> dict:
        return {
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "contextLines": list(self.context_lines),
            "relevanceScore": self.relevance_score,
        }


@dataclass(frozen=True)
class IssueSuggestion:
    """A proposed next step for resolving an issue."""

    type: SuggestionType
    description: str
    reasoning: str
    file_path: str | None = None
    line_number: int | None = None
    code_snippet: str | None = None
    suggested_change: str | None = None

    def to_dict(self) -> dict:
        data = {
            "type": self.type,
            "description": self.description,
            "reasoning": self.reasoning,
        }
        if self.file_path is not None:
            data["filePath"] = self.file_path
        if self.line_number is not None:
            data["lineNumber"] = self.line_number
        if self.code_snippet is not None:
            data["codeSnippet"] = self.code_snippet
        if self.suggested_change is not None:
            data["suggestedChange"] = self.suggested_change
        return data


@dataclass(frozen=True)
class IssueAnalysis:
    """Verdict for one GitHub issue."""

    issue: GitHubIssue
    category: IssueCategory
    priority: IssuePriority
    estimated_effort: Effort
    related_files: list[str] = field(default_factory=list)
    code_context: list[CodeContext] = field(default_factory=list)
    suggestions: list[IssueSuggestion] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "issue": self.issue.to_dict(),
            "category": self.category,
            "priority": self.priority,
            "relatedFiles": list(self.related_files),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "estimatedEffort": self.estimated_effort,
            "codeContext": [c.to_dict() for c in self.code_context],
        }


@dataclass(frozen=True)
class IssueSummary:
    """Aggregate view over every analyzed issue of a repository."""

    total_issues: int = 0
    open_issues: int = 0
    closed_issues: int = 0
    category_summary: dict[str, int] = field(default_factory=dict)
    priority_summary: dict[str, int] = field(default_factory=dict)
    effort_summary: dict[str, int] = field(default_factory=dict)
    analyses: list[IssueAnalysis] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def failed(cls, message: str) -> "IssueSummary":
        """Summary recorded when the issue track could not run."""
        return cls(error=message)

    def find(self, issue_number: int) -> IssueAnalysis | None:
        for analysis in self.analyses:
            if analysis.issue.number == issue_number:
                return analysis
        return None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"error": self.error, "totalIssues": 0, "analyses": []}
        return {
            "totalIssues": self.total_issues,
            "openIssues": self.open_issues,
            "closedIssues": self.closed_issues,
            "categorySummary": dict(self.category_summary),
            "prioritySummary": dict(self.priority_summary),
            "effortSummary": dict(self.effort_summary),
            "analyses": [a.to_dict() for a in self.analyses],
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class FinalReport:
    """Terminal artifact of a completed analysis."""

    overview: ReportOverview
    categories: Categories
    file_analysis: list[FileVerdict]
    recommendations: Recommendations
    summary: str
    github_issues: IssueSummary | None = None

    def to_dict(self) -> dict:
        data = {
            "overview": self.overview.to_dict(),
            "categories": self.categories.to_dict(),
            "fileAnalysis": [verdict.to_dict() for verdict in self.file_analysis],
            "recommendations": self.recommendations.to_dict(),
            "summary": self.summary,
        }
        if self.github_issues is not None:
            data["githubIssues"] = self.github_issues.to_dict()
        return data
