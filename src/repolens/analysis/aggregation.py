"""Fold per-file verdicts and per-issue analyses into report-level figures.

Everything here is a pure function of its inputs.
"""

import math
from collections import Counter
from typing import Iterable, Sequence

from repolens.analysis.models import (
    Categories,
    CategoryScore,
    FileVerdict,
    FinalReport,
    Finding,
    IssueAnalysis,
    IssueSummary,
    Recommendations,
    ReportOverview,
    RiskLevel,
)
from repolens.github.models import GitHubIssue, IssueState


SEVERITY_WEIGHTS = {"low": 1, "medium": 3, "high": 7, "critical": 15}

# Score of a category with no findings at all
CLEAN_SCORE = 85
# Assumed worst case: five critical-equivalent findings per file
WORST_CASE_WEIGHT_PER_FILE = 5

CATEGORY_WEIGHTS = {
    "security": 0.30,
    "code_quality": 0.25,
    "performance": 0.25,
    "maintainability": 0.20,
}

TOP_SUGGESTIONS = 3
DETAIL_LIMIT = 5
IMMEDIATE_FROM_CRITICAL = 3
IMMEDIATE_FROM_HIGH = 2

SHORT_TERM_RECOMMENDATIONS = [
    "Implement automated testing if not present",
    "Set up continuous integration pipeline",
    "Add comprehensive error handling",
    "Improve code documentation",
    "Establish coding standards and linting rules",
]

LONG_TERM_RECOMMENDATIONS = [
    "Consider architectural improvements for scalability",
    "Implement monitoring and logging",
    "Regular security audits",
    "Performance optimization based on usage patterns",
    "Team code review processes",
]

RISK_DESCRIPTIONS = {
    "low": "well-maintained with minimal issues",
    "medium": "generally good but has some areas for improvement",
    "high": "has several important issues that should be addressed",
    "critical": "has critical issues that require immediate attention",
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ----------------------------------------------------------------------
# File verdicts
# ----------------------------------------------------------------------


def category_score(issues: Sequence[Finding], file_count: int) -> int:
    """Score one bucket of findings on a 0-100 scale."""
    if not issues:
        return CLEAN_SCORE

    total_weight = sum(SEVERITY_WEIGHTS[issue.severity] for issue in issues)
    max_weight = max(file_count, 1) * WORST_CASE_WEIGHT_PER_FILE
    return max(0, round_half_up(100 - (total_weight / max_weight) * 100))


def partition_findings(verdicts: Iterable[FileVerdict]) -> dict[str, list[Finding]]:
    """Pool findings into security, performance, quality (incl. bugs) and style."""
    buckets: dict[str, list[Finding]] = {
        "security": [],
        "performance": [],
        "quality": [],
        "style": [],
    }
    for verdict in verdicts:
        for issue in verdict.issues:
            if issue.type == "bug":
                buckets["quality"].append(issue)
            else:
                buckets[issue.type].append(issue)
    return buckets


def top_suggestions(issues: Iterable[Finding], limit: int = TOP_SUGGESTIONS) -> list[str]:
    """Most frequent fix suggestions; ties keep first-seen order."""
    counts = Counter(issue.suggestion for issue in issues if issue.suggestion)
    return [suggestion for suggestion, _ in counts.most_common(limit)]


def _category(issues: list[Finding], score: int) -> CategoryScore:
    return CategoryScore(
        score=score,
        issues=len(issues),
        critical_issues=sum(1 for issue in issues if issue.severity == "critical"),
        suggestions=top_suggestions(issues),
        details=[issue.message for issue in issues[:DETAIL_LIMIT]],
    )


def calculate_categories(verdicts: Sequence[FileVerdict]) -> Categories:
    buckets = partition_findings(verdicts)
    file_count = len(verdicts)

    if verdicts:
        maintainability = round_half_up(
            sum(verdict.maintainability for verdict in verdicts) / file_count
        )
    else:
        maintainability = CLEAN_SCORE

    style = buckets["style"]
    return Categories(
        code_quality=_category(buckets["quality"], category_score(buckets["quality"], file_count)),
        security=_category(buckets["security"], category_score(buckets["security"], file_count)),
        performance=_category(
            buckets["performance"], category_score(buckets["performance"], file_count)
        ),
        # Maintainability is scored from the reviewer's own figure, not findings
        maintainability=CategoryScore(
            score=maintainability,
            issues=len(style),
            critical_issues=0,
            suggestions=top_suggestions(style),
            details=[issue.message for issue in style[:DETAIL_LIMIT]],
        ),
    )


def overall_score(categories: Categories) -> int:
    return round_half_up(
        categories.security.score * CATEGORY_WEIGHTS["security"]
        + categories.code_quality.score * CATEGORY_WEIGHTS["code_quality"]
        + categories.performance.score * CATEGORY_WEIGHTS["performance"]
        + categories.maintainability.score * CATEGORY_WEIGHTS["maintainability"]
    )


def risk_tier(score: int) -> RiskLevel:
    """Risk level implied by the score alone."""
    if score < 40:
        return "critical"
    if score < 60:
        return "high"
    if score < 80:
        return "medium"
    return "low"


def risk_level(score: int, verdicts: Iterable[FileVerdict]) -> RiskLevel:
    """Risk level of a repository; any critical finding makes it critical."""
    if any(issue.severity == "critical" for verdict in verdicts for issue in verdict.issues):
        return "critical"
    return risk_tier(score)


def _distinct_suggestions(issues: Iterable[Finding], limit: int, seen: set[str]) -> list[str]:
    picked: list[str] = []
    for issue in issues:
        if len(picked) >= limit:
            break
        if issue.suggestion and issue.suggestion not in seen:
            seen.add(issue.suggestion)
            picked.append(issue.suggestion)
    return picked


def build_recommendations(verdicts: Sequence[FileVerdict]) -> Recommendations:
    findings = [issue for verdict in verdicts for issue in verdict.issues]
    seen: set[str] = set()
    immediate = _distinct_suggestions(
        (issue for issue in findings if issue.severity == "critical"),
        IMMEDIATE_FROM_CRITICAL,
        seen,
    )
    immediate += _distinct_suggestions(
        (issue for issue in findings if issue.severity == "high"),
        IMMEDIATE_FROM_HIGH,
        seen,
    )
    return Recommendations(
        immediate=immediate,
        short_term=list(SHORT_TERM_RECOMMENDATIONS),
        long_term=list(LONG_TERM_RECOMMENDATIONS),
    )


def build_summary(score: int, categories: Categories, repository_name: str) -> str:
    focus = (
        "security vulnerabilities"
        if categories.security.critical_issues > 0
        else "code quality improvements"
    )
    return (
        f"The {repository_name} repository scores {score}/100 and is "
        f"{RISK_DESCRIPTIONS[risk_tier(score)]}.\n"
        f"Security score: {categories.security.score}/100 "
        f"({categories.security.critical_issues} critical issues).\n"
        f"Code quality: {categories.code_quality.score}/100.\n"
        f"Performance: {categories.performance.score}/100.\n"
        f"Focus on {focus} as the next priority."
    )


def build_report(
    verdicts: Sequence[FileVerdict],
    repository_name: str,
    total_files: int,
    lines_of_code: int,
    github_issues: IssueSummary | None = None,
) -> FinalReport:
    """Build the final report of an analysis.

    Args:
        verdicts: One verdict per reviewed file
        repository_name: Name shown in the overview and summary
        total_files: Number of discovered files
        lines_of_code: Total line count of the discovered files
        github_issues: Issue-track summary, if issues were analyzed

    Returns:
        The immutable FinalReport
    """
    categories = calculate_categories(verdicts)
    score = overall_score(categories)

    return FinalReport(
        overview=ReportOverview(
            total_files=total_files,
            lines_of_code=lines_of_code,
            overall_score=score,
            risk_level=risk_level(score, verdicts),
            repository_name=repository_name,
        ),
        categories=categories,
        file_analysis=list(verdicts),
        recommendations=build_recommendations(verdicts),
        summary=build_summary(score, categories, repository_name),
        github_issues=github_issues,
    )


# ----------------------------------------------------------------------
# GitHub issues
# ----------------------------------------------------------------------


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def issue_insights(analyses: Sequence[IssueAnalysis]) -> list[str]:
    """Short observations about the analyzed issues."""
    if not analyses:
        return ["No issues found for analysis"]

    insights: list[str] = []
    priorities = Counter(analysis.priority for analysis in analyses)
    categories = Counter(analysis.category for analysis in analyses)

    if priorities["critical"]:
        insights.append(
            f"🚨 {_plural(priorities['critical'], 'critical issue')} require immediate attention"
        )
    if priorities["high"]:
        insights.append(
            f"⚠️ {_plural(priorities['high'], 'high-priority issue')} should be addressed soon"
        )

    if categories["bug"] > categories["feature"] * 2:
        insights.append(
            "🐛 High bug-to-feature ratio suggests focus on stability over new features"
        )

    high_effort = sum(1 for analysis in analyses if analysis.estimated_effort == "high")
    if high_effort / len(analyses) > 0.3:
        insights.append(
            "💪 Many issues require significant effort - consider breaking them into smaller tasks"
        )

    related = {path for analysis in analyses for path in analysis.related_files}
    if related:
        insights.append(
            f"📁 Issues reference {_plural(len(related), 'different file')} across the codebase"
        )

    return insights or ["Analysis completed successfully"]


def summarize_issues(
    issues: Sequence[GitHubIssue],
    analyses: Sequence[IssueAnalysis],
) -> IssueSummary:
    """Build the issue-track summary attached to the final report."""
    categories = Counter(analysis.category for analysis in analyses)
    priorities = Counter(analysis.priority for analysis in analyses)
    efforts = Counter(analysis.estimated_effort for analysis in analyses)

    return IssueSummary(
        total_issues=len(issues),
        open_issues=sum(1 for issue in issues if issue.state == IssueState.OPEN),
        closed_issues=sum(1 for issue in issues if issue.state == IssueState.CLOSED),
        category_summary={
            "bugs": categories["bug"],
            "features": categories["feature"],
            "enhancements": categories["enhancement"],
            "documentation": categories["documentation"],
            "questions": categories["question"],
            "other": categories["other"],
        },
        priority_summary={
            "critical": priorities["critical"],
            "high": priorities["high"],
            "medium": priorities["medium"],
            "low": priorities["low"],
        },
        effort_summary={
            "high": efforts["high"],
            "medium": efforts["medium"],
            "low": efforts["low"],
        },
        analyses=list(analyses),
        insights=issue_insights(analyses),
    )
