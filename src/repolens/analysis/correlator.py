"""Text-overlap heuristics linking GitHub issues to source files.

Everything here is deterministic: the same issue and the same files always
give the same related files, code contexts and classification.
"""

import re
from datetime import datetime, timezone
from typing import Iterable, Sequence

from repolens.analysis.models import (
    CodeContext,
    Effort,
    IssueAnalysis,
    IssueCategory,
    IssuePriority,
    IssueSuggestion,
)
from repolens.code.discovery import CodeFile
from repolens.github.models import GitHubIssue, IssueState, as_utc


MAX_SEARCH_TERMS = 20
MAX_RELATED_FILES = 10
CONTEXT_FILES = 5
MAX_CONTEXTS = 10
CONTEXT_RADIUS = 2
SUGGESTION_CONTEXTS = 3

PATH_MATCH_SCORE = 10
CONTENT_MATCH_SCORE = 2
EXTENSION_MENTION_SCORE = 5
LINE_TERM_SCORE = 2
LINE_MARKER_SCORE = 3
LINE_MARKERS = ("TODO", "FIXME", "BUG")

_IDENTIFIER_PATTERN = re.compile(r"\b[a-zA-Z_][a-zA-Z0-9_]*\b")
_FILE_PATTERN = re.compile(
    r"[\w/.-]+\.(?:js|jsx|ts|tsx|py|java|cpp|go|rs|php|rb|swift|kt|cs|html|css|json|yaml|yml)"
)
_QUOTED_PATTERN = re.compile(r"[\"`']([^\"`']+)[\"`']")

# (result, label substrings, title substrings); first matching rule wins
CATEGORY_RULES: tuple[tuple[IssueCategory, tuple[str, ...], tuple[str, ...]], ...] = (
    ("bug", ("bug",), ("bug", "error", "fix")),
    ("feature", ("feature",), ("feature", "implement")),
    ("enhancement", ("enhancement",), ("improve", "enhance")),
    ("documentation", ("documentation",), ("docs", "documentation")),
    ("question", ("question",), ("question", "how to")),
)

PRIORITY_RULES: tuple[tuple[IssuePriority, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "critical",
        ("critical", "urgent", "security"),
        ("critical", "urgent", "security", "crash", "data loss"),
    ),
    ("high", ("high", "important", "priority"), ("blocker", "regression", "production")),
    ("low", ("low", "minor", "nice-to-have"), ("minor", "cosmetic")),
)

EFFORT_RULES: tuple[tuple[Effort, tuple[str, ...]], ...] = (
    ("high", ("major", "breaking")),
    ("low", ("minor", "easy")),
)

PRIORITY_WEIGHTS = {"critical": 4, "high": 3, "medium": 2, "low": 1}
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def extract_search_terms(issue: GitHubIssue) -> list[str]:
    """Pull identifier-like tokens, file paths and quoted strings from an issue.

    Args:
        issue: Issue whose title and body are scanned

    Returns:
        Up to 20 distinct lower-cased terms in discovery order
    """
    text = f"{issue.title} {issue.body}".lower()
    terms: dict[str, None] = {}

    for match in _IDENTIFIER_PATTERN.findall(text):
        if 2 < len(match) < 50:
            terms.setdefault(match)

    for match in _FILE_PATTERN.findall(text):
        terms.setdefault(match)

    for match in _QUOTED_PATTERN.findall(text):
        if 2 < len(match) < 100:
            terms.setdefault(match)

    return list(terms)[:MAX_SEARCH_TERMS]


def score_file(issue: GitHubIssue, code_file: CodeFile, terms: Iterable[str]) -> int:
    """Relevance of one file to an issue; zero means unrelated."""
    path = code_file.relative_path.lower()
    content = code_file.content.lower()
    score = 0

    for term in terms:
        if term in path:
            score += PATH_MATCH_SCORE
        matches = re.findall(rf"\b{re.escape(term)}\b", content)
        score += len(matches) * CONTENT_MATCH_SCORE

    if code_file.extension and code_file.extension in issue.body.lower():
        score += EXTENSION_MENTION_SCORE

    return score


def find_related_files(issue: GitHubIssue, files: Sequence[CodeFile]) -> list[CodeFile]:
    """Rank files by relevance to an issue.

    Returns:
        At most 10 files with a positive score, best first; ties keep input order
    """
    terms = extract_search_terms(issue)
    scored = []
    for code_file in files:
        score = score_file(issue, code_file, terms)
        if score > 0:
            scored.append((score, code_file))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [code_file for _, code_file in scored[:MAX_RELATED_FILES]]


def extract_code_context(issue: GitHubIssue, related: Sequence[CodeFile]) -> list[CodeContext]:
    """Collect the most relevant line windows from the top related files."""
    terms = extract_search_terms(issue)
    contexts: list[CodeContext] = []

    for code_file in related[:CONTEXT_FILES]:
        lines = code_file.content.split("\n")
        for index, line in enumerate(lines):
            lowered = line.lower()
            relevance = sum(LINE_TERM_SCORE for term in terms if term in lowered)
            if any(marker in line for marker in LINE_MARKERS):
                relevance += LINE_MARKER_SCORE
            if relevance <= 0:
                continue

            start = max(0, index - CONTEXT_RADIUS)
            end = min(len(lines) - 1, index + CONTEXT_RADIUS)
            contexts.append(
                CodeContext(
                    file_path=code_file.relative_path,
                    line_number=index + 1,
                    context_lines=lines[start : end + 1],
                    relevance_score=relevance,
                )
            )

    contexts.sort(key=lambda context: context.relevance_score, reverse=True)
    return contexts[:MAX_CONTEXTS]


def _matches(issue: GitHubIssue, label_tokens: Sequence[str], title_tokens: Sequence[str]) -> bool:
    labels = [label.lower() for label in issue.labels]
    title = issue.title.lower()
    return any(token in label for label in labels for token in label_tokens) or any(
        token in title for token in title_tokens
    )


def categorize_issue(issue: GitHubIssue) -> IssueCategory:
    for category, label_tokens, title_tokens in CATEGORY_RULES:
        if _matches(issue, label_tokens, title_tokens):
            return category
    return "other"


def prioritize_issue(issue: GitHubIssue) -> IssuePriority:
    """Priority from labels and title; closed issues default to low."""
    for priority, label_tokens, title_tokens in PRIORITY_RULES:
        if _matches(issue, label_tokens, title_tokens):
            return priority
        if priority == "low" and issue.state == IssueState.CLOSED:
            return "low"
    return "medium"


def estimate_effort(issue: GitHubIssue) -> Effort:
    labels = [label.lower() for label in issue.labels]
    for effort, tokens in EFFORT_RULES:
        if any(token in label for label in labels for token in tokens):
            return effort
    return "medium"


def heuristic_suggestions(
    issue: GitHubIssue, contexts: Sequence[CodeContext]
) -> list[IssueSuggestion]:
    """Keyword-driven suggestions plus one per top code context."""
    body = issue.body.lower()
    suggestions: list[IssueSuggestion] = []

    if "error" in body or "exception" in body:
        suggestions.append(
            IssueSuggestion(
                type="code_change",
                description="Add proper error handling and validation",
                reasoning="Issue mentions errors which suggests missing error handling",
            )
        )
    if "performance" in body or "slow" in body:
        suggestions.append(
            IssueSuggestion(
                type="refactor",
                description="Optimize performance-critical code sections",
                reasoning="Issue mentions performance concerns",
            )
        )
    if "test" in body:
        suggestions.append(
            IssueSuggestion(
                type="testing",
                description="Add comprehensive test coverage for affected functionality",
                reasoning="Issue relates to testing requirements",
            )
        )

    for context in contexts[:SUGGESTION_CONTEXTS]:
        suggestions.append(
            IssueSuggestion(
                type="code_change",
                description=f"Review and potentially modify code in {context.file_path}",
                reasoning=(
                    "This code section appears related to the issue based on content analysis"
                ),
                file_path=context.file_path,
                line_number=context.line_number,
                code_snippet="\n".join(context.context_lines),
            )
        )

    return suggestions


def sort_analyses(analyses: Iterable[IssueAnalysis]) -> list[IssueAnalysis]:
    """Order analyses by priority, then newest issue first."""
    return sorted(
        analyses,
        key=lambda analysis: (
            PRIORITY_WEIGHTS[analysis.priority],
            as_utc(analysis.issue.created_at) or _EPOCH,
        ),
        reverse=True,
    )
