"""Report models, aggregation and issue correlation for repolens."""

from repolens.analysis.models import (
    Categories,
    CategoryScore,
    CodeContext,
    FileVerdict,
    FinalReport,
    Finding,
    IssueAnalysis,
    IssueSuggestion,
    IssueSummary,
    Recommendations,
    ReportOverview,
)
from repolens.analysis.aggregation import build_report, summarize_issues
from repolens.analysis.correlator import extract_search_terms, find_related_files

__all__ = [
    # Models
    "Categories",
    "CategoryScore",
    "CodeContext",
    "FileVerdict",
    "FinalReport",
    "Finding",
    "IssueAnalysis",
    "IssueSuggestion",
    "IssueSummary",
    "Recommendations",
    "ReportOverview",
    # Aggregation
    "build_report",
    "summarize_issues",
    # Correlation
    "extract_search_terms",
    "find_related_files",
]
