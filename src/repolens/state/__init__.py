"""Job state management module for repolens."""

from repolens.state.models import AnalysisJob, JobStatus
from repolens.state.registry import (
    AnalysisCancelledError,
    CancellationToken,
    InMemoryJobStore,
    JobRegistry,
    JobStore,
)

__all__ = [
    "AnalysisJob",
    "JobStatus",
    "AnalysisCancelledError",
    "CancellationToken",
    "InMemoryJobStore",
    "JobRegistry",
    "JobStore",
]
