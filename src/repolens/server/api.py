"""HTTP endpoints for submitting and inspecting repository analyses."""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from repolens.agents import AgentContext, FileReviewAgent, IssueReviewAgent
from repolens.analysis.pipeline import AnalysisPipeline
from repolens.code import FileDiscovery, RepositoryCloner
from repolens.llm import get_provider
from repolens.server.config import get_settings
from repolens.server.validation import is_github_url, validate_repo_url
from repolens.state import AnalysisJob, JobRegistry


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(_CamelModel):
    """Request body for submitting an analysis."""

    repository_url: Optional[str] = None
    include_github_issues: bool = Field(default=True, alias="includeGitHubIssues")
    github_token: Optional[str] = None


class AnalyzeResponse(_CamelModel):
    """Acknowledgement returned once a job has been accepted."""

    analysis_id: str
    status: str = "processing"
    message: str = "Analysis started. Check back for results."
    estimated_time: str


class CancelResponse(_CamelModel):
    analysis_id: str
    cancelled: bool


@lru_cache
def get_registry() -> JobRegistry:
    """Get the process-wide job registry."""
    return JobRegistry()


@lru_cache
def get_pipeline() -> AnalysisPipeline:
    """Build the analysis pipeline from settings.

    Raises:
        LLMConfigError: If the reviewer provider is not configured
    """
    settings = get_settings()
    context = AgentContext(llm_provider=get_provider(settings=settings))

    return AnalysisPipeline(
        registry=get_registry(),
        cloner=RepositoryCloner(
            base_dir=settings.get_workspace_path(),
            max_repo_size=settings.max_repo_size_bytes,
        ),
        file_reviewer=FileReviewAgent(context),
        issue_reviewer=IssueReviewAgent(context, use_llm=settings.issue_ai_suggestions),
        discovery=FileDiscovery(
            max_file_size=settings.max_file_size_bytes,
            max_files=settings.max_files,
        ),
        github_token=settings.github_token or None,
    )


def _get_job(registry: JobRegistry, analysis_id: str) -> AnalysisJob:
    job = registry.get(analysis_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return job


@router.post("/analyze", response_model=AnalyzeResponse)
async def submit_analysis(
    request: AnalyzeRequest,
    background_tasks: BackgroundTasks,
    registry: JobRegistry = Depends(get_registry),
) -> AnalyzeResponse:
    """Validate a repository URL and start its analysis in the background."""
    if not request.repository_url:
        raise HTTPException(status_code=400, detail="Repository URL is required")

    repository_url = request.repository_url.strip()
    if not validate_repo_url(repository_url):
        raise HTTPException(
            status_code=400,
            detail="Invalid repository URL. Please provide a valid GitHub or GitLab URL.",
        )

    if request.include_github_issues and not is_github_url(repository_url):
        raise HTTPException(
            status_code=400,
            detail="GitHub issues analysis is only available for GitHub repositories",
        )

    try:
        pipeline = get_pipeline()
    except Exception as e:
        logger.exception("Failed to start analysis")
        raise HTTPException(status_code=500, detail=f"Failed to start analysis: {e}") from e

    job = registry.create(repository_url, request.include_github_issues)
    background_tasks.add_task(
        pipeline.run,
        job.id,
        repository_url,
        request.include_github_issues,
        request.github_token,
    )

    return AnalyzeResponse(
        analysis_id=job.id,
        estimated_time="3-7 minutes" if request.include_github_issues else "2-5 minutes",
    )


@router.get("/analyze/{analysis_id}")
async def get_analysis(
    analysis_id: str,
    registry: JobRegistry = Depends(get_registry),
) -> dict:
    """Get the current record of an analysis."""
    return _get_job(registry, analysis_id).to_dict()


@router.delete("/analyze/{analysis_id}", response_model=CancelResponse)
async def cancel_analysis(
    analysis_id: str,
    registry: JobRegistry = Depends(get_registry),
) -> CancelResponse:
    """Request cancellation of a running analysis."""
    _get_job(registry, analysis_id)
    return CancelResponse(analysis_id=analysis_id, cancelled=registry.cancel(analysis_id))


@router.get("/analyze/{analysis_id}/issues")
async def get_issues_analysis(
    analysis_id: str,
    registry: JobRegistry = Depends(get_registry),
) -> dict:
    """Get the GitHub issues part of a completed analysis."""
    job = _get_job(registry, analysis_id)
    if job.results is None or job.results.github_issues is None:
        raise HTTPException(
            status_code=404,
            detail="GitHub issues analysis not available for this repository",
        )

    return {
        "analysisId": analysis_id,
        "repositoryName": job.repository_name,
        "githubIssues": job.results.github_issues.to_dict(),
    }


@router.get("/analyze/{analysis_id}/issues/{issue_number}")
async def get_issue_analysis(
    analysis_id: str,
    issue_number: int,
    registry: JobRegistry = Depends(get_registry),
) -> dict:
    """Get the analysis of a single GitHub issue."""
    job = _get_job(registry, analysis_id)
    if job.results is None or job.results.github_issues is None:
        raise HTTPException(
            status_code=404,
            detail="GitHub issues analysis not available for this repository",
        )

    analysis = job.results.github_issues.find(issue_number)
    if analysis is None:
        raise HTTPException(status_code=404, detail=f"Issue #{issue_number} not found in analysis")

    return {
        "analysisId": analysis_id,
        "repositoryName": job.repository_name,
        "issueAnalysis": analysis.to_dict(),
    }
