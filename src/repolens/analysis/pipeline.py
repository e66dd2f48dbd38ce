"""Orchestration of one repository analysis job."""

import asyncio
import logging
from typing import Callable, Sequence

from repolens.agents.file_reviewer import FileReviewAgent
from repolens.agents.issue_reviewer import IssueReviewAgent
from repolens.analysis.aggregation import build_report, summarize_issues
from repolens.analysis.models import IssueSummary
from repolens.code.checkout import Checkout, RepositoryCloner
from repolens.code.discovery import CodeFile, FileDiscovery
from repolens.github.client import GitHubClient
from repolens.state.registry import AnalysisCancelledError, CancellationToken, JobRegistry


logger = logging.getLogger(__name__)

GitHubClientFactory = Callable[[str, str | None], GitHubClient]


class AnalysisPipeline:
    """Run the clone, discover, review, correlate and report stages of a job.

    Stages run strictly in order and the job's cancellation token is checked
    before the first and after each of them. Whatever happens, the checkout
    is removed once the run ends.
    """

    def __init__(
        self,
        registry: JobRegistry,
        cloner: RepositoryCloner,
        file_reviewer: FileReviewAgent,
        issue_reviewer: IssueReviewAgent,
        discovery: FileDiscovery | None = None,
        github_client_factory: GitHubClientFactory = GitHubClient.from_url,
        github_token: str | None = None,
    ):
        """Initialize the pipeline.

        Args:
            registry: Registry receiving progress and terminal transitions
            cloner: Repository checkout manager
            file_reviewer: Agent reviewing individual files
            issue_reviewer: Agent analyzing GitHub issues
            discovery: File discovery policy (defaults to the standard limits)
            github_client_factory: Builds a tracker client from (url, token)
            github_token: Token used when a request does not carry one
        """
        self.registry = registry
        self.cloner = cloner
        self.file_reviewer = file_reviewer
        self.issue_reviewer = issue_reviewer
        self.discovery = discovery or FileDiscovery()
        self.github_client_factory = github_client_factory
        self.github_token = github_token

    async def run(
        self,
        job_id: str,
        repository_url: str,
        include_github_issues: bool,
        github_token: str | None = None,
    ) -> None:
        """Execute a job to completion or failure.

        Never raises; every outcome is recorded on the job.
        """
        token = self.registry.start(job_id)
        checkout: Checkout | None = None

        try:
            token.raise_if_cancelled()

            self._progress(job_id, 10, "Cloning repository...")
            checkout = await asyncio.to_thread(self.cloner.clone, repository_url)
            self.registry.set_repository_name(job_id, checkout.repo_name)
            token.raise_if_cancelled()

            self._progress(job_id, 20, "Discovering code files...")
            files = await asyncio.to_thread(self.discovery.discover, checkout.path)
            token.raise_if_cancelled()

            self._progress(job_id, 40, "Analyzing code quality...")
            verdicts = await self.file_reviewer.review_all(files, token)
            token.raise_if_cancelled()

            github_issues = None
            if include_github_issues:
                github_issues = await self._analyze_issues(
                    job_id, repository_url, files, github_token, token
                )
                token.raise_if_cancelled()

            self._progress(job_id, 85, "Generating comprehensive report...")
            report = build_report(
                verdicts,
                repository_name=checkout.repo_name,
                total_files=len(files),
                lines_of_code=sum(code_file.line_count for code_file in files),
                github_issues=github_issues,
            )
            self.registry.complete(job_id, report)
            logger.info(f"Analysis completed successfully for {checkout.repo_name}")

        except AnalysisCancelledError as e:
            logger.info(f"Analysis {job_id} cancelled")
            self.registry.fail(job_id, str(e))
        except Exception as e:
            logger.error(f"Analysis processing error for {job_id}: {e}")
            self.registry.fail(job_id, str(e))
        finally:
            if checkout is not None:
                await self.cloner.cleanup(checkout.path)

    async def _analyze_issues(
        self,
        job_id: str,
        repository_url: str,
        files: Sequence[CodeFile],
        github_token: str | None,
        token: CancellationToken,
    ) -> IssueSummary:
        """Run the issue track; failures other than cancellation degrade."""
        try:
            self._progress(job_id, 60, "Fetching GitHub issues...")
            client = self.github_client_factory(repository_url, github_token or self.github_token)
            issues = await asyncio.to_thread(client.fetch_issues)
            token.raise_if_cancelled()

            self._progress(job_id, 70, "Analyzing GitHub issues...")
            analyses = await self.issue_reviewer.review_all(issues, files, token)
        except AnalysisCancelledError:
            raise
        except Exception as e:
            logger.warning(f"GitHub issues analysis failed: {e}")
            return IssueSummary.failed(str(e))

        logger.info(f"GitHub issues analysis completed: {len(issues)} issues processed")
        return summarize_issues(issues, analyses)

    def _progress(self, job_id: str, progress: int, step: str) -> None:
        logger.info(f"[{job_id}] {progress}% {step}")
        self.registry.update_progress(job_id, progress, step)
