"""In-process registry of analysis jobs and their cancellation tokens."""

import logging
import threading
from dataclasses import replace
from typing import Callable, Protocol

from repolens.analysis.models import FinalReport
from repolens.state.models import AnalysisJob, JobStatus, utcnow


logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Analysis was cancelled"


class AnalysisCancelledError(Exception):
    """Raised at a stage boundary once a job has been cancelled."""

    def __init__(self, message: str = CANCELLED_MESSAGE):
        super().__init__(message)


class CancellationToken:
    """Cooperative cancellation flag checked between pipeline stages.

    Cancelling never interrupts work already in flight; the next check
    raises and whatever that work produced is discarded.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise AnalysisCancelledError()


class JobStore(Protocol):
    """Key-value store holding one immutable record per job."""

    def put(self, job: AnalysisJob) -> None: ...

    def get(self, job_id: str) -> AnalysisJob | None: ...

    def compare_and_swap(self, expected: AnalysisJob, new: AnalysisJob) -> bool: ...


class InMemoryJobStore:
    """Dictionary-backed job store.

    Records live until the process exits; there is no eviction.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def put(self, job: AnalysisJob) -> None:
        with self._lock:
            self._jobs[job.id] = job

    def get(self, job_id: str) -> AnalysisJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def compare_and_swap(self, expected: AnalysisJob, new: AnalysisJob) -> bool:
        with self._lock:
            if self._jobs.get(expected.id) is not expected:
                return False
            self._jobs[new.id] = new
            return True


class JobRegistry:
    """Tracks the lifecycle, progress and cancellation of analysis jobs.

    Every job owns a cancellation token from the moment it is created until
    it reaches a terminal status, so a cancellation requested before the
    pipeline picks the job up is not lost.
    """

    def __init__(self, store: JobStore | None = None):
        """Initialize the registry.

        Args:
            store: Backing store (defaults to an in-memory store)
        """
        self.store = store if store is not None else InMemoryJobStore()
        self._tokens: dict[str, CancellationToken] = {}
        self._tokens_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, job_id: str) -> AnalysisJob | None:
        return self.store.get(job_id)

    def is_running(self, job_id: str) -> bool:
        job = self.get(job_id)
        if job is None or job.status != JobStatus.PROCESSING:
            return False
        token = self._token(job_id)
        return token is not None and not token.cancelled

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create(self, repository_url: str, include_github_issues: bool = False) -> AnalysisJob:
        job = AnalysisJob(
            repository_url=repository_url,
            include_github_issues=include_github_issues,
        )
        with self._tokens_lock:
            self._tokens[job.id] = CancellationToken()
        self.store.put(job)
        logger.info(f"Registered analysis {job.id} for {repository_url}")
        return job

    def start(self, job_id: str) -> CancellationToken:
        """Move a job to processing and hand out its cancellation token.

        The token is already cancelled when cancellation was requested while
        the job was still pending.
        """
        with self._tokens_lock:
            token = self._tokens.setdefault(job_id, CancellationToken())
        self._update(
            job_id,
            lambda job: replace(job, status=JobStatus.PROCESSING)
            if job.status == JobStatus.PENDING
            else job,
        )
        return token

    def update_progress(self, job_id: str, progress: int, step: str) -> AnalysisJob | None:
        """Record progress for a running job.

        Updates for jobs that are not processing, or whose token has been
        cancelled, are ignored. Progress never moves backwards.
        """
        if not self.is_running(job_id):
            return self.get(job_id)

        def apply(job: AnalysisJob) -> AnalysisJob:
            if job.status != JobStatus.PROCESSING:
                return job
            return replace(
                job,
                progress=max(job.progress, min(progress, 100)),
                current_step=step,
            )

        return self._update(job_id, apply)

    def set_repository_name(self, job_id: str, name: str) -> AnalysisJob | None:
        return self._update(job_id, lambda job: replace(job, repository_name=name))

    def complete(self, job_id: str, report: FinalReport) -> AnalysisJob | None:
        job = self._update(
            job_id,
            lambda job: replace(
                job,
                status=JobStatus.COMPLETED,
                progress=100,
                results=report,
                error=None,
                completed_at=utcnow(),
            ),
        )
        self._forget(job_id)
        return job

    def fail(self, job_id: str, message: str) -> AnalysisJob | None:
        job = self._update(
            job_id,
            lambda job: replace(
                job,
                status=JobStatus.FAILED,
                results=None,
                error=message,
                completed_at=utcnow(),
            ),
        )
        self._forget(job_id)
        return job

    def cancel(self, job_id: str) -> bool:
        """Flag a pending or processing job for cancellation.

        Returns:
            True if the job had not finished and is now flagged
        """
        job = self.get(job_id)
        if job is None or job.status.is_terminal:
            return False
        token = self._token(job_id)
        if token is None or token.cancelled:
            return False
        token.cancel()
        logger.info(f"Cancellation requested for analysis {job_id}")
        return True

    def cancel_all(self) -> int:
        with self._tokens_lock:
            tokens = [token for token in self._tokens.values() if not token.cancelled]
        for token in tokens:
            token.cancel()
        return len(tokens)

    def _token(self, job_id: str) -> CancellationToken | None:
        with self._tokens_lock:
            return self._tokens.get(job_id)

    def _forget(self, job_id: str) -> None:
        with self._tokens_lock:
            self._tokens.pop(job_id, None)

    def _update(
        self,
        job_id: str,
        transform: Callable[[AnalysisJob], AnalysisJob],
    ) -> AnalysisJob | None:
        while True:
            current = self.store.get(job_id)
            if current is None:
                return None
            updated = transform(current)
            if updated is current or self.store.compare_and_swap(current, updated):
                return updated
