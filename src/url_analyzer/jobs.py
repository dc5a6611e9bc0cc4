"""
Background execution of analysis runs with a queued/running/completed/error lifecycle.
"""
from __future__ import annotations

import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional

from url_analyzer.config import AnalyzerConfig
from url_analyzer.core import normalize_target, run_analysis, utc_now_iso
from url_analyzer.errors import FetchError
from url_analyzer.models import AnalysisResult

DEFAULT_MAX_JOBS = 4


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(slots=True)
class AnalysisJob:
    """Bookkeeping for one submitted URL."""
    id: str
    url: str
    status: JobStatus = JobStatus.QUEUED
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "status": self.status.value,
            "error": self.error,
            "created_at": self.created_at,
            "result": self.result.to_dict() if self.result else None,
        }


class JobRunner:
    """
    Runs each analysis as an independent background task.

    submit() returns as soon as the job is queued. Callers poll get() or block
    on wait(). Returned jobs are snapshots; the runner owns the live records.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        max_jobs: int = DEFAULT_MAX_JOBS,
        verbose: bool = False,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.verbose = verbose
        self._pool = ThreadPoolExecutor(max_workers=max_jobs, thread_name_prefix="analysis")
        self._lock = threading.Lock()
        self._jobs: Dict[str, AnalysisJob] = {}
        self._futures: List[Future] = []

    def __enter__(self) -> JobRunner:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def submit(self, raw_url: str) -> AnalysisJob:
        """
        Normalize raw_url and queue an analysis for it.

        Raises:
            InvalidTargetError: raw_url cannot be normalized. No job is created.
        """
        url = normalize_target(raw_url)
        job = AnalysisJob(id=uuid.uuid4().hex, url=url, created_at=utc_now_iso())
        with self._lock:
            self._jobs[job.id] = job
            snapshot = replace(job)
        self._dispatch(job.id)
        return snapshot

    def rerun(self, job_id: str) -> AnalysisJob:
        """Queue a failed job again. Queued, running and completed jobs are left alone."""
        with self._lock:
            job = self._jobs[job_id]
            if job.status is not JobStatus.ERROR:
                return replace(job)
            job.status = JobStatus.QUEUED
            job.error = None
            snapshot = replace(job)
        self._dispatch(job_id)
        return snapshot

    def get(self, job_id: str) -> AnalysisJob:
        with self._lock:
            return replace(self._jobs[job_id])

    def jobs(self) -> List[AnalysisJob]:
        with self._lock:
            return [replace(job) for job in self._jobs.values()]

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Block until every dispatched job has finished (or timeout expires).

        Job failures are recorded on the job itself and never raised here.
        """
        with self._lock:
            futures = list(self._futures)
        wait_futures(futures, timeout=timeout)
        with self._lock:
            self._futures = [future for future in self._futures if not future.done()]

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def _dispatch(self, job_id: str) -> None:
        future = self._pool.submit(self._run, job_id)
        with self._lock:
            self._futures.append(future)

    def _run(self, job_id: str) -> None:
        with self._lock:
            job = self._jobs[job_id]
            if job.status is not JobStatus.QUEUED:
                return
            job.status = JobStatus.RUNNING
            url = job.url

        try:
            result = run_analysis(url, config=self.config, verbose=self.verbose)
        except FetchError as e:
            with self._lock:
                job.status = JobStatus.ERROR
                job.error = str(e)
            return
        except Exception as e:
            with self._lock:
                job.status = JobStatus.ERROR
                job.error = f"Unexpected error: {e}"
            raise

        with self._lock:
            job.status = JobStatus.COMPLETED
            job.result = result
            job.error = None
