"""
Background Tasks for Job Search Processing

Celery task consuming job search requests from the durable queue:
- Validate the message into a JobSearchRequest
- Run the pipeline (discover -> extract -> suggest -> persist)
- Ack on completion, even if some links failed

A malformed message or an exception escaping the pipeline rejects the
message without requeue, so a poison message cannot loop forever. Such
requests are not retried.

Each worker process owns one WorkerRuntime: an event loop plus the HTTP,
OpenAI and database clients the pipeline is built from. It is created on
the first task and closed when the worker process shuts down.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx
from celery.exceptions import Reject
from celery.signals import worker_process_shutdown, worker_shutdown
from openai import AsyncOpenAI
from prometheus_client import Histogram, Counter

from jobsearch.celery import celery_app
from jobsearch.config import Settings, get_settings
from jobsearch.database import create_session_factory, init_db
from jobsearch.schemas import JobSearchRequest
from jobsearch.services.extractor import DescriptionExtractor
from jobsearch.services.pipeline import (
    JobSearchPipeline,
    PipelineError,
    PipelineReport,
    parse_request,
)
from jobsearch.services.search import BraveLinkSearcher
from jobsearch.services.store import JobStore
from jobsearch.services.suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

TASK_DURATION = Histogram(
    "job_search_task_duration_seconds",
    "Time spent processing one job search request",
    ["task_name"]
)

TASK_FAILURES = Counter(
    "job_search_task_failures_total",
    "Number of rejected job search messages",
    ["task_name", "reason"]
)

LINKS_PROCESSED = Counter(
    "job_links_processed_total",
    "Candidate links processed, by result",
    ["result"]
)

FALLBACK_OUTCOMES = Counter(
    "pipeline_fallbacks_total",
    "External calls answered with fallback data",
    ["component"]
)


# ==================== Worker Runtime ====================

class WorkerRuntime:
    """
    Long-lived resources of one worker process.

    Attributes:
        loop: Event loop every task of this process runs on
        http_client: Shared client for search and page fetches
        openai_client: AsyncOpenAI client, None without an API key
        engine: Database engine (trusted service context)
        pipeline: JobSearchPipeline wired to the clients above
    """

    def __init__(self, settings: Settings):
        self.loop = asyncio.new_event_loop()
        self.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        self.openai_client = (
            AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.http_timeout_seconds)
            if settings.openai_api_key
            else None
        )
        self.engine, session_factory = create_session_factory(settings.database_url)
        self.pipeline = JobSearchPipeline(
            searcher=BraveLinkSearcher(client=self.http_client, settings=settings),
            extractor=DescriptionExtractor(client=self.http_client, settings=settings),
            generator=SuggestionGenerator(openai_client=self.openai_client, settings=settings),
            store=JobStore(session_factory),
            settings=settings,
        )
        try:
            self.run(init_db(self.engine))
        except Exception:
            self.close()
            raise

    def run(self, coro: Any) -> Any:
        return self.loop.run_until_complete(coro)

    def close(self) -> None:
        try:
            self.run(self._aclose())
        finally:
            self.loop.close()

    async def _aclose(self) -> None:
        await self.http_client.aclose()
        if self.openai_client is not None:
            await self.openai_client.close()
        await self.engine.dispose()


# Global runtime reference (lazy loaded, one per worker process)
_runtime: Optional[WorkerRuntime] = None


def get_runtime() -> WorkerRuntime:
    """Get or initialize this process's worker runtime."""
    global _runtime
    if _runtime is None:
        _runtime = WorkerRuntime(get_settings())
        logger.info("Worker runtime initialized")
    return _runtime


def shutdown_runtime(**kwargs) -> None:
    """Release the worker runtime. Connected to worker shutdown signals."""
    global _runtime
    if _runtime is None:
        return
    runtime, _runtime = _runtime, None
    logger.info("Shutting down worker runtime...")
    runtime.close()


worker_process_shutdown.connect(shutdown_runtime, weak=False)
worker_shutdown.connect(shutdown_runtime, weak=False)


# ==================== Helper Functions ====================

def run_pipeline(request: JobSearchRequest) -> PipelineReport:
    """Run one request on this process's event loop."""
    runtime = get_runtime()
    return runtime.run(runtime.pipeline.process_request(request))


def record_report_metrics(report: PipelineReport) -> None:
    LINKS_PROCESSED.labels(result="saved").inc(report.processed)
    LINKS_PROCESSED.labels(result="failed").inc(report.failed)
    if report.links_fallback:
        FALLBACK_OUTCOMES.labels(component="search").inc()
    if report.suggestions_fallback:
        FALLBACK_OUTCOMES.labels(component="suggestions").inc(report.suggestions_fallback)


# ==================== Celery Tasks ====================

@celery_app.task(bind=True, max_retries=0)
def process_job_search(self, payload: Any) -> dict:
    """
    Process one job search request from the queue.

    Args:
        payload: Message body {jobName, jobLocation, jobType, userId, timestamp}

    Returns:
        Dict with processing statistics (PipelineReport.to_dict)

    Raises:
        Reject: malformed message or unexpected pipeline failure; the
            message is dropped, not requeued
    """
    start_time = time.time()

    try:
        try:
            request = parse_request(payload)
        except PipelineError as exc:
            TASK_FAILURES.labels(task_name="process_job_search", reason="malformed_message").inc()
            logger.error(f"Rejecting malformed job search message: {exc.details}")
            raise Reject(f"Malformed job search message: {exc.details}", requeue=False) from exc

        logger.info(f"Received job search for user {request.user_id}")

        try:
            report = run_pipeline(request)
        except Exception as exc:
            TASK_FAILURES.labels(task_name="process_job_search", reason="unexpected_error").inc()
            logger.exception(f"Error processing job search for user {request.user_id}")
            raise Reject(f"Job search processing failed: {exc}", requeue=False) from exc

        record_report_metrics(report)
        logger.info(f"Job processing result: {report.to_dict()}")
        return report.to_dict()

    finally:
        duration = time.time() - start_time
        TASK_DURATION.labels(task_name="process_job_search").observe(duration)


def enqueue_job_search(request: JobSearchRequest):
    """
    Publish a search request onto the durable job queue.

    Returns:
        AsyncResult of the queued task
    """
    settings = get_settings()
    return process_job_search.apply_async(
        args=[request.to_message()],
        queue=settings.job_queue_name,
    )
