"""
Job Search Pipeline - orchestration of discovery, extraction, suggestions

Two entry points share the same components:

process_request (queue worker):
    RECEIVED -> LINKS_DISCOVERED -> per link (EXTRACTING -> SUGGESTING ->
    PERSISTING) -> DONE | PARTIAL | FAILED

    Links are processed one at a time in discovery order, up to
    worker_max_links. A link that fails to extract or persist is logged
    and skipped; its siblings are unaffected. Without a resume on file,
    suggestions are skipped and records are stored with suggestions=None.

search_immediate (request/response):
    Requires a resume, extracts up to immediate_max_links postings, and
    generates one suggestion set from the first extracted description.
    Nothing is persisted. Failures surface as a single PipelineError
    carrying an HTTP-style status code.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from jobsearch.config import Settings, get_settings
from jobsearch.schemas import (
    CandidateLink,
    ExtractedPosting,
    JobRecord,
    JobSearchRequest,
    Outcome,
    SuggestionSet,
)
from jobsearch.services.extractor import DescriptionExtractor, FetchError
from jobsearch.services.search import LinkSearcher
from jobsearch.services.store import JobStore, ResumeNotFound
from jobsearch.services.suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "userId, jobName, jobLocation, and jobType are required."
RESUME_REQUIRED_MESSAGE = "Resume not found for this user. Please upload a resume first."
IMMEDIATE_FAILURE_MESSAGE = "Failed to process job search and resume customization."


class PipelineState(str, Enum):
    RECEIVED = "received"
    LINKS_DISCOVERED = "links_discovered"
    EXTRACTING = "extracting"
    SUGGESTING = "suggesting"
    PERSISTING = "persisting"
    DONE = "done"
    PARTIAL = "partial"
    FAILED = "failed"


class PipelineError(Exception):
    """Aggregate failure of the request/response variant."""

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


@dataclass
class PipelineReport:
    """Summary of one processed queue message."""

    user_id: str
    search_query: str
    total_links: int = 0
    attempted: int = 0
    processed: int = 0
    failed: int = 0
    links_fallback: bool = False
    suggestions_fallback: int = 0
    resume_found: bool = False
    saved_job_ids: List[str] = field(default_factory=list)
    state: PipelineState = PipelineState.RECEIVED

    def finish(self) -> "PipelineReport":
        if self.failed == 0:
            self.state = PipelineState.DONE
        elif self.processed == 0:
            self.state = PipelineState.FAILED
        else:
            self.state = PipelineState.PARTIAL
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "search_query": self.search_query,
            "total_links": self.total_links,
            "attempted": self.attempted,
            "processed": self.processed,
            "failed": self.failed,
            "links_fallback": self.links_fallback,
            "suggestions_fallback": self.suggestions_fallback,
            "resume_found": self.resume_found,
            "saved_job_ids": list(self.saved_job_ids),
            "state": self.state.value,
        }


@dataclass
class ScrapedDescription:
    url: str
    title: str
    description: str
    original_title: str


@dataclass
class ImmediateSearchResult:
    job_links: List[CandidateLink]
    job_descriptions: List[ScrapedDescription]
    resume_suggestions: SuggestionSet
    search_query: str
    links_fallback: bool = False
    suggestions_fallback: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobLinks": [link.model_dump(by_alias=True) for link in self.job_links],
            "jobDescriptions": [
                {
                    "url": d.url,
                    "title": d.title,
                    "description": d.description,
                    "originalTitle": d.original_title,
                }
                for d in self.job_descriptions
            ],
            "resumeSuggestions": self.resume_suggestions.to_storage(),
            "searchQuery": self.search_query,
            "timestamp": self.timestamp.isoformat(),
        }


def parse_request(payload: Any) -> JobSearchRequest:
    """
    Validate an incoming request body (dict, or raw JSON from a
    non-Celery producer).

    Raises:
        PipelineError: 400 if the body is not JSON or required fields are
            missing or blank
    """
    try:
        if isinstance(payload, (str, bytes)):
            return JobSearchRequest.model_validate_json(payload)
        return JobSearchRequest.model_validate(payload)
    except ValidationError as e:
        raise PipelineError(400, INVALID_REQUEST_MESSAGE, details=str(e)) from e


def generic_description(request: JobSearchRequest) -> str:
    return (
        f"We are looking for a {request.job_name} to join our team in "
        f"{request.job_location}. This is a {request.job_type} position that "
        "requires strong technical skills and experience in the field."
    )


class JobSearchPipeline:
    """
    Drives one job search request through all pipeline stages.

    All collaborators are injected; the pipeline holds no connections of
    its own.

    Attributes:
        searcher: Link discovery provider
        extractor: Posting page extractor
        generator: Resume suggestion generator
        store: Job persistence and resume lookup
    """

    def __init__(
        self,
        searcher: LinkSearcher,
        extractor: DescriptionExtractor,
        generator: SuggestionGenerator,
        store: JobStore,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.searcher = searcher
        self.extractor = extractor
        self.generator = generator
        self.store = store
        self.worker_max_links = settings.worker_max_links
        self.immediate_max_links = settings.immediate_max_links

    async def process_request(self, request: JobSearchRequest) -> PipelineReport:
        """
        Process one queued search request.

        Link-level failures are counted, never raised. Only a failure
        outside the per-link loop (e.g. a broken searcher) propagates.

        Returns:
            PipelineReport with per-link statistics and final state
        """
        report = PipelineReport(
            user_id=str(request.user_id), search_query=request.search_query
        )
        logger.info(
            f"[{report.state.value}] Processing job search for user {request.user_id}: "
            f"{request.job_name} in {request.job_location} ({request.job_type})"
        )

        discovery = await self.searcher.discover(
            request.job_name, request.job_location, request.job_type
        )
        links = discovery.value or []
        report.total_links = len(links)
        report.links_fallback = discovery.is_fallback
        report.state = PipelineState.LINKS_DISCOVERED
        logger.info(
            f"[{report.state.value}] Found {len(links)} job links"
            + (f" (fallback: {discovery.reason})" if discovery.is_fallback else "")
        )

        resume = await self._load_resume(request)
        report.resume_found = resume is not None

        batch = links[: self.worker_max_links]
        report.attempted = len(batch)

        for index, link in enumerate(batch, start=1):
            try:
                result = await self._process_link(
                    request, link, resume, index, len(batch)
                )
            except Exception as e:
                report.failed += 1
                logger.error(f"Failed to process job {index}/{len(batch)} ({link.url}): {e}")
                continue

            if result is None:
                report.failed += 1
                continue

            job_id, used_fallback = result

            report.processed += 1
            report.saved_job_ids.append(job_id)
            if used_fallback:
                report.suggestions_fallback += 1

        report.finish()
        logger.info(
            f"[{report.state.value}] Job search processing completed for user "
            f"{request.user_id}: {report.processed}/{report.attempted} jobs saved"
        )
        return report

    async def search_immediate(self, request: JobSearchRequest) -> ImmediateSearchResult:
        """
        Search, extract and suggest without persisting anything.

        Raises:
            PipelineError: 404 when the user has no resume, 500 on any
                other unexpected failure
        """
        try:
            resume = await self.store.fetch_resume(request.user_id)
        except ResumeNotFound as e:
            raise PipelineError(404, RESUME_REQUIRED_MESSAGE) from e
        except Exception as e:
            logger.exception(f"Resume lookup failed for user {request.user_id}")
            raise PipelineError(500, IMMEDIATE_FAILURE_MESSAGE, details=str(e)) from e

        try:
            discovery = await self.searcher.discover(
                request.job_name, request.job_location, request.job_type
            )
            links = discovery.value or []

            descriptions: List[ScrapedDescription] = []
            for link in links[: self.immediate_max_links]:
                extraction = await self._extract(link)
                if extraction.failed:
                    continue
                posting = extraction.value
                descriptions.append(
                    ScrapedDescription(
                        url=link.url,
                        title=posting.title,
                        description=posting.description,
                        original_title=link.title,
                    )
                )

            if descriptions:
                description = descriptions[0].description
            else:
                description = generic_description(request)

            suggestion = await self.generator.suggest(
                description,
                resume,
                request.job_name,
                request.job_location,
                request.job_type,
            )
        except Exception as e:
            logger.exception(f"Immediate job search failed for user {request.user_id}")
            raise PipelineError(500, IMMEDIATE_FAILURE_MESSAGE, details=str(e)) from e

        return ImmediateSearchResult(
            job_links=links,
            job_descriptions=descriptions,
            resume_suggestions=suggestion.value,
            search_query=request.search_query,
            links_fallback=discovery.is_fallback,
            suggestions_fallback=suggestion.is_fallback,
        )

    async def _load_resume(self, request: JobSearchRequest) -> Optional[Dict[str, Any]]:
        try:
            resume = await self.store.fetch_resume(request.user_id)
        except ResumeNotFound:
            logger.info(f"No resume on file for user {request.user_id}, skipping suggestions")
            return None
        except Exception as e:
            logger.warning(f"Could not fetch resume data for user {request.user_id}: {e}")
            return None
        logger.info("Resume data fetched successfully")
        return resume

    async def _extract(self, link: CandidateLink) -> Outcome[ExtractedPosting]:
        try:
            return Outcome.success(await self.extractor.extract(link.url))
        except FetchError as e:
            logger.warning(f"Skipping {link.url}: {e.reason}")
            return Outcome.failure(reason="fetch_error")
        except Exception as e:
            logger.warning(f"Skipping {link.url}: extraction failed: {e!r}")
            return Outcome.failure(reason="extract_error")

    async def _process_link(
        self,
        request: JobSearchRequest,
        link: CandidateLink,
        resume: Optional[Dict[str, Any]],
        index: int,
        total: int,
    ) -> Optional[Tuple[str, bool]]:
        """(job id, suggestions were fallback), or None if the page could not be fetched."""
        logger.info(f"[{PipelineState.EXTRACTING.value}] Processing job {index}/{total}: {link.url}")
        extraction = await self._extract(link)
        if extraction.failed:
            return None
        posting = extraction.value

        suggestions: Optional[SuggestionSet] = None
        used_fallback = False
        if resume is not None:
            logger.info(f"[{PipelineState.SUGGESTING.value}] Generating suggestions for {posting.title}")
            try:
                outcome = await self.generator.suggest(
                    posting.description,
                    resume,
                    request.job_name,
                    request.job_location,
                    request.job_type,
                )
            except Exception as e:
                logger.warning(f"Failed to generate AI suggestions: {e}")
            else:
                suggestions = outcome.value
                used_fallback = outcome.is_fallback

        record = JobRecord.from_posting(request, link, posting, suggestions)

        logger.info(f"[{PipelineState.PERSISTING.value}] Saving job: {record.title}")
        job_id = await self.store.save_job(record)
        return job_id, used_fallback
