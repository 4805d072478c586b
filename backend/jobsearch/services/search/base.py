from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping
from jobsearch.schemas import CandidateLink, Outcome
from jobsearch.schemas.job import build_search_query

# Known job boards plus generic terms that mark a result as a posting
JOB_KEYWORDS = (
    "indeed",
    "linkedin",
    "glassdoor",
    "monster",
    "careerbuilder",
    "ziprecruiter",
    "simplyhired",
    "dice",
    "angel",
    "stackoverflow",
    "remote",
    "job",
    "career",
    "position",
    "opening",
)

FALLBACK_LINKS = (
    {
        "url": "https://example.com/job1",
        "title": "Software Engineer at Example Corp",
        "description": "We are looking for a talented software engineer...",
    },
    {
        "url": "https://example.com/job2",
        "title": "Full Stack Developer",
        "description": "Join our team as a full stack developer...",
    },
)


def fallback_links() -> List[CandidateLink]:
    return [CandidateLink.model_validate(item) for item in FALLBACK_LINKS]


def is_job_result(url: str, title: str) -> bool:
    url = url.lower()
    title = title.lower()
    return any(keyword in url or keyword in title for keyword in JOB_KEYWORDS)


def filter_job_links(results: Iterable[Mapping], limit: int) -> List[CandidateLink]:
    """
    Keep provider results that look like job postings.

    Provider ranking is preserved; results are only dropped, never
    reordered. At most `limit` links are returned.
    """
    links: List[CandidateLink] = []
    for result in results:
        if len(links) >= limit:
            break
        if not isinstance(result, Mapping):
            continue
        url = result.get("url") or ""
        title = result.get("title") or ""
        if not url or not is_job_result(url, title):
            continue
        links.append(
            CandidateLink(
                url=url,
                title=title,
                snippet=result.get("description") or "",
            )
        )
    return links


class LinkSearcher(ABC):
    """Base class for job link discovery providers"""

    source: str = "unknown"

    @abstractmethod
    async def discover(
        self, job_name: str, job_location: str, job_type: str
    ) -> Outcome[List[CandidateLink]]:
        """Find candidate posting URLs, ranked by the provider"""
        pass
