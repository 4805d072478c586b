from jobsearch.services.search.base import (
    JOB_KEYWORDS,
    FALLBACK_LINKS,
    LinkSearcher,
    build_search_query,
    filter_job_links,
)
from jobsearch.services.search.brave import BraveLinkSearcher

__all__ = [
    "JOB_KEYWORDS",
    "FALLBACK_LINKS",
    "LinkSearcher",
    "BraveLinkSearcher",
    "build_search_query",
    "filter_job_links",
]
