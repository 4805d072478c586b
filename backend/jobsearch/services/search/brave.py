import logging
from typing import Any, List, Optional

import httpx

from jobsearch.config import Settings, get_settings
from jobsearch.schemas import CandidateLink, Outcome
from jobsearch.services.search.base import (
    LinkSearcher,
    build_search_query,
    fallback_links,
    filter_job_links,
)

logger = logging.getLogger(__name__)


class BraveLinkSearcher(LinkSearcher):
    """
    Link discovery backed by the Brave web search API.

    Any provider failure (no key, timeout, non-2xx, unreadable body) is
    reported as a fallback outcome carrying FALLBACK_LINKS, so the
    pipeline always has something to process.
    """

    source = "brave"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.api_key = settings.brave_api_key
        self.search_url = settings.brave_search_url
        self.result_count = settings.search_result_count
        self.country = settings.search_country
        self.max_results = settings.discovery_max_results
        self.timeout = settings.http_timeout_seconds

    async def discover(
        self, job_name: str, job_location: str, job_type: str
    ) -> Outcome[List[CandidateLink]]:
        query = build_search_query(job_name, job_location, job_type)

        if not self.api_key:
            logger.warning("BRAVE_API_KEY not configured, returning fallback job links")
            return Outcome.fallback(fallback_links(), reason="missing_credentials")

        try:
            data = await self._search(query)
        except httpx.TimeoutException as e:
            logger.warning(f"Brave search timed out for '{query}': {e!r}")
            return Outcome.fallback(fallback_links(), reason="timeout")
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Brave search HTTP error {e.response.status_code} for '{query}'"
            )
            return Outcome.fallback(fallback_links(), reason="http_status")
        except httpx.HTTPError as e:
            logger.warning(f"Brave search transport error for '{query}': {e!r}")
            return Outcome.fallback(fallback_links(), reason="transport_error")
        except ValueError as e:
            logger.warning(f"Brave search returned unreadable JSON for '{query}': {e}")
            return Outcome.fallback(fallback_links(), reason="malformed_response")

        # Brave omits "web" (or its "results") when nothing matched
        results = None
        if isinstance(data, dict):
            web = data.get("web") or {}
            results = web.get("results", []) if isinstance(web, dict) else None
        if not isinstance(results, list):
            logger.warning(f"Brave search returned an unexpected body shape for '{query}'")
            return Outcome.fallback(fallback_links(), reason="malformed_response")

        links = filter_job_links(results, limit=self.max_results)
        logger.info(f"Brave search found {len(links)} job links for '{query}'")
        return Outcome.success(links)

    async def _search(self, query: str) -> Any:
        params = {
            "q": query,
            "count": self.result_count,
            "country": self.country,
        }
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key,
        }

        if self.client is not None:
            response = await self.client.get(
                self.search_url, params=params, headers=headers, timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.search_url, params=params, headers=headers, timeout=self.timeout
                )

        response.raise_for_status()
        return response.json()
