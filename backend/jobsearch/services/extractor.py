"""
Job Description Extractor - heuristic scraping of third-party postings

Job postings live on sites with no shared markup, so extraction is a
cascade of CSS selector strategies tried in order, ending in a generic
fallback that always yields a non-empty title and description.

Title:
    1. TITLE_SELECTORS, first non-empty text
    2. First h1/h2/h3 in the document
    3. "Job Title Not Found"

Description:
    1. DESCRIPTION_SELECTORS, first text longer than description_min_length
    2. Body text with navigation/header/footer/sidebar removed, whitespace
       collapsed, truncated to description_max_length
    3. "Job description could not be extracted"

Only a failed HTTP fetch is surfaced to the caller, as FetchError.

Usage:
    extractor = DescriptionExtractor(client=http_client)
    posting = await extractor.extract("https://boards.example.com/jobs/123")
"""

import logging
import re
from typing import Callable, List, Optional, Sequence

import httpx
from bs4 import BeautifulSoup

from jobsearch.config import Settings, get_settings
from jobsearch.schemas import ExtractedPosting

logger = logging.getLogger(__name__)

# Some boards reject non-browser agents
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

TITLE_SELECTORS = (
    "h1",
    '[data-testid="job-title"]',
    ".job-title",
    ".title",
    'h1[class*="title"]',
    'h1[class*="job"]',
)

DESCRIPTION_SELECTORS = (
    '[data-testid="job-description"]',
    ".job-description",
    ".description",
    ".content",
    ".job-details",
    ".job-content",
    '[class*="description"]',
    '[class*="content"]',
    "main",
    "article",
)

HEADING_SELECTOR = "h1, h2, h3"
BOILERPLATE_SELECTOR = "nav, header, footer, .nav, .header, .footer, .sidebar"

TITLE_NOT_FOUND = "Job Title Not Found"
DESCRIPTION_NOT_FOUND = "Job description could not be extracted"

_WHITESPACE_RE = re.compile(r"\s+")

Strategy = Callable[[BeautifulSoup], Optional[str]]


class FetchError(Exception):
    """The posting page could not be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch job posting from {url}: {reason}")


def normalize_whitespace(text: str) -> str:
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def first_text(selector: str) -> Strategy:
    """Text of the first element matching selector, if non-empty."""

    def strategy(soup: BeautifulSoup) -> Optional[str]:
        node = soup.select_one(selector)
        if node is None:
            return None
        return node.get_text().strip() or None

    return strategy


def long_text(selector: str, min_length: int) -> Strategy:
    """Combined text of all elements matching selector, if longer than min_length."""

    def strategy(soup: BeautifulSoup) -> Optional[str]:
        text = "".join(node.get_text() for node in soup.select(selector)).strip()
        if len(text) > min_length:
            return text
        return None

    return strategy


def body_text(max_length: int) -> Strategy:
    """Page text minus navigation chrome. Mutates the soup, so run it last."""

    def strategy(soup: BeautifulSoup) -> Optional[str]:
        for node in soup.select(BOILERPLATE_SELECTOR):
            node.decompose()
        for node in soup(["script", "style"]):
            node.decompose()
        root = soup.body or soup
        text = normalize_whitespace(root.get_text(separator=" "))
        return text[:max_length] or None

    return strategy


def default_title_strategies(selectors: Sequence[str] = TITLE_SELECTORS) -> List[Strategy]:
    return [first_text(s) for s in selectors] + [first_text(HEADING_SELECTOR)]


def default_description_strategies(
    selectors: Sequence[str] = DESCRIPTION_SELECTORS,
    min_length: int = 100,
    max_length: int = 3000,
) -> List[Strategy]:
    return [long_text(s, min_length) for s in selectors] + [body_text(max_length)]


def run_strategies(strategies: Sequence[Strategy], soup: BeautifulSoup) -> Optional[str]:
    for strategy in strategies:
        text = strategy(soup)
        if text:
            return text
    return None


class DescriptionExtractor:
    """
    Fetches a posting page and extracts its title and description.

    Attributes:
        client: Shared httpx client (a temporary one is opened per call if None)
        title_strategies: Ordered title strategies
        description_strategies: Ordered description strategies
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
        title_strategies: Optional[Sequence[Strategy]] = None,
        description_strategies: Optional[Sequence[Strategy]] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.timeout = settings.http_timeout_seconds
        self.title_strategies = list(title_strategies or default_title_strategies())
        self.description_strategies = list(
            description_strategies
            or default_description_strategies(
                min_length=settings.description_min_length,
                max_length=settings.description_max_length,
            )
        )

    async def extract(self, url: str) -> ExtractedPosting:
        """
        Fetch url and extract a posting.

        Raises:
            FetchError: the page could not be downloaded
        """
        html = await self.fetch(url)
        return self.extract_from_html(html, url)

    async def fetch(self, url: str) -> str:
        headers = {"User-Agent": BROWSER_USER_AGENT}
        try:
            if self.client is not None:
                response = await self.client.get(
                    url, headers=headers, timeout=self.timeout, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(
                        url, headers=headers, timeout=self.timeout, follow_redirects=True
                    )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Scraping error for URL {url}: {e!r}")
            raise FetchError(url, str(e) or type(e).__name__) from e
        return response.text

    def extract_from_html(self, html: str, url: str) -> ExtractedPosting:
        soup = BeautifulSoup(html or "", "lxml")

        # Title first: the description fallback strips elements from the soup
        title = run_strategies(self.title_strategies, soup) or TITLE_NOT_FOUND
        description = run_strategies(self.description_strategies, soup) or DESCRIPTION_NOT_FOUND

        return ExtractedPosting(title=title, description=description, source_url=url)
