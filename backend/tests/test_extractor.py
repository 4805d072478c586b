"""
Tests for the job description extractor.

Tests cover:
- Selector cascade for title and description
- Short description matches skipped as noise
- Body-text and placeholder fallbacks (fields never empty)
- Fetch failures surfaced as FetchError
"""
import httpx
import pytest

from jobsearch.services.extractor import (
    BROWSER_USER_AGENT,
    DESCRIPTION_NOT_FOUND,
    TITLE_NOT_FOUND,
    DescriptionExtractor,
    FetchError,
    first_text,
    normalize_whitespace,
)

LONG_TEXT = (
    "We are hiring a backend engineer to build data pipelines in Python. "
    "You will own services end to end, work with product, and mentor others."
)


def page(body: str) -> str:
    return f"<html><head><title>t</title></head><body>{body}</body></html>"


@pytest.fixture
def extractor(settings):
    return DescriptionExtractor(settings=settings)


class TestTitleExtraction:
    """Tests for title selectors and fallbacks."""

    def test_h1_wins_over_later_selectors(self, extractor):
        html = page(
            '<div data-testid="job-title">Test-id title</div>'
            "<h1>Senior Engineer</h1>"
        )

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.title == "Senior Engineer"

    def test_empty_h1_falls_through_to_test_id(self, extractor):
        html = page('<h1>   </h1><span data-testid="job-title"> Platform Engineer </span>')

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.title == "Platform Engineer"

    def test_class_name_selector(self, extractor):
        html = page('<div class="job-title">Data Analyst</div>')

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.title == "Data Analyst"

    def test_heading_fallback(self, extractor):
        html = page("<h3>Backend Role</h3><h2>Later heading</h2>")

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.title == "Backend Role"

    def test_placeholder_when_no_title(self, extractor):
        posting = extractor.extract_from_html(page("<p>nothing here</p>"), "https://jobs.example/1")

        assert posting.title == TITLE_NOT_FOUND


class TestDescriptionExtraction:
    """Tests for description selectors and fallbacks."""

    def test_test_id_description(self, extractor):
        html = page(f'<h1>Role</h1><div data-testid="job-description">{LONG_TEXT}</div>')

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.description == LONG_TEXT

    def test_short_match_is_skipped(self, extractor):
        """Matches of 100 characters or fewer are noise."""
        html = page(
            '<div class="description">Apply now</div>'
            f"<main>{LONG_TEXT}</main>"
        )

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.description == LONG_TEXT

    def test_exactly_min_length_is_skipped(self, extractor):
        exact = "x" * 100
        html = page(f'<div class="description">{exact}</div><article>{LONG_TEXT}</article>')

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.description == LONG_TEXT

    def test_body_fallback_strips_navigation(self, extractor):
        html = page(
            "<nav>Home Jobs About</nav>"
            "<header>Site header</header>"
            "<div><p>Build   things</p>\n\n<p>with us</p></div>"
            '<div class="sidebar">Related links</div>'
            "<footer>Copyright</footer>"
            "<script>var tracking = 1;</script>"
        )

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.description == "Build things with us"

    def test_body_fallback_truncates(self, extractor):
        html = page("<div>" + ("word " * 1000) + "</div>")

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert len(posting.description) == 3000

    def test_empty_document_uses_placeholders(self, extractor):
        """Title and description are never empty."""
        posting = extractor.extract_from_html("", "https://jobs.example/1")

        assert posting.title == TITLE_NOT_FOUND
        assert posting.description == DESCRIPTION_NOT_FOUND
        assert posting.source_url == "https://jobs.example/1"

    def test_title_survives_body_fallback(self, extractor):
        html = page("<header><h1>Header Title</h1></header><div>short body</div>")

        posting = extractor.extract_from_html(html, "https://jobs.example/1")

        assert posting.title == "Header Title"
        assert posting.description == "short body"


class TestCustomStrategies:
    def test_strategies_are_configurable(self, settings):
        extractor = DescriptionExtractor(
            settings=settings,
            title_strategies=[first_text("span.role")],
        )

        posting = extractor.extract_from_html(
            page('<h1>Ignored</h1><span class="role">Chosen</span>'),
            "https://jobs.example/1",
        )

        assert posting.title == "Chosen"


class TestFetch:
    """Tests for fetching posting pages."""

    @pytest.mark.asyncio
    async def test_sends_browser_user_agent(self, settings, make_client):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["agent"] = request.headers.get("User-Agent")
            return httpx.Response(200, text=page(f"<h1>Role</h1><main>{LONG_TEXT}</main>"))

        async with make_client(handler) as client:
            extractor = DescriptionExtractor(client=client, settings=settings)
            posting = await extractor.extract("https://jobs.example/1")

        assert seen["agent"] == BROWSER_USER_AGENT
        assert posting.title == "Role"
        assert posting.description == LONG_TEXT

    @pytest.mark.asyncio
    async def test_http_error_raises_fetch_error(self, settings, make_client):
        async with make_client(lambda request: httpx.Response(404)) as client:
            extractor = DescriptionExtractor(client=client, settings=settings)
            with pytest.raises(FetchError) as exc_info:
                await extractor.extract("https://jobs.example/missing")

        assert exc_info.value.url == "https://jobs.example/missing"

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self, settings, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with make_client(handler) as client:
            extractor = DescriptionExtractor(client=client, settings=settings)
            with pytest.raises(FetchError):
                await extractor.extract("https://jobs.example/slow")


def test_normalize_whitespace():
    assert normalize_whitespace("  a \n\t b  ") == "a b"
    assert normalize_whitespace("") == ""
