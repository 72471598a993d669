"""Unit tests for ScraperService: HTML filtering, Markdown conversion and retries (no browser)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

import content_intel.services.scraper as scraper_module
from content_intel.exceptions import ScraperError
from content_intel.services.scraper import ScraperService

PAGE = """
<html>
  <head><title>Page</title><script>track()</script></head>
  <body>
    <nav>Menu</nav>
    <article><h2>Heading</h2><p>Inside article</p><script>ads()</script></article>
    <p>Loose paragraph</p>
    <footer>Footer text</footer>
  </body>
</html>
"""


@pytest.fixture
def service(settings) -> ScraperService:
    return ScraperService(settings=settings)


# ---------------------------------------------------------------------------
# Tag filtering
# ---------------------------------------------------------------------------


class TestFilterHtml:

    def test_excluded_tags_are_removed(self, service) -> None:
        html = service._filter_html(PAGE, [], ["script", "nav", "footer"])

        assert "track()" not in html and "ads()" not in html
        assert "Menu" not in html
        assert "Footer text" not in html
        assert "Inside article" in html

    def test_nested_matches_are_kept_once(self, service) -> None:
        html = service._filter_html(PAGE, ["article", "p", "h2"], ["script"])

        assert html.count("Inside article") == 1
        assert html.count("Heading") == 1
        assert "Loose paragraph" in html
        assert "Menu" not in html

    def test_no_match_keeps_whole_document(self, service) -> None:
        html = service._filter_html("<div>only a div</div>", ["article"], [])

        assert "only a div" in html

    def test_empty_include_keeps_everything(self, service) -> None:
        html = service._filter_html(PAGE, [], [])

        assert "Menu" in html and "Footer text" in html


class TestTitleFromHtml:

    def test_prefers_og_title(self, service) -> None:
        html = '<meta property="og:title" content=" Social Title "><h1>Heading</h1>'
        assert service._title_from_html(html) == "Social Title"

    def test_falls_back_to_h1(self, service) -> None:
        assert service._title_from_html("<h1> Heading </h1>") == "Heading"

    def test_none_when_nothing_found(self, service) -> None:
        assert service._title_from_html("<p>text</p>") is None


# ---------------------------------------------------------------------------
# Markdown conversion
# ---------------------------------------------------------------------------


class TestToMarkdown:

    def test_uses_trafilatura_when_long_enough(self, service, monkeypatch) -> None:
        extracted = "# Main\n\n\n\n" + "word " * 40
        monkeypatch.setattr(scraper_module.trafilatura, "extract", lambda *args, **kwargs: extracted)

        markdown = service._to_markdown("<p>ignored</p>", "https://x.com")

        assert markdown.startswith("# Main\n\nword")

    @pytest.mark.parametrize("extracted", [None, "too short"])
    def test_short_extraction_falls_back_to_markdownify(self, service, monkeypatch, extracted) -> None:
        monkeypatch.setattr(scraper_module.trafilatura, "extract", lambda *args, **kwargs: extracted)

        markdown = service._to_markdown("<h1>Title</h1><p>Body text</p>", "https://x.com")

        assert markdown.startswith("# Title")
        assert "Body text" in markdown

    def test_extraction_error_falls_back_to_markdownify(self, service, monkeypatch) -> None:
        def explode(*args, **kwargs):
            raise ValueError("parser crashed")

        monkeypatch.setattr(scraper_module.trafilatura, "extract", explode)

        assert "Body text" in service._to_markdown("<p>Body text</p>", "https://x.com")

    def test_clean_markdown(self, service) -> None:
        assert service._clean_markdown("\nA\n\n\n\nB  ") == "A\n\nB"
        assert "Skip to content" not in service._clean_markdown("A [Skip to content] B")


# ---------------------------------------------------------------------------
# scrape / fetch_html
# ---------------------------------------------------------------------------


class TestScrape:

    def test_fetch_failure_is_a_structured_result(self, service, monkeypatch) -> None:
        def fail(url):
            raise ScraperError("Failed to fetch webpage after 3 attempts")

        monkeypatch.setattr(service, "fetch_html", fail)

        result = service.scrape("https://down.example")

        assert not result.success
        assert "3 attempts" in result.error

    def test_requested_formats_only(self, service, monkeypatch) -> None:
        monkeypatch.setattr(service, "fetch_html", lambda url: ("Page", "<p>Body text</p>"))
        monkeypatch.setattr(scraper_module.trafilatura, "extract", lambda *args, **kwargs: None)

        result = service.scrape("https://x.com", formats=["markdown"])

        assert result.success
        assert result.title == "Page"
        assert result.markdown == "Body text"
        assert result.html is None

    def test_retries_then_succeeds(self, settings, monkeypatch) -> None:
        service = ScraperService(max_retries=3, settings=settings)
        fetch = MagicMock(side_effect=[RuntimeError("net::ERR_CONNECTION_RESET"), ("T", "<p>x</p>")])
        sleep = MagicMock()
        monkeypatch.setattr(service, "_fetch_with_playwright", fetch)
        monkeypatch.setattr(scraper_module.time, "sleep", sleep)

        assert service.fetch_html("https://x.com") == ("T", "<p>x</p>")
        assert fetch.call_count == 2
        sleep.assert_called_once_with(2)

    def test_gives_up_after_max_retries(self, settings, monkeypatch) -> None:
        service = ScraperService(max_retries=2, settings=settings)
        fetch = MagicMock(side_effect=RuntimeError("timeout"))
        monkeypatch.setattr(service, "_fetch_with_playwright", fetch)
        monkeypatch.setattr(scraper_module.time, "sleep", MagicMock())

        with pytest.raises(ScraperError, match="after 2 attempts"):
            service.fetch_html("https://x.com")
        assert fetch.call_count == 2
