"""
Web scraping service using Playwright
Renders pages headlessly, filters them by tag, and converts the result to Markdown
"""
import os
import re
import time
import random
from typing import Iterable, List, Optional, Sequence, Tuple
from playwright.sync_api import sync_playwright, TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth
from markdownify import markdownify as md
from loguru import logger
from bs4 import BeautifulSoup
import trafilatura

from content_intel.config import Settings, get_settings
from content_intel.exceptions import ScraperError
from content_intel.models import ScrapeResult


class ScraperService:
    """Scraping backend: fetch(url) -> title, markdown and html"""

    # Mainstream browser user agents
    USER_AGENTS = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    ]

    def __init__(self, timeout: Optional[int] = None, max_retries: Optional[int] = None, settings: Optional[Settings] = None):
        """
        Initialize scraper service

        Args:
            timeout: Navigation timeout in milliseconds (default: SCRAPER_TIMEOUT_MS)
            max_retries: Maximum number of attempts per URL (default: SCRAPER_MAX_RETRIES)
            settings: Application settings (if None, will load from environment)
        """
        self.settings = settings or get_settings()
        self.timeout = timeout or self.settings.scraper_timeout_ms
        self.max_retries = max_retries or self.settings.scraper_max_retries

    def scrape(
        self,
        url: str,
        formats: Sequence[str] = ("markdown", "html"),
        include_tags: Optional[Sequence[str]] = None,
        exclude_tags: Optional[Sequence[str]] = None,
    ) -> ScrapeResult:
        """
        Scrape one URL

        Args:
            url: URL to fetch
            formats: Content formats to return ("markdown", "html")
            include_tags: If given, only content inside these tags is kept
            exclude_tags: Tags removed before conversion

        Returns:
            ScrapeResult; success is False when every attempt failed
        """
        try:
            title, html = self.fetch_html(url)
        except ScraperError as e:
            return ScrapeResult(success=False, error=str(e))

        filtered = self._filter_html(html, include_tags or [], exclude_tags or [])
        markdown = self._to_markdown(filtered, url) if "markdown" in formats else None

        return ScrapeResult(
            success=True,
            title=title,
            markdown=markdown,
            html=filtered if "html" in formats else None,
        )

    def fetch_html(self, url: str) -> Tuple[Optional[str], str]:
        """
        Fetch the rendered page with retries

        Args:
            url: URL to fetch

        Returns:
            Tuple of (page title, body HTML)

        Raises:
            ScraperError: If scraping fails after all retries
        """
        logger.info(f"Fetching webpage content from: {url}")

        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug(f"Attempt {attempt}/{self.max_retries}")
                return self._fetch_with_playwright(url)
            except Exception as e:
                last_error = e
                logger.warning(f"Attempt {attempt} failed: {str(e)}")
                if attempt < self.max_retries:
                    wait_time = attempt * 2
                    logger.info(f"Retrying in {wait_time} seconds...")
                    time.sleep(wait_time)
                else:
                    logger.error(f"All {self.max_retries} attempts failed")

        raise ScraperError(f"Failed to fetch webpage after {self.max_retries} attempts: {url} - {str(last_error)}")

    def _get_random_user_agent(self) -> str:
        return random.choice(self.USER_AGENTS)

    def _get_proxy_config(self) -> Optional[dict]:
        """
        Get proxy configuration from environment variable

        Returns:
            Proxy configuration dict for Playwright, or None if not configured
        """
        proxy_url = os.getenv('ALL_PROXY') or os.getenv('all_proxy')
        if not proxy_url:
            return None

        logger.info(f"Using proxy: {proxy_url}")
        return {"server": proxy_url}

    def _fetch_with_playwright(self, url: str) -> Tuple[Optional[str], str]:
        """
        Internal function to fetch webpage with Playwright

        Args:
            url: URL to fetch

        Returns:
            Tuple of (page title, body HTML)
        """
        with sync_playwright() as p:
            browser = p.chromium.launch(
                headless=True,
                args=[
                    '--disable-blink-features=AutomationControlled',
                    '--disable-dev-shm-usage',
                    '--no-sandbox',
                ]
            )

            try:
                context_options = {
                    "user_agent": self._get_random_user_agent(),
                    "viewport": {"width": 1920, "height": 1080},
                    "extra_http_headers": {
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
                        "Accept-Language": "en-US,en;q=0.9",
                    }
                }
                proxy_config = self._get_proxy_config()
                if proxy_config:
                    context_options["proxy"] = proxy_config

                context = browser.new_context(**context_options)

                try:
                    Stealth().apply_stealth_sync(context)
                except Exception as e:
                    logger.warning(f"Failed to apply stealth plugin: {e}")

                page = context.new_page()

                # Navigate with progressively weaker load conditions
                try:
                    page.goto(url, wait_until="networkidle", timeout=self.timeout)
                except PlaywrightTimeoutError:
                    logger.warning("networkidle timeout, trying with load state")
                    try:
                        page.goto(url, wait_until="load", timeout=self.timeout)
                    except PlaywrightTimeoutError:
                        logger.warning("load timeout, trying with domcontentloaded")
                        page.goto(url, wait_until="domcontentloaded", timeout=self.timeout)

                title = page.title() or None
                html = page.content()
            finally:
                browser.close()

        if not html:
            raise ScraperError(f"Could not extract content from page: {url}")

        if not title:
            title = self._title_from_html(html)

        logger.info(f"Fetched page '{title or 'Untitled'}', {len(html)} characters of HTML")
        return title, html

    def _title_from_html(self, html: str) -> Optional[str]:
        """Fall back to og:title or the first h1 when the document has no <title>"""
        soup = BeautifulSoup(html, 'lxml')
        og_title = soup.find('meta', attrs={'property': 'og:title'})
        if og_title and og_title.get('content'):
            return og_title['content'].strip()
        h1 = soup.find('h1')
        if h1 and h1.get_text(strip=True):
            return h1.get_text(strip=True)
        return None

    def _filter_html(self, html: str, include_tags: Iterable[str], exclude_tags: Iterable[str]) -> str:
        """
        Drop excluded tags, then keep only the outermost included elements

        Args:
            html: Raw HTML string
            include_tags: Tags whose content is kept (empty keeps everything)
            exclude_tags: Tags removed entirely

        Returns:
            Filtered HTML string
        """
        soup = BeautifulSoup(html, 'lxml')

        for tag in exclude_tags:
            for element in soup.find_all(tag):
                element.decompose()

        include = list(include_tags)
        if not include:
            return str(soup)

        matched = soup.find_all(include)
        matched_ids = {id(element) for element in matched}
        kept: List[str] = []
        for element in matched:
            # Nested matches are already contained in their ancestor
            if any(id(parent) in matched_ids for parent in element.parents):
                continue
            kept.append(str(element))

        return "\n".join(kept) if kept else str(soup)

    def _to_markdown(self, html: str, url: str) -> str:
        """
        Convert HTML to Markdown, preferring trafilatura's main-content extraction

        Args:
            html: Filtered HTML string
            url: Original URL

        Returns:
            Markdown formatted content string
        """
        try:
            markdown = trafilatura.extract(html, output_format='markdown', url=url)
            if markdown and len(markdown) > 100:
                return self._clean_markdown(markdown)
            logger.debug("Trafilatura extraction returned empty or too short content")
        except Exception as e:
            logger.warning(f"Trafilatura extraction failed: {e}")

        markdown = md(html, heading_style="ATX", bullets="-")
        return self._clean_markdown(markdown)

    def _clean_markdown(self, content: str) -> str:
        """
        Clean and normalize markdown content

        Args:
            content: Raw markdown content

        Returns:
            Cleaned markdown content
        """
        content = re.sub(r'\n{3,}', '\n\n', content)
        content = content.strip()

        content = re.sub(r'\[Skip to content\]', '', content, flags=re.IGNORECASE)
        content = re.sub(r'\[Skip to navigation\]', '', content, flags=re.IGNORECASE)

        return content
