"""
Content fetching stage
Turns a list of URLs into ContentRecords, skipping URLs that cannot be scraped
"""
from datetime import datetime
from typing import Any, Optional
from loguru import logger

from content_intel.config import Settings
from content_intel.exceptions import ScraperError
from content_intel.models import ContentRecord, StageResult
from content_intel.services.batch import run_batch
from content_intel.services.scraper import ScraperService

INCLUDE_TAGS = ['title', 'meta', 'h1', 'h2', 'h3', 'p', 'article']
EXCLUDE_TAGS = ['script', 'style', 'nav', 'footer', 'aside']


def count_words(text: str) -> int:
    return len(text.split())


class ContentFetcher:
    """Fetches URLs through the scraping backend"""

    def __init__(self, scraper: Optional[ScraperService] = None, settings: Optional[Settings] = None):
        """
        Initialize content fetcher

        Args:
            scraper: Scraping backend (if None, will create new)
            settings: Application settings (if None, will load from environment)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.scraper = scraper or ScraperService(settings=settings)

    def fetch(self, urls: Any) -> StageResult:
        """
        Fetch every URL independently

        Args:
            urls: List of absolute URLs

        Returns:
            StageResult whose data is the list of ContentRecords that could be
            fetched, in input order; metadata carries total_urls and
            successful_scrapes. Fails only if urls is not a list of strings.
        """
        if not isinstance(urls, (list, tuple)) or not all(isinstance(url, str) for url in urls):
            return StageResult.fail("URLs must be provided as an array of strings")

        logger.info(f"Fetching {len(urls)} URL(s)")
        batch = run_batch(
            urls,
            self._fetch_one,
            key=lambda url: url,
            max_workers=self.settings.fetch_concurrency,
            label="url",
        )
        records = batch.values
        logger.info(f"Fetched {len(records)}/{len(urls)} URL(s)")

        return StageResult.ok(
            records,
            total_urls=len(urls),
            successful_scrapes=len(records),
            failures=[failure.model_dump() for failure in batch.failures],
        )

    def _fetch_one(self, url: str) -> ContentRecord:
        """
        Scrape one URL into a ContentRecord

        Raises:
            ScraperError: If the backend reports failure
        """
        result = self.scraper.scrape(
            url,
            formats=["markdown", "html"],
            include_tags=INCLUDE_TAGS,
            exclude_tags=EXCLUDE_TAGS,
        )
        if not result.success:
            raise ScraperError(result.error or f"Scraping backend reported failure for {url}")

        markdown = result.markdown or ""
        return ContentRecord(
            url=url,
            title=(result.title or "").strip() or "Untitled",
            body=markdown or result.html or "",
            fetched_at=datetime.now(),
            word_count=count_words(markdown),
        )
