"""
Content tools service
Single-step operations on ad-hoc JSON content documents
"""
import json
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from loguru import logger

from content_intel.config import Settings
from content_intel.exceptions import ScraperError
from content_intel.models import AnalysisResult, ContentDocument, ContentEnrichment
from content_intel.services.llm import LLMService
from content_intel.services.scraper import ScraperService

ENRICHMENT_TYPES = ("summary", "keywords", "sentiment")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _split_list(text: str) -> List[str]:
    return [part.strip() for part in text.split(',') if part.strip()]


class ContentToolsService:
    """Fetch, enrich, organize and analyze standalone content documents"""

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        scraper: Optional[ScraperService] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize content tools service

        Args:
            llm: LLM service (if None, will create new on first use)
            scraper: Scraping backend (if None, will create new on first use)
            settings: Application settings (if None, will load from environment)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self._llm = llm
        self._scraper = scraper

    @property
    def llm(self) -> LLMService:
        if self._llm is None:
            self._llm = LLMService(self.settings)
        return self._llm

    @property
    def scraper(self) -> ScraperService:
        if self._scraper is None:
            self._scraper = ScraperService(settings=self.settings)
        return self._scraper

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def fetch_from_url(self, url: str) -> ContentDocument:
        """
        Scrape a URL into a content document

        Raises:
            ScraperError: If the page cannot be scraped
        """
        result = self.scraper.scrape(url, formats=["markdown"])
        if not result.success:
            raise ScraperError(f"Failed to scrape: {result.error}")

        return ContentDocument(
            url=url,
            title=result.title or '',
            body=result.markdown or '',
            metadata={"crawledAt": datetime.now().isoformat(), "source": url},
        )

    def fetch_from_file(self, file_path: Path) -> ContentDocument:
        """Read a local text file into a content document"""
        body = Path(file_path).read_text(encoding='utf-8')
        return ContentDocument(
            body=body,
            metadata={"source": str(file_path), "loadedAt": datetime.now().isoformat()},
        )

    def load_content(self, file_path: Path) -> ContentDocument:
        """Load a JSON content document"""
        with open(file_path, 'r', encoding='utf-8') as f:
            return ContentDocument.model_validate(json.load(f))

    def save_content(self, content, output_path: Path) -> None:
        """Write a document (or any model) as indented JSON"""
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content.model_dump_json(indent=2, exclude_none=True))
        logger.info(f"Content saved to {output_path}")

    # ------------------------------------------------------------------
    # LLM operations
    # ------------------------------------------------------------------

    def summarize(self, content: ContentDocument) -> str:
        return self.llm.complete(
            f"Summarize the following content in a concise way:\n\n{content.body}",
            temperature=0.2,
        )

    def extract_keywords(self, content: ContentDocument) -> List[str]:
        result = self.llm.complete(
            "Extract the 5-10 most important keywords from this content. "
            f"Return them as a comma-separated list:\n\n{content.body}",
            temperature=0.2,
        )
        return _split_list(result)

    def analyze_sentiment(self, content: ContentDocument) -> str:
        return self.llm.complete(
            "Analyze the sentiment of this content. Classify it as positive, neutral, or negative, "
            f"and explain why:\n\n{content.body}",
            temperature=0.2,
        )

    def categorize(self, content: ContentDocument, categories: List[str]) -> List[str]:
        result = self.llm.complete(
            f"Categorize the following content into one or more of these categories: {', '.join(categories)}. "
            f"Return only the applicable categories as a comma-separated list:\n\n{content.body}",
            temperature=0.2,
        )
        return _split_list(result)

    def analyze_content(self, content: ContentDocument, query: str) -> str:
        return self.llm.complete(
            f"Based on the following content, please answer this query: {query}\n\nContent:\n{content.body}",
            temperature=0.2,
        )

    # ------------------------------------------------------------------
    # Document-level commands
    # ------------------------------------------------------------------

    def enrich(self, content: ContentDocument, enrichment_type: str) -> ContentDocument:
        """
        Append one enrichment entry to the document

        Raises:
            ValueError: If enrichment_type is not summary, keywords or sentiment
        """
        if enrichment_type == "summary":
            data = self.summarize(content)
        elif enrichment_type == "keywords":
            data = self.extract_keywords(content)
        elif enrichment_type == "sentiment":
            data = self.analyze_sentiment(content)
        else:
            raise ValueError(f"Unknown enrichment type: {enrichment_type}")

        logger.info(f"Enriched content with {enrichment_type}")
        enrichment = ContentEnrichment(type=enrichment_type, data=data, timestamp=_now_ms())
        return content.model_copy(update={"enrichments": [*content.enrichments, enrichment]})

    def organize(self, content: ContentDocument, categories: List[str]) -> ContentDocument:
        logger.info(f"Organizing content into categories: {', '.join(categories)}")
        return content.model_copy(update={"categories": self.categorize(content, categories)})

    def analyze(self, content: ContentDocument, query: str) -> AnalysisResult:
        logger.info(f"Analyzing content with query: {query}")
        return AnalysisResult(query=query, result=self.analyze_content(content, query), timestamp=_now_ms())
