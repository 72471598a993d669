"""
Enrichment stages
Summarizer and takeaway extractor, each adding one derived field per record
"""
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional
from loguru import logger

from content_intel.config import Settings
from content_intel.models import ContentRecord, StageResult
from content_intel.services.batch import run_batch
from content_intel.services.llm import LLMService

SUMMARY_PROMPT = """Please provide a concise 3-4 sentence summary of the following content.
Focus on the main points, key insights, and most important information.

Title: {title}
Content: {content}

Summary:"""

TAKEAWAYS_PROMPT = """Extract exactly 3 key takeaways from the following content.
Each takeaway should be a clear, actionable insight or important fact.
Format your response as a numbered list (1., 2., 3.).

Title: {title}
Content: {content}

Key Takeaways:"""

MAX_TAKEAWAYS = 3
_NUMBERED_LINE = re.compile(r'^\d+\.\s*(.+)$')


def truncate_content(content: str, max_length: int) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + '...'


def parse_takeaways(text: str) -> List[str]:
    """
    Parse a numbered-list response into at most three takeaways

    Lines look like "1. text". When no line matches, the whole response is
    returned as a single takeaway; an empty response yields an empty list.
    """
    takeaways: List[str] = []
    for line in text.split('\n'):
        match = _NUMBERED_LINE.match(line.strip())
        if match and len(takeaways) < MAX_TAKEAWAYS:
            takeaways.append(match.group(1).strip())

    if takeaways:
        return takeaways
    stripped = text.strip()
    return [stripped] if stripped else []


class EnrichmentStage(ABC):
    """
    Base class for stages that derive one field per record with the LLM

    The output has the same length and order as the input. A record whose LLM
    call fails is returned unchanged.
    """

    name = "enrichment"
    count_key = "processed_count"
    temperature = 0.3

    def __init__(self, llm: Optional[LLMService] = None, settings: Optional[Settings] = None):
        """
        Initialize enrichment stage

        Args:
            llm: LLM service (if None, will create new)
            settings: Application settings (if None, will load from environment)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.llm = llm or LLMService(settings)

    def enrich(self, items: Any) -> StageResult:
        """
        Enrich every record independently

        Args:
            items: List of ContentRecords

        Returns:
            StageResult whose data has one record per input record
        """
        if not isinstance(items, (list, tuple)):
            return StageResult.fail("Content items must be provided as an array")

        logger.info(f"Running {self.name} on {len(items)} item(s)")
        batch = run_batch(
            items,
            self._enrich_one,
            key=lambda item: item.url,
            max_workers=self.settings.enrich_concurrency,
            label=self.name,
        )

        enriched = [
            outcome.value if outcome.succeeded else original
            for original, outcome in zip(items, batch.outcomes)
        ]
        processed = len(items) - len(batch.failures)
        logger.info(f"{self.name} processed {processed}/{len(items)} item(s)")

        return StageResult.ok(
            enriched,
            total_items=len(items),
            failures=[failure.model_dump() for failure in batch.failures],
            **{self.count_key: processed},
        )

    def _build_prompt(self, template: str, item: ContentRecord) -> str:
        return template.format(
            title=item.title,
            content=truncate_content(item.body, self.settings.content_char_limit),
        )

    @abstractmethod
    def _enrich_one(self, item: ContentRecord) -> ContentRecord:
        """Return a copy of item with the stage's field filled in"""


class Summarizer(EnrichmentStage):
    """Adds a 3-4 sentence summary to each record"""

    name = "summarizer"
    count_key = "summarized_count"
    temperature = 0.3

    def _enrich_one(self, item: ContentRecord) -> ContentRecord:
        summary = self.llm.complete(self._build_prompt(SUMMARY_PROMPT, item), temperature=self.temperature)
        return item.model_copy(update={"summary": summary or None})


class TakeawayExtractor(EnrichmentStage):
    """Adds up to three key takeaways to each record"""

    name = "takeaway-extractor"
    count_key = "processed_count"
    temperature = 0.2

    def _enrich_one(self, item: ContentRecord) -> ContentRecord:
        response = self.llm.complete(self._build_prompt(TAKEAWAYS_PROMPT, item), temperature=self.temperature)
        takeaways = parse_takeaways(response)
        return item.model_copy(update={"takeaways": takeaways or None})
