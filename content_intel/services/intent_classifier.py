"""
Intent classification
Maps a free-text prompt to an Intent with the LLM, falling back to keyword rules
"""
import re
from typing import List, Optional
from loguru import logger

from content_intel.config import Settings
from content_intel.models import Action, ClassificationResponse, Intent, IntentEntities
from content_intel.services.llm import LLMService

CLASSIFICATION_PROMPT = """Analyze the following user prompt and classify the intent. Extract any URLs, domains, or questions mentioned.

User Prompt: "{prompt}"

Classify the intent as one of:
- crawl: User wants to scrape/crawl specific URLs or domains
- summarize: User wants summaries of content
- extract_takeaways: User wants key takeaways extracted
- build_knowledge_base: User wants to crawl content and store it for Q&A
- query_knowledge_base: User is asking a question about previously stored content
- full_analysis: User wants complete analysis (crawl + summarize + takeaways + store)

Return the action, the entities (urls as an array of URLs, the question, the domain name) and a confidence between 0 and 1."""

URL_PATTERN = re.compile(r'https?://[^\s]+')

KEYWORD_CONFIDENCE = 0.7
DEFAULT_CONFIDENCE = 0.5


def extract_urls(text: str) -> List[str]:
    return URL_PATTERN.findall(text)


def fallback_classification(prompt: str) -> Intent:
    """
    Deterministic keyword classification

    Rules are checked in priority order; the first match wins.
    """
    lower_prompt = prompt.lower()
    urls = extract_urls(prompt)

    def _keyword_intent(action: Action) -> Intent:
        return Intent(
            action=action,
            entities=IntentEntities(urls=urls),
            confidence=KEYWORD_CONFIDENCE,
        )

    if 'crawl' in lower_prompt or 'scrape' in lower_prompt:
        return _keyword_intent(Action.CRAWL)

    if 'summarize' in lower_prompt or 'summary' in lower_prompt:
        return _keyword_intent(Action.SUMMARIZE)

    if 'takeaway' in lower_prompt or 'key points' in lower_prompt:
        return _keyword_intent(Action.EXTRACT_TAKEAWAYS)

    if 'knowledge base' in lower_prompt or ('build' in lower_prompt and 'q&a' in lower_prompt):
        return _keyword_intent(Action.BUILD_KNOWLEDGE_BASE)

    # Default to full analysis when URLs are present, otherwise a question
    if urls:
        return Intent(
            action=Action.FULL_ANALYSIS,
            entities=IntentEntities(urls=urls),
            confidence=DEFAULT_CONFIDENCE,
        )
    return Intent(
        action=Action.QUERY_KNOWLEDGE_BASE,
        entities=IntentEntities(question=prompt),
        confidence=DEFAULT_CONFIDENCE,
    )


class IntentClassifier:
    """Classifies prompts into one of the six workflows"""

    def __init__(self, llm: Optional[LLMService] = None, settings: Optional[Settings] = None, use_llm: bool = True):
        """
        Initialize intent classifier

        Args:
            llm: LLM service (if None and use_llm, will create new)
            settings: Application settings (if None, will load from environment)
            use_llm: When False, only the keyword fallback is used
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.llm = (llm or LLMService(settings)) if use_llm else None

    def classify(self, prompt: str) -> Intent:
        """
        Classify a prompt; never raises

        Args:
            prompt: Free-text user prompt

        Returns:
            Intent from the LLM, or from the keyword fallback on any failure
        """
        if self.llm is None:
            return fallback_classification(prompt)

        try:
            response = self.llm.extract(
                CLASSIFICATION_PROMPT.format(prompt=prompt),
                ClassificationResponse,
                temperature=0.1,
                model=self.settings.classifier_model,
            )
            intent = self._normalize(response, prompt)
            logger.info(f"Classified prompt as {intent.action.value} (confidence {intent.confidence:.2f})")
            return intent
        except Exception as e:
            logger.warning(f"Intent classification failed, using fallback: {e}")
            return fallback_classification(prompt)

    def _normalize(self, response: ClassificationResponse, prompt: str) -> Intent:
        """Fill entities the LLM left out from the prompt itself"""
        if not isinstance(response, ClassificationResponse):
            response = ClassificationResponse.model_validate(response)

        entities = response.entities
        urls = (entities.urls if entities else None) or extract_urls(prompt)
        question = entities.question if entities else None
        if not question and response.action == Action.QUERY_KNOWLEDGE_BASE:
            question = prompt

        return Intent(
            action=response.action,
            entities=IntentEntities(
                urls=urls,
                question=question or None,
                domain=(entities.domain if entities else None) or None,
            ),
            confidence=response.confidence if response.confidence is not None else DEFAULT_CONFIDENCE,
        )
