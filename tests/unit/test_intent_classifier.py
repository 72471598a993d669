"""Unit tests for IntentClassifier: LLM classification with keyword fallback."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from content_intel.exceptions import LLMServiceError
from content_intel.models import Action, ClassificationResponse
from content_intel.models.intent import ClassificationEntities
from content_intel.services.intent_classifier import (
    IntentClassifier,
    extract_urls,
    fallback_classification,
)


def _classifier(settings, response=None, error: Exception | None = None) -> tuple[IntentClassifier, MagicMock]:
    llm = MagicMock()
    if error is not None:
        llm.extract.side_effect = error
    else:
        llm.extract.return_value = response
    return IntentClassifier(llm=llm, settings=settings), llm


# ---------------------------------------------------------------------------
# Fallback classification
# ---------------------------------------------------------------------------


class TestFallbackClassification:

    @pytest.mark.parametrize(
        "prompt, urls",
        [
            ("crawl https://example.com", ["https://example.com"]),
            ("Please CRAWL https://a.io/x and https://b.io/y now", ["https://a.io/x", "https://b.io/y"]),
            ("scrape http://news.site/page?id=3", ["http://news.site/page?id=3"]),
        ],
    )
    def test_crawl_keyword_with_urls(self, prompt: str, urls: list[str]) -> None:
        intent = fallback_classification(prompt)

        assert intent.action == Action.CRAWL
        assert intent.entities.urls == urls
        assert intent.confidence == 0.7

    @pytest.mark.parametrize(
        "prompt",
        ["What did the article say about pricing?", "tell me something interesting", "hello"],
    )
    def test_default_is_query_with_prompt_as_question(self, prompt: str) -> None:
        intent = fallback_classification(prompt)

        assert intent.action == Action.QUERY_KNOWLEDGE_BASE
        assert intent.entities.question == prompt
        assert intent.entities.urls == []
        assert intent.confidence == 0.5

    def test_url_without_keyword_is_full_analysis(self) -> None:
        intent = fallback_classification("look at https://example.com/post")

        assert intent.action == Action.FULL_ANALYSIS
        assert intent.entities.urls == ["https://example.com/post"]
        assert intent.entities.question is None
        assert intent.confidence == 0.5

    @pytest.mark.parametrize(
        "prompt, action",
        [
            ("summarize https://x.com", Action.SUMMARIZE),
            ("give me a summary of https://x.com", Action.SUMMARIZE),
            ("what are the takeaways from https://x.com", Action.EXTRACT_TAKEAWAYS),
            ("list the key points of https://x.com", Action.EXTRACT_TAKEAWAYS),
            ("add https://x.com to the knowledge base", Action.BUILD_KNOWLEDGE_BASE),
            ("build a Q&A set from https://x.com", Action.BUILD_KNOWLEDGE_BASE),
        ],
    )
    def test_keyword_actions(self, prompt: str, action: Action) -> None:
        intent = fallback_classification(prompt)

        assert intent.action == action
        assert intent.entities.urls == ["https://x.com"]
        assert intent.confidence == 0.7

    def test_priority_order_crawl_beats_summarize(self) -> None:
        intent = fallback_classification("crawl and summarize https://x.com")
        assert intent.action == Action.CRAWL

    def test_priority_order_summary_beats_takeaways(self) -> None:
        intent = fallback_classification("summary and key points please")
        assert intent.action == Action.SUMMARIZE

    def test_build_without_qa_is_not_knowledge_base(self) -> None:
        intent = fallback_classification("build something")
        assert intent.action == Action.QUERY_KNOWLEDGE_BASE


def test_extract_urls_stops_at_whitespace() -> None:
    assert extract_urls("see https://a.com/x, then http://b.org") == ["https://a.com/x,", "http://b.org"]


# ---------------------------------------------------------------------------
# LLM classification
# ---------------------------------------------------------------------------


class TestLLMClassification:

    def test_llm_result_is_used(self, settings) -> None:
        response = ClassificationResponse(
            action=Action.SUMMARIZE,
            entities=ClassificationEntities(urls=["https://llm.example"], domain="llm.example"),
            confidence=0.92,
        )
        classifier, llm = _classifier(settings, response)

        intent = classifier.classify("please do something with https://prompt.example")

        assert intent.action == Action.SUMMARIZE
        assert intent.entities.urls == ["https://llm.example"]
        assert intent.entities.domain == "llm.example"
        assert intent.confidence == pytest.approx(0.92)
        assert llm.extract.call_args.kwargs["model"] == settings.classifier_model

    def test_missing_urls_fall_back_to_prompt_urls(self, settings) -> None:
        response = ClassificationResponse(action=Action.CRAWL, confidence=0.8)
        classifier, _ = _classifier(settings, response)

        intent = classifier.classify("get https://a.com and https://b.com")

        assert intent.entities.urls == ["https://a.com", "https://b.com"]

    def test_query_without_question_uses_prompt(self, settings) -> None:
        response = ClassificationResponse(
            action=Action.QUERY_KNOWLEDGE_BASE,
            entities=ClassificationEntities(urls=[]),
        )
        classifier, _ = _classifier(settings, response)

        intent = classifier.classify("What is RAG?")

        assert intent.entities.question == "What is RAG?"
        assert intent.confidence == 0.5

    def test_llm_confidence_is_clamped(self) -> None:
        response = ClassificationResponse(action=Action.CRAWL, confidence=3.0)
        assert response.confidence == 1.0

    def test_llm_failure_uses_fallback(self, settings) -> None:
        classifier, _ = _classifier(settings, error=LLMServiceError("boom"))

        intent = classifier.classify("crawl https://example.com")

        assert intent.action == Action.CRAWL
        assert intent.entities.urls == ["https://example.com"]
        assert intent.confidence == 0.7

    def test_malformed_llm_response_uses_fallback(self, settings) -> None:
        classifier, _ = _classifier(settings, {"action": "dance", "confidence": "very"})

        intent = classifier.classify("no keywords here")

        assert intent.action == Action.QUERY_KNOWLEDGE_BASE
        assert intent.entities.question == "no keywords here"

    def test_without_llm_only_fallback_runs(self, settings) -> None:
        classifier = IntentClassifier(settings=settings, use_llm=False)

        assert classifier.llm is None
        assert classifier.classify("scrape https://x.com").action == Action.CRAWL
