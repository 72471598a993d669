"""
Services module - Business logic and external integrations
"""
from .llm import LLMService
from .scraper import ScraperService
from .fetcher import ContentFetcher
from .enrichment import Summarizer, TakeawayExtractor, parse_takeaways
from .knowledge_store import KnowledgeStore
from .intent_classifier import IntentClassifier, fallback_classification
from .orchestrator import Orchestrator
from .content_tools import ContentToolsService

__all__ = [
    "LLMService",
    "ScraperService",
    "ContentFetcher",
    "Summarizer",
    "TakeawayExtractor",
    "parse_takeaways",
    "KnowledgeStore",
    "IntentClassifier",
    "fallback_classification",
    "Orchestrator",
    "ContentToolsService",
]
