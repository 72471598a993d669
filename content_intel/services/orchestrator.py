"""
Workflow orchestration - Business logic
Routes a classified intent to its fixed pipeline of fetch, enrichment and
knowledge-store stages, and aggregates the outcome
"""
from typing import List, Optional, assert_never
from loguru import logger

from content_intel.config import Settings
from content_intel.exceptions import WorkflowError
from content_intel.models import (
    Action,
    ContentRecord,
    CrawlResult,
    FullAnalysisResult,
    Intent,
    KnowledgeBaseResult,
    ProcessedPrompt,
    QueryResult,
    StoreReceipt,
    SummarizeResult,
    TakeawaysResult,
    WorkflowMetadata,
    WorkflowResult,
)
from content_intel.services.enrichment import Summarizer, TakeawayExtractor
from content_intel.services.fetcher import ContentFetcher
from content_intel.services.intent_classifier import IntentClassifier
from content_intel.services.knowledge_store import KnowledgeStore


class Orchestrator:
    """Workflow engine coordinating classification and the pipeline stages"""

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        classifier: Optional[IntentClassifier] = None,
        fetcher: Optional[ContentFetcher] = None,
        summarizer: Optional[Summarizer] = None,
        takeaway_extractor: Optional[TakeawayExtractor] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize orchestrator

        Args:
            knowledge_store: Opened knowledge store handle
            classifier: Intent classifier (if None, will create new)
            fetcher: Content fetcher (if None, will create new)
            summarizer: Summarizer stage (if None, will create new)
            takeaway_extractor: Takeaway extraction stage (if None, will create new)
            settings: Application settings (if None, will load from environment)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.knowledge_store = knowledge_store
        self.classifier = classifier or IntentClassifier(settings=settings)
        self.fetcher = fetcher or ContentFetcher(settings=settings)
        self.summarizer = summarizer or Summarizer(settings=settings)
        self.takeaway_extractor = takeaway_extractor or TakeawayExtractor(settings=settings)

    def process_prompt(self, prompt: str) -> ProcessedPrompt:
        """
        Classify a prompt and run its workflow

        Args:
            prompt: Free-text user prompt

        Returns:
            ProcessedPrompt with the intent, the workflow result and a one-line summary

        Raises:
            WorkflowError: If the workflow cannot run or a required stage fails
        """
        logger.info(f"Processing prompt: {prompt}")
        intent = self.classifier.classify(prompt)
        return self.execute(intent)

    def execute(self, intent: Intent) -> ProcessedPrompt:
        """
        Run the pipeline for an already classified intent

        Raises:
            WorkflowError: If the workflow cannot run or a required stage fails
        """
        results: WorkflowResult
        match intent.action:
            case Action.CRAWL:
                results = self.handle_crawl(intent)
            case Action.SUMMARIZE:
                results = self.handle_summarize(intent)
            case Action.EXTRACT_TAKEAWAYS:
                results = self.handle_extract_takeaways(intent)
            case Action.BUILD_KNOWLEDGE_BASE:
                results = self.handle_build_knowledge_base(intent)
            case Action.QUERY_KNOWLEDGE_BASE:
                results = self.handle_query_knowledge_base(intent)
            case Action.FULL_ANALYSIS:
                results = self.handle_full_analysis(intent)
            case _:
                assert_never(intent.action)

        summary = execution_summary(results)
        logger.info(summary)
        return ProcessedPrompt(intent=intent, results=results, execution_summary=summary)

    def handle_crawl(self, intent: Intent) -> CrawlResult:
        urls = self._require_urls(intent, "crawling")
        items, metadata = self._fetch(urls, "Crawling failed")
        return CrawlResult(items=items, metadata=metadata)

    def handle_summarize(self, intent: Intent) -> SummarizeResult:
        urls = self._require_urls(intent, "summarization")
        items, metadata = self._fetch(urls, "Failed to crawl URLs for summarization")

        response = self.summarizer.enrich(items)
        if not response.success:
            raise WorkflowError(response.error or "Summarization failed")

        metadata.summarized_count = response.metadata.get("summarized_count", 0)
        return SummarizeResult(items=response.data, metadata=metadata)

    def handle_extract_takeaways(self, intent: Intent) -> TakeawaysResult:
        urls = self._require_urls(intent, "takeaway extraction")
        items, metadata = self._fetch(urls, "Failed to crawl URLs for takeaway extraction")

        response = self.takeaway_extractor.enrich(items)
        if not response.success:
            raise WorkflowError(response.error or "Takeaway extraction failed")

        metadata.takeaway_count = response.metadata.get("processed_count", 0)
        return TakeawaysResult(items=response.data, metadata=metadata)

    def handle_build_knowledge_base(self, intent: Intent) -> KnowledgeBaseResult:
        urls = self._require_urls(intent, "knowledge base building")
        items, metadata = self._fetch(urls, "Failed to crawl content")

        response = self.knowledge_store.store(items)
        if not response.success:
            raise WorkflowError(response.error or "Failed to store content in knowledge base")

        receipt: StoreReceipt = response.data
        metadata.documents_stored = receipt.documents_stored
        metadata.chunks_created = receipt.chunks_created
        return KnowledgeBaseResult(crawled_content=items, storage=receipt, metadata=metadata)

    def handle_query_knowledge_base(self, intent: Intent) -> QueryResult:
        question = intent.entities.question
        if not question:
            raise WorkflowError("No question provided for knowledge base query")

        response = self.knowledge_store.query(question)
        if not response.success:
            raise WorkflowError(response.error or "Knowledge base query failed")

        answer = response.data
        return QueryResult(
            answer=answer,
            metadata=WorkflowMetadata(documents_retrieved=answer.documents_retrieved),
        )

    def handle_full_analysis(self, intent: Intent) -> FullAnalysisResult:
        """
        Fetch, summarize, extract takeaways and store

        Only the fetch is required; later stage failures degrade the result.
        """
        urls = self._require_urls(intent, "full analysis")

        # Step 1: Fetch content
        logger.info("Step 1: Fetching content...")
        items, metadata = self._fetch(urls, "Failed to crawl content")

        # Step 2: Generate summaries
        logger.info("Step 2: Generating summaries...")
        summary_response = self.summarizer.enrich(items)
        if summary_response.success:
            items = summary_response.data
            metadata.summarized_count = summary_response.metadata.get("summarized_count", 0)
        else:
            logger.warning(f"Summarization failed, continuing without summaries: {summary_response.error}")

        # Step 3: Extract key takeaways
        logger.info("Step 3: Extracting key takeaways...")
        takeaways_response = self.takeaway_extractor.enrich(items)
        if takeaways_response.success:
            items = takeaways_response.data
            metadata.takeaway_count = takeaways_response.metadata.get("processed_count", 0)
        else:
            logger.warning(f"Takeaway extraction failed, continuing without takeaways: {takeaways_response.error}")

        # Step 4: Store in knowledge base
        logger.info("Step 4: Storing in knowledge base...")
        store_response = self.knowledge_store.store(items)
        if store_response.success:
            metadata.documents_stored = store_response.data.documents_stored
            metadata.chunks_created = store_response.data.chunks_created
        else:
            logger.warning(f"Storing in knowledge base failed: {store_response.error}")

        return FullAnalysisResult(
            crawled_content=items,
            summary_generated=summary_response.success,
            takeaways_extracted=takeaways_response.success,
            stored_in_knowledge_base=store_response.success,
            metadata=metadata,
        )

    def _require_urls(self, intent: Intent, purpose: str) -> List[str]:
        urls = intent.entities.urls
        if not urls:
            raise WorkflowError(f"No URLs provided for {purpose}")
        return urls

    def _fetch(self, urls: List[str], error_message: str) -> tuple[List[ContentRecord], WorkflowMetadata]:
        """
        Fetch URLs and start the metadata counters

        Raises:
            WorkflowError: If the fetch fails or yields no content at all
        """
        response = self.fetcher.fetch(urls)
        if not response.success:
            raise WorkflowError(response.error or error_message)

        items: List[ContentRecord] = response.data
        if not items:
            raise WorkflowError(f"{error_message}: no content could be fetched from {len(urls)} URL(s)")

        metadata = WorkflowMetadata(
            total_urls=response.metadata.get("total_urls", len(urls)),
            successful_scrapes=response.metadata.get("successful_scrapes", len(items)),
            total_words=sum(item.word_count for item in items),
        )
        return items, metadata


def execution_summary(results: WorkflowResult) -> str:
    """One-line summary built from the result counters"""
    metadata = results.metadata
    match results:
        case CrawlResult():
            return (
                f"Successfully crawled {metadata.successful_scrapes} page(s). "
                f"Total content gathered: {metadata.total_words} words."
            )
        case SummarizeResult():
            return f"Generated summaries for {metadata.summarized_count} out of {metadata.successful_scrapes} content item(s)."
        case TakeawaysResult():
            return f"Extracted key takeaways from {metadata.takeaway_count} out of {metadata.successful_scrapes} content item(s)."
        case KnowledgeBaseResult():
            return (
                f"Built knowledge base with {metadata.documents_stored} document(s) "
                f"and {metadata.chunks_created} searchable chunks."
            )
        case QueryResult():
            return f"Retrieved answer from knowledge base with {len(results.answer.sources)} relevant source(s)."
        case FullAnalysisResult():
            return (
                f"Complete analysis finished: {metadata.successful_scrapes} pages crawled, "
                f"summaries and takeaways generated, {metadata.chunks_created} chunks stored in knowledge base."
            )
        case _:
            assert_never(results)
