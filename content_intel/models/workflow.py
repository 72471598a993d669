"""
Workflow result models
One model per action, combined into a discriminated union on ``action``
"""
from typing import Annotated, List, Literal, Union
from pydantic import BaseModel, Field

from content_intel.models.content import ContentRecord
from content_intel.models.intent import Action, Intent
from content_intel.models.knowledge import QueryAnswer, StoreReceipt


class WorkflowMetadata(BaseModel):
    """Counters aggregated over one workflow run"""
    total_urls: int = 0
    successful_scrapes: int = 0
    total_words: int = 0
    documents_stored: int = 0
    chunks_created: int = 0
    documents_retrieved: int = 0
    summarized_count: int = 0
    takeaway_count: int = 0


class CrawlResult(BaseModel):
    action: Literal[Action.CRAWL] = Action.CRAWL
    items: List[ContentRecord] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


class SummarizeResult(BaseModel):
    action: Literal[Action.SUMMARIZE] = Action.SUMMARIZE
    items: List[ContentRecord] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


class TakeawaysResult(BaseModel):
    action: Literal[Action.EXTRACT_TAKEAWAYS] = Action.EXTRACT_TAKEAWAYS
    items: List[ContentRecord] = Field(default_factory=list)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


class KnowledgeBaseResult(BaseModel):
    action: Literal[Action.BUILD_KNOWLEDGE_BASE] = Action.BUILD_KNOWLEDGE_BASE
    crawled_content: List[ContentRecord] = Field(default_factory=list)
    storage: StoreReceipt = Field(default_factory=StoreReceipt)
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


class QueryResult(BaseModel):
    action: Literal[Action.QUERY_KNOWLEDGE_BASE] = Action.QUERY_KNOWLEDGE_BASE
    answer: QueryAnswer
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


class FullAnalysisResult(BaseModel):
    action: Literal[Action.FULL_ANALYSIS] = Action.FULL_ANALYSIS
    crawled_content: List[ContentRecord] = Field(default_factory=list)
    summary_generated: bool = False
    takeaways_extracted: bool = False
    stored_in_knowledge_base: bool = False
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)


WorkflowResult = Annotated[
    Union[
        CrawlResult,
        SummarizeResult,
        TakeawaysResult,
        KnowledgeBaseResult,
        QueryResult,
        FullAnalysisResult,
    ],
    Field(discriminator="action"),
]


class ProcessedPrompt(BaseModel):
    """Everything produced for one prompt"""
    intent: Intent
    results: WorkflowResult
    execution_summary: str
