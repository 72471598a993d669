"""
Data models module
"""
from .content import (
    AnalysisResult,
    ContentDocument,
    ContentEnrichment,
    ContentRecord,
    ScrapeResult,
)
from .intent import Action, ClassificationResponse, Intent, IntentEntities
from .knowledge import Chunk, QueryAnswer, Source, StoreReceipt
from .results import BatchOutcome, ItemFailure, ItemOutcome, StageResult
from .workflow import (
    CrawlResult,
    FullAnalysisResult,
    KnowledgeBaseResult,
    ProcessedPrompt,
    QueryResult,
    SummarizeResult,
    TakeawaysResult,
    WorkflowMetadata,
    WorkflowResult,
)

__all__ = [
    "AnalysisResult",
    "ContentDocument",
    "ContentEnrichment",
    "ContentRecord",
    "ScrapeResult",
    "Action",
    "ClassificationResponse",
    "Intent",
    "IntentEntities",
    "Chunk",
    "QueryAnswer",
    "Source",
    "StoreReceipt",
    "BatchOutcome",
    "ItemFailure",
    "ItemOutcome",
    "StageResult",
    "CrawlResult",
    "FullAnalysisResult",
    "KnowledgeBaseResult",
    "ProcessedPrompt",
    "QueryResult",
    "SummarizeResult",
    "TakeawaysResult",
    "WorkflowMetadata",
    "WorkflowResult",
]
