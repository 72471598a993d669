"""
Data models for the knowledge store
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class Chunk(BaseModel):
    """
    A sub-span of a content record's body stored in the knowledge store
    The embedding lives in the vector index row at the same position
    """
    text: str
    source_url: str
    source_title: str
    chunk_index: int = Field(ge=0)
    chunk_count: int = Field(ge=1)
    fetched_at: Optional[datetime] = None
    summary: Optional[str] = None
    takeaways: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _index_within_count(self) -> "Chunk":
        if self.chunk_index >= self.chunk_count:
            raise ValueError(
                f"chunk_index {self.chunk_index} must be smaller than chunk_count {self.chunk_count}"
            )
        return self


class Source(BaseModel):
    """A document cited by a knowledge base answer"""
    title: str
    url: str


class QueryAnswer(BaseModel):
    """Retrieval-augmented answer to a question"""
    answer: str
    sources: List[Source] = Field(default_factory=list)
    relevance_score: str = "low"
    documents_retrieved: int = 0


class StoreReceipt(BaseModel):
    """Counters for one store operation"""
    documents_stored: int = 0
    chunks_created: int = 0
