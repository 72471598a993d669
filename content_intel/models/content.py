"""
Data models for fetched content
Using Pydantic for data validation
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


class ScrapeResult(BaseModel):
    """Raw result returned by the scraping backend for one URL"""
    success: bool
    title: Optional[str] = None
    markdown: Optional[str] = None
    html: Optional[str] = None
    error: Optional[str] = None


class ContentRecord(BaseModel):
    """
    One fetched document flowing through the pipeline

    Enrichment stages add ``summary`` and ``takeaways``; a missing value means
    the stage was skipped or failed for this record.
    """
    url: str = Field(min_length=1)
    title: str = Field(min_length=1)
    body: str = ""
    summary: Optional[str] = None
    takeaways: Optional[List[str]] = Field(default=None, max_length=3)
    fetched_at: datetime = Field(default_factory=datetime.now)
    word_count: int = Field(default=0, ge=0)
    content_type: str = "web-page"

    @field_validator("summary", mode="before")
    @classmethod
    def _empty_summary_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("takeaways", mode="before")
    @classmethod
    def _empty_takeaways_are_absent(cls, value):
        if isinstance(value, list) and not value:
            return None
        return value


class ContentEnrichment(BaseModel):
    """One enrichment entry attached to a content document"""
    type: str
    data: Any = None
    timestamp: int


class ContentDocument(BaseModel):
    """Ad-hoc JSON content document used by the file-based commands"""
    id: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    body: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    enrichments: List[ContentEnrichment] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Answer to a free-form query about a content document"""
    query: str
    result: str
    timestamp: int
