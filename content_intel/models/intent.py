"""
Intent models produced by the intent classifier
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class Action(str, Enum):
    """The closed set of workflows a prompt can be routed to"""
    CRAWL = "crawl"
    SUMMARIZE = "summarize"
    EXTRACT_TAKEAWAYS = "extract_takeaways"
    BUILD_KNOWLEDGE_BASE = "build_knowledge_base"
    QUERY_KNOWLEDGE_BASE = "query_knowledge_base"
    FULL_ANALYSIS = "full_analysis"


class IntentEntities(BaseModel):
    """Entities extracted from a prompt"""
    urls: List[str] = Field(default_factory=list)
    question: Optional[str] = None
    domain: Optional[str] = None


class Intent(BaseModel):
    """Structured interpretation of a free-text prompt"""
    action: Action
    entities: IntentEntities = Field(default_factory=IntentEntities)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ClassificationEntities(BaseModel):
    """Entities as returned by the LLM; every field may be omitted"""
    urls: Optional[List[str]] = Field(default=None, description="Absolute URLs mentioned in the prompt")
    question: Optional[str] = Field(default=None, description="The question the user is asking, if any")
    domain: Optional[str] = Field(default=None, description="Domain name mentioned in the prompt, if any")


class ClassificationResponse(BaseModel):
    """
    Response model requested from the LLM for intent classification
    Used with Instructor to get structured output
    """
    action: Action = Field(description="The workflow the user is asking for")
    entities: Optional[ClassificationEntities] = None
    confidence: Optional[float] = Field(default=None, description="Confidence between 0 and 1")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return min(1.0, max(0.0, value))
