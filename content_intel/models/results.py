"""
Result types shared by the pipeline stages
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class StageResult(BaseModel):
    """Structured outcome of one stage call"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> "StageResult":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata: Any) -> "StageResult":
        return cls(success=False, error=error, metadata=metadata)


class ItemFailure(BaseModel):
    """Why a single item of a batch failed"""
    key: str
    reason: str


class ItemOutcome(BaseModel):
    """Success-with-value or failure-with-reason for one batch item"""
    value: Any = None
    failure: Optional[ItemFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @classmethod
    def ok(cls, value: Any) -> "ItemOutcome":
        return cls(value=value)

    @classmethod
    def failed(cls, key: str, reason: str) -> "ItemOutcome":
        return cls(failure=ItemFailure(key=key, reason=reason))


class BatchOutcome(BaseModel):
    """Per-item outcomes of a batch, in input order"""
    outcomes: List[ItemOutcome] = Field(default_factory=list)

    @property
    def values(self) -> List[Any]:
        return [outcome.value for outcome in self.outcomes if outcome.succeeded]

    @property
    def failures(self) -> List[ItemFailure]:
        return [outcome.failure for outcome in self.outcomes if outcome.failure is not None]
