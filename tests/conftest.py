"""Shared pytest fixtures for the content_intel test suite."""

from __future__ import annotations

import math
import re
import zlib
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from content_intel.config import Settings
from content_intel.models import ContentRecord

EMBEDDING_DIM = 64
_WORD = re.compile(r"[a-z0-9]+")


class FakeLLM:
    """Deterministic stand-in for LLMService.

    Embeddings are hashed bag-of-words vectors so texts sharing words are
    close in L2 distance. ``complete`` returns ``reply`` (or calls it when it
    is a callable) and records every prompt.
    """

    def __init__(self, reply: str | Callable[[str], str] = "stub answer"):
        self.reply = reply
        self.prompts: List[str] = []
        self.embedded: List[str] = []

    def complete(self, prompt: str, temperature: float = 0.3, model: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply

    def embed(self, text: str) -> List[float]:
        return self.embed_many([text])[0]

    def embed_many(self, texts: List[str]) -> List[List[float]]:
        self.embedded.extend(texts)
        return [_bag_of_words(text) for text in texts]


def _bag_of_words(text: str) -> List[float]:
    vector = [0.0] * EMBEDDING_DIM
    for word in _WORD.findall(text.lower()):
        vector[zlib.crc32(word.encode()) % EMBEDDING_DIM] += 1.0
    norm = math.sqrt(sum(v * v for v in vector)) or 1.0
    return [v / norm for v in vector]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with test defaults and an isolated vector store directory."""
    s = Settings()
    s.llm_api_key = "sk-test"
    s.llm_base_url = ""
    s.vector_store_path = str(tmp_path / "vector_store")
    s.chunk_size = 1000
    s.chunk_overlap = 200
    s.retrieval_top_k = 4
    s.content_char_limit = 3000
    s.fetch_concurrency = 1
    s.enrich_concurrency = 1
    return s


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def make_record() -> Callable[..., ContentRecord]:
    """Factory for ContentRecords with sensible defaults."""

    def _make(
        url: str = "https://example.com/article",
        title: str = "Example Article",
        body: str = "Example body text about content intelligence.",
        **overrides,
    ) -> ContentRecord:
        return ContentRecord(
            url=url,
            title=title,
            body=body,
            fetched_at=overrides.pop("fetched_at", datetime(2024, 1, 1, 12, 0, 0)),
            word_count=overrides.pop("word_count", len(body.split())),
            **overrides,
        )

    return _make


@pytest.fixture
def llm_factory() -> Callable[..., FakeLLM]:
    """Build FakeLLMs with a custom reply."""
    return FakeLLM
