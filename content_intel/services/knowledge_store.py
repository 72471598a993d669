"""
Knowledge store
Chunks content, embeds the chunks into a FAISS index persisted on disk,
and answers questions with retrieval-augmented generation
"""
import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import faiss
import numpy as np
from langchain_text_splitters import RecursiveCharacterTextSplitter
from loguru import logger

from content_intel.config import Settings
from content_intel.exceptions import KnowledgeStoreError
from content_intel.models import (
    Chunk,
    ContentRecord,
    QueryAnswer,
    Source,
    StageResult,
    StoreReceipt,
)
from content_intel.services.llm import LLMService

NO_CONTENT_ANSWER = "I don't have any relevant content in my knowledge base to answer that question."

QA_PROMPT = """Use the following context to answer the question. If you cannot find the answer in the context, say "I don't have enough information to answer that question."

Context:
{context}

Question: {question}

Answer:"""


class KnowledgeStore:
    """
    Append-only similarity index over content chunks

    Lifecycle: ``open()`` loads the index from disk (or starts an empty one
    when the files are missing, unreadable or inconsistent), ``store`` and
    ``query`` are only valid while open, ``close()`` flushes unsaved changes
    and releases it. Every ``store`` call ends with a full synchronous save;
    when that save fails the call's chunks are rolled back. One writer per
    store directory.
    """

    INDEX_FILE = "faiss.index"
    METADATA_FILE = "chunks.json"

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        settings: Optional[Settings] = None,
        store_path: Optional[str] = None,
    ):
        """
        Initialize knowledge store (call open() before use)

        Args:
            llm: LLM service used for embeddings and answers (if None, will create new)
            settings: Application settings (if None, will load from environment)
            store_path: Directory holding the persisted index (default: VECTOR_STORE_PATH)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.llm = llm or LLMService(settings)
        self.store_path = Path(store_path or settings.vector_store_path)
        self.text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        )

        self._index: Optional[faiss.IndexFlatL2] = None
        self._chunks: List[Chunk] = []
        self._ready = False
        self._dirty = False
        self._lock = threading.Lock()

    @property
    def index_path(self) -> Path:
        return self.store_path / self.INDEX_FILE

    @property
    def metadata_path(self) -> Path:
        return self.store_path / self.METADATA_FILE

    @property
    def is_ready(self) -> bool:
        return self._ready

    def __enter__(self) -> "KnowledgeStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> "KnowledgeStore":
        """Load the persisted index; fall back to a fresh empty index"""
        if self._ready:
            return self

        try:
            self._index, self._chunks = self._load()
            logger.info(f"Loaded knowledge store from {self.store_path} with {len(self._chunks)} chunks")
        except FileNotFoundError:
            logger.info(f"No knowledge store at {self.store_path}, starting with an empty index")
            self._index, self._chunks = None, []
        except Exception as e:
            logger.warning(f"Failed to load knowledge store from {self.store_path}: {e}. Starting fresh.")
            self._index, self._chunks = None, []
            # Overwrite the unreadable files on close
            self._dirty = True

        self._ready = True
        return self

    def close(self) -> None:
        """Flush unsaved changes to disk and release the index"""
        if not self._ready:
            return
        with self._lock:
            if self._dirty:
                self._save()
            self._index = None
            self._chunks = []
            self._ready = False
            self._dirty = False
        logger.debug(f"Closed knowledge store at {self.store_path}")

    def count(self) -> int:
        return len(self._chunks)

    def store(self, items: Any) -> StageResult:
        """
        Chunk, embed and append records, then persist the whole index

        Args:
            items: List of ContentRecords

        Returns:
            StageResult with a StoreReceipt; metadata carries documents_stored
            and chunks_created
        """
        if not self._ready:
            return StageResult.fail("Vector store not initialized")
        if not isinstance(items, (list, tuple)):
            return StageResult.fail("Content items must be provided as an array")

        chunks: List[Chunk] = []
        for item in items:
            chunks.extend(self.chunk_record(item))

        try:
            with self._lock:
                vectors = self.llm.embed_many([chunk.text for chunk in chunks]) if chunks else []
                had_index = self._index is not None
                rows_before = self._index.ntotal if had_index else 0
                chunks_before = len(self._chunks)
                try:
                    if chunks:
                        self._append(chunks, vectors)
                    self._save()
                except Exception:
                    self._rollback(had_index, rows_before, chunks_before)
                    raise
        except Exception as e:
            logger.exception(f"Knowledge store operation failed: {e}")
            return StageResult.fail(f"Knowledge base operation failed: {e}")

        receipt = StoreReceipt(documents_stored=len(items), chunks_created=len(chunks))
        logger.info(f"Stored {receipt.documents_stored} document(s) as {receipt.chunks_created} chunk(s)")
        return StageResult.ok(
            receipt,
            documents_stored=receipt.documents_stored,
            chunks_created=receipt.chunks_created,
        )

    def chunk_record(self, item: ContentRecord) -> List[Chunk]:
        """Split one record's body into overlapping chunks"""
        texts = self.text_splitter.split_text(item.body)
        return [
            Chunk(
                text=text,
                source_url=item.url,
                source_title=item.title,
                chunk_index=index,
                chunk_count=len(texts),
                fetched_at=item.fetched_at,
                summary=item.summary,
                takeaways=item.takeaways or [],
            )
            for index, text in enumerate(texts)
        ]

    def query(self, question: str, k: Optional[int] = None) -> StageResult:
        """
        Answer a question from the most similar stored chunks

        Args:
            question: Natural-language question
            k: Number of chunks to retrieve (default: RETRIEVAL_TOP_K)

        Returns:
            StageResult with a QueryAnswer
        """
        if not self._ready:
            return StageResult.fail("Vector store not initialized")

        k = k or self.settings.retrieval_top_k

        try:
            hits = self.similarity_search(question, k)

            if not hits:
                return StageResult.ok(
                    QueryAnswer(answer=NO_CONTENT_ANSWER, sources=[], relevance_score="low"),
                    documents_retrieved=0,
                )

            context = "\n\n---\n\n".join(
                f"Source: {chunk.source_title} ({chunk.source_url})\n{chunk.text}"
                for chunk, _ in hits
            )
            answer = self.llm.complete(QA_PROMPT.format(context=context, question=question), temperature=0.1)
        except Exception as e:
            logger.exception(f"Knowledge base query failed: {e}")
            return StageResult.fail(f"Knowledge base operation failed: {e}")

        return StageResult.ok(
            QueryAnswer(
                answer=answer,
                sources=unique_sources([chunk for chunk, _ in hits]),
                relevance_score="high",
                documents_retrieved=len(hits),
            ),
            documents_retrieved=len(hits),
        )

    def similarity_search(self, question: str, k: int) -> List[Tuple[Chunk, float]]:
        """Return up to k (chunk, L2 distance) pairs, nearest first"""
        if self._index is None or self._index.ntotal == 0:
            return []

        query_vector = np.array([self.llm.embed(question)], dtype='float32')
        distances, indices = self._index.search(query_vector, min(k, self._index.ntotal))

        hits = []
        for row, distance in zip(indices[0], distances[0]):
            if row == -1 or row >= len(self._chunks):
                continue
            hits.append((self._chunks[row], float(distance)))
        return hits

    def _append(self, chunks: List[Chunk], vectors: List[List[float]]) -> None:
        """Add vectors and their chunks at the same rows (caller holds the lock)"""
        if len(vectors) != len(chunks):
            raise KnowledgeStoreError(f"Expected {len(chunks)} embeddings, got {len(vectors)}")

        embeddings = np.array(vectors, dtype='float32')
        if self._index is None:
            self._index = faiss.IndexFlatL2(embeddings.shape[1])
            logger.info(f"Initialized new index with dimension {embeddings.shape[1]}")
        elif embeddings.shape[1] != self._index.d:
            raise KnowledgeStoreError(
                f"Embedding dimension {embeddings.shape[1]} does not match index dimension {self._index.d}"
            )

        self._index.add(embeddings)
        self._chunks.extend(chunks)

    def _rollback(self, had_index: bool, rows_before: int, chunks_before: int) -> None:
        """Drop rows added by a store call that could not be persisted (caller holds the lock)"""
        if not had_index:
            self._index = None
        elif self._index.ntotal > rows_before:
            self._index.remove_ids(np.arange(rows_before, self._index.ntotal, dtype='int64'))
        del self._chunks[chunks_before:]
        # Disk may hold a partial write; close() rewrites the rolled-back state
        self._dirty = True
        logger.warning(f"Rolled back unsaved chunks, store holds {len(self._chunks)} chunks")

    def _load(self) -> Tuple[Optional[faiss.IndexFlatL2], List[Chunk]]:
        """
        Read index and chunk metadata from disk

        Raises:
            FileNotFoundError: If nothing has been persisted yet
            KnowledgeStoreError: If the files are inconsistent
        """
        if not self.metadata_path.exists():
            if self.index_path.exists():
                raise KnowledgeStoreError(f"{self.METADATA_FILE} is missing next to {self.INDEX_FILE}")
            raise FileNotFoundError(self.metadata_path)

        with open(self.metadata_path, 'r', encoding='utf-8') as f:
            data: Dict[str, Any] = json.load(f)
        chunks = [Chunk.model_validate(entry) for entry in data.get("chunks", [])]

        if not self.index_path.exists():
            if chunks:
                raise KnowledgeStoreError(f"{self.INDEX_FILE} is missing for {len(chunks)} stored chunks")
            return None, []

        index = faiss.read_index(str(self.index_path))
        if index.ntotal != len(chunks):
            raise KnowledgeStoreError(
                f"Index holds {index.ntotal} vectors but metadata lists {len(chunks)} chunks"
            )
        return index, chunks

    def _save(self) -> None:
        """Write index and chunk metadata to disk (caller holds the lock)"""
        try:
            self.store_path.mkdir(parents=True, exist_ok=True)
            if self._index is not None:
                faiss.write_index(self._index, str(self.index_path))
            elif self.index_path.exists():
                self.index_path.unlink()
            data = {"chunks": [chunk.model_dump(mode="json") for chunk in self._chunks]}
            with open(self.metadata_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except Exception as e:
            raise KnowledgeStoreError(f"Failed to save knowledge store to {self.store_path}: {e}") from e

        self._dirty = False
        logger.debug(f"Saved {len(self._chunks)} chunks to {self.store_path}")


def unique_sources(chunks: List[Chunk]) -> List[Source]:
    """Sources of the given chunks, deduplicated by (title, url) in first-seen order"""
    seen: Dict[Tuple[str, str], Source] = {}
    for chunk in chunks:
        key = (chunk.source_title, chunk.source_url)
        if key not in seen:
            seen[key] = Source(title=chunk.source_title, url=chunk.source_url)
    return list(seen.values())
