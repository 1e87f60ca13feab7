"""
Vector Store

In-memory semantic index over embedded document chunks.
Returns RetrievedDocument records for context assembly.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .embedding_service import EmbeddingService

logger = logging.getLogger("ragdesk.common.vector_store")


@dataclass
class RetrievedDocument:
    """A document chunk returned by similarity search"""
    metadata: Dict[str, Any] = field(default_factory=dict)
    text: Optional[str] = None

    def __str__(self) -> str:
        if self.text is not None:
            return self.text
        return f"RetrievedDocument(metadata={self.metadata!r})"


class VectorStore:
    """
    Cosine-similarity search over documents held in memory.

    Documents are embedded on insert; each stored copy carries its text
    under metadata["page_content"].
    """

    def __init__(self, embedding_service: EmbeddingService, topk: int = 4):
        self._embedding = embedding_service
        self._topk = topk
        self._documents: List[RetrievedDocument] = []
        self._vectors: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        return len(self._documents)

    def add_documents(self, documents: Sequence[RetrievedDocument]) -> int:
        """
        Embed and store documents.

        Documents without text are skipped.

        Returns:
            Number of documents stored
        """
        docs = [d for d in documents if d.text and d.text.strip()]
        if not docs:
            return 0

        vectors = np.array(self._embedding.embed([d.text for d in docs]), dtype=np.float32)
        stored = [
            RetrievedDocument(metadata={**d.metadata, "page_content": d.text}, text=d.text)
            for d in docs
        ]

        with self._lock:
            if self._vectors is None:
                self._vectors = vectors
            else:
                self._vectors = np.vstack([self._vectors, vectors])
            self._documents.extend(stored)

        logger.info("Stored %d document chunk(s), %d total", len(stored), self.count)
        return len(stored)

    def similarity_search(self, query: str, topk: Optional[int] = None) -> List[RetrievedDocument]:
        """
        Return the documents most similar to the query, best first.

        The cosine score is copied into each returned document's
        metadata["score"].
        """
        topk = topk or self._topk

        with self._lock:
            if self._vectors is None or not self._documents:
                return []
            vectors = self._vectors
            documents = list(self._documents)

        query_vec = np.array(self._embedding.embed_single(query), dtype=np.float32)
        scores = vectors @ query_vec
        order = np.argsort(-scores)[:topk]

        return [
            RetrievedDocument(
                metadata={**documents[i].metadata, "score": float(scores[i])},
                text=documents[i].text,
            )
            for i in order
        ]

    def clear(self) -> None:
        with self._lock:
            self._documents = []
            self._vectors = None
