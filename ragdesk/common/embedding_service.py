"""
Embedding Service

On-device embedding generation using fastembed.
Vectors are L2 normalized so a dot product equals cosine similarity.
"""

import logging
from typing import List, Optional

import numpy as np

logger = logging.getLogger("ragdesk.common.embedding_service")


class EmbeddingService:
    """
    Embedding service backed by a fastembed TextEmbedding model.

    The model is loaded lazily on first use; fastembed downloads weights
    the first time a model name is requested.
    """

    def __init__(self, model: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self._model_name = model
        self._model = None

    @property
    def model_name(self) -> str:
        return self._model_name

    def _ensure_model(self):
        if self._model is None:
            from fastembed import TextEmbedding

            logger.info("Loading embedding model %s", self._model_name)
            self._model = TextEmbedding(model_name=self._model_name)
        return self._model

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            List of embedding vectors (L2 normalized)
        """
        if not texts:
            return []

        model = self._ensure_model()
        matrix = np.array(list(model.embed(texts)), dtype=np.float32)

        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return (matrix / norms).tolist()

    def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Raises:
            ValueError: if text is empty
        """
        if not text:
            raise ValueError("Cannot embed empty text")

        return self.embed([text])[0]

    def cosine_similarity(self, vec1: List[float], vec2: List[float]) -> float:
        """
        Compute cosine similarity between two normalized vectors.

        Returns:
            Cosine similarity score clamped to 0.0 to 1.0
        """
        v1 = np.array(vec1)
        v2 = np.array(vec2)

        if v1.shape != v2.shape:
            raise ValueError(f"Vector dimension mismatch: {v1.shape} vs {v2.shape}")

        similarity = float(np.dot(v1, v2))

        # Clamp to valid range (numerical precision issues)
        return max(0.0, min(1.0, similarity))


# Module-level singleton getter
_service_instance: Optional[EmbeddingService] = None


def get_embedding_service(
    model: str = "sentence-transformers/all-MiniLM-L6-v2"
) -> EmbeddingService:
    """Get the shared EmbeddingService instance."""
    global _service_instance

    if _service_instance is None:
        _service_instance = EmbeddingService(model=model)

    return _service_instance
