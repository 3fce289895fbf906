"""Semantic re-ranking of filtered candidates by embedding similarity."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

import numpy as np

from shopbot.catalog.models import Product
from shopbot.ranking.embeddings import EmbeddingBackend

COSINE_EPSILON = 1e-9

logger = logging.getLogger("shopbot.rerank")


class EmbeddingCache:
    """Product id → vector map shared by all ranking calls."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vectors: dict[int, np.ndarray] = {}

    def get(self, product_id: int) -> np.ndarray | None:
        return self._vectors.get(product_id)

    def put_if_absent(self, product_id: int, vector: np.ndarray) -> np.ndarray:
        with self._lock:
            return self._vectors.setdefault(product_id, vector)

    def evict(self, product_id: int | None = None) -> None:
        """Drop one vector, or every vector when ``product_id`` is None."""

        with self._lock:
            if product_id is None:
                self._vectors.clear()
            else:
                self._vectors.pop(product_id, None)

    def __len__(self) -> int:
        return len(self._vectors)


def product_text(product: Product) -> str:
    parts = (product.brand, product.model, product.type, product.description)
    return " ".join(part.strip() for part in parts if part and part.strip())


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return float(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b) + COSINE_EPSILON))


class SemanticReranker:
    """Orders candidates by cosine similarity to the query embedding."""

    def __init__(self, embedder: EmbeddingBackend, cache: EmbeddingCache | None = None) -> None:
        self._embedder = embedder
        self.cache = cache if cache is not None else EmbeddingCache()

    def rerank(self, query: str, candidates: Sequence[Product], top_k: int) -> list[Product]:
        if not candidates:
            return list(candidates)

        query_vector = self._embedder.embed(query)
        scores = [cosine(query_vector, self._vector_for(product)) for product in candidates]
        # sorted() is stable, so equal scores keep candidate order
        order = sorted(range(len(candidates)), key=lambda index: -scores[index])
        ranked = [candidates[index] for index in order[: max(0, top_k)]]
        logger.debug("Reranked %d candidates for %r", len(candidates), query)
        return ranked

    def _vector_for(self, product: Product) -> np.ndarray:
        if product.id is None:
            return self._embedder.embed(product_text(product))
        cached = self.cache.get(product.id)
        if cached is not None:
            return cached
        return self.cache.put_if_absent(product.id, self._embedder.embed(product_text(product)))
