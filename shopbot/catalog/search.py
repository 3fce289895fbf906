"""Product retrieval combining structured filtering with semantic re-ranking."""

from __future__ import annotations

import logging

from shopbot.catalog.models import Product
from shopbot.catalog.store import CandidateSource
from shopbot.filters.models import QueryFilter
from shopbot.ranking.rerank import SemanticReranker

logger = logging.getLogger("shopbot.search")

MIN_FETCH_SIZE = 40


class ProductSearchService:
    def __init__(self, source: CandidateSource, reranker: SemanticReranker) -> None:
        self.source = source
        self.reranker = reranker

    def preview(self, query: QueryFilter, limit: int) -> list[Product]:
        return self.source.preview(query, limit)

    def final_results(
        self,
        text: str | None,
        query: QueryFilter,
        limit: int,
        tolerance_cm: float,
    ) -> list[Product]:
        """Fetch a wide candidate pool, then keep the ``limit`` closest to ``text``."""

        fetch_size = max(limit * 4, MIN_FETCH_SIZE)
        candidates = self.source.final_candidates(query, tolerance_cm, fetch_size)
        logger.info("Final retrieval: %d candidates for %s", len(candidates), query)
        if not candidates:
            return candidates

        rerank_query = text if text and text.strip() else build_search_query(query)
        return self.reranker.rerank(rerank_query, candidates, limit)[:limit]

    def search(self, text: str, query: QueryFilter, limit: int, tolerance_cm: float) -> tuple[list[Product], int]:
        """One-shot search; falls back to the whole catalog when nothing matches.

        Returns the ranked products and the size of the filtered pool.
        """

        filtered = self.source.final_candidates(query, tolerance_cm)
        pool = filtered or self.source.all_products()
        return self.reranker.rerank(text, pool, limit), len(filtered)


def build_search_query(query: QueryFilter | None) -> str:
    if query is None:
        return "washing machine best match"

    parts = ["washing machine"]
    if query.brand is not None:
        parts.append(f"brand {query.brand}")
    if query.type is not None:
        parts.append(f"type {query.type}")
    if query.min_price is not None or query.max_price is not None:
        parts.append("price")
        if query.min_price is not None:
            parts.append(f"from {int(query.min_price)}")
        if query.max_price is not None:
            parts.append(f"up to {int(query.max_price)}")
    if query.min_capacity_kg is not None or query.max_capacity_kg is not None:
        parts.append("capacity")
        if query.min_capacity_kg is not None:
            parts.append(f"from {query.min_capacity_kg}")
        if query.max_capacity_kg is not None:
            parts.append(f"to {query.max_capacity_kg}")
    return " ".join(parts)
