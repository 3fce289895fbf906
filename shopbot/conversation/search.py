"""One-shot natural language product search outside a conversation."""

from __future__ import annotations

import logging

from shopbot.catalog.search import ProductSearchService
from shopbot.conversation.responses import SearchResponse
from shopbot.llm.answers import AnswerService
from shopbot.llm.extractor import QueryExtractor
from shopbot.ranking.constraints import DEFAULT_TOLERANCE_CM

logger = logging.getLogger("shopbot.conversation.search")


class OneShotSearch:
    def __init__(
        self,
        extractor: QueryExtractor,
        search: ProductSearchService,
        answers: AnswerService,
        tolerance_cm: float = DEFAULT_TOLERANCE_CM,
    ) -> None:
        self.extractor = extractor
        self.search = search
        self.answers = answers
        self.tolerance_cm = tolerance_cm

    def run(self, text: str, k: int = 5) -> SearchResponse:
        query = self.extractor.extract(text)
        results, filtered_count = self.search.search(text, query, k, self.tolerance_cm)
        logger.info("Search %r matched %d filtered products, returning %d", text, filtered_count, len(results))
        return SearchResponse(
            query=text,
            filter=query.to_dict(),
            size_before_rerank=filtered_count,
            results=[product.to_dict() for product in results],
            explanation=self.answers.explain(text, query, results),
        )
