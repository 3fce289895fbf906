"""Narrative explanation of a final shortlist."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from shopbot.catalog.models import Product
from shopbot.core.errors import LLMError
from shopbot.filters.models import QueryFilter, describe_budget, describe_capacity, describe_dimensions
from shopbot.llm.client import ChatClient
from shopbot.ranking.constraints import DEFAULT_TOLERANCE_CM, evaluate, narrate

logger = logging.getLogger("shopbot.answers")

EXPLAIN_TEMPLATE = """You are the closing voice of a guided washing-machine assistant.

User request (latest wording):
"{query}"

Collected filters (human summary):
{summary}

Filters JSON:
{filter_json}

Ranked shortlist (only options you may mention):
{items}

Requirements:
1) Open with one sentence summarising how well the shortlist covers budget, type, capacity, and dimensions.
2) Then list each product as a bullet. Explain why it matches using the numbers in its checks line. If something is off, prepend "⚠" and say exactly which constraint is missed.
3) Finish with a heading "Trade-off ideas:" followed by 1-2 short bullets with actionable levers like "+€50 budget stretch".
4) If the shortlist is empty, explain the likely reason and suggest the most helpful filter change instead.
5) Language must match the user's language.
6) Stay factual: base every statement strictly on the data provided above.
"""


def _summary(query: QueryFilter) -> str:
    brand = "any brand" if query.brand_flexible else (query.brand or "open")
    return "; ".join(
        [
            f"Budget {describe_budget(query, separator='-') or 'not specified'}",
            f"Type {query.type or 'open'}",
            f"Capacity {describe_capacity(query) or 'not specified'}",
            f"Brand {brand}",
            f"Dimensions {describe_dimensions(query) or 'not specified'}",
        ]
    )


def _product_line(product: Product, query: QueryFilter, tolerance_cm: float) -> str:
    report = evaluate(query, product, tolerance_cm)
    price = f"price €{product.price:.0f}" if product.price is not None else "price unknown"
    capacity = f"{product.capacity_kg}kg" if product.capacity_kg is not None else "capacity unknown"
    checks = "; ".join(f"{check.attribute}: {check.status.value} ({check.detail})" for check in report.checks)
    description = (product.description or "n/a").strip()
    if len(description) > 160:
        description = description[:157] + "..."
    return (
        f"- id:{product.id if product.id is not None else 'unknown'} | {product.label} ({product.type or 'unknown'}) "
        f"{price} | {capacity} | checks {checks or 'none'} | desc {description}"
    )


class AnswerService:
    """Explains a shortlist via the LLM, or via the deterministic narration when offline."""

    def __init__(self, client: ChatClient | None = None, tolerance_cm: float = DEFAULT_TOLERANCE_CM) -> None:
        self._client = client
        self._tolerance_cm = tolerance_cm

    def explain(self, user_query: str, query: QueryFilter, results: Sequence[Product]) -> str:
        fallback = narrate(query, results, self._tolerance_cm)
        if self._client is None:
            return fallback

        prompt = EXPLAIN_TEMPLATE.format(
            query=user_query,
            summary=_summary(query),
            filter_json=json.dumps(query.to_dict(), indent=2, ensure_ascii=False),
            items="\n".join(_product_line(product, query, self._tolerance_cm) for product in results) or "none",
        )
        try:
            return self._client.complete(prompt)
        except LLMError:
            logger.exception("Shortlist explanation failed; using narration")
            return fallback
