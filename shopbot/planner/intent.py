"""Purchase-intent and product-selection detection."""

from __future__ import annotations

import re
from typing import Iterable

from shopbot.catalog.models import Product
from shopbot.filters.models import QueryFilter

QUOTED_SELECTION = re.compile(r"\"([^\"]+)\"")

PURCHASE_KEY_PHRASES = [
    "i'll take", "i will take", "lets take", "let's take", "take the", "take that one",
    "that's the one", "that's it", "i'll go with", "i will go with", "go with that",
    "i'm taking", "i want the", "we'll take", "we will take", "ok we'll take", "order that",
    "buy that", "i'll choose", "consider it done", "lock it in",
    "我要这个", "我要這個", "就这个", "就這個", "买这个", "買這個", "就它了", "就它吧", "就这个吧",
    "好的就它", "就选这个", "我要那台", "就决定这个",
]

AFFIRMATION_PHRASES = [
    " is ok", " is okay", " is fine", " looks good", " works for me", " sounds good",
    " that'll do", " that will do", " good for me", "就行",
]


def extract_selection(
    text: str | None,
    query: QueryFilter | None,
    products: Iterable[Product] = (),
) -> str | None:
    """Return the product reference the user seems to point at, if any.

    Quoted text wins, then the current filter brand, then the first listed
    product whose model or brand is mentioned.
    """

    if not text or not text.strip():
        return None

    quoted = QUOTED_SELECTION.search(text)
    if quoted:
        return quoted.group(1).strip()

    lower = text.lower()
    if query is not None and query.brand and query.brand.lower() in lower:
        return query.brand

    for product in products:
        if product.model and product.model.lower() in lower:
            return f"{product.brand} {product.model}" if product.brand else product.model
        if product.brand and product.brand.lower() in lower:
            return product.brand
    return None


def is_purchase_intent(text: str | None, selection_hint: str | None) -> bool:
    if not text or not text.strip():
        return False
    lower = text.lower()
    if any(phrase in lower for phrase in PURCHASE_KEY_PHRASES):
        return True
    return selection_hint is not None and any(phrase in lower for phrase in AFFIRMATION_PHRASES)
