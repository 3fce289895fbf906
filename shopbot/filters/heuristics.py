"""Deterministic gap-filling for filters returned by the extraction oracle.

The extractor is probabilistic and regularly drops or mis-times fields. The
rules below only ever fill fields that are still ``None`` and stay silent when
the text is ambiguous.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, Sequence

from shopbot.filters.models import QueryFilter
from shopbot.filters.numbers import extract_numbers

logger = logging.getLogger("shopbot.filters.heuristics")

MIN_PLAUSIBLE_PRICE = 50.0

DIMENSION_PATTERN = re.compile(r"(\d{2,})\s*[x×]\s*(\d{2,})\s*[x×]\s*(\d{2,})")
PRICE_RANGE_PATTERN = re.compile(r"(\d{2,})\s*(?:-|to)\s*(\d{2,})(?!\s*(?:cm|mm|kg|litre|liter))")
CAPACITY_RANGE_PATTERN = re.compile(r"(\d{1,2})\s*(?:-|to)\s*(\d{1,2})\s*kg")
CAPACITY_PATTERN = re.compile(r"(\d{1,2})\s*kg")

# Matched as whole words against the alphanumeric-only form of the text.
MAX_PRICE_HINTS = [
    "under", "below", "less", "less than", "max", "budget", "plafond", "moins de",
    "inferieur", "inferior", "jusqu a", "up to", "cap",
]
MIN_PRICE_HINTS = [
    "over", "above", "at least", "minimum", "plus de", "au moins", "superieur", "superior",
]
TOP_LOAD_HINTS = ["top load", "top-load", "toploader", "toplader", "top"]
FRONT_LOAD_HINTS = ["front load", "front-load", "frontloader", "front", "hublot"]
PRICE_WORDS = ["price", "cost"]
DIMENSION_WORDS = ["width", "height", "depth", "dimension", "size"]

# Matched as raw substrings of the lower-cased text.
MAX_PRICE_PHRASES = ["within budget", "upper limit"]
MIN_PRICE_PHRASES = ["minimum spend", "floor", "starting from"]
TOP_LOAD_PHRASES = ["vertical load", "upright washer"]
FRONT_LOAD_PHRASES = ["horizontal drum", "side door"]
CURRENCY_MARKERS = ["€", "eur", "euro"]
MAX_SYMBOLS = ["≤", "<=", "up to"]
MIN_SYMBOLS = ["≥", ">="]

BRAND_RELAX_PHRASES = [
    "any brand", "any other brand", "other brand", "different brand",
    "open on brand", "brand doesn't matter", "brand does not matter",
    "brand isn't important", "no brand preference", "another brand",
    "any brands", "brand flexible", "brand free",
    "任何品牌", "别的品牌", "其他品牌", "还有别的品牌", "还有其他品牌",
    "品牌不限", "品牌无所谓", "没有品牌偏好", "换个品牌", "别的牌子", "其他牌子",
]
BRAND_EXCLUSION_PREFIXES = ["other than ", "not ", "besides ", "except ", "outside ", "apart from "]


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(phrase in text for phrase in phrases)


def contains_any_word(normalized: str, phrases: Iterable[str]) -> bool:
    """Whole-word containment against a text already reduced to ``[a-z0-9 ]``."""

    if not normalized:
        return False
    padded = f" {normalized} "
    for phrase in phrases:
        cleaned = " ".join(re.sub(r"[^a-z0-9]+", " ", phrase.lower()).split())
        if cleaned and f" {cleaned} " in padded:
            return True
    return False


def normalize_tokens(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", " ", text.lower()).strip()


def enrich_filter(draft: QueryFilter | None, text: str, brands: Sequence[str] = ()) -> QueryFilter:
    """Return ``draft`` with whatever the raw ``text`` can safely add."""

    result = draft if draft is not None else QueryFilter()
    lower = text.lower()
    normalized = normalize_tokens(text)

    if result.brand is None:
        for brand in brands:
            if brand.lower() in lower:
                result = replace(result, brand=brand)
                break

    if result.type is None:
        top_hint = contains_any_word(normalized, TOP_LOAD_HINTS) or contains_any(lower, TOP_LOAD_PHRASES)
        front_hint = contains_any_word(normalized, FRONT_LOAD_HINTS) or contains_any(lower, FRONT_LOAD_PHRASES)
        if top_hint and not front_hint:
            result = replace(result, type="top")
        elif front_hint and not top_hint:
            result = replace(result, type="front")

    result, text_for_price = _apply_dimensions(result, lower)
    result = _apply_capacity(result, lower)
    result = _apply_price(result, lower, normalized, text_for_price)
    return relax_brand_if_requested(result, lower)


def _apply_dimensions(query: QueryFilter, lower: str) -> tuple[QueryFilter, str]:
    for match in DIMENSION_PATTERN.finditer(lower):
        width, height, depth = (float(group) for group in match.groups())
        query = replace(
            query,
            width_cm=query.width_cm if query.width_cm is not None else width,
            height_cm=query.height_cm if query.height_cm is not None else height,
            depth_cm=query.depth_cm if query.depth_cm is not None else depth,
        )
    return query, DIMENSION_PATTERN.sub(" ", lower)


def _apply_capacity(query: QueryFilter, lower: str) -> QueryFilter:
    range_match = CAPACITY_RANGE_PATTERN.search(lower)
    if range_match:
        first, second = int(range_match.group(1)), int(range_match.group(2))
        if first > 0 and second > 0:
            return replace(
                query,
                min_capacity_kg=query.min_capacity_kg if query.min_capacity_kg is not None else min(first, second),
                max_capacity_kg=query.max_capacity_kg if query.max_capacity_kg is not None else max(first, second),
            )

    single_match = CAPACITY_PATTERN.search(lower)
    if single_match:
        value = int(single_match.group(1))
        if value > 0:
            return replace(
                query,
                min_capacity_kg=query.min_capacity_kg if query.min_capacity_kg is not None else value,
                max_capacity_kg=query.max_capacity_kg if query.max_capacity_kg is not None else value,
            )
    return query


def _apply_price(query: QueryFilter, lower: str, normalized: str, text_for_price: str) -> QueryFilter:
    if query.min_price is not None and query.max_price is not None:
        return query

    has_currency = contains_any(lower, CURRENCY_MARKERS)
    has_price_word = contains_any_word(normalized, PRICE_WORDS)
    has_budget_word = contains_any_word(normalized, ["budget"])
    max_hint = contains_any_word(normalized, MAX_PRICE_HINTS) or contains_any(lower, MAX_PRICE_PHRASES)
    min_hint = contains_any_word(normalized, MIN_PRICE_HINTS) or contains_any(lower, MIN_PRICE_PHRASES)
    has_range_marker = PRICE_RANGE_PATTERN.search(text_for_price) is not None

    numbers = [value for value in extract_numbers(text_for_price) if value >= MIN_PLAUSIBLE_PRICE]
    if not numbers:
        return query

    has_price_signal = has_currency or has_price_word or has_budget_word or max_hint or min_hint
    dimension_words = contains_any_word(normalized, DIMENSION_WORDS)

    if len(numbers) >= 2 and not dimension_words and (has_price_signal or has_range_marker):
        ordered = sorted(numbers)
        return replace(
            query,
            min_price=query.min_price if query.min_price is not None else ordered[0],
            max_price=query.max_price if query.max_price is not None else ordered[-1],
        )

    value = numbers[0]
    qualifies_max = max_hint or contains_any(lower, MAX_SYMBOLS) or has_currency or has_budget_word
    qualifies_min = min_hint or contains_any(lower, MIN_SYMBOLS) or has_currency
    # Max wins when both qualify.
    if qualifies_max:
        if query.max_price is None:
            query = replace(query, max_price=value)
    elif qualifies_min:
        if query.min_price is None:
            query = replace(query, min_price=value)
    return query


def relax_brand_if_requested(query: QueryFilter, lower: str) -> QueryFilter:
    """Clear the brand when the text asks for any/other brands or excludes the current one."""

    if contains_any(lower, BRAND_RELAX_PHRASES):
        return replace(query, brand=None, brand_flexible=True)

    if query.brand is None:
        return query

    brand_lower = query.brand.lower()
    if contains_any(lower, (prefix + brand_lower for prefix in BRAND_EXCLUSION_PREFIXES)):
        logger.debug("Brand %s excluded by user text", query.brand)
        return replace(query, brand=None, brand_flexible=True)
    return query
