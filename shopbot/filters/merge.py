"""Turn-over-turn combination of the session filter with a fresh extraction."""

from __future__ import annotations

from typing import TypeVar

from shopbot.filters.heuristics import MIN_PLAUSIBLE_PRICE
from shopbot.filters.models import QueryFilter

T = TypeVar("T")


def _first_non_null(candidate: T | None, fallback: T | None) -> T | None:
    return candidate if candidate is not None else fallback


def _valid_price(value: float | None) -> float | None:
    if value is None or value < MIN_PLAUSIBLE_PRICE:
        return None
    return value


def merge_filters(baseline: QueryFilter | None, incoming: QueryFilter | None) -> QueryFilter:
    """Return the new session filter.

    ``incoming`` wins field by field when set. Brand follows its own rules so an
    explicit "any brand" survives later turns that do not mention brands, and a
    merge that would leave ``min_price > max_price`` drops the minimum.
    """

    baseline = baseline if baseline is not None else QueryFilter()
    if incoming is None:
        return baseline

    if incoming.brand_flexible:
        brand = None
    elif incoming.brand is not None:
        brand = incoming.brand
    elif baseline.brand_flexible:
        brand = None
    else:
        brand = baseline.brand
    brand_flexible = incoming.brand_flexible or (incoming.brand is None and baseline.brand_flexible)

    min_price = _first_non_null(_valid_price(incoming.min_price), _valid_price(baseline.min_price))
    max_price = _first_non_null(_valid_price(incoming.max_price), _valid_price(baseline.max_price))
    if min_price is not None and max_price is not None and min_price > max_price:
        min_price = None

    return QueryFilter(
        brand=brand,
        type=_first_non_null(incoming.type, baseline.type),
        min_price=min_price,
        max_price=max_price,
        min_capacity_kg=_first_non_null(incoming.min_capacity_kg, baseline.min_capacity_kg),
        max_capacity_kg=_first_non_null(incoming.max_capacity_kg, baseline.max_capacity_kg),
        width_cm=_first_non_null(incoming.width_cm, baseline.width_cm),
        height_cm=_first_non_null(incoming.height_cm, baseline.height_cm),
        depth_cm=_first_non_null(incoming.depth_cm, baseline.depth_cm),
        brand_flexible=brand_flexible,
    )
