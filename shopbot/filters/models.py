"""Structured product filter shared by extraction, planning and retrieval."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal

LoadType = Literal["front", "top"]


@dataclass(frozen=True, slots=True)
class QueryFilter:
    """Desired washing-machine attributes. ``None`` always means "not known yet"."""

    brand: str | None = None
    type: LoadType | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_capacity_kg: int | None = None
    max_capacity_kg: int | None = None
    width_cm: float | None = None
    height_cm: float | None = None
    depth_cm: float | None = None
    brand_flexible: bool = False

    def has_any_value(self) -> bool:
        """True when at least one attribute (flexibility aside) is set."""

        return any(
            getattr(self, item.name) is not None
            for item in fields(self)
            if item.name != "brand_flexible"
        )

    def has_dimensions(self) -> bool:
        return self.width_cm is not None or self.height_cm is not None or self.depth_cm is not None

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def describe_budget(query: QueryFilter, *, separator: str = " - ") -> str | None:
    if query.min_price is None and query.max_price is None:
        return None
    if query.min_price is not None and query.max_price is not None:
        return f"€{int(query.min_price)}{separator}€{int(query.max_price)}"
    if query.max_price is not None:
        return f"≤ €{int(query.max_price)}"
    return f"≥ €{int(query.min_price)}"


def describe_capacity(query: QueryFilter) -> str | None:
    if query.min_capacity_kg is None and query.max_capacity_kg is None:
        return None
    if query.min_capacity_kg is not None and query.max_capacity_kg is not None:
        return f"{query.min_capacity_kg}-{query.max_capacity_kg}kg"
    if query.max_capacity_kg is not None:
        return f"≤ {query.max_capacity_kg}kg"
    return f"≥ {query.min_capacity_kg}kg"


def describe_brand(query: QueryFilter) -> str | None:
    if query.brand_flexible:
        return "Any brand"
    return query.brand


def describe_dimensions(query: QueryFilter) -> str | None:
    if not query.has_dimensions():
        return None
    parts = [
        "?" if value is None else f"{value:.0f}"
        for value in (query.width_cm, query.height_cm, query.depth_cm)
    ]
    return "×".join(parts) + " cm"


def render_filter_summary(query: QueryFilter | None) -> str:
    """Multi-line summary used inside LLM prompts."""

    if query is None:
        query = QueryFilter()
    brand = "any brand" if query.brand_flexible else (query.brand or "unknown")
    return "\n".join(
        [
            f"Budget: {describe_budget(query, separator='-') or 'unknown'}",
            f"Type: {query.type or 'unknown'}",
            f"Capacity: {describe_capacity(query) or 'unknown'}",
            f"Brand: {brand}",
            f"Dimensions: {describe_dimensions(query) or 'unknown'}",
        ]
    )
