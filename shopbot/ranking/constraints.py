"""Per-attribute constraint checks between a filter and a product.

The same report feeds the preview/result badges and the fallback narration,
so both always agree on what matches and by how much.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from shopbot.catalog.models import Product
from shopbot.filters.models import QueryFilter, describe_budget, describe_capacity

DEFAULT_TOLERANCE_CM = 1.0
DIMENSION_AXES = ("width", "height", "depth")


class ConstraintStatus(str, Enum):
    SATISFIED = "satisfied"
    VIOLATED = "violated"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ConstraintCheck:
    """Outcome for one attribute; ``delta`` is signed (positive means above the bound)."""

    attribute: str
    status: ConstraintStatus
    detail: str
    delta: float | None = None


@dataclass(frozen=True, slots=True)
class ConstraintReport:
    checks: tuple[ConstraintCheck, ...]

    def get(self, attribute: str) -> ConstraintCheck | None:
        for check in self.checks:
            if check.attribute == attribute:
                return check
        return None

    def is_satisfied(self, attribute: str) -> bool:
        """Unconstrained attributes count as satisfied."""

        check = self.get(attribute)
        return check is None or check.status is ConstraintStatus.SATISFIED

    @property
    def has_dimension_constraints(self) -> bool:
        return any(self.get(axis) is not None for axis in DIMENSION_AXES)

    @property
    def dimensions_fit(self) -> bool:
        return all(self.is_satisfied(axis) for axis in DIMENSION_AXES)

    @property
    def violations(self) -> list[ConstraintCheck]:
        return [check for check in self.checks if check.status is ConstraintStatus.VIOLATED]

    def badges(self) -> list[str]:
        badges: list[str] = []
        for attribute, label in (
            ("budget", "Within budget"),
            ("capacity", "Capacity match"),
            ("type", "Type match"),
        ):
            check = self.get(attribute)
            if check is not None and check.status is ConstraintStatus.SATISFIED:
                badges.append(label)
        if self.has_dimension_constraints and self.dimensions_fit:
            badges.append("Dimension fit")
        brand = self.get("brand")
        if brand is not None and brand.status is ConstraintStatus.SATISFIED:
            badges.append("Brand match")
        return badges


def evaluate(query: QueryFilter, product: Product, tolerance_cm: float = DEFAULT_TOLERANCE_CM) -> ConstraintReport:
    checks: list[ConstraintCheck] = []

    budget = _check_budget(query, product)
    if budget is not None:
        checks.append(budget)

    if query.type is not None:
        checks.append(_check_equal("type", query.type, product.type))

    capacity = _check_capacity(query, product)
    if capacity is not None:
        checks.append(capacity)

    if query.brand is not None and not query.brand_flexible:
        checks.append(_check_equal("brand", query.brand, product.brand))

    for axis, expected, actual in (
        ("width", query.width_cm, product.width_cm),
        ("height", query.height_cm, product.height_cm),
        ("depth", query.depth_cm, product.depth_cm),
    ):
        if expected is not None:
            checks.append(_check_dimension(axis, expected, actual, tolerance_cm))

    return ConstraintReport(tuple(checks))


def _check_budget(query: QueryFilter, product: Product) -> ConstraintCheck | None:
    if query.min_price is None and query.max_price is None:
        return None
    if product.price is None:
        return ConstraintCheck("budget", ConstraintStatus.UNKNOWN, "price unknown")

    price = product.price
    if query.max_price is not None and price > query.max_price:
        gap = price - query.max_price
        return ConstraintCheck("budget", ConstraintStatus.VIOLATED, f"+€{gap:.0f} over cap", gap)
    if query.min_price is not None and price < query.min_price:
        gap = price - query.min_price
        return ConstraintCheck("budget", ConstraintStatus.VIOLATED, f"€{-gap:.0f} below floor", gap)
    if query.max_price is not None:
        slack = query.max_price - price
        return ConstraintCheck("budget", ConstraintStatus.SATISFIED, f"€{slack:.0f} under cap", -slack)
    slack = price - query.min_price
    return ConstraintCheck("budget", ConstraintStatus.SATISFIED, f"€{slack:.0f} above floor", slack)


def _check_capacity(query: QueryFilter, product: Product) -> ConstraintCheck | None:
    if query.min_capacity_kg is None and query.max_capacity_kg is None:
        return None
    if product.capacity_kg is None:
        return ConstraintCheck("capacity", ConstraintStatus.UNKNOWN, "capacity unknown")

    capacity = product.capacity_kg
    if query.max_capacity_kg is not None and capacity > query.max_capacity_kg:
        gap = capacity - query.max_capacity_kg
        return ConstraintCheck("capacity", ConstraintStatus.VIOLATED, f"+{gap}kg above maximum", float(gap))
    if query.min_capacity_kg is not None and capacity < query.min_capacity_kg:
        gap = capacity - query.min_capacity_kg
        return ConstraintCheck("capacity", ConstraintStatus.VIOLATED, f"{gap}kg below minimum", float(gap))
    return ConstraintCheck("capacity", ConstraintStatus.SATISFIED, f"{capacity}kg fits", 0.0)


def _check_equal(attribute: str, expected: str, actual: str | None) -> ConstraintCheck:
    if actual is None:
        return ConstraintCheck(attribute, ConstraintStatus.UNKNOWN, f"{attribute} unknown")
    if expected.lower() == actual.lower():
        return ConstraintCheck(attribute, ConstraintStatus.SATISFIED, f"{attribute} {actual}")
    return ConstraintCheck(attribute, ConstraintStatus.VIOLATED, f"{attribute} is {actual}, wanted {expected}")


def _check_dimension(axis: str, expected: float, actual: float | None, tolerance_cm: float) -> ConstraintCheck:
    if actual is None:
        return ConstraintCheck(axis, ConstraintStatus.UNKNOWN, f"{axis} unknown")
    gap = actual - expected
    if abs(gap) <= tolerance_cm:
        return ConstraintCheck(axis, ConstraintStatus.SATISFIED, f"{axis} {actual:.0f}cm fits", gap)
    return ConstraintCheck(
        axis,
        ConstraintStatus.VIOLATED,
        f"{axis} {actual:.0f}cm vs {expected:.0f}cm ({gap:+.0f}cm)",
        gap,
    )


def narrate(query: QueryFilter, products: Sequence[Product], tolerance_cm: float = DEFAULT_TOLERANCE_CM) -> str:
    """Plain-text explanation of how each product meets or misses the filter."""

    if not products:
        return (
            "No washing machine matches every constraint yet. "
            f"Try widening the budget ({describe_budget(query) or 'not specified'}) "
            f"or the capacity ({describe_capacity(query) or 'not specified'})."
        )

    reports = [evaluate(query, product, tolerance_cm) for product in products]
    full_matches = sum(1 for report in reports if not report.violations)
    lines = [f"{full_matches} of {len(products)} shortlisted machines meet every constraint."]

    for product, report in zip(products, reports):
        price = f"€{product.price:.0f}" if product.price is not None else "price unknown"
        matched = [check.detail for check in report.checks if check.status is ConstraintStatus.SATISFIED]
        missed = [check.detail for check in report.violations]
        line = f"- {product.label} ({price})"
        if matched:
            line += ": " + ", ".join(matched)
        if missed:
            line += " ⚠ " + ", ".join(missed)
        lines.append(line)

    return "\n".join(lines)
