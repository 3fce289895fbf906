from shopbot.catalog.models import Product
from shopbot.filters.models import QueryFilter
from shopbot.ranking.constraints import ConstraintStatus, evaluate, narrate

MACHINE = Product(
    id=10,
    brand="Bosch",
    model="Serie 4",
    type="front",
    price=637,
    capacity_kg=8,
    width_cm=60,
    height_cm=85,
    depth_cm=59,
)


def test_budget_overrun_is_reported_with_gap():
    report = evaluate(QueryFilter(max_price=600), MACHINE)
    check = report.get("budget")

    assert check.status is ConstraintStatus.VIOLATED
    assert check.detail == "+€37 over cap"
    assert check.delta == 37


def test_budget_slack_under_cap():
    report = evaluate(QueryFilter(max_price=700), MACHINE)

    assert report.get("budget").detail == "€63 under cap"
    assert "Within budget" in report.badges()


def test_dimensions_use_tolerance():
    query = QueryFilter(width_cm=60, height_cm=85, depth_cm=58)

    assert evaluate(query, MACHINE, tolerance_cm=1.0).dimensions_fit
    assert not evaluate(query, MACHINE, tolerance_cm=0.5).dimensions_fit


def test_flexible_brand_is_not_checked():
    report = evaluate(QueryFilter(brand="Miele", brand_flexible=True), MACHINE)

    assert report.get("brand") is None
    assert report.violations == []


def test_unknown_attributes_are_not_violations():
    report = evaluate(QueryFilter(type="front", min_capacity_kg=7), Product(id=1, brand="Beko"))

    assert report.get("type").status is ConstraintStatus.UNKNOWN
    assert report.get("capacity").status is ConstraintStatus.UNKNOWN
    assert report.violations == []


def test_badges_for_full_match():
    query = QueryFilter(brand="Bosch", type="front", max_price=650, min_capacity_kg=8, max_capacity_kg=8,
                        width_cm=60, height_cm=85, depth_cm=59)

    assert evaluate(query, MACHINE).badges() == [
        "Within budget",
        "Capacity match",
        "Type match",
        "Dimension fit",
        "Brand match",
    ]


def test_narration_counts_full_matches_and_flags_misses():
    cheaper = Product(id=11, brand="Beko", model="WTV", type="front", price=329, capacity_kg=8)
    text = narrate(QueryFilter(max_price=600), [MACHINE, cheaper])

    assert text.splitlines()[0] == "1 of 2 shortlisted machines meet every constraint."
    assert "⚠ +€37 over cap" in text
    assert "Beko WTV (€329): €271 under cap" in text


def test_narration_for_empty_shortlist():
    text = narrate(QueryFilter(max_price=200), [])

    assert text.startswith("No washing machine matches every constraint yet.")
    assert "≤ €200" in text
