from shopbot.catalog.brands import BrandCatalog
from shopbot.filters.models import QueryFilter
from shopbot.memory.models import ConversationSession, SlotStage, SlotType
from shopbot.planner.slots import SlotFillingPlanner, evaluate_stages
from shopbot.planner.types import PlannerAction, PlannerContext


def make_planner(brands=("Bosch", "Miele")):
    return SlotFillingPlanner(BrandCatalog(lambda: list(brands)))


def session_with(query, **flags):
    session = ConversationSession(**flags)
    session.filter = query
    return session


def test_budget_stages():
    stages = evaluate_stages
    assert stages(QueryFilter(), strict_capacity=False, ask_dimensions=True)[SlotType.BUDGET] is SlotStage.MISSING
    assert stages(QueryFilter(max_price=600), strict_capacity=False, ask_dimensions=True)[SlotType.BUDGET] is SlotStage.REFINED
    assert stages(QueryFilter(min_price=400, max_price=600), strict_capacity=False, ask_dimensions=True)[
        SlotType.BUDGET
    ] is SlotStage.REFINED
    assert stages(QueryFilter(min_price=300, max_price=900), strict_capacity=False, ask_dimensions=True)[
        SlotType.BUDGET
    ] is SlotStage.ROUGH


def test_capacity_stage_depends_on_strict_flag():
    query = QueryFilter(min_capacity_kg=7, max_capacity_kg=9)

    assert evaluate_stages(query, strict_capacity=False, ask_dimensions=True)[SlotType.CAPACITY] is SlotStage.REFINED
    assert evaluate_stages(query, strict_capacity=True, ask_dimensions=True)[SlotType.CAPACITY] is SlotStage.ROUGH
    assert evaluate_stages(QueryFilter(min_capacity_kg=7), strict_capacity=True, ask_dimensions=True)[
        SlotType.CAPACITY
    ] is SlotStage.ROUGH


def test_dimensions_stage():
    partial = QueryFilter(width_cm=60)
    full = QueryFilter(width_cm=60, height_cm=85, depth_cm=55)

    assert evaluate_stages(partial, strict_capacity=False, ask_dimensions=True)[SlotType.DIMENSIONS] is SlotStage.ROUGH
    assert evaluate_stages(full, strict_capacity=False, ask_dimensions=True)[SlotType.DIMENSIONS] is SlotStage.REFINED
    assert evaluate_stages(QueryFilter(), strict_capacity=False, ask_dimensions=False)[
        SlotType.DIMENSIONS
    ] is SlotStage.REFINED


def test_finalize_with_refined_core_slots():
    planner = make_planner()
    query = QueryFilter(min_price=400, max_price=500, type="front", min_capacity_kg=8, max_capacity_kg=8)
    session = session_with(query)
    planner.refresh_stages(session)

    assert planner.should_finalize(session) is True

    without_capacity = session_with(QueryFilter(min_price=400, max_price=500, type="front"))
    planner.refresh_stages(without_capacity)
    assert planner.should_finalize(without_capacity) is False


def test_next_slot_order_and_brand_skip():
    planner = make_planner()
    session = session_with(QueryFilter(max_price=600, type="front", min_capacity_kg=8, max_capacity_kg=8))
    planner.refresh_stages(session)
    assert planner.next_slot(session) is SlotType.BRAND

    single_brand = make_planner(brands=("Bosch",))
    assert single_brand.next_slot(session) is SlotType.DIMENSIONS

    flexible = session_with(
        QueryFilter(max_price=600, type="front", min_capacity_kg=8, max_capacity_kg=8, brand_flexible=True)
    )
    planner.refresh_stages(flexible)
    assert planner.next_slot(flexible) is SlotType.DIMENSIONS


def test_next_slot_defaults_to_brand_when_everything_is_known():
    planner = make_planner()
    session = session_with(
        QueryFilter(
            brand_flexible=True,
            max_price=600,
            type="front",
            min_capacity_kg=8,
            max_capacity_kg=8,
            width_cm=60,
            height_cm=85,
            depth_cm=55,
        )
    )
    planner.refresh_stages(session)

    assert planner.next_slot(session) is SlotType.BRAND


def test_slots_completed_never_decrements():
    planner = make_planner()
    session = session_with(QueryFilter(max_price=600))
    assert planner.refresh_stages(session) == [SlotType.BUDGET]
    assert session.metrics.slots_completed == 1

    session.filter = QueryFilter(min_price=100, max_price=600)
    planner.refresh_stages(session)
    assert session.stage(SlotType.BUDGET) is SlotStage.ROUGH
    assert session.metrics.slots_completed == 1

    session.filter = QueryFilter(min_price=450, max_price=600)
    planner.refresh_stages(session)
    assert session.metrics.slots_completed == 2


def test_purchase_phrase_short_circuits_finalize():
    planner = make_planner()
    session = session_with(QueryFilter(max_price=600))
    planner.refresh_stages(session)

    decision = planner.decide(PlannerContext(session=session, latest_text="OK I'll take the Bosch"))

    assert decision.action is PlannerAction.CLOSE_PURCHASE


def test_decide_asks_for_next_slot():
    planner = make_planner()
    session = session_with(QueryFilter(max_price=600, type="front"))
    planner.refresh_stages(session)

    decision = planner.decide(PlannerContext(session=session, latest_text="front loader under 600"))

    assert decision.action is PlannerAction.ASK_SLOT
    assert decision.next_slot is SlotType.CAPACITY
    assert decision.stage is SlotStage.MISSING
