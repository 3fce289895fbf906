"""Slot-filling planner: stage tracking, next question and finalize decision."""

from __future__ import annotations

import logging

from shopbot.catalog.brands import BrandCatalog
from shopbot.filters.models import QueryFilter
from shopbot.memory.models import ConversationSession, SlotStage, SlotType
from shopbot.planner.base import Planner
from shopbot.planner.intent import extract_selection, is_purchase_intent
from shopbot.planner.types import PlannerAction, PlannerContext, PlannerDecision

logger = logging.getLogger("shopbot.planner")

BUDGET_REFINED_SPAN = 200.0
CAPACITY_REFINED_SPAN_KG = 1


def budget_stage(query: QueryFilter) -> SlotStage:
    if query.min_price is None and query.max_price is None:
        return SlotStage.MISSING
    if query.min_price is not None and query.max_price is not None:
        span = abs(query.max_price - query.min_price)
        return SlotStage.REFINED if span <= BUDGET_REFINED_SPAN else SlotStage.ROUGH
    return SlotStage.REFINED


def type_stage(query: QueryFilter) -> SlotStage:
    return SlotStage.MISSING if query.type is None else SlotStage.REFINED


def capacity_stage(query: QueryFilter, strict: bool) -> SlotStage:
    if query.min_capacity_kg is None and query.max_capacity_kg is None:
        return SlotStage.MISSING
    if not strict:
        return SlotStage.REFINED
    if query.min_capacity_kg is not None and query.max_capacity_kg is not None:
        span = abs(query.max_capacity_kg - query.min_capacity_kg)
        return SlotStage.REFINED if span <= CAPACITY_REFINED_SPAN_KG else SlotStage.ROUGH
    return SlotStage.ROUGH


def brand_stage(query: QueryFilter) -> SlotStage:
    return SlotStage.REFINED if query.brand_flexible or query.brand is not None else SlotStage.MISSING


def dimensions_stage(query: QueryFilter, ask: bool) -> SlotStage:
    if not ask:
        return SlotStage.REFINED
    values = (query.width_cm, query.height_cm, query.depth_cm)
    present = sum(value is not None for value in values)
    if present == 0:
        return SlotStage.MISSING
    return SlotStage.REFINED if present == len(values) else SlotStage.ROUGH


def evaluate_stages(query: QueryFilter, *, strict_capacity: bool, ask_dimensions: bool) -> dict[SlotType, SlotStage]:
    return {
        SlotType.BUDGET: budget_stage(query),
        SlotType.TYPE: type_stage(query),
        SlotType.CAPACITY: capacity_stage(query, strict_capacity),
        SlotType.BRAND: brand_stage(query),
        SlotType.DIMENSIONS: dimensions_stage(query, ask_dimensions),
    }


class SlotFillingPlanner(Planner):
    """Deterministic planner driven only by the session filter and its two flags."""

    def __init__(self, brand_catalog: BrandCatalog) -> None:
        self._brand_catalog = brand_catalog

    def describe(self) -> str:
        return "Slot-filling planner (budget, type, capacity, brand, dimensions)"

    def refresh_stages(self, session: ConversationSession) -> list[SlotType]:
        updated = evaluate_stages(
            session.filter,
            strict_capacity=session.strict_capacity,
            ask_dimensions=session.ask_dimensions,
        )
        newly_refined: list[SlotType] = []
        for slot, stage in updated.items():
            previous = session.slot_stages.get(slot)
            session.slot_stages[slot] = stage
            if previous is not SlotStage.REFINED and stage is SlotStage.REFINED:
                session.metrics.slots_completed += 1
                newly_refined.append(slot)
        return newly_refined

    def decide(self, context: PlannerContext) -> PlannerDecision:
        session = context.session
        selection = extract_selection(context.latest_text, session.filter, context.preview)

        if is_purchase_intent(context.latest_text, selection):
            logger.info("Purchase intent detected for session %s (selection=%s)", session.id, selection)
            return PlannerDecision(action=PlannerAction.CLOSE_PURCHASE, selection_hint=selection)

        if self.should_finalize(session):
            return PlannerDecision(action=PlannerAction.FINALIZE, selection_hint=selection)

        slot = self.next_slot(session)
        return PlannerDecision(
            action=PlannerAction.ASK_SLOT,
            next_slot=slot,
            stage=session.stage(slot),
            selection_hint=selection,
        )

    def next_slot(self, session: ConversationSession) -> SlotType:
        for slot in SlotType:
            stage = session.stage(slot)
            if slot is SlotType.BRAND and self._skip_brand(session):
                continue
            if slot is SlotType.DIMENSIONS and stage is SlotStage.REFINED:
                continue
            if stage in (SlotStage.MISSING, SlotStage.ROUGH):
                return slot
        return SlotType.BRAND

    def should_finalize(self, session: ConversationSession) -> bool:
        budget_ready = session.stage(SlotType.BUDGET) is SlotStage.REFINED
        type_ready = session.stage(SlotType.TYPE) is SlotStage.REFINED
        capacity = session.stage(SlotType.CAPACITY)
        if session.strict_capacity:
            capacity_ready = capacity is SlotStage.REFINED
        else:
            capacity_ready = capacity is not SlotStage.MISSING
        return budget_ready and type_ready and capacity_ready

    def _skip_brand(self, session: ConversationSession) -> bool:
        return session.filter.brand_flexible or len(self._brand_catalog.brands()) <= 1
