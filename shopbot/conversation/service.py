"""Turn pipeline for the guided shopping conversation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from shopbot.catalog.brands import BrandCatalog
from shopbot.catalog.models import Product
from shopbot.catalog.search import ProductSearchService
from shopbot.conversation.responses import (
    AssistantMessage,
    ConversationTurnResponse,
    PreviewBlock,
    PreviewItem,
    ResultBlock,
    SlotSnapshot,
)
from shopbot.core.metrics import MetricsCollector
from shopbot.filters.merge import merge_filters
from shopbot.filters.models import QueryFilter, describe_brand, describe_budget, describe_capacity, describe_dimensions
from shopbot.llm.answers import AnswerService
from shopbot.llm.extractor import QueryExtractor
from shopbot.llm.questions import QuestionGenerator
from shopbot.memory.models import ConversationSession, SlotType
from shopbot.memory.store import SessionStore
from shopbot.planner.base import Planner
from shopbot.planner.intent import extract_selection
from shopbot.planner.types import PlannerAction, PlannerContext, PlannerDecision
from shopbot.ranking.constraints import DEFAULT_TOLERANCE_CM, evaluate

logger = logging.getLogger("shopbot.conversation")

PREVIEW_HEADLINE = "Preview with current filters"
REPHRASE_MESSAGE = "I didn't catch that. Could you rephrase or tap one of the suggestions?"
GENERIC_CLOSING = "Great, I'll wrap that up for you. Let me know if you need anything else."
EVENT_ACK = "Noted ✅"
ADD_TO_CART = "add_to_cart"

STATIC_CHIPS = {
    SlotType.BUDGET: ["≤ 500€", "≤ 600€", "≤ 700€"],
    SlotType.TYPE: ["Front load", "Top load"],
    SlotType.CAPACITY: ["7kg", "8kg", "9kg"],
    SlotType.DIMENSIONS: ["60×85×55 cm", "45×90×60 cm"],
}
BRAND_CHIP_COUNT = 5
HIGHLIGHT_COUNT = 3

CJK_PATTERN = re.compile(r"[\u3400-\u9fff\uf900-\ufaff]")


@dataclass(frozen=True)
class ConversationLimits:
    preview_limit: int = 3
    final_limit: int = 5
    tolerance_cm: float = DEFAULT_TOLERANCE_CM
    strict_capacity: bool = False
    ask_dimensions: bool = True


def detect_locale(text: str) -> str:
    return "zh" if CJK_PATTERN.search(text) else "en"


def slot_value(slot: SlotType, query: QueryFilter) -> str | None:
    if slot is SlotType.BUDGET:
        return describe_budget(query)
    if slot is SlotType.TYPE:
        return query.type
    if slot is SlotType.CAPACITY:
        return describe_capacity(query)
    if slot is SlotType.BRAND:
        return describe_brand(query)
    return describe_dimensions(query)


def highlights(products: Sequence[Product]) -> list[str]:
    return [product.label for product in products[:HIGHLIGHT_COUNT]]


class ConversationService:
    """Owns the session lifecycle: start, user turns and UI events."""

    def __init__(
        self,
        store: SessionStore,
        extractor: QueryExtractor,
        planner: Planner,
        search: ProductSearchService,
        questions: QuestionGenerator,
        answers: AnswerService,
        brand_catalog: BrandCatalog,
        limits: ConversationLimits | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.planner = planner
        self.search = search
        self.questions = questions
        self.answers = answers
        self.brand_catalog = brand_catalog
        self.limits = limits or ConversationLimits()
        self.metrics = metrics or MetricsCollector()

    def start_conversation(self, locale: str | None = None) -> ConversationTurnResponse:
        session = ConversationSession(
            strict_capacity=self.limits.strict_capacity,
            ask_dimensions=self.limits.ask_dimensions,
        )
        if locale:
            session.locale_hint = locale
        self.planner.refresh_stages(session)
        self.store.add(session)
        self.metrics.record_session_started()
        logger.info("Started session %s", session.id)

        slot = self.planner.next_slot(session)
        assistant = self.questions.generate_question(
            slot, session.stage(slot), session.filter, None, session.locale_hint, None, None
        )
        return self._response(session, assistant, chips=self.chips_for(slot))

    def apply_user_reply(
        self,
        session_id: str,
        message: str | None = None,
        chip: str | None = None,
    ) -> ConversationTurnResponse:
        session = self.store.require(session_id)
        text = (message or chip or "").strip()
        if not text:
            return self._response(session, AssistantMessage(text=REPHRASE_MESSAGE))

        session.metrics.turn_count += 1
        session.utterances.append(text)
        session.locale_hint = detect_locale(text)

        previous_brand = session.filter.brand
        extracted = self.extractor.extract("\n".join(session.utterances))
        session.filter = merge_filters(session.filter, extracted)
        self.planner.refresh_stages(session)

        context_hint = None
        if previous_brand is not None and session.filter.brand is None:
            context_hint = f"brand_relaxed:{previous_brand}"
            logger.info("Session %s relaxed brand %s", session.id, previous_brand)

        preview_products: list[Product] = []
        if session.filter.has_any_value():
            preview_products = self.search.preview(session.filter, self.limits.preview_limit)
        session.metrics.record_preview(bool(preview_products))

        decision = self.planner.decide(PlannerContext(session=session, latest_text=text, preview=preview_products))
        logger.debug("Session %s decision %s", session.id, decision)

        if decision.action is PlannerAction.CLOSE_PURCHASE:
            response = self._finalize(session, decision, preview_products, purchase=True)
        elif decision.action is PlannerAction.FINALIZE:
            response = self._finalize(session, decision, preview_products, purchase=False)
        else:
            slot = decision.next_slot or self.planner.next_slot(session)
            stage = decision.stage or session.stage(slot)
            assistant = self.questions.generate_question(
                slot,
                stage,
                session.filter,
                highlights(preview_products),
                session.locale_hint,
                text,
                context_hint,
            )
            response = self._response(
                session,
                assistant,
                chips=self.chips_for(slot),
                preview=self._preview_block(session.filter, preview_products),
            )
            self.metrics.record_turn(response.status, slot.value)
            return response

        self.metrics.record_turn(response.status)
        return response

    def record_event(self, session_id: str, event_type: str) -> ConversationTurnResponse:
        session = self.store.require(session_id)
        if event_type == ADD_TO_CART:
            session.metrics.add_to_cart_clicks += 1
        else:
            logger.info("Ignoring unknown event %r for session %s", event_type, session_id)
        return self._response(session, AssistantMessage(text=EVENT_ACK))

    def chips_for(self, slot: SlotType) -> list[str]:
        if slot is SlotType.BRAND:
            return self.brand_catalog.brands()[:BRAND_CHIP_COUNT]
        return list(STATIC_CHIPS[slot])

    def _finalize(
        self,
        session: ConversationSession,
        decision: PlannerDecision,
        preview_products: Sequence[Product],
        *,
        purchase: bool,
    ) -> ConversationTurnResponse:
        query_text = ". ".join(session.utterances)
        results = self.search.final_results(query_text, session.filter, self.limits.final_limit, self.limits.tolerance_cm)
        session.metrics.record_final_retrieval(bool(results))
        session.completed = True

        if purchase:
            selection = decision.selection_hint or extract_selection(
                session.utterances[-1], session.filter, [*preview_products, *results]
            )
            assistant = AssistantMessage(text=self._closing_text(selection))
        else:
            assistant = self.questions.generate_completion(
                highlights(results or list(preview_products)), session.locale_hint
            )
        logger.info(
            "Session %s completed (purchase=%s, results=%d)", session.id, purchase, len(results)
        )

        result = None
        if results or not purchase:
            explanation = self.answers.explain(query_text, session.filter, results)
            result = ResultBlock(explanation=explanation, items=self._items(session.filter, results))
        return self._response(
            session,
            assistant,
            preview=self._preview_block(session.filter, preview_products),
            result=result,
        )

    @staticmethod
    def _closing_text(selection: str | None) -> str:
        if selection:
            return f"Great choice on {selection}! I'll get that sorted for you. Let me know if you need anything else."
        return GENERIC_CLOSING

    def _preview_block(self, query: QueryFilter, products: Sequence[Product]) -> PreviewBlock | None:
        if not products:
            return None
        return PreviewBlock(headline=PREVIEW_HEADLINE, items=self._items(query, products))

    def _items(self, query: QueryFilter, products: Sequence[Product]) -> list[PreviewItem]:
        return [
            PreviewItem(
                id=product.id,
                brand=product.brand,
                model=product.model,
                price=product.price,
                type=product.type,
                capacity_kg=product.capacity_kg,
                badges=evaluate(query, product, self.limits.tolerance_cm).badges(),
            )
            for product in products
        ]

    def _response(
        self,
        session: ConversationSession,
        assistant: AssistantMessage,
        *,
        chips: list[str] | None = None,
        preview: PreviewBlock | None = None,
        result: ResultBlock | None = None,
    ) -> ConversationTurnResponse:
        return ConversationTurnResponse(
            session_id=session.id,
            status="completed" if session.completed else "collecting",
            assistant=assistant,
            chips=chips or [],
            preview=preview,
            result=result,
            slots=[
                SlotSnapshot(slot=slot.value, stage=session.stage(slot).value, value=slot_value(slot, session.filter))
                for slot in SlotType
            ],
            metrics=session.metrics.snapshot(),
        )
