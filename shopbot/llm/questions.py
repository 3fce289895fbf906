"""Assistant wording for follow-up questions and completion messages."""

from __future__ import annotations

import logging
from typing import Sequence

from shopbot.conversation.responses import AssistantMessage
from shopbot.core.errors import LLMError
from shopbot.filters.models import QueryFilter, render_filter_summary
from shopbot.llm.client import ChatClient
from shopbot.memory.models import SlotStage, SlotType

logger = logging.getLogger("shopbot.questions")

QUESTION_TEMPLATE = """You write the next assistant message in a guided washing-machine shopping conversation.

Language: {language}
SlotGoal: {slot_description}
Stage: {stage}
KnownFilters:
{filters}

PreviewHighlights:
{preview}

LatestUserMessage:
{latest_user_message}

ContextHint:
{context_hint}

Guidelines:
- Friendly, curious and helpful. Sound human, not robotic.
- Keep responses under 40 words.
- Begin by naturally acknowledging what the user said.
- Weave confirmed preferences from KnownFilters into the reply when it helps the flow.
- Do not invent product names. Only reference products from PreviewHighlights.
- If ContextHint starts with brand_relaxed, acknowledge that the brand restriction was dropped.
- Ask one clear question at a time about the SlotGoal.
- Avoid bullet points, emojis, or mentioning "slot", "stage", or UI chips.

Respond with the message text only.
"""

COMPLETION_TEMPLATE = """You are about to reveal the final shortlist of washing machines.

Language: {language}
PreviewExamples:
{preview}

Write one short sentence that:
- Celebrates the progress so far.
- Invites the user to review the shortlist.
- Stays under 25 words.
- Avoids mentions of "slot", "stage", or UI mechanics.

Return only the sentence.
"""

SLOT_DESCRIPTIONS = {
    SlotType.BUDGET: "customer's comfortable price range in euros",
    SlotType.TYPE: "preferred loading style: front-load or top-load",
    SlotType.CAPACITY: "desired drum capacity in kilograms",
    SlotType.BRAND: "brand preferences or exclusions",
    SlotType.DIMENSIONS: "width, height, depth constraints in centimetres",
}

SLOT_HINTS = {
    SlotType.BUDGET: "Tap a quick chip for common budgets.",
    SlotType.TYPE: "Chips cover front vs top load.",
    SlotType.CAPACITY: "Popular kg sizes sit on the chips.",
    SlotType.BRAND: "Brand chips are ready if you have a favorite.",
    SlotType.DIMENSIONS: "Try typing 60×85×55 cm if you know it.",
}

FALLBACK_QUESTIONS = {
    (SlotType.BUDGET, SlotStage.MISSING): "What budget do you have in mind for the new washing machine?",
    (SlotType.BUDGET, SlotStage.ROUGH): "That's a wide price range. Could you narrow the budget a little?",
    (SlotType.TYPE, SlotStage.MISSING): "Do you prefer a front-load or a top-load machine?",
    (SlotType.CAPACITY, SlotStage.MISSING): "How many kilograms of laundry should the drum hold?",
    (SlotType.CAPACITY, SlotStage.ROUGH): "Which drum capacity fits best, for example 7, 8 or 9 kg?",
    (SlotType.BRAND, SlotStage.MISSING): "Any brand you prefer, or should I keep all brands open?",
    (SlotType.DIMENSIONS, SlotStage.MISSING): "Does the machine need to fit a specific space? Width × height × depth helps.",
    (SlotType.DIMENSIONS, SlotStage.ROUGH): "I have part of the size. Could you share the full width × height × depth?",
}

FALLBACK_COMPLETION = "Great progress! Here is the shortlist that matches what you told me."


def resolve_language(locale_hint: str | None) -> str:
    if locale_hint and locale_hint.lower().startswith("zh"):
        return "zh"
    return "en"


def _preview_lines(highlights: Sequence[str] | None) -> str:
    if not highlights:
        return "none"
    return "\n".join(list(highlights)[:3])


class QuestionGenerator:
    """Writes assistant messages via the LLM, with template fallbacks."""

    def __init__(self, client: ChatClient | None = None) -> None:
        self._client = client

    def generate_question(
        self,
        slot: SlotType,
        stage: SlotStage,
        current_filter: QueryFilter | None,
        preview_highlights: Sequence[str] | None,
        locale_hint: str | None,
        latest_user_message: str | None,
        context_hint: str | None,
    ) -> AssistantMessage:
        hint = SLOT_HINTS[slot]
        fallback = self._fallback_question(slot, stage, context_hint)
        if self._client is None:
            return AssistantMessage(text=fallback, hint=hint)

        prompt = QUESTION_TEMPLATE.format(
            language=resolve_language(locale_hint),
            slot_description=SLOT_DESCRIPTIONS[slot],
            stage=stage.value.lower(),
            filters=render_filter_summary(current_filter),
            preview=_preview_lines(preview_highlights),
            latest_user_message=(latest_user_message or "").strip() or "none",
            context_hint=context_hint or "none",
        )
        try:
            text = self._client.complete(prompt)
        except LLMError:
            logger.exception("Question generation failed for slot %s", slot.value)
            text = fallback
        return AssistantMessage(text=text, hint=hint)

    def generate_completion(self, preview_highlights: Sequence[str] | None, locale_hint: str | None) -> AssistantMessage:
        if self._client is None:
            return AssistantMessage(text=FALLBACK_COMPLETION)

        prompt = COMPLETION_TEMPLATE.format(
            language=resolve_language(locale_hint),
            preview=_preview_lines(preview_highlights),
        )
        try:
            text = self._client.complete(prompt)
        except LLMError:
            logger.exception("Completion message generation failed")
            text = FALLBACK_COMPLETION
        return AssistantMessage(text=text)

    @staticmethod
    def _fallback_question(slot: SlotType, stage: SlotStage, context_hint: str | None) -> str:
        question = FALLBACK_QUESTIONS.get((slot, stage)) or FALLBACK_QUESTIONS[(slot, SlotStage.MISSING)]
        if context_hint and context_hint.startswith("brand_relaxed:"):
            previous = context_hint.split(":", 1)[1]
            question = f"No problem, I'll look beyond {previous}. {question}"
        return question
