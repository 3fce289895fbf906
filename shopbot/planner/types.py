"""Planner-related enums and data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from shopbot.catalog.models import Product
from shopbot.memory.models import ConversationSession, SlotStage, SlotType


class PlannerAction(str, Enum):
    """What the turn pipeline should do after merging the latest filter."""

    ASK_SLOT = "ask_slot"
    FINALIZE = "finalize"
    CLOSE_PURCHASE = "close_purchase"


@dataclass(slots=True)
class PlannerContext:
    """Inputs passed to the planner when deciding next action."""

    session: ConversationSession
    latest_text: str
    preview: Sequence[Product] = field(default_factory=list)


@dataclass(slots=True)
class PlannerDecision:
    """Planner output describing chosen action and metadata."""

    action: PlannerAction
    next_slot: SlotType | None = None
    stage: SlotStage | None = None
    selection_hint: str | None = None
