"""Dataclasses representing a guided shopping conversation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from shopbot.filters.models import QueryFilter


class SlotType(str, Enum):
    """Preference dimensions, declared in the order they are asked."""

    BUDGET = "budget"
    TYPE = "type"
    CAPACITY = "capacity"
    BRAND = "brand"
    DIMENSIONS = "dimensions"


class SlotStage(str, Enum):
    MISSING = "MISSING"
    ROUGH = "ROUGH"
    REFINED = "REFINED"


@dataclass(slots=True)
class ConversationMetrics:
    """Per-session engagement counters."""

    turn_count: int = 0
    slots_completed: int = 0
    previews_triggered: int = 0
    previews_with_hits: int = 0
    final_retrievals: int = 0
    final_retrievals_with_hits: int = 0
    add_to_cart_clicks: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def record_preview(self, had_hits: bool) -> None:
        self.previews_triggered += 1
        if had_hits:
            self.previews_with_hits += 1

    def record_final_retrieval(self, had_hits: bool) -> None:
        self.final_retrievals += 1
        if had_hits:
            self.final_retrievals_with_hits += 1

    def snapshot(self) -> dict[str, Any]:
        age = datetime.now(timezone.utc) - self.created_at
        return {
            "turn_count": self.turn_count,
            "slots_completed": self.slots_completed,
            "previews_triggered": self.previews_triggered,
            "preview_hit_rate": (
                self.previews_with_hits / self.previews_triggered if self.previews_triggered else 0.0
            ),
            "final_retrievals": self.final_retrievals,
            "final_retrieval_hit_rate": (
                self.final_retrievals_with_hits / self.final_retrievals if self.final_retrievals else 0.0
            ),
            "add_to_cart_clicks": self.add_to_cart_clicks,
            "conversation_age_seconds": max(0, int(age.total_seconds())),
        }


def _initial_stages() -> dict[SlotType, SlotStage]:
    return {slot: SlotStage.MISSING for slot in SlotType}


@dataclass(slots=True)
class ConversationSession:
    """Mutable state of one dialogue. Only the turn pipeline for this id writes it."""

    strict_capacity: bool = False
    ask_dimensions: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    filter: QueryFilter = field(default_factory=QueryFilter)
    utterances: list[str] = field(default_factory=list)
    slot_stages: dict[SlotType, SlotStage] = field(default_factory=_initial_stages)
    completed: bool = False
    locale_hint: str = "auto"
    metrics: ConversationMetrics = field(default_factory=ConversationMetrics)

    def stage(self, slot: SlotType) -> SlotStage:
        return self.slot_stages.get(slot, SlotStage.MISSING)
