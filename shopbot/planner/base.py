"""Planner abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shopbot.memory.models import ConversationSession, SlotType

from .types import PlannerContext, PlannerDecision


class Planner(ABC):
    """Decides the next action given the latest conversational turn."""

    @abstractmethod
    def refresh_stages(self, session: ConversationSession) -> list[SlotType]:
        """Recompute slot stages from the session filter; return newly refined slots."""

    @abstractmethod
    def decide(self, context: PlannerContext) -> PlannerDecision:
        """Return the planner decision for a given context."""

    @abstractmethod
    def next_slot(self, session: ConversationSession) -> SlotType:
        """Slot the assistant should ask about next."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable summary of planner strategy."""
