"""API routes for the guided conversation."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends

from shopbot.conversation.responses import (
    ConversationEventRequest,
    ConversationStartRequest,
    ConversationTurnResponse,
    UserReplyRequest,
)
from shopbot.conversation.service import ConversationService


def create_conversations_router(get_service: Callable[[], ConversationService]) -> APIRouter:
    router = APIRouter(prefix="/api/conversations", tags=["conversations"])

    @router.post("", response_model=ConversationTurnResponse)
    def start_conversation(
        payload: ConversationStartRequest | None = None,
        service: ConversationService = Depends(get_service),
    ) -> ConversationTurnResponse:
        return service.start_conversation(payload.locale if payload else None)

    @router.post("/{session_id}/messages", response_model=ConversationTurnResponse)
    def post_message(
        session_id: str,
        payload: UserReplyRequest,
        service: ConversationService = Depends(get_service),
    ) -> ConversationTurnResponse:
        return service.apply_user_reply(session_id, message=payload.message, chip=payload.chip)

    @router.post("/{session_id}/events", response_model=ConversationTurnResponse)
    def post_event(
        session_id: str,
        payload: ConversationEventRequest,
        service: ConversationService = Depends(get_service),
    ) -> ConversationTurnResponse:
        return service.record_event(session_id, payload.type)

    return router
