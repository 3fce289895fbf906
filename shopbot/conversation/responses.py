"""Request and response payloads for the conversation API."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ConversationStartRequest(BaseModel):
    locale: Optional[str] = None


class UserReplyRequest(BaseModel):
    """Either free text or the label of a quick-reply chip."""

    message: Optional[str] = None
    chip: Optional[str] = None


class ConversationEventRequest(BaseModel):
    type: str


class AssistantMessage(BaseModel):
    text: str
    hint: Optional[str] = None


class PreviewItem(BaseModel):
    id: Optional[int] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    price: Optional[float] = None
    type: Optional[str] = None
    capacity_kg: Optional[int] = None
    badges: List[str] = Field(default_factory=list)


class PreviewBlock(BaseModel):
    headline: str
    items: List[PreviewItem]


class ResultBlock(BaseModel):
    explanation: str
    items: List[PreviewItem]


class SlotSnapshot(BaseModel):
    slot: str
    stage: str
    value: Optional[str] = None


class ConversationTurnResponse(BaseModel):
    session_id: str
    status: Literal["collecting", "completed"]
    assistant: AssistantMessage
    chips: List[str] = Field(default_factory=list)
    preview: Optional[PreviewBlock] = None
    result: Optional[ResultBlock] = None
    slots: List[SlotSnapshot] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    query: str
    filter: Dict[str, Any]
    size_before_rerank: int
    results: List[Dict[str, Any]]
    explanation: str
