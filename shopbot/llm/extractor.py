"""Structured filter extraction: unreliable LLM oracle plus deterministic enrichment."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shopbot.catalog.brands import BrandCatalog
from shopbot.core.errors import LLMError
from shopbot.filters.heuristics import enrich_filter
from shopbot.filters.models import QueryFilter
from shopbot.llm.client import ChatClient

logger = logging.getLogger("shopbot.extractor")

EXTRACTION_PROMPT = """You are an assistant that extracts **structured filters** for washing-machine shopping.

Supported fields (any may be null):
- brand (string)
- type ("front" or "top")
- minPrice (number), maxPrice (number)
- minCapacityKg (integer), maxCapacityKg (integer)
- widthCm (number), heightCm (number), depthCm (number)

Rules:
- If user gives a price range like "400-600", set minPrice=400, maxPrice=600.
- "front load" => type="front"; "top load" => type="top".
- If user gives physical dimensions like "60x85x55", map them to widthCm=60, heightCm=85, depthCm=55.
- Return ONLY valid JSON with these fields; do not include extra keys.

User query: "{query}"
"""

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class ExtractedFilter(BaseModel):
    """Wire shape of the oracle's JSON answer."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    brand: str | None = None
    type: Literal["front", "top"] | None = None
    min_price: float | None = Field(default=None, alias="minPrice")
    max_price: float | None = Field(default=None, alias="maxPrice")
    min_capacity_kg: int | None = Field(default=None, alias="minCapacityKg")
    max_capacity_kg: int | None = Field(default=None, alias="maxCapacityKg")
    width_cm: float | None = Field(default=None, alias="widthCm")
    height_cm: float | None = Field(default=None, alias="heightCm")
    depth_cm: float | None = Field(default=None, alias="depthCm")

    @field_validator("brand", mode="before")
    @classmethod
    def _blank_brand(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _loose_type(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        lowered = value.strip().lower()
        if "front" in lowered:
            return "front"
        if "top" in lowered:
            return "top"
        return None

    def to_filter(self) -> QueryFilter:
        return QueryFilter(**self.model_dump())


def parse_filter_payload(raw: str | None) -> QueryFilter | None:
    """Parse the oracle's text answer; ``None`` when it is not a usable JSON object."""

    if not raw:
        return None
    text = _FENCE_PATTERN.sub("", raw.strip())
    start, end = text.find("{"), text.rfind("}")
    if start < 0 or end <= start:
        return None
    try:
        payload = json.loads(text[start : end + 1])
        return ExtractedFilter.model_validate(payload).to_filter()
    except ValueError as exc:
        logger.debug("Discarding unparseable extraction payload: %s", exc)
        return None


class FilterOracle(ABC):
    """Best-effort natural language to filter mapping. May return ``None``."""

    @abstractmethod
    def extract(self, text: str) -> QueryFilter | None:
        """Return a possibly partial filter, or ``None`` on failure."""


class LLMFilterOracle(FilterOracle):
    def __init__(self, client: ChatClient) -> None:
        self._client = client

    def extract(self, text: str) -> QueryFilter | None:
        try:
            raw = self._client.complete(EXTRACTION_PROMPT.format(query=text))
        except LLMError:
            logger.warning("Filter extraction unavailable; relying on heuristics")
            return None
        return parse_filter_payload(raw)


class QueryExtractor:
    """Runs the oracle, substitutes an empty filter on failure, then enriches."""

    def __init__(self, oracle: FilterOracle | None, brand_catalog: BrandCatalog) -> None:
        self._oracle = oracle
        self._brand_catalog = brand_catalog

    def extract(self, text: str) -> QueryFilter:
        draft = self._oracle.extract(text) if self._oracle is not None else None
        if draft is None:
            draft = QueryFilter()
        return enrich_filter(draft, text, self._brand_catalog.brands())
