"""API route for one-shot catalog search."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query

from shopbot.conversation.responses import SearchResponse
from shopbot.conversation.search import OneShotSearch


def create_search_router(get_search: Callable[[], OneShotSearch]) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["search"])

    @router.get("/search", response_model=SearchResponse)
    def search_endpoint(
        q: str | None = None,
        k: int = Query(default=5, ge=1, le=50),
        search: OneShotSearch = Depends(get_search),
    ) -> SearchResponse:
        if not q or not q.strip():
            raise HTTPException(status_code=400, detail="q parameter is required")
        return search.run(q.strip(), k)

    return router
