"""Exception types and FastAPI exception handlers."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("shopbot.errors")


class UnknownSessionError(LookupError):
    """Raised when a turn references a session id that was never started."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id


class LLMError(RuntimeError):
    """Raised by the chat/embedding clients when the remote call fails or is unusable."""


async def unknown_session_handler(request: Request, exc: UnknownSessionError) -> JSONResponse:
    logger.warning("Rejected %s %s for unknown session %s", request.method, request.url.path, exc.session_id)
    return JSONResponse(
        status_code=404,
        content={
            "error": "unknown_session",
            "message": str(exc),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Something unexpected happened. Please try again later.",
        },
    )
