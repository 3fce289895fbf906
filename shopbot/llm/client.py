"""Minimal OpenRouter (OpenAI-compatible) chat completions client."""

from __future__ import annotations

import logging
import threading
import time

import httpx

from shopbot.core.errors import LLMError


class ChatClient:
    """Sends single-prompt chat completions, spacing calls by a minimum interval."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "minimax/minimax-m2:free",
        base_url: str = "https://openrouter.ai/api/v1",
        referer: str | None = None,
        title: str | None = None,
        rate_limit_per_sec: float = 1.0,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._referer = referer
        self._title = title
        self._min_interval = max(0.1, rate_limit_per_sec)
        self._last_call = 0.0
        self._rate_lock = threading.Lock()
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger("shopbot.llm")

    def complete(self, prompt: str, *, system: str | None = None) -> str:
        """Return the first choice's text, or raise :class:`LLMError`."""

        with self._rate_lock:
            wait_for = self._min_interval - (time.monotonic() - self._last_call)
            if wait_for > 0:
                time.sleep(wait_for)
            self._last_call = time.monotonic()

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._title:
            headers["X-Title"] = self._title

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.post(
                self._url,
                headers=headers,
                json={"model": self._model, "messages": messages},
            )
            response.raise_for_status()
            data = response.json()
            content = data.get("choices", [{}])[0].get("message", {}).get("content") or ""
        except (httpx.HTTPError, ValueError, AttributeError, IndexError) as exc:
            self._logger.warning("Chat completion failed: %s", exc)
            raise LLMError("chat completion failed") from exc

        content = content.strip()
        if not content:
            raise LLMError("empty completion")
        return content
