"""Embedding backends used by the semantic reranker."""

from __future__ import annotations

import logging
import re
import zlib
from abc import ABC, abstractmethod
from collections import Counter

import httpx
import numpy as np

from shopbot.core.errors import LLMError

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text.lower())


class EmbeddingBackend(ABC):
    """Maps text to a fixed-length vector."""

    @abstractmethod
    def embed(self, text: str) -> np.ndarray:
        """Return the embedding for ``text``."""


class HashingEmbedder(EmbeddingBackend):
    """Offline term-frequency vectors with tokens hashed into ``dim`` buckets.

    crc32 keeps vectors stable across processes, unlike the salted builtin hash.
    """

    def __init__(self, dim: int = 512) -> None:
        self.dim = dim

    def embed(self, text: str) -> np.ndarray:
        vector = np.zeros(self.dim, dtype=np.float32)
        tokens = tokenize(text)
        if not tokens:
            return vector
        for token, count in Counter(tokens).items():
            vector[zlib.crc32(token.encode("utf-8")) % self.dim] += count / len(tokens)
        return vector


class OpenAIEmbedder(EmbeddingBackend):
    """Calls an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = base_url.rstrip("/") + "/embeddings"
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger("shopbot.embeddings")

    def embed(self, text: str) -> np.ndarray:
        try:
            response = self._client.post(
                self._url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self._model, "input": text},
            )
            response.raise_for_status()
            data = response.json()
            values = data["data"][0]["embedding"]
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
            self._logger.warning("Embedding request failed: %s", exc)
            raise LLMError("embedding request failed") from exc
        return np.asarray(values, dtype=np.float32)
