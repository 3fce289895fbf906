"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(default="Washing Machine Assistant", description="Human-readable service name.")
    environment: str = Field(default="local", description="Deployment environment identifier.")
    log_level: str = Field(default="INFO", description="Application log level.")

    products_db_path: Path = Field(
        default=Path("../db/products.db"),
        description="SQLite file holding the product catalog.",
    )

    openrouter_api_key: str | None = Field(
        default=None,
        description="Optional OpenRouter API key for filter extraction and message generation.",
    )
    openrouter_model: str = Field(
        default="minimax/minimax-m2:free",
        description="OpenRouter model identifier.",
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible chat completions base URL.",
    )
    openrouter_referer: str | None = Field(
        default=None,
        description="Referer header required by OpenRouter (your app URL).",
    )
    openrouter_title: str | None = Field(
        default="Washing Machine Assistant",
        description="Title header sent to OpenRouter.",
    )
    openrouter_rate_limit_per_sec: float = Field(
        default=1.0,
        ge=0.1,
        description="Minimum interval (seconds) between OpenRouter API calls.",
    )
    llm_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout applied to every outbound LLM or embedding call.",
    )

    openai_api_key: str | None = Field(default=None, description="Optional OpenAI API key for embeddings.")
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name.",
    )
    embedding_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible embeddings base URL.",
    )
    local_embedding_dim: int = Field(
        default=512,
        ge=16,
        description="Vector size of the offline hashed embedder used when no API key is configured.",
    )

    strict_capacity_refinement: bool = Field(
        default=False,
        description="Require a capacity span of at most 1 kg before the capacity slot counts as refined.",
    )
    ask_dimensions: bool = Field(
        default=True,
        description="Whether the assistant asks for machine dimensions at all.",
    )
    preview_limit: int = Field(default=3, ge=1, description="Products shown in a mid-conversation preview.")
    final_limit: int = Field(default=5, ge=1, description="Products returned once the conversation finalizes.")
    dimension_tolerance_cm: float = Field(
        default=1.0,
        ge=0,
        description="Absolute per-axis tolerance applied when matching dimensions.",
    )

    frontend_origin: AnyHttpUrl | None = Field(
        default=None,
        description="Allowed frontend origin (CORS). If omitted, defaults to localhost dev server.",
    )
    additional_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        description="Additional allowed CORS origins for multi-client deployments.",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the full list of allowed CORS origins."""

        origins: list[str] = []

        if self.frontend_origin:
            origins.append(str(self.frontend_origin).rstrip("/"))
        else:
            origins.extend([
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ])

        for origin in self.additional_origins:
            origins.append(str(origin).rstrip("/"))

        # Deduplicate while preserving order
        seen: set[str] = set()
        unique: list[str] = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique.append(origin)

        return unique

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openrouter_api_key)

    @property
    def remote_embeddings_enabled(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
