"""FastAPI application entry point for the washing-machine shopping assistant."""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopbot.api.conversations import create_conversations_router
from shopbot.api.search import create_search_router
from shopbot.catalog.brands import BrandCatalog
from shopbot.catalog.search import ProductSearchService
from shopbot.catalog.store import SQLiteProductStore
from shopbot.conversation.search import OneShotSearch
from shopbot.conversation.service import ConversationLimits, ConversationService
from shopbot.core.config import get_settings
from shopbot.core.errors import UnknownSessionError, unhandled_exception_handler, unknown_session_handler
from shopbot.core.logging import configure_logging, request_id_middleware
from shopbot.core.metrics import MetricsCollector
from shopbot.llm.answers import AnswerService
from shopbot.llm.client import ChatClient
from shopbot.llm.extractor import LLMFilterOracle, QueryExtractor
from shopbot.llm.questions import QuestionGenerator
from shopbot.memory.store import InMemorySessionStore
from shopbot.planner.slots import SlotFillingPlanner
from shopbot.ranking.embeddings import EmbeddingBackend, HashingEmbedder, OpenAIEmbedder
from shopbot.ranking.rerank import EmbeddingCache, SemanticReranker

settings = get_settings()
logger = logging.getLogger("shopbot.app")

product_store = SQLiteProductStore(settings.products_db_path)
brand_catalog = BrandCatalog(product_store.list_brands)

chat_client: ChatClient | None = None
if settings.llm_enabled:
    chat_client = ChatClient(
        settings.openrouter_api_key,
        model=settings.openrouter_model,
        base_url=settings.openrouter_base_url,
        referer=settings.openrouter_referer,
        title=settings.openrouter_title,
        rate_limit_per_sec=settings.openrouter_rate_limit_per_sec,
        timeout=settings.llm_timeout_seconds,
    )

embedder: EmbeddingBackend
if settings.remote_embeddings_enabled:
    embedder = OpenAIEmbedder(
        settings.openai_api_key,
        model=settings.embedding_model,
        base_url=settings.embedding_base_url,
        timeout=settings.llm_timeout_seconds,
    )
else:
    embedder = HashingEmbedder(settings.local_embedding_dim)

embedding_cache = EmbeddingCache()
search_service = ProductSearchService(product_store, SemanticReranker(embedder, embedding_cache))
extractor = QueryExtractor(LLMFilterOracle(chat_client) if chat_client else None, brand_catalog)
answers = AnswerService(chat_client, settings.dimension_tolerance_cm)
metrics = MetricsCollector()

conversation_service = ConversationService(
    store=InMemorySessionStore(),
    extractor=extractor,
    planner=SlotFillingPlanner(brand_catalog),
    search=search_service,
    questions=QuestionGenerator(chat_client),
    answers=answers,
    brand_catalog=brand_catalog,
    limits=ConversationLimits(
        preview_limit=settings.preview_limit,
        final_limit=settings.final_limit,
        tolerance_cm=settings.dimension_tolerance_cm,
        strict_capacity=settings.strict_capacity_refinement,
        ask_dimensions=settings.ask_dimensions,
    ),
    metrics=metrics,
)
one_shot_search = OneShotSearch(extractor, search_service, answers, settings.dimension_tolerance_cm)


def get_conversation_service() -> ConversationService:
    """Dependency injector for the conversation service."""

    return conversation_service


def get_search() -> OneShotSearch:
    return one_shot_search


app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)

app.include_router(create_conversations_router(get_conversation_service))
app.include_router(create_search_router(get_search))


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Return basic service status for monitoring."""

    return {"status": "ok"}


@app.get("/ready", tags=["health"])
def readiness_probe() -> dict[str, Any]:
    """Readiness endpoint: the product catalog must be queryable and non-empty."""

    products_ok = False
    products_error: str | None = None
    product_count = 0
    try:
        product_count = product_store.count()
        products_ok = product_count > 0
        if not products_ok:
            products_error = "catalog is empty"
    except Exception as exc:  # noqa: BLE001
        products_error = str(exc)

    components: dict[str, dict[str, Any]] = {
        "products_db": {
            "path": str(settings.products_db_path),
            "ok": products_ok,
            "count": product_count,
            **({"error": products_error} if products_error else {}),
        },
        "llm": {"enabled": settings.llm_enabled, "model": settings.openrouter_model},
        "embeddings": {"remote": settings.remote_embeddings_enabled, "cached_vectors": len(embedding_cache)},
    }

    return {
        "status": "ok" if products_ok else "degraded",
        "environment": settings.environment,
        "components": components,
    }


@app.on_event("startup")
async def startup_logging() -> None:
    level = configure_logging(settings.log_level)
    logger.info("Logging configured at %s level for %s environment", logging.getLevelName(level), settings.environment)
    logger.info("Planner: %s", conversation_service.planner.describe())


app.add_exception_handler(UnknownSessionError, unknown_session_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/metrics", tags=["metrics"])
async def metrics_endpoint() -> dict:
    snapshot = metrics.snapshot()
    return {
        "total_turns": snapshot.total_turns,
        "sessions_started": snapshot.sessions_started,
        "statuses": snapshot.statuses,
        "next_slots": snapshot.next_slots,
    }
