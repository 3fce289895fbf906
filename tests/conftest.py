from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import pytest

# Settings are read when shopbot.main is imported; keep tests offline and off the real catalog.
os.environ.setdefault("PRODUCTS_DB_PATH", str(Path(tempfile.mkdtemp(prefix="shopbot-tests-")) / "products.db"))
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""

from shopbot.catalog.brands import BrandCatalog  # noqa: E402
from shopbot.catalog.models import Product  # noqa: E402
from shopbot.catalog.search import ProductSearchService  # noqa: E402
from shopbot.catalog.store import SQLiteProductStore  # noqa: E402
from shopbot.conversation.service import ConversationService  # noqa: E402
from shopbot.llm.answers import AnswerService  # noqa: E402
from shopbot.llm.extractor import QueryExtractor  # noqa: E402
from shopbot.llm.questions import QuestionGenerator  # noqa: E402
from shopbot.memory.store import InMemorySessionStore  # noqa: E402
from shopbot.planner.slots import SlotFillingPlanner  # noqa: E402
from shopbot.ranking.embeddings import EmbeddingBackend, HashingEmbedder  # noqa: E402
from shopbot.ranking.rerank import SemanticReranker  # noqa: E402


class CountingEmbedder(EmbeddingBackend):
    """Hashing embedder that records every text it was asked to embed."""

    def __init__(self, dim: int = 256) -> None:
        self._inner = HashingEmbedder(dim)
        self.calls: list[str] = []

    def embed(self, text: str):
        self.calls.append(text)
        return self._inner.embed(text)


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def catalog_records(fixtures_dir: Path) -> list[dict]:
    return json.loads((fixtures_dir / "products.json").read_text(encoding="utf-8"))


@pytest.fixture
def products(catalog_records: list[dict]) -> list[Product]:
    return [Product.from_mapping(record) for record in catalog_records]


@pytest.fixture
def product_store(tmp_path: Path, products: list[Product]) -> SQLiteProductStore:
    store = SQLiteProductStore(tmp_path / "products.db")
    store.upsert_products(products)
    return store


@pytest.fixture
def brand_catalog(product_store: SQLiteProductStore) -> BrandCatalog:
    return BrandCatalog(product_store.list_brands)


@pytest.fixture
def counting_embedder() -> CountingEmbedder:
    return CountingEmbedder()


@pytest.fixture
def search_service(product_store: SQLiteProductStore, counting_embedder: CountingEmbedder) -> ProductSearchService:
    return ProductSearchService(product_store, SemanticReranker(counting_embedder))


@pytest.fixture
def conversation_service(
    brand_catalog: BrandCatalog,
    search_service: ProductSearchService,
) -> ConversationService:
    return ConversationService(
        store=InMemorySessionStore(),
        extractor=QueryExtractor(None, brand_catalog),
        planner=SlotFillingPlanner(brand_catalog),
        search=search_service,
        questions=QuestionGenerator(),
        answers=AnswerService(),
        brand_catalog=brand_catalog,
    )
