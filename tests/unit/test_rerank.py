import numpy as np

from shopbot.catalog.models import Product
from shopbot.ranking.embeddings import HashingEmbedder
from shopbot.ranking.rerank import EmbeddingCache, SemanticReranker, cosine, product_text

CLOSE = Product(id=1, brand="Bosch", model="Serie 4", type="front", description="quiet front loader with steam")
FAR = Product(id=2, brand="Candy", model="CST", type="top", description="compact lid washer")


def test_lexically_closer_product_ranks_first(counting_embedder):
    reranker = SemanticReranker(counting_embedder)

    ranked = reranker.rerank("quiet bosch front loader", [FAR, CLOSE], top_k=2)

    assert [product.id for product in ranked] == [1, 2]


def test_empty_candidates_skip_embedding(counting_embedder):
    reranker = SemanticReranker(counting_embedder)

    assert reranker.rerank("anything", [], top_k=5) == []
    assert counting_embedder.calls == []


def test_product_vectors_are_cached_by_id(counting_embedder):
    cache = EmbeddingCache()
    reranker = SemanticReranker(counting_embedder, cache)

    reranker.rerank("front loader", [CLOSE, FAR], top_k=2)
    reranker.rerank("top loader", [CLOSE, FAR], top_k=2)

    assert counting_embedder.calls.count(product_text(CLOSE)) == 1
    assert counting_embedder.calls.count(product_text(FAR)) == 1
    assert len(cache) == 2


def test_products_without_id_are_embedded_every_time(counting_embedder):
    anonymous = Product(brand="Beko", model="WTV", type="front")
    reranker = SemanticReranker(counting_embedder)

    reranker.rerank("beko", [anonymous], top_k=1)
    reranker.rerank("beko", [anonymous], top_k=1)

    assert counting_embedder.calls.count(product_text(anonymous)) == 2
    assert len(reranker.cache) == 0


def test_ties_keep_candidate_order(counting_embedder):
    twins = [
        Product(id=3, brand="Beko", model="A"),
        Product(id=4, brand="Beko", model="A"),
    ]
    ranked = SemanticReranker(counting_embedder).rerank("miele", twins, top_k=2)

    assert [product.id for product in ranked] == [3, 4]


def test_top_k_truncates(counting_embedder):
    ranked = SemanticReranker(counting_embedder).rerank("loader", [CLOSE, FAR], top_k=1)

    assert len(ranked) == 1


def test_cache_eviction():
    cache = EmbeddingCache()
    cache.put_if_absent(1, np.ones(3))
    cache.put_if_absent(2, np.ones(3))

    cache.evict(1)
    assert cache.get(1) is None and len(cache) == 1
    cache.evict()
    assert len(cache) == 0


def test_put_if_absent_keeps_first_vector():
    cache = EmbeddingCache()
    first = cache.put_if_absent(1, np.ones(3))
    second = cache.put_if_absent(1, np.zeros(3))

    assert second is first


def test_cosine_handles_zero_vector():
    assert cosine(np.zeros(4), np.ones(4)) == 0.0


def test_product_text_skips_empty_fields():
    assert product_text(Product(brand="Bosch", model=" ", type="front")) == "Bosch front"


def test_hashing_embedder_is_deterministic():
    embedder = HashingEmbedder(dim=64)

    assert np.array_equal(embedder.embed("front loader"), embedder.embed("front loader"))
    assert not embedder.embed("").any()
