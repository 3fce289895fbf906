import json

import httpx
import numpy as np
import pytest

from shopbot.core.errors import LLMError
from shopbot.filters.models import QueryFilter
from shopbot.llm.answers import AnswerService
from shopbot.llm.client import ChatClient
from shopbot.llm.extractor import LLMFilterOracle
from shopbot.llm.questions import FALLBACK_COMPLETION, QuestionGenerator
from shopbot.memory.models import SlotStage, SlotType
from shopbot.ranking.embeddings import OpenAIEmbedder


def make_client(handler):
    return ChatClient(
        "test-key",
        model="test-model",
        title="Shop Test",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def test_chat_client_sends_prompt_and_headers():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["title"] = request.headers["X-Title"]
        captured["body"] = json.loads(request.content)
        return completion("  Hello!  ")

    assert make_client(handler).complete("Say hi", system="Be brief") == "Hello!"
    assert captured["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert captured["auth"] == "Bearer test-key"
    assert captured["title"] == "Shop Test"
    assert captured["body"]["model"] == "test-model"
    assert [message["role"] for message in captured["body"]["messages"]] == ["system", "user"]


def test_chat_client_raises_on_http_error():
    client = make_client(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(LLMError):
        client.complete("hi")


def test_chat_client_raises_on_empty_content():
    with pytest.raises(LLMError):
        make_client(lambda request: completion("   ")).complete("hi")


def test_llm_oracle_parses_completion():
    oracle = LLMFilterOracle(make_client(lambda request: completion('{"type": "top", "maxPrice": 500}')))

    assert oracle.extract("top loader") == QueryFilter(type="top", max_price=500)


def test_llm_oracle_returns_none_when_unavailable():
    oracle = LLMFilterOracle(make_client(lambda request: httpx.Response(503)))

    assert oracle.extract("top loader") is None


def test_question_generator_uses_llm_text():
    generator = QuestionGenerator(make_client(lambda request: completion("How big is your household?")))

    message = generator.generate_question(SlotType.CAPACITY, SlotStage.MISSING, QueryFilter(), [], "en", "hi", None)

    assert message.text == "How big is your household?"
    assert message.hint == "Popular kg sizes sit on the chips."


def test_question_generator_falls_back_on_failure():
    generator = QuestionGenerator(make_client(lambda request: httpx.Response(500)))

    message = generator.generate_question(
        SlotType.CAPACITY, SlotStage.MISSING, QueryFilter(), [], "en", "hi", "brand_relaxed:Bosch"
    )

    assert message.text.startswith("No problem, I'll look beyond Bosch.")


def test_offline_fallbacks():
    generator = QuestionGenerator()

    rough = generator.generate_question(SlotType.BUDGET, SlotStage.ROUGH, None, None, None, None, None)
    refined = generator.generate_question(SlotType.TYPE, SlotStage.REFINED, None, None, None, None, None)

    assert "narrow the budget" in rough.text
    assert refined.text == "Do you prefer a front-load or a top-load machine?"
    assert generator.generate_completion(["Bosch Serie 4"], "en").text == FALLBACK_COMPLETION


def test_answer_service_falls_back_to_narration(products):
    service = AnswerService(make_client(lambda request: httpx.Response(500)))

    text = service.explain("front loader", QueryFilter(type="front"), products[:2])

    assert text.startswith("2 of 2 shortlisted machines meet every constraint.")


def test_answer_service_prompt_lists_products(products):
    seen = {}

    def handler(request):
        seen["prompt"] = json.loads(request.content)["messages"][-1]["content"]
        return completion("Here is why.")

    text = AnswerService(make_client(handler)).explain("front loader", QueryFilter(max_price=600), products[:1])

    assert text == "Here is why."
    assert "Bosch Serie 4 WAN28208" in seen["prompt"]
    assert "€51 under cap" in seen["prompt"]


def test_openai_embedder_parses_vector():
    def handler(request):
        assert json.loads(request.content)["input"] == "front loader"
        return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

    embedder = OpenAIEmbedder("key", client=httpx.Client(transport=httpx.MockTransport(handler)))

    assert np.allclose(embedder.embed("front loader"), [0.1, 0.2, 0.3])


def test_openai_embedder_raises_on_bad_payload():
    embedder = OpenAIEmbedder(
        "key", client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    )

    with pytest.raises(LLMError):
        embedder.embed("front loader")
