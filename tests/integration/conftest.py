import pytest
from fastapi.testclient import TestClient

from shopbot import main
from shopbot.conversation.search import OneShotSearch
from shopbot.llm.answers import AnswerService
from shopbot.llm.extractor import QueryExtractor


@pytest.fixture
def client(conversation_service, search_service, brand_catalog):
    conversation_service.metrics = main.metrics
    one_shot = OneShotSearch(QueryExtractor(None, brand_catalog), search_service, AnswerService())
    main.app.dependency_overrides[main.get_conversation_service] = lambda: conversation_service
    main.app.dependency_overrides[main.get_search] = lambda: one_shot
    try:
        yield TestClient(main.app, raise_server_exceptions=False)
    finally:
        main.app.dependency_overrides.clear()
