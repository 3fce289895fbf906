import pytest

from shopbot.core.errors import UnknownSessionError
from shopbot.memory.models import ConversationSession, SlotStage, SlotType
from shopbot.memory.store import InMemorySessionStore


def test_add_and_fetch():
    store = InMemorySessionStore()
    session = ConversationSession()
    store.add(session)

    assert store.get(session.id) is session
    assert list(store.iter_session_ids()) == [session.id]
    assert len(store) == 1


def test_require_unknown_session_raises():
    store = InMemorySessionStore()

    with pytest.raises(UnknownSessionError) as excinfo:
        store.require("missing")

    assert excinfo.value.session_id == "missing"
    assert isinstance(excinfo.value, LookupError)


def test_new_session_defaults():
    session = ConversationSession()

    assert all(session.stage(slot) is SlotStage.MISSING for slot in SlotType)
    assert session.completed is False
    assert session.metrics.snapshot()["turn_count"] == 0


def test_metrics_hit_rates():
    session = ConversationSession()
    session.metrics.record_preview(True)
    session.metrics.record_preview(False)
    session.metrics.record_final_retrieval(True)

    snapshot = session.metrics.snapshot()
    assert snapshot["previews_triggered"] == 2
    assert snapshot["preview_hit_rate"] == 0.5
    assert snapshot["final_retrieval_hit_rate"] == 1.0
