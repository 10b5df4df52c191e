import threading

import pytest

from zap_agent.routing.categories import DomainCategory
from zap_agent.routing.memory import ConversationMemory, InMemoryBackend, MemoryBackend


def test_history_is_bounded_and_evicts_oldest_first():
    memory = ConversationMemory(history_size=3)

    for turn in ["m1", "m2", "m3", "m4"]:
        memory.append_turn("s1", turn)

    assert memory.get_history("s1") == ["m2", "m3", "m4"]


def test_history_length_never_exceeds_capacity():
    memory = ConversationMemory(history_size=2)

    for i in range(10):
        memory.append_turn("s1", f"m{i}")
        assert len(memory.get_history("s1")) <= 2


def test_unknown_sender_has_empty_history_and_no_context():
    memory = ConversationMemory()

    assert memory.get_history("nobody") == []
    assert memory.get_domain_context("nobody", DomainCategory.PRODUCT) is None


def test_history_is_isolated_per_sender():
    memory = ConversationMemory()
    memory.append_turn("a", "oi")
    memory.append_turn("b", "olá")

    assert memory.get_history("a") == ["oi"]
    assert memory.get_history("b") == ["olá"]


def test_get_history_returns_a_copy():
    memory = ConversationMemory()
    memory.append_turn("a", "oi")

    memory.get_history("a").append("injected")

    assert memory.get_history("a") == ["oi"]


def test_domain_context_is_overwritten_and_scoped_by_category():
    memory = ConversationMemory()
    memory.set_domain_context("s1", DomainCategory.PRODUCT, [{"nome": "A"}])
    memory.set_domain_context("s1", DomainCategory.PRODUCT, [{"nome": "B"}])
    memory.set_domain_context("s1", DomainCategory.PAYMENT, [{"tipo": "pix"}])

    assert memory.get_domain_context("s1", DomainCategory.PRODUCT) == [{"nome": "B"}]
    assert memory.get_domain_context("s1", DomainCategory.PAYMENT) == [{"tipo": "pix"}]
    assert memory.get_domain_context("s2", DomainCategory.PRODUCT) is None


def test_domain_context_is_a_snapshot():
    memory = ConversationMemory()
    records = [{"nome": "A"}]
    memory.set_domain_context("s1", DomainCategory.PRODUCT, records)

    records[0]["nome"] = "mutated"

    assert memory.get_domain_context("s1", DomainCategory.PRODUCT) == [{"nome": "A"}]


def test_clear_all_empties_every_sender():
    memory = ConversationMemory()
    memory.append_turn("a", "oi")
    memory.append_turn("b", "olá")
    memory.set_domain_context("a", DomainCategory.PRODUCT, [{"nome": "A"}])

    memory.clear_all()

    assert memory.get_history("a") == []
    assert memory.get_history("b") == []
    assert memory.get_domain_context("a", DomainCategory.PRODUCT) is None
    assert memory.stats()["senders"] == 0


def test_clear_sender_keeps_other_senders():
    memory = ConversationMemory()
    memory.append_turn("a", "oi")
    memory.append_turn("b", "olá")
    memory.set_domain_context("a", DomainCategory.ORDER, [{"passo": "1"}])

    memory.clear_sender("a")

    assert memory.get_history("a") == []
    assert memory.get_domain_context("a", DomainCategory.ORDER) is None
    assert memory.get_history("b") == ["olá"]


def test_custom_backend_is_used():
    backend = InMemoryBackend()
    memory = ConversationMemory(backend=backend)

    memory.append_turn("a", "oi")

    assert backend.count("history") == 1


def test_history_size_must_be_positive():
    with pytest.raises(ValueError):
        ConversationMemory(history_size=0)


def test_clear_all_is_atomic_with_concurrent_appends():
    memory = ConversationMemory(history_size=5)
    stop = threading.Event()

    def writer() -> None:
        i = 0
        while not stop.is_set():
            memory.append_turn("s", f"m{i}")
            i += 1

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(50):
            memory.clear_all()
            assert len(memory.get_history("s")) <= 5
    finally:
        stop.set()
        thread.join()


class ListBackend(MemoryBackend):
    """Store that keeps plain lists, like a JSON-backed store would."""

    def __init__(self):
        self.data: dict[tuple[str, str], list] = {}

    def get(self, namespace, key):
        return self.data.get((namespace, key))

    def set(self, namespace, key, value):
        self.data[(namespace, key)] = list(value)

    def delete(self, namespace, key):
        self.data.pop((namespace, key), None)

    def clear(self):
        self.data = {}


def test_history_stays_bounded_when_backend_returns_lists():
    memory = ConversationMemory(history_size=2, backend=ListBackend())

    for i in range(5):
        memory.append_turn("s", str(i))

    assert memory.get_history("s") == ["3", "4"]
