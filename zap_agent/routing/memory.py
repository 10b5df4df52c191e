"""Bounded per-sender conversation memory and domain-context cache."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Sequence
from typing import Any

from loguru import logger

from zap_agent.routing.categories import DomainCategory, KnowledgeRecord

HISTORY = "history"
CONTEXT = "context"


class MemoryBackend(ABC):
    """Key-value store behind ConversationMemory, keyed by namespace and key."""

    @abstractmethod
    def get(self, namespace: str, key: str) -> Any | None:
        pass

    @abstractmethod
    def set(self, namespace: str, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def count(self, namespace: str) -> int:
        return 0


class InMemoryBackend(MemoryBackend):
    """Process-local dict store; lost on restart."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    def get(self, namespace: str, key: str) -> Any | None:
        return self._data.get(namespace, {}).get(key)

    def set(self, namespace: str, key: str, value: Any) -> None:
        self._data.setdefault(namespace, {})[key] = value

    def delete(self, namespace: str, key: str) -> None:
        self._data.get(namespace, {}).pop(key, None)

    def clear(self) -> None:
        self._data = {}

    def count(self, namespace: str) -> int:
        return len(self._data.get(namespace, {}))


class ConversationMemory:
    """
    Per-sender bounded history plus per-sender, per-category domain context.

    History keeps at most `history_size` turns, evicting the oldest first.
    Every public operation runs under one lock so `clear_all` from the
    scheduled reset never observes a half-applied append.
    """

    def __init__(self, history_size: int = 10, backend: MemoryBackend | None = None):
        if history_size < 1:
            raise ValueError("history_size must be >= 1")
        self.history_size = history_size
        self.backend = backend or InMemoryBackend()
        self._lock = threading.RLock()

    def append_turn(self, sender: str, text: str) -> None:
        """Push a turn onto the sender's history, evicting the oldest when full."""
        with self._lock:
            # Stores may return a plain list; rebound on every write.
            turns = deque(self.backend.get(HISTORY, sender) or (), maxlen=self.history_size)
            turns.append(text)
            self.backend.set(HISTORY, sender, turns)

    def get_history(self, sender: str) -> list[str]:
        """Turns for a sender, oldest first; empty for unseen senders."""
        with self._lock:
            turns = self.backend.get(HISTORY, sender)
            return list(turns) if turns else []

    def set_domain_context(
        self,
        sender: str,
        category: DomainCategory,
        records: Sequence[KnowledgeRecord],
    ) -> None:
        with self._lock:
            snapshot = tuple(dict(record) for record in records)
            self.backend.set(CONTEXT, self._context_key(sender, category), snapshot)

    def get_domain_context(
        self, sender: str, category: DomainCategory
    ) -> list[KnowledgeRecord] | None:
        with self._lock:
            snapshot = self.backend.get(CONTEXT, self._context_key(sender, category))
            if not snapshot:
                return None
            return [dict(record) for record in snapshot]

    def clear_sender(self, sender: str) -> None:
        """Forget one sender's history and every category context."""
        with self._lock:
            self.backend.delete(HISTORY, sender)
            for category in DomainCategory:
                self.backend.delete(CONTEXT, self._context_key(sender, category))

    def clear_all(self) -> None:
        """Empty all per-sender state."""
        with self._lock:
            senders = self.backend.count(HISTORY)
            self.backend.clear()
        logger.info(f"Conversation memory cleared ({senders} sender(s))")

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "senders": self.backend.count(HISTORY),
                "contexts": self.backend.count(CONTEXT),
                "history_size": self.history_size,
            }

    @staticmethod
    def _context_key(sender: str, category: DomainCategory) -> str:
        return f"{sender}:{category.value}"
