"""Keyword matching of knowledge records against a free-text question."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from zap_agent.routing.categories import KnowledgeRecord, Scalar

_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)


def normalize_text(text: str) -> str:
    """Lowercase and replace special characters with single spaces."""
    return " ".join(_NON_ALNUM.sub(" ", (text or "").lower()).split())


def format_value(value: Scalar) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "sim" if value else "não"
    return str(value)


def format_record(record: KnowledgeRecord, id_field: str) -> str:
    """Render one record as `field: value` lines, identifier excluded."""
    return "\n".join(
        f"{name}: {format_value(value)}" for name, value in record.items() if name != id_field
    )


def format_records(records: Sequence[KnowledgeRecord], id_field: str) -> str:
    """Render records separated by a blank line."""
    return "\n\n".join(format_record(record, id_field) for record in records)


class KeywordMatcher:
    """
    Filter knowledge records by whole-word overlap with a question.

    A record matches when at least one query token survives filtering and
    appears as a whole word in the record's searchable text. Matches are
    accepted in order until the formatted-length budget would overflow.
    """

    STOPWORDS = {
        # Portuguese function words
        "a", "o", "e", "é", "à", "as", "os", "um", "uma", "uns", "umas",
        "de", "do", "da", "dos", "das", "em", "no", "na", "nos", "nas",
        "por", "para", "pra", "pro", "com", "sem", "que", "qual", "quais",
        "quanto", "quanta", "quantos", "quantas", "como", "onde", "quando",
        "vocês", "voces", "você", "voce", "tem", "têm", "ter", "ser", "está",
        "esta", "estão", "isso", "esse", "essa", "este", "aquele", "aquela",
        "meu", "minha", "seu", "sua", "mais", "menos", "muito", "pode",
        "posso", "gostaria", "queria", "quero", "saber", "sobre", "favor",
        "olá", "ola", "oi", "bom", "boa", "dia", "tarde", "noite", "obrigado",
        "obrigada", "vcs", "vc", "tudo", "bem", "então", "entao", "também",
        "tambem", "ainda", "aqui", "ali", "lá", "mim", "ele", "ela", "eles",
        # Domain-generic nouns
        "produto", "produtos", "item", "itens", "loja", "informação",
        "informacao", "informações", "informacoes", "valor", "coisa",
    }

    def __init__(self, budget_chars: int = 2000, extra_stop_words: Iterable[str] | None = None):
        self.budget_chars = budget_chars
        self.stop_words = set(self.STOPWORDS)
        self.stop_words.update(normalize_text(word) for word in (extra_stop_words or []))

    def tokenize(self, text: str) -> list[str]:
        """
        Query tokens that survive stop-word and length filtering, in order.

        Each whitespace token is normalized like record text, so "dry-fit"
        becomes the phrase "dry fit" and still matches `Dry-Fit` in a record.
        """
        tokens: list[str] = []
        for raw in (text or "").split():
            token = normalize_text(raw)
            if not token or token in self.stop_words:
                continue
            # Two-letter tokens are dropped; single characters stay as size/model ids (X, P, M).
            if len(token) == 2:
                continue
            if token not in tokens:
                tokens.append(token)
        return tokens

    def searchable_text(self, record: KnowledgeRecord, id_field: str) -> str:
        return normalize_text(
            " ".join(format_value(v) for k, v in record.items() if k != id_field and v is not None)
        )

    def filter(
        self,
        records: Sequence[KnowledgeRecord],
        query_text: str,
        id_field: str = "codigo",
    ) -> list[KnowledgeRecord]:
        """Return matching records within the formatted-length budget."""
        tokens = self.tokenize(query_text)
        if not tokens:
            return []

        patterns = [re.compile(rf"\b{re.escape(token)}\b") for token in tokens]
        accepted: list[KnowledgeRecord] = []
        used = 0
        for record in records:
            haystack = self.searchable_text(record, id_field)
            if not haystack:
                continue
            if not any(pattern.search(haystack) for pattern in patterns):
                continue
            cost = len(format_record(record, id_field))
            if used + cost > self.budget_chars:
                break
            accepted.append(record)
            used += cost
        return accepted
