"""Intent classification: map message text to a DomainCategory."""

from __future__ import annotations

import json
import re
import unicodedata
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path

from loguru import logger

from zap_agent.providers.base import LLMProvider
from zap_agent.routing.categories import CATEGORY_TABLE, DomainCategory
from zap_agent.utils.helpers import truncate


class IntentClassifier(ABC):
    """Always terminates in a member of DomainCategory."""

    @abstractmethod
    async def classify(self, text: str) -> DomainCategory:
        pass


def build_classification_prompt(text: str) -> str:
    """Instruction listing every category with its one-sentence description."""
    lines = [
        "Classifique a mensagem do cliente em exatamente uma das categorias abaixo.",
        "Responda somente com o nome da categoria, em uma palavra, sem pontuação.",
        "",
    ]
    for category, profile in CATEGORY_TABLE.items():
        lines.append(f"- {category.value}: {profile.description}")
    lines.extend(["", f"Mensagem: {text}", "Categoria:"])
    return "\n".join(lines)


def parse_label(reply: str) -> DomainCategory:
    """Exact, case-insensitive match of a single-token reply; anything else is DEFAULT."""
    first_line = (reply or "").strip().splitlines()[0] if (reply or "").strip() else ""
    label = first_line.strip().strip("`'\".:;!*").strip()
    return DomainCategory.parse(label)


class DelegatedClassifier(IntentClassifier):
    """Ask a completion backend for the category label."""

    def __init__(self, provider: LLMProvider, model: str | None = None):
        self.provider = provider
        self.model = model

    async def classify(self, text: str) -> DomainCategory:
        if not (text or "").strip():
            return DomainCategory.DEFAULT
        try:
            reply = await self.provider.complete(build_classification_prompt(text), model=self.model)
        except Exception as e:
            logger.warning(f"Delegated classification failed, using default: {e}")
            return DomainCategory.DEFAULT

        category = parse_label(reply)
        if category is DomainCategory.DEFAULT and reply.strip().lower() != "default":
            logger.debug(f"Unrecognized category label {truncate(reply, 40)!r}")
        return category


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", (text or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _tokens(text: str) -> frozenset[str]:
    return frozenset(re.findall(r"[a-z0-9]+", _fold(text)))


class LocalIntentClassifier(IntentClassifier):
    """
    Lexical intent model trained from example utterances per intent.

    Confidence is the best token-set similarity between the message and any
    training utterance of an intent. Predictions under `min_confidence`, or
    for labels outside the category set, fall back to DEFAULT.
    """

    def __init__(self, corpus: dict[str, list[str]], min_confidence: float = 0.35):
        self.min_confidence = min_confidence
        self._examples: list[tuple[DomainCategory, frozenset[str]]] = []
        self.train(corpus)

    def train(self, corpus: dict[str, list[str]]) -> None:
        examples: list[tuple[DomainCategory, frozenset[str]]] = []
        for intent, utterances in corpus.items():
            category = DomainCategory.parse(intent)
            if category is DomainCategory.DEFAULT and intent.strip().lower() not in {"default", "none", "padrao"}:
                logger.warning(f"Intent {intent!r} has no matching category; examples ignored")
                continue
            for utterance in utterances:
                tokens = _tokens(utterance)
                if tokens:
                    examples.append((category, tokens))
        self._examples = examples
        logger.debug(f"Local intent model trained with {len(examples)} utterance(s)")

    @classmethod
    def from_file(cls, path: str | Path | None = None, min_confidence: float = 0.35) -> LocalIntentClassifier:
        """Load a corpus JSON file; None loads the packaged Portuguese corpus."""
        if path:
            raw = Path(path).expanduser().read_text(encoding="utf-8")
        else:
            raw = resources.files("zap_agent.data").joinpath("intents.pt.json").read_text(encoding="utf-8")
        data = json.loads(raw)
        corpus = data.get("intents", data) if isinstance(data, dict) else {}
        return cls(corpus, min_confidence=min_confidence)

    def predict(self, text: str) -> tuple[DomainCategory, float]:
        """Best (category, confidence) for the text."""
        query = _tokens(text)
        if not query:
            return DomainCategory.DEFAULT, 0.0

        best_category = DomainCategory.DEFAULT
        best_score = 0.0
        for category, example in self._examples:
            overlap = len(query & example)
            if not overlap:
                continue
            # Weigh coverage of the example so short utterances like "oi" still win.
            score = 0.5 * overlap / len(query | example) + 0.5 * overlap / len(example)
            if score > best_score:
                best_category, best_score = category, score
        return best_category, round(best_score, 4)

    async def classify(self, text: str) -> DomainCategory:
        category, confidence = self.predict(text)
        if confidence < self.min_confidence:
            return DomainCategory.DEFAULT
        logger.debug(f"Intent {category.value} ({confidence:.2f}) for {truncate(text, 40)!r}")
        return category
