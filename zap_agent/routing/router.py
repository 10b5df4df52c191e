"""Model routing: resolve a logical model name to a backend and forward."""

from __future__ import annotations

from loguru import logger

from zap_agent.bus.events import InboundMessage
from zap_agent.providers.backends import Backend


def resolve_model_by_prefix(text: str, prefixes: dict[str, str]) -> tuple[str | None, str]:
    """
    Find the model whose trigger prefix starts the text.

    Longer prefixes are tried first so `!chatgpt` wins over `!chat`.
    Returns (model name or None, text without the prefix).
    """
    stripped = (text or "").lstrip()
    lowered = stripped.lower()
    for name, prefix in sorted(prefixes.items(), key=lambda item: len(item[1]), reverse=True):
        marker = (prefix or "").strip().lower()
        if not marker or not lowered.startswith(marker):
            continue
        rest = stripped[len(marker):]
        if rest and not rest[0].isspace():
            continue
        return name, rest.strip()
    return None, text


class ModelRouter:
    """Registry of named backends; unknown names are logged and dropped."""

    def __init__(self, backends: dict[str, Backend] | None = None):
        self.backends: dict[str, Backend] = dict(backends or {})

    def register(self, backend: Backend) -> None:
        self.backends[backend.name] = backend

    def get(self, name: str) -> Backend | None:
        return self.backends.get(name)

    @property
    def names(self) -> list[str]:
        return list(self.backends)

    async def dispatch(self, prompt: str, model_name: str, original: InboundMessage) -> bool:
        """Forward the prompt to the named backend. Returns True when forwarded."""
        backend = self.backends.get(model_name)
        if backend is None:
            logger.error(f"Model not found: {model_name}")
            return False
        if original.has_media and backend.model_type != "image":
            logger.warning(
                f"Dropping media message from {original.session_key}: "
                f"{model_name} does not accept images"
            )
            return False
        await backend.send_message(prompt, original)
        return True
