"""Send-capable model backends selected by the model router."""

from __future__ import annotations

import base64
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from loguru import logger

from zap_agent.bus.events import InboundMessage, OutboundMessage
from zap_agent.bus.queue import MessageBus
from zap_agent.providers.base import LLMProvider


class Backend(ABC):
    """A named model that answers a prompt and replies on the originating chat."""

    model_type: ClassVar[str] = "text"

    def __init__(
        self,
        name: str,
        provider: LLMProvider,
        bus: MessageBus,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ):
        self.name = name
        self.provider = provider
        self.bus = bus
        self.model = model or provider.get_default_model()
        self.max_tokens = max_tokens
        self.temperature = temperature

    @abstractmethod
    async def send_message(self, text: str, original: InboundMessage) -> None:
        """Generate a reply for `text` and publish it to the sender's chat."""
        pass

    async def _generate_and_reply(
        self, messages: list[dict[str, Any]], original: InboundMessage
    ) -> None:
        response = await self.provider.chat(
            messages,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        if response.is_error or not (response.content or "").strip():
            logger.error(f"{self.name} produced no reply for {original.session_key}: {response.content}")
            return
        await self.bus.publish_outbound(
            OutboundMessage(
                channel=original.channel,
                chat_id=original.chat_id,
                content=response.content.strip(),
                reply_to=original.metadata.get("message_id"),
            )
        )


class TextBackend(Backend):
    """Backend that accepts text prompts only."""

    model_type = "text"


class ImageBackend(Backend):
    """Backend that also accepts images attached to the inbound message."""

    model_type = "image"


class ChatBackend(TextBackend):
    """Plain chat completion."""

    async def send_message(self, text: str, original: InboundMessage) -> None:
        await self._generate_and_reply([{"role": "user", "content": text}], original)


class CustomBackend(TextBackend):
    """Chat completion with a fixed context document as the system prompt."""

    def __init__(self, name: str, provider: LLMProvider, bus: MessageBus, context_path: str = "", **kwargs: Any):
        super().__init__(name, provider, bus, **kwargs)
        self.context_path = context_path
        self._context: str | None = None

    def load_context(self) -> str:
        if self._context is None:
            self._context = ""
            if self.context_path:
                path = Path(self.context_path).expanduser()
                try:
                    self._context = path.read_text(encoding="utf-8").strip()
                except OSError as e:
                    logger.warning(f"Context file for {self.name} not readable ({path}): {e}")
        return self._context

    async def send_message(self, text: str, original: InboundMessage) -> None:
        messages: list[dict[str, Any]] = []
        context = self.load_context()
        if context:
            messages.append({"role": "system", "content": context})
        messages.append({"role": "user", "content": text})
        await self._generate_and_reply(messages, original)


class VisionBackend(ImageBackend):
    """Multimodal completion embedding the inbound images as data URLs."""

    async def send_message(self, text: str, original: InboundMessage) -> None:
        content: list[dict[str, Any]] = []
        for path in original.media:
            file_path = Path(path)
            mime, _ = mimetypes.guess_type(path)
            if not file_path.is_file() or not (mime or "").startswith("image/"):
                logger.debug(f"{self.name}: skipping non-image attachment {path}")
                continue
            try:
                b64 = base64.b64encode(file_path.read_bytes()).decode()
            except OSError as e:
                logger.warning(f"{self.name}: failed to read attachment {path}: {e}")
                continue
            content.append({"type": "image_url", "image_url": {"url": f"data:{mime};base64,{b64}"}})

        content.append({"type": "text", "text": text.strip() or "Descreva a imagem."})
        await self._generate_and_reply([{"role": "user", "content": content}], original)
