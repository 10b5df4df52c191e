"""Base channel interface for chat platforms."""

import re
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from zap_agent.bus.events import InboundMessage, OutboundMessage
from zap_agent.bus.queue import MessageBus


class BaseChannel(ABC):
    """
    Abstract base class for chat channel implementations.

    A channel owns the transport and only talks to the engine through the
    message bus.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: MessageBus):
        self.config = config
        self.bus = bus
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """
        Start the channel and begin listening for messages.

        This should be a long-running async task that:
        1. Connects to the chat platform
        2. Listens for incoming messages
        3. Forwards messages to the bus via _handle_message()
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and clean up resources."""

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """Send a message through this channel."""

    def is_allowed(self, sender_id: str) -> bool:
        """Check a sender against the allowFrom list; an empty list allows everyone."""
        allow_list = getattr(self.config, "allow_from", [])
        if not allow_list:
            return True

        sender_variants = self._build_identity_variants(sender_id)
        for allowed in allow_list:
            if sender_variants & self._build_identity_variants(allowed):
                return True
        return False

    def _build_identity_variants(self, raw: str) -> set[str]:
        """Build matching variants for JIDs and phone numbers with or without country code."""
        text = str(raw or "").strip()
        variants = {text}

        if "@" in text:
            variants.add(text.split("@", 1)[0].strip())

        digits = re.sub(r"\D+", "", text)
        if digits:
            variants.add(digits)
            if digits.startswith("55") and len(digits) > 11:
                variants.add(digits[2:])
            elif len(digits) in (10, 11):
                variants.add(f"55{digits}")

        return {v for v in variants if v}

    async def _handle_message(
        self,
        sender_id: str,
        chat_id: str,
        content: str,
        media: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Handle an incoming message from the chat platform.

        Checks permissions and forwards to the bus. Self-authored messages
        skip the allow list.
        """
        metadata_obj = metadata or {}
        if not metadata_obj.get("from_me") and not self.is_allowed(sender_id):
            logger.warning(
                f"Access denied for sender {sender_id} on channel {self.name}. "
                f"Add them to allowFrom list in config to grant access."
            )
            return

        msg = InboundMessage(
            channel=self.name,
            sender_id=str(sender_id),
            chat_id=str(chat_id),
            content=content,
            media=media or [],
            metadata=metadata_obj,
        )

        await self.bus.publish_inbound(msg)

    @property
    def is_running(self) -> bool:
        """Check if the channel is running."""
        return self._running
