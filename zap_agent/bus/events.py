"""Event types for the message bus."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class InboundMessage:
    """Message received from a chat channel."""

    channel: str  # whatsapp
    sender_id: str  # Stable sender identity
    chat_id: str  # Conversation identifier used for replies
    content: str  # Message text
    timestamp: datetime = field(default_factory=datetime.now)
    media: list[str] = field(default_factory=list)  # Local media file paths
    metadata: dict[str, Any] = field(default_factory=dict)  # Channel-specific data

    @property
    def session_key(self) -> str:
        """Unique key for per-sender memory and ordering."""
        return f"{self.channel}:{self.chat_id}"

    @property
    def has_media(self) -> bool:
        return bool(self.media) or bool(self.metadata.get("has_media"))

    @property
    def from_me(self) -> bool:
        return bool(self.metadata.get("from_me"))

    @property
    def has_quoted(self) -> bool:
        return bool(self.metadata.get("has_quoted"))


@dataclass
class OutboundMessage:
    """Message to send to a chat channel."""

    channel: str
    chat_id: str
    content: str
    reply_to: str | None = None
    media: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
