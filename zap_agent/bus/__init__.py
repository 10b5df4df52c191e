"""Message bus module for decoupled channel-engine communication."""

from zap_agent.bus.events import InboundMessage, OutboundMessage
from zap_agent.bus.queue import MessageBus

__all__ = ["MessageBus", "InboundMessage", "OutboundMessage"]
