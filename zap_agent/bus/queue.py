"""Async message queue for decoupled channel-engine communication."""

import asyncio

from loguru import logger

from zap_agent.bus.events import InboundMessage, OutboundMessage


class MessageBus:
    """
    Async message bus that decouples chat channels from the routing engine.

    Channels push messages to the inbound queue, and the engine consumes
    them; replies are published to the outbound queue and dispatched by
    the channel manager.
    """

    def __init__(self):
        self.inbound: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self.outbound: asyncio.Queue[OutboundMessage] = asyncio.Queue()
        self._running = True

    async def publish_inbound(self, msg: InboundMessage) -> None:
        """Publish a message from a channel to the engine."""
        await self.inbound.put(msg)

    async def consume_inbound(self) -> InboundMessage:
        """Consume the next inbound message (blocks until available)."""
        return await self.inbound.get()

    async def publish_outbound(self, msg: OutboundMessage) -> None:
        """Publish a response from a backend to the channels."""
        await self.outbound.put(msg)

    async def consume_outbound(self) -> OutboundMessage:
        """Consume the next outbound message (blocks until available)."""
        return await self.outbound.get()

    def stop(self) -> None:
        """Mark the bus as stopped."""
        self._running = False
        logger.debug("Message bus stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def inbound_size(self) -> int:
        """Number of pending inbound messages."""
        return self.inbound.qsize()

    @property
    def outbound_size(self) -> int:
        """Number of pending outbound messages."""
        return self.outbound.qsize()
