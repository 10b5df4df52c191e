"""WhatsApp channel implementation using Node.js bridge."""

import asyncio
import json
from pathlib import Path

import websockets
from loguru import logger

from zap_agent.bus.events import OutboundMessage
from zap_agent.bus.queue import MessageBus
from zap_agent.channels.base import BaseChannel
from zap_agent.config.schema import WhatsAppConfig


class WhatsAppChannel(BaseChannel):
    """
    WhatsApp channel that connects to a Node.js bridge.

    The bridge handles the WhatsApp Web protocol and QR pairing.
    Communication between Python and Node.js is via WebSocket.
    """

    name = "whatsapp"

    def __init__(self, config: WhatsAppConfig, bus: MessageBus, reconnect_delay: float = 5.0):
        super().__init__(config, bus)
        self.config: WhatsAppConfig = config
        self.reconnect_delay = reconnect_delay
        self._ws = None
        self._connected = False

    async def start(self) -> None:
        """Start the WhatsApp channel by connecting to the bridge."""
        bridge_url = self.config.bridge_url

        logger.info(f"Connecting to WhatsApp bridge at {bridge_url}...")

        self._running = True

        while self._running:
            try:
                async with websockets.connect(bridge_url) as ws:
                    self._ws = ws
                    self._connected = True
                    logger.info("Connected to WhatsApp bridge")

                    if self.config.bridge_token:
                        await ws.send(json.dumps({"type": "auth", "token": self.config.bridge_token}))
                        logger.info("Sent bridge auth token")

                    async for message in ws:
                        try:
                            await self._handle_bridge_message(message)
                        except Exception as e:
                            logger.error(f"Error handling bridge message: {e}")

            except asyncio.CancelledError:
                break
            except Exception as e:
                self._connected = False
                self._ws = None
                logger.warning(f"WhatsApp bridge connection error: {e}")

                if self._running:
                    logger.info(f"Reconnecting in {self.reconnect_delay:g} seconds...")
                    await asyncio.sleep(self.reconnect_delay)

    async def stop(self) -> None:
        """Stop the WhatsApp channel."""
        self._running = False
        self._connected = False

        if self._ws:
            await self._ws.close()
            self._ws = None

    async def send(self, msg: OutboundMessage) -> None:
        """Send a message through WhatsApp."""
        if not self._ws or not self._connected:
            raise RuntimeError("WhatsApp bridge not connected")

        payload = {
            "type": "send",
            "to": msg.chat_id,
            "text": msg.content,
        }
        if msg.reply_to:
            payload["quotedId"] = msg.reply_to

        try:
            await self._ws.send(json.dumps(payload))
        except Exception as e:
            logger.error(f"Error sending WhatsApp message: {e}")

    async def _handle_bridge_message(self, raw: str) -> None:
        """Handle a message from the bridge."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON from bridge: {raw[:100]}")
            return

        msg_type = data.get("type")

        if msg_type == "message":
            sender_jid = str(data.get("sender", ""))
            chat_jid = str(data.get("chatId", "") or sender_jid)
            sender_id = self._jid_to_identity(sender_jid or chat_jid)
            content = str(data.get("content", "") or "")
            media_path = data.get("mediaPath", "")
            mime_type = str(data.get("mimeType", "") or "")
            media_paths: list[str] = []

            if media_path:
                path_obj = Path(str(media_path))
                if path_obj.exists() and path_obj.is_file():
                    media_paths.append(str(path_obj))
                else:
                    logger.warning(f"WhatsApp media path not found: {media_path}")

            await self._handle_message(
                sender_id=sender_id,
                chat_id=chat_jid,  # Full JID for replies
                content=content,
                media=media_paths,
                metadata={
                    "message_id": data.get("id"),
                    "timestamp": data.get("timestamp"),
                    "is_group": data.get("isGroup", False),
                    "from_me": bool(data.get("fromMe", False)),
                    "has_quoted": bool(data.get("hasQuotedMsg", False)),
                    "has_media": bool(data.get("hasMedia", False) or media_paths),
                    "sender_jid": sender_jid,
                    "mime_type": mime_type,
                },
            )

        elif msg_type == "status":
            status = data.get("status")
            logger.info(f"WhatsApp status: {status}")

            if status == "connected":
                self._connected = True
            elif status == "disconnected":
                self._connected = False

        elif msg_type == "qr":
            logger.info("Scan QR code in the bridge terminal to connect WhatsApp")

        elif msg_type == "error":
            logger.error(f"WhatsApp bridge error: {data.get('error')}")

    def _jid_to_identity(self, jid: str) -> str:
        """Convert JID into stable sender identity for allowlist checks."""
        value = (jid or "").strip()
        if not value:
            return ""
        left = value.split("@", 1)[0]
        if ":" in left:
            left = left.split(":", 1)[0]
        return left
