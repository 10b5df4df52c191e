"""Chat channels module."""

from zap_agent.channels.base import BaseChannel
from zap_agent.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ChannelManager"]
