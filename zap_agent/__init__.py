"""Zap Agent - A WhatsApp store assistant that routes questions to AI models."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zap-agent")
except PackageNotFoundError:
    __version__ = "0.1.0"

__logo__ = "💬"
__brand__ = "zap-agent"
