"""LLM provider abstraction and model backends."""

from zap_agent.providers.backends import (
    Backend,
    ChatBackend,
    CustomBackend,
    ImageBackend,
    TextBackend,
    VisionBackend,
)
from zap_agent.providers.base import LLMProvider, LLMResponse
from zap_agent.providers.factory import build_backends, build_provider
from zap_agent.providers.litellm_provider import LiteLLMProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LiteLLMProvider",
    "Backend",
    "TextBackend",
    "ImageBackend",
    "ChatBackend",
    "VisionBackend",
    "CustomBackend",
    "build_provider",
    "build_backends",
]
