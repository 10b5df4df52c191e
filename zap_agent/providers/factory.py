"""Build providers and the backend registry from configuration."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from zap_agent.bus.queue import MessageBus
from zap_agent.config.schema import Config
from zap_agent.providers.backends import Backend, ChatBackend, CustomBackend, VisionBackend
from zap_agent.providers.base import LLMProvider
from zap_agent.providers.litellm_provider import LiteLLMProvider

ProviderFactory = Callable[[str, Config], LLMProvider]


def build_provider(model: str, config: Config) -> LLMProvider:
    """LiteLLM provider bound to the credentials of the model's provider."""
    return LiteLLMProvider(
        api_key=config.get_api_key(model),
        api_base=config.get_api_base(model),
        default_model=model,
    )


def build_backends(
    config: Config,
    bus: MessageBus,
    *,
    provider_factory: ProviderFactory | None = None,
) -> dict[str, Backend]:
    """Registry of enabled backends keyed by logical model name."""
    make_provider = provider_factory or build_provider
    backends: dict[str, Backend] = {}

    for name, entry in config.models.builtin.items():
        if not entry.enable:
            continue
        backend_cls = VisionBackend if entry.kind == "image" else ChatBackend
        backends[name] = backend_cls(name, make_provider(entry.model, config), bus, model=entry.model)

    for custom in config.models.custom:
        if not custom.enable:
            continue
        if custom.model_name in backends:
            logger.warning(f"Custom model {custom.model_name} shadows a builtin model; skipped")
            continue
        backends[custom.model_name] = CustomBackend(
            custom.model_name,
            make_provider(custom.model, config),
            bus,
            context_path=custom.context,
            model=custom.model,
        )

    return backends
