"""Configuration schema using Pydantic."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class _CamelModel(BaseModel):
    """Accept camelCase keys from config.json as well as snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WhatsAppConfig(_CamelModel):
    """WhatsApp channel configuration."""
    enabled: bool = True
    bridge_url: str = "ws://localhost:3001"
    bridge_token: str = ""
    allow_from: list[str] = Field(default_factory=list)  # Allowed phone numbers


class ChannelsConfig(_CamelModel):
    """Configuration for chat channels."""
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)


class ModelConfig(_CamelModel):
    """One routable model: trigger prefix, enable flag and the LiteLLM model id."""
    prefix: str
    enable: bool = True
    model: str = "gemini/gemini-1.5-flash"
    kind: Literal["text", "image"] = "text"


class CustomModelConfig(_CamelModel):
    """Text model that answers with a fixed context file prepended."""
    model_name: str
    prefix: str
    enable: bool = True
    context: str = ""  # Path to a markdown context file
    model: str = "gemini/gemini-1.5-flash"


def _default_builtin_models() -> dict[str, ModelConfig]:
    return {
        "ChatGPT": ModelConfig(prefix="!chatgpt", model="gpt-3.5-turbo"),
        "GeminiVision": ModelConfig(
            prefix="!gemini-vision", model="gemini/gemini-1.5-flash", kind="image"
        ),
        "Gemini": ModelConfig(prefix="!chat", model="gemini/gemini-1.5-flash"),
    }


def _default_custom_models() -> list[CustomModelConfig]:
    return [
        CustomModelConfig(
            model_name="whatsapp-ai-bot",
            prefix="!bot",
            context="./static/whatsapp-ai-bot.md",
        )
    ]


class ModelsConfig(_CamelModel):
    """Table of logical model names."""
    builtin: dict[str, ModelConfig] = Field(default_factory=_default_builtin_models)
    custom: list[CustomModelConfig] = Field(default_factory=_default_custom_models)


class EnablePrefixConfig(_CamelModel):
    """Whether a prefix is required; unprefixed text goes to default_model otherwise."""
    enable: bool = False
    default_model: str = "Gemini"


class ProviderConfig(_CamelModel):
    """LLM provider configuration."""
    api_key: str = ""
    api_base: str | None = None


class ProvidersConfig(_CamelModel):
    """Configuration for LLM providers."""
    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    gemini: ProviderConfig = Field(default_factory=ProviderConfig)
    groq: ProviderConfig = Field(default_factory=ProviderConfig)
    openrouter: ProviderConfig = Field(default_factory=ProviderConfig)


class KnowledgeConfig(_CamelModel):
    """Knowledge endpoints (one per category, relative to base_url)."""
    base_url: str = "http://localhost:3000"
    timeout_seconds: float = 10.0
    endpoints: dict[str, str] = Field(default_factory=dict)  # category -> path override


class MemoryConfig(_CamelModel):
    """Per-sender memory and the scheduled reset."""
    history_size: int = Field(default=10, ge=1)
    reset_cron: str = "0 0 * * *"
    timezone: str = "local"


class ClassifierConfig(_CamelModel):
    """Intent classification strategy."""
    strategy: Literal["local", "delegated"] = "local"
    model: str = "gemini/gemini-1.5-flash"  # Used by the delegated strategy
    intents_path: str = ""  # Empty -> packaged corpus
    min_confidence: float = 0.35


class MatcherConfig(_CamelModel):
    """Keyword matcher tuning."""
    budget_chars: int = Field(default=2000, ge=1)
    extra_stop_words: list[str] = Field(default_factory=list)


class Config(BaseSettings):
    """Root configuration for Zap Agent."""
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    enable_prefix: EnablePrefixConfig = Field(
        default_factory=EnablePrefixConfig, serialization_alias="enablePrefix"
    )
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    knowledge: KnowledgeConfig = Field(default_factory=KnowledgeConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_enable_prefix(cls, data: Any) -> Any:
        # config.json spells this section camelCase.
        if isinstance(data, dict) and "enablePrefix" in data:
            data = dict(data)
            data["enable_prefix"] = data.pop("enablePrefix")
        return data

    def _provider_map(self) -> dict[str, ProviderConfig]:
        """Map provider names to config objects."""
        return {
            "openai": self.providers.openai,
            "gemini": self.providers.gemini,
            "groq": self.providers.groq,
            "openrouter": self.providers.openrouter,
        }

    def provider_for(self, model: str) -> str:
        """Provider name inferred from a LiteLLM model id."""
        lowered = (model or "").strip().lower()
        if "/" in lowered:
            explicit = lowered.split("/", 1)[0]
            if explicit in self._provider_map():
                return explicit
        if "gemini" in lowered:
            return "gemini"
        if lowered.startswith("gpt") or "openai" in lowered:
            return "openai"
        if "llama" in lowered or "groq" in lowered:
            return "groq"
        return "openrouter"

    def get_api_key(self, model: str) -> str | None:
        """API key for the provider that serves `model`."""
        provider_cfg = self._provider_map()[self.provider_for(model)]
        return provider_cfg.api_key or None

    def get_api_base(self, model: str) -> str | None:
        provider_cfg = self._provider_map()[self.provider_for(model)]
        return provider_cfg.api_base

    def enabled_prefixes(self) -> dict[str, str]:
        """Map of enabled model name -> trigger prefix."""
        prefixes = {
            name: entry.prefix for name, entry in self.models.builtin.items() if entry.enable
        }
        for custom in self.models.custom:
            if custom.enable:
                prefixes[custom.model_name] = custom.prefix
        return prefixes

    def model_id(self, name: str) -> str | None:
        """LiteLLM model id behind a logical model name."""
        entry = self.models.builtin.get(name)
        if entry is not None:
            return entry.model
        for custom in self.models.custom:
            if custom.model_name == name:
                return custom.model
        return None

    model_config = SettingsConfigDict(
        env_prefix="ZAP_AGENT_",
        env_nested_delimiter="__",
        populate_by_name=True,
    )
