"""Agent loop: turns inbound chat messages into routed model prompts."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loguru import logger

from zap_agent.bus.events import InboundMessage
from zap_agent.bus.queue import MessageBus
from zap_agent.config.schema import Config
from zap_agent.knowledge.gateway import KnowledgeGateway
from zap_agent.providers.backends import Backend
from zap_agent.providers.factory import ProviderFactory, build_backends, build_provider
from zap_agent.routing.categories import DomainCategory, profile_for
from zap_agent.routing.classifier import DelegatedClassifier, IntentClassifier, LocalIntentClassifier
from zap_agent.routing.matcher import KeywordMatcher
from zap_agent.routing.memory import ConversationMemory
from zap_agent.routing.prompt import PromptAssembler
from zap_agent.routing.queue import DeliveryQueue
from zap_agent.routing.router import ModelRouter, resolve_model_by_prefix
from zap_agent.utils.helpers import truncate


@dataclass
class PendingMessage:
    """An accepted inbound message waiting in its sender's queue."""

    msg: InboundMessage
    model_name: str
    text: str  # Message text with any model prefix removed
    explicit: bool = False  # Prefix-selected model: skip classification

    @property
    def sender(self) -> str:
        return self.msg.session_key


class AgentLoop:
    """
    The routing engine.

    It:
    1. Receives messages from the bus
    2. Picks the target model from the prefix table (or the default model)
    3. Queues the message on its sender's delivery queue
    4. Classifies, retrieves and filters knowledge, assembles the prompt
    5. Hands the prompt to the model router
    """

    def __init__(
        self,
        bus: MessageBus,
        router: ModelRouter,
        classifier: IntentClassifier,
        gateway: KnowledgeGateway,
        matcher: KeywordMatcher | None = None,
        memory: ConversationMemory | None = None,
        prefixes: dict[str, str] | None = None,
        default_model: str = "Gemini",
        require_prefix: bool = False,
    ):
        self.bus = bus
        self.router = router
        self.classifier = classifier
        self.gateway = gateway
        self.matcher = matcher or KeywordMatcher()
        self.memory = memory or ConversationMemory()
        self.assembler = PromptAssembler(self.memory)
        self.prefixes = dict(prefixes or {})
        self.default_model = default_model
        self.require_prefix = require_prefix
        self.queue: DeliveryQueue[PendingMessage] = DeliveryQueue(self.process, name="delivery")
        self._running = False

    @classmethod
    def from_config(
        cls,
        config: Config,
        bus: MessageBus,
        *,
        backends: dict[str, Backend] | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> AgentLoop:
        """Wire every collaborator from configuration."""
        make_provider = provider_factory or build_provider
        registry = backends if backends is not None else build_backends(
            config, bus, provider_factory=make_provider
        )

        classifier_cfg = config.classifier
        classifier: IntentClassifier
        if classifier_cfg.strategy == "delegated":
            classifier = DelegatedClassifier(
                make_provider(classifier_cfg.model, config), model=classifier_cfg.model
            )
        else:
            classifier = LocalIntentClassifier.from_file(
                classifier_cfg.intents_path or None,
                min_confidence=classifier_cfg.min_confidence,
            )

        return cls(
            bus=bus,
            router=ModelRouter(registry),
            classifier=classifier,
            gateway=KnowledgeGateway(
                base_url=config.knowledge.base_url,
                endpoints=config.knowledge.endpoints,
                timeout=config.knowledge.timeout_seconds,
            ),
            matcher=KeywordMatcher(
                budget_chars=config.matcher.budget_chars,
                extra_stop_words=config.matcher.extra_stop_words,
            ),
            memory=ConversationMemory(history_size=config.memory.history_size),
            prefixes=config.enabled_prefixes(),
            default_model=config.enable_prefix.default_model,
            require_prefix=config.enable_prefix.enable,
        )

    async def run(self) -> None:
        """Run the agent loop, processing messages from the bus."""
        self._running = True
        logger.info("Agent loop started")

        while self._running:
            try:
                msg = await asyncio.wait_for(self.bus.consume_inbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            try:
                self.handle_inbound(msg)
            except Exception as e:
                logger.error(f"Error accepting message from {msg.session_key}: {e}")

    def stop(self) -> None:
        """Stop the agent loop."""
        self._running = False
        logger.info("Agent loop stopping")

    async def shutdown(self) -> None:
        """Stop the loop and cancel in-flight drains."""
        self.stop()
        self.bus.stop()
        await self.queue.shutdown()

    def handle_inbound(self, msg: InboundMessage) -> PendingMessage | None:
        """
        Apply the inbound rules and queue the message.

        Returns the queued item, or None when the message is ignored.
        """
        text = msg.content or ""
        if not text.strip() and not msg.has_media:
            return None

        model_name, stripped = resolve_model_by_prefix(text, self.prefixes)

        # Bot replies quote the user's message and carry no prefix.
        if msg.from_me and msg.has_quoted and model_name is None:
            return None

        if msg.has_media:
            if model_name is None:
                logger.debug(f"Ignoring media without model prefix from {msg.session_key}")
                return None
            item = PendingMessage(msg=msg, model_name=model_name, text=stripped, explicit=True)
        elif model_name is None:
            if self.require_prefix:
                return None
            item = PendingMessage(msg=msg, model_name=self.default_model, text=text.strip())
        elif not stripped:
            return None
        else:
            item = PendingMessage(msg=msg, model_name=model_name, text=stripped, explicit=True)

        logger.info(f"Queued message from {msg.session_key} for {item.model_name}: {truncate(text)!r}")
        self.queue.enqueue(item.sender, item)
        return item

    async def build_prompt(self, sender: str, text: str) -> tuple[DomainCategory, str]:
        """Classify, retrieve, filter and assemble the prompt for one message."""
        category = await self.classifier.classify(text)
        profile = profile_for(category)

        records = []
        if profile.endpoint:
            fetched = await self.gateway.fetch_records(category)
            records = self.matcher.filter(fetched, text, id_field=profile.id_field)
            logger.debug(
                f"{category.value}: {len(records)}/{len(fetched)} record(s) matched for {sender}"
            )

        history = self.memory.get_history(sender)
        prompt = self.assembler.assemble(sender, category, text, records, history)
        return category, prompt

    async def process(self, item: PendingMessage) -> None:
        """Full pipeline for one queued message."""
        if item.explicit:
            prompt = item.text
        else:
            category, prompt = await self.build_prompt(item.sender, item.text)
            logger.info(f"Message from {item.sender} classified as {category.value}")

        if not item.msg.from_me and item.text:
            self.memory.append_turn(item.sender, item.text)

        await self.router.dispatch(prompt, item.model_name, item.msg)
