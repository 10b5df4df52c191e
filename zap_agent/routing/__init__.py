"""Routing & context-assembly engine."""

from zap_agent.routing.categories import CATEGORY_TABLE, CategoryProfile, DomainCategory
from zap_agent.routing.classifier import DelegatedClassifier, IntentClassifier, LocalIntentClassifier
from zap_agent.routing.matcher import KeywordMatcher
from zap_agent.routing.memory import ConversationMemory, InMemoryBackend, MemoryBackend
from zap_agent.routing.prompt import PromptAssembler
from zap_agent.routing.queue import DeliveryQueue
from zap_agent.routing.router import ModelRouter, resolve_model_by_prefix

__all__ = [
    "CATEGORY_TABLE",
    "CategoryProfile",
    "DomainCategory",
    "IntentClassifier",
    "DelegatedClassifier",
    "LocalIntentClassifier",
    "KeywordMatcher",
    "ConversationMemory",
    "MemoryBackend",
    "InMemoryBackend",
    "PromptAssembler",
    "DeliveryQueue",
    "ModelRouter",
    "resolve_model_by_prefix",
]
