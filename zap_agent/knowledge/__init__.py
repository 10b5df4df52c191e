"""Knowledge retrieval from the store's HTTP endpoints."""

from zap_agent.knowledge.gateway import KnowledgeGateway

__all__ = ["KnowledgeGateway"]
