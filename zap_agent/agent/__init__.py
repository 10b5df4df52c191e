"""Agent core module."""

from zap_agent.agent.loop import AgentLoop, PendingMessage

__all__ = ["AgentLoop", "PendingMessage"]
