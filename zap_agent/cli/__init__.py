"""CLI module for zap-agent."""
