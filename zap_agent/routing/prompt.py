"""Prompt assembly from category, retrieved records, memory and the question."""

from __future__ import annotations

from collections.abc import Sequence

from zap_agent.routing.categories import (
    CATEGORY_TABLE,
    CategoryProfile,
    DomainCategory,
    KnowledgeRecord,
)
from zap_agent.routing.matcher import format_records
from zap_agent.routing.memory import ConversationMemory


class PromptAssembler:
    """
    Build the final prompt for a message.

    Sections, in order: persona preamble, knowledge block, recent history
    (for categories that need continuity), then the literal question.
    Fresh records replace the sender's stored context for the category;
    with no fresh records the stored context is reused and marked as
    carried over.
    """

    CARRIED_OVER_NOTE = (
        "(Dados da consulta anterior: nenhuma informação nova foi encontrada "
        "para esta pergunta.)"
    )

    def __init__(
        self,
        memory: ConversationMemory,
        table: dict[DomainCategory, CategoryProfile] | None = None,
    ):
        self.memory = memory
        self.table = table or CATEGORY_TABLE

    def assemble(
        self,
        sender: str,
        category: DomainCategory,
        text: str,
        records: Sequence[KnowledgeRecord],
        history: Sequence[str],
    ) -> str:
        profile = self.table[category]
        sections = [profile.persona]

        knowledge = self._knowledge_block(sender, category, profile, records)
        if knowledge:
            sections.append(knowledge)

        if profile.include_history and history:
            turns = "\n".join(f"- {turn}" for turn in history)
            sections.append(f"Histórico recente da conversa:\n{turns}")

        sections.append(f"Pergunta: {text}")
        return "\n\n".join(sections)

    def _knowledge_block(
        self,
        sender: str,
        category: DomainCategory,
        profile: CategoryProfile,
        records: Sequence[KnowledgeRecord],
    ) -> str:
        if records:
            self.memory.set_domain_context(sender, category, records)
            return f"{profile.knowledge_title}:\n{format_records(records, profile.id_field)}"

        previous = self.memory.get_domain_context(sender, category)
        if not previous:
            return ""
        return (
            f"{profile.knowledge_title} (anterior):\n"
            f"{self.CARRIED_OVER_NOTE}\n{format_records(previous, profile.id_field)}"
        )
