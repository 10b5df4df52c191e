from zap_agent.routing.categories import CATEGORY_TABLE, DomainCategory
from zap_agent.routing.memory import ConversationMemory
from zap_agent.routing.prompt import PromptAssembler

CAMISETA = {"codigo": 1, "nome": "Camiseta X", "preco": 49.9}


def test_product_prompt_contains_records_history_and_question_in_order():
    memory = ConversationMemory()
    assembler = PromptAssembler(memory)

    prompt = assembler.assemble(
        "s1",
        DomainCategory.PRODUCT,
        "qual o preço do produto X?",
        [CAMISETA],
        ["oi", "vocês têm camisetas?"],
    )

    persona = CATEGORY_TABLE[DomainCategory.PRODUCT].persona
    assert prompt.startswith(persona)
    assert "nome: Camiseta X\npreco: 49.9" in prompt
    assert "codigo" not in prompt
    assert "- oi\n- vocês têm camisetas?" in prompt
    assert prompt.endswith("Pergunta: qual o preço do produto X?")
    assert prompt.index("Camiseta X") < prompt.index("Histórico") < prompt.index("Pergunta:")


def test_fresh_records_are_stored_as_domain_context():
    memory = ConversationMemory()
    PromptAssembler(memory).assemble("s1", DomainCategory.PRODUCT, "camiseta", [CAMISETA], [])

    assert memory.get_domain_context("s1", DomainCategory.PRODUCT) == [CAMISETA]


def test_empty_records_fall_back_to_stored_context_marked_as_carried_over():
    memory = ConversationMemory()
    assembler = PromptAssembler(memory)
    assembler.assemble("s1", DomainCategory.PRODUCT, "camiseta x", [CAMISETA], [])

    prompt = assembler.assemble("s1", DomainCategory.PRODUCT, "e em azul?", [], ["camiseta x"])

    assert "(anterior)" in prompt
    assert PromptAssembler.CARRIED_OVER_NOTE in prompt
    assert "nome: Camiseta X" in prompt
    assert memory.get_domain_context("s1", DomainCategory.PRODUCT) == [CAMISETA]


def test_no_records_and_no_context_omits_knowledge_block():
    memory = ConversationMemory()
    profile = CATEGORY_TABLE[DomainCategory.PAYMENT]

    prompt = PromptAssembler(memory).assemble("s1", DomainCategory.PAYMENT, "aceita pix?", [], [])

    assert profile.knowledge_title not in prompt
    assert prompt == f"{profile.persona}\n\nPergunta: aceita pix?"


def test_context_does_not_leak_across_categories_or_senders():
    memory = ConversationMemory()
    assembler = PromptAssembler(memory)
    assembler.assemble("s1", DomainCategory.PRODUCT, "camiseta", [CAMISETA], [])

    other_category = assembler.assemble("s1", DomainCategory.PAYMENT, "aceita pix?", [], [])
    other_sender = assembler.assemble("s2", DomainCategory.PRODUCT, "camiseta", [], [])

    assert "Camiseta X" not in other_category
    assert "Camiseta X" not in other_sender


def test_greeting_prompt_is_brief_self_introduction_without_history():
    memory = ConversationMemory()

    prompt = PromptAssembler(memory).assemble(
        "s1", DomainCategory.GREETING, "Oi", [], ["mensagem antiga"]
    )

    assert "apresente-se brevemente" in prompt
    assert "mensagem antiga" not in prompt
    assert prompt.endswith("Pergunta: Oi")


def test_history_only_for_continuity_categories():
    memory = ConversationMemory()
    assembler = PromptAssembler(memory)
    history = ["turno anterior"]

    for category, profile in CATEGORY_TABLE.items():
        prompt = assembler.assemble("s1", category, "texto", [], history)
        assert ("turno anterior" in prompt) is profile.include_history

    assert {c for c, p in CATEGORY_TABLE.items() if p.include_history} == {
        DomainCategory.PRODUCT,
        DomainCategory.PAYMENT,
        DomainCategory.ORDER,
    }


def test_default_category_uses_plain_instruction():
    memory = ConversationMemory()

    prompt = PromptAssembler(memory).assemble("s1", DomainCategory.DEFAULT, "obrigado", [], [])

    assert prompt == "Responda apenas a informação abaixo:\n\nPergunta: obrigado"


def test_assembly_is_deterministic():
    memory = ConversationMemory()
    assembler = PromptAssembler(memory)
    args = ("s1", DomainCategory.ORDER, "como faço um pedido?", [{"passo": "Escolha"}], ["oi"])

    assert assembler.assemble(*args) == assembler.assemble(*args)
