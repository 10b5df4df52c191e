"""Domain categories and the per-category routing table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

Scalar = Union[str, int, float, bool, None]
KnowledgeRecord = dict[str, Scalar]


class DomainCategory(str, Enum):
    """Closed set of knowledge topics a message can be routed to."""

    PRODUCT = "product"
    PAYMENT = "payment"
    COMPANY = "company"
    EXCHANGE = "exchange"
    DELIVERY = "delivery"
    GREETING = "greeting"
    PROMOTION = "promotion"
    ORDER = "order"
    DEFAULT = "default"

    @classmethod
    def parse(cls, label: str | None) -> DomainCategory:
        """Map a label (English or Portuguese intent name) to a category; unknown -> DEFAULT."""
        key = (label or "").strip().lower()
        if not key:
            return cls.DEFAULT
        for category in cls:
            if category.value == key:
                return category
        return _ALIASES.get(key, cls.DEFAULT)


_ALIASES: dict[str, DomainCategory] = {
    "produto": DomainCategory.PRODUCT,
    "pagamento": DomainCategory.PAYMENT,
    "empresa": DomainCategory.COMPANY,
    "troca": DomainCategory.EXCHANGE,
    "entrega": DomainCategory.DELIVERY,
    "saudacao": DomainCategory.GREETING,
    "saudação": DomainCategory.GREETING,
    "promocao": DomainCategory.PROMOTION,
    "promoção": DomainCategory.PROMOTION,
    "pedido": DomainCategory.ORDER,
    "padrao": DomainCategory.DEFAULT,
    "none": DomainCategory.DEFAULT,
}


@dataclass(frozen=True)
class CategoryProfile:
    """How one category is retrieved, described and framed in the prompt."""

    description: str  # One sentence shown to the delegated classifier
    persona: str  # Preamble placed at the top of the prompt
    include_history: bool = False
    endpoint: str | None = None  # Knowledge path; None means no retrieval
    id_field: str = "codigo"  # Identifier column excluded from search and formatting
    knowledge_title: str = "Informações do banco"


_BASE_PERSONA = (
    "Você é o atendente virtual da loja no WhatsApp. Responda em português, "
    "de forma cordial e objetiva, usando apenas as informações fornecidas."
)

CATEGORY_TABLE: dict[DomainCategory, CategoryProfile] = {
    DomainCategory.PRODUCT: CategoryProfile(
        description="Perguntas sobre produtos, preços, estoque, tamanhos ou descrições.",
        persona=f"{_BASE_PERSONA} Você ajuda o cliente a encontrar produtos e tirar dúvidas sobre eles.",
        include_history=True,
        endpoint="/produtos",
        knowledge_title="Informações do produto",
    ),
    DomainCategory.PAYMENT: CategoryProfile(
        description="Formas de pagamento, chave PIX, dados bancários ou envio de comprovante.",
        persona=f"{_BASE_PERSONA} Você orienta o cliente sobre as formas de pagamento.",
        include_history=True,
        endpoint="/pagamentos",
        knowledge_title="Métodos de pagamento",
    ),
    DomainCategory.COMPANY: CategoryProfile(
        description="Informações sobre a empresa: endereço, horário de funcionamento, contato.",
        persona=f"{_BASE_PERSONA} Você apresenta informações institucionais da empresa.",
        endpoint="/empresa",
        knowledge_title="Informações da empresa",
    ),
    DomainCategory.EXCHANGE: CategoryProfile(
        description="Trocas, devoluções e garantia de produtos.",
        persona=f"{_BASE_PERSONA} Você explica a política de trocas e devoluções.",
        endpoint="/trocas",
        knowledge_title="Política de trocas",
    ),
    DomainCategory.DELIVERY: CategoryProfile(
        description="Prazos de entrega, frete, envio e rastreamento.",
        persona=f"{_BASE_PERSONA} Você explica prazos, valores e regras de entrega.",
        endpoint="/entregas",
        knowledge_title="Política de entrega",
    ),
    DomainCategory.GREETING: CategoryProfile(
        description="Cumprimentos e saudações como oi, olá, bom dia.",
        persona=(
            f"{_BASE_PERSONA} O cliente está cumprimentando: apresente-se brevemente "
            "como atendente virtual e pergunte como pode ajudar, em no máximo duas frases."
        ),
        endpoint="/saudacao",
        knowledge_title="Roteiro de saudação",
    ),
    DomainCategory.PROMOTION: CategoryProfile(
        description="Promoções, descontos, cupons e ofertas.",
        persona=f"{_BASE_PERSONA} Você divulga as promoções vigentes.",
        endpoint="/promocoes",
        knowledge_title="Promoções vigentes",
    ),
    DomainCategory.ORDER: CategoryProfile(
        description="Como fazer um pedido, acompanhar ou alterar um pedido.",
        persona=f"{_BASE_PERSONA} Você explica como fazer e acompanhar pedidos.",
        include_history=True,
        endpoint="/pedidos",
        knowledge_title="Instruções de pedido",
    ),
    DomainCategory.DEFAULT: CategoryProfile(
        description="Qualquer outra mensagem, agradecimentos ou encerramento da conversa.",
        persona="Responda apenas a informação abaixo:",
    ),
}


def profile_for(category: DomainCategory) -> CategoryProfile:
    """Routing profile for a category."""
    return CATEGORY_TABLE[category]
