"""
Category Catalog

Category ids are free strings on transactions; this catalog only maps
them to display data (label, icon, color) and holds the keyword lists
the insight rules match against.

DESIGN DECISION: The catalog is an immutable value injected into the
aggregator and the insight generator instead of module-level mutable
dicts, so tests can swap in their own category sets.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


FALLBACK_CATEGORY = "outros"

# Card invoice payments are bookkeeping, not spending
CARD_PAYMENT_CATEGORY = "cartao"

FALLBACK_COLOR = "#64748B"


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


_ICONS = {
    # Moradia
    "moradia": "home",
    "aluguel": "home-outline",
    "condominio": "business",
    "agua": "water",
    "energia": "flash",
    "internet": "wifi",
    "gas": "flame",
    "telefone": "call",
    # Alimentação
    "mercado": "cart",
    "alimentacao": "restaurant",
    "lanche": "fast-food",
    "restaurante": "restaurant-outline",
    "delivery": "bicycle",
    # Transporte
    "transporte": "car",
    "combustivel": "speedometer",
    "estacionamento": "car-sport",
    "uber": "car-outline",
    # Saúde
    "saude": "medical",
    "farmacia": "medkit",
    "academia": "barbell",
    # Educação
    "educacao": "school",
    "cursos": "book",
    "livros": "library",
    # Pessoal
    "vestuario": "shirt",
    "beleza": "sparkles",
    "pets": "paw",
    # Lazer
    "lazer": "game-controller",
    "viagem": "airplane",
    "cinema": "film",
    "streaming": "tv",
    "jogos": "game-controller-outline",
    "presentes": "gift",
    "doacoes": "heart",
    # Financeiro
    "assinaturas": "card",
    "cartao": "card-outline",
    "impostos": "document-text",
    "taxas": "receipt",
    "juros": "trending-down",
    # Casa
    "manutencao": "construct",
    "moveis": "bed",
    "eletronicos": "laptop",
    # Receitas
    "salario": "cash",
    "deposito": "card",
    "freelance": "briefcase",
    "bonus": "sparkles",
    "rendimentos": "trending-up",
    "investimentos": "stats-chart",
    "aluguelrecebido": "home",
    "reembolso": "refresh",
    "vendas": "pricetag",
    "extra": "gift",
    "outros": "ellipsis-horizontal",
}

_LABELS = {
    "moradia": "Moradia",
    "aluguel": "Aluguel",
    "condominio": "Condomínio",
    "agua": "Água",
    "energia": "Energia",
    "internet": "Internet",
    "gas": "Gás",
    "telefone": "Telefone",
    "mercado": "Mercado",
    "alimentacao": "Alimentação",
    "lanche": "Lanche",
    "restaurante": "Restaurante",
    "delivery": "Delivery",
    "transporte": "Transporte",
    "combustivel": "Combustível",
    "estacionamento": "Estacionamento",
    "uber": "Uber/99",
    "saude": "Saúde",
    "farmacia": "Farmácia",
    "academia": "Academia",
    "educacao": "Educação",
    "cursos": "Cursos",
    "livros": "Livros",
    "vestuario": "Vestuário",
    "beleza": "Beleza",
    "pets": "Pets",
    "lazer": "Lazer",
    "viagem": "Viagem",
    "cinema": "Cinema",
    "streaming": "Streaming",
    "presentes": "Presentes",
    "assinaturas": "Assinaturas",
    "cartao": "Cartão",
    "impostos": "Impostos",
    "taxas": "Taxas",
    "manutencao": "Manutenção",
    "moveis": "Móveis",
    "eletronicos": "Eletrônicos",
    "salario": "Salário",
    "deposito": "Depósito",
    "freelance": "Freelance",
    "bonus": "Bônus",
    "rendimentos": "Rendimentos",
    "investimentos": "Investimentos",
    "aluguelRecebido": "Aluguel Recebido",
    "reembolso": "Reembolso",
    "vendas": "Vendas",
    "extra": "Extra",
    "outros": "Outros",
}

_COLORS = {
    "agua": "#3B82F6",
    "energia": "#FBBF24",
    "internet": "#8B5CF6",
    "alimentacao": "#10B981",
    "transporte": "#F97316",
    "saude": "#EC4899",
    "educacao": "#06B6D4",
    "lazer": "#A855F7",
    "outros": FALLBACK_COLOR,
    # Receitas
    "salario": "#10B981",
    "deposito": "#3B82F6",
    "extra": "#F59E0B",
}


@dataclass(frozen=True)
class CategoryCatalog:
    """
    Read-only category lookup tables plus insight keyword lists.

    Keyword matching is case-insensitive substring containment on the
    category name, so "cinema_imax" matches the leisure rule.
    """

    labels: Mapping[str, str] = field(default_factory=lambda: _LABELS)
    icons: Mapping[str, str] = field(default_factory=lambda: _ICONS)
    colors: Mapping[str, str] = field(default_factory=lambda: _COLORS)
    fallback: str = FALLBACK_CATEGORY

    food_out_keywords: tuple[str, ...] = (
        "lanche", "lanches", "restaurante", "restaurantes",
        "delivery", "fast food", "ifood",
    )
    subscription_keywords: tuple[str, ...] = (
        "assinatura", "streaming", "netflix", "spotify",
        "academia", "mensalidade",
    )
    leisure_keywords: tuple[str, ...] = (
        "lazer", "entretenimento", "diversão", "cinema",
        "shows", "jogos", "games",
    )
    transport_keywords: tuple[str, ...] = (
        "transporte", "uber", "99", "combustível",
        "gasolina", "estacionamento",
    )

    def __post_init__(self):
        # Frozen dataclass: wrap tables so callers cannot mutate them
        object.__setattr__(self, "labels", _frozen(self.labels))
        object.__setattr__(self, "icons", _frozen(self.icons))
        object.__setattr__(self, "colors", _frozen(self.colors))

    def color_for(self, category: str) -> str:
        return self.colors.get(category) or self.colors.get(self.fallback, FALLBACK_COLOR)

    def icon_for(self, category: str) -> str:
        return self.icons.get(category.lower()) or self.icons.get(self.fallback, "")

    def label_for(self, category: str) -> str:
        """Known label, else the id capitalized."""
        label = self.labels.get(category)
        if label:
            return label
        return category[:1].upper() + category[1:]

    @staticmethod
    def matches(category: str, keywords: tuple[str, ...]) -> bool:
        lowered = category.lower()
        return any(keyword in lowered for keyword in keywords)


DEFAULT_CATALOG = CategoryCatalog()
