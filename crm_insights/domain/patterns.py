"""Ordered classification rule catalogs for inbound customer messages"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Tuple

from crm_insights.domain.extraction import extract_value
from crm_insights.domain.models import InteractionType


@dataclass(frozen=True)
class PatternRule:
    """Single classification rule: first matching rule in a catalog wins"""

    pattern: Pattern[str]
    interaction_type: InteractionType
    category: Optional[str] = None
    value_extractor: Optional[Callable[[str], Optional[float]]] = None

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(
    regex: str,
    interaction_type: InteractionType,
    category: str,
    value_extractor: Optional[Callable[[str], Optional[float]]] = None,
) -> PatternRule:
    return PatternRule(re.compile(regex, re.IGNORECASE), interaction_type, category, value_extractor)


PURCHASE_RULES: Tuple[PatternRule, ...] = (
    _rule(r"comprei|compra|gastei|paguei|adquiri", InteractionType.PURCHASE, "geral", extract_value),
    _rule(r"supermercado|mercado|alimentação|comida", InteractionType.PURCHASE, "alimentação", extract_value),
    _rule(r"roupa|vestuário|calça|camisa|vestido|sapato", InteractionType.PURCHASE, "vestuário", extract_value),
    _rule(r"eletrônico|celular|computador|tv|notebook", InteractionType.PURCHASE, "eletrônicos", extract_value),
    _rule(r"casa|móvel|decoração|cozinha", InteractionType.PURCHASE, "casa", extract_value),
)

FEEDBACK_RULES: Tuple[PatternRule, ...] = (
    _rule(r"gostei|adorei|excelente|ótimo|perfeito|recomendo", InteractionType.FEEDBACK, "positivo"),
    _rule(r"não gostei|ruim|péssimo|horrível|decepcionado", InteractionType.FEEDBACK, "negativo"),
    _rule(r"feedback|opinião|avaliação|comentário", InteractionType.FEEDBACK, "geral"),
)

COMPLAINT_RULES: Tuple[PatternRule, ...] = (
    _rule(r"reclamação|problema|defeito|quebrado|não funciona", InteractionType.COMPLAINT, "produto"),
    _rule(r"atendimento|demora|espera|mal atendido", InteractionType.COMPLAINT, "atendimento"),
    _rule(r"entrega|atraso|não chegou|perdido", InteractionType.COMPLAINT, "entrega"),
)

QUESTION_RULES: Tuple[PatternRule, ...] = (
    _rule(r"\?|como|quando|onde|qual|quanto|por que", InteractionType.QUESTION, "informação"),
    _rule(r"preço|valor|custo|quanto custa", InteractionType.QUESTION, "preço"),
    _rule(r"disponível|estoque|tem|possui", InteractionType.QUESTION, "disponibilidade"),
)

PROFILE_RULES: Tuple[PatternRule, ...] = (
    _rule(r"meu nome é|me chamo|sou|trabalho como|profissão", InteractionType.PROFILE_UPDATE, "identificação"),
    _rule(r"moro em|cidade|endereço|localização", InteractionType.PROFILE_UPDATE, "localização"),
    _rule(r"idade|anos|nasci|aniversário", InteractionType.PROFILE_UPDATE, "idade"),
)

# Type detection priority: a purchase that is also a question stays a purchase
DETECTION_ORDER: Tuple[PatternRule, ...] = (
    PURCHASE_RULES + COMPLAINT_RULES + FEEDBACK_RULES + PROFILE_RULES + QUESTION_RULES
)

# Category lookup walks the catalogs in declaration order
CATEGORY_ORDER: Tuple[PatternRule, ...] = (
    PURCHASE_RULES + FEEDBACK_RULES + COMPLAINT_RULES + QUESTION_RULES + PROFILE_RULES
)
