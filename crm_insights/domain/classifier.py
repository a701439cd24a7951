"""Message classifier - turns inbound customer text into interaction records"""

from typing import List, Optional

from crm_insights.domain.extraction import extract_entities, extract_value
from crm_insights.domain.models import (
    ExtractedData,
    InboundMessage,
    Interaction,
    InteractionType,
    ProcessedMessage,
    SentimentType,
)
from crm_insights.domain.patterns import CATEGORY_ORDER, DETECTION_ORDER
from crm_insights.utils.date_utils import parse_message_timestamp

POSITIVE_WORDS = (
    "bom", "ótimo", "excelente", "perfeito", "adorei", "gostei", "maravilhoso",
    "fantástico", "incrível", "satisfeito", "feliz", "recomendo", "aprovado",
)

NEGATIVE_WORDS = (
    "ruim", "péssimo", "horrível", "terrível", "odeio", "detesto", "problema",
    "defeito", "quebrado", "insatisfeito", "decepcionado", "frustrado", "raiva",
)

# Types that always get an automatic reply; FEEDBACK only when negative
AUTO_REPLY_TYPES = frozenset({
    InteractionType.COMPLAINT,
    InteractionType.QUESTION,
    InteractionType.PURCHASE,
    InteractionType.PROFILE_UPDATE,
})

RESPONSE_TEMPLATES = {
    InteractionType.COMPLAINT: (
        "😔 Lamentamos o inconveniente. Nossa equipe irá analisar sua reclamação "
        "e entrar em contato em breve."
    ),
    InteractionType.QUESTION: (
        "❓ Recebemos sua pergunta! Nossa equipe irá responder em breve com as "
        "informações solicitadas."
    ),
    InteractionType.PROFILE_UPDATE: (
        "📝 Informações atualizadas com sucesso! Obrigado por manter seu perfil atualizado."
    ),
}
PURCHASE_WITH_VALUE_TEMPLATE = "✅ Compra registrada! Valor: R$ {value:.2f}. Obrigado pela informação!"
PURCHASE_TEMPLATE = "✅ Compra registrada! Obrigado por compartilhar essa informação conosco."
FEEDBACK_TEMPLATES = {
    SentimentType.POSITIVE: "😊 Que bom saber que você gostou! Seu feedback é muito importante para nós.",
    SentimentType.NEGATIVE: "😔 Agradecemos seu feedback. Vamos trabalhar para melhorar sua experiência.",
    SentimentType.NEUTRAL: "📝 Obrigado pelo seu feedback! Sua opinião é muito valiosa para nós.",
}
DEFAULT_TEMPLATE = "👋 Olá! Recebemos sua mensagem e nossa equipe irá analisá-la em breve."


def detect_interaction_type(text: str) -> InteractionType:
    """
    Classify text by the first matching rule.

    Catalog priority: purchase -> complaint -> feedback -> profile -> question.
    No match is a valid outcome and yields GENERAL.
    """
    for rule in DETECTION_ORDER:
        if rule.matches(text):
            return rule.interaction_type
    return InteractionType.GENERAL


def analyze_sentiment(text: str) -> SentimentType:
    """Lexicon containment count; strictly greater side wins, ties are NEUTRAL"""
    lower_text = text.lower()
    positive_score = sum(1 for word in POSITIVE_WORDS if word in lower_text)
    negative_score = sum(1 for word in NEGATIVE_WORDS if word in lower_text)

    if positive_score > negative_score:
        return SentimentType.POSITIVE
    if negative_score > positive_score:
        return SentimentType.NEGATIVE
    return SentimentType.NEUTRAL


def extract_category(text: str, interaction_type: InteractionType) -> Optional[str]:
    for rule in CATEGORY_ORDER:
        if rule.interaction_type == interaction_type and rule.matches(text):
            return rule.category
    return None


def extract_data(text: str, interaction_type: InteractionType) -> ExtractedData:
    value = extract_value(text)
    entities = extract_entities(text)
    return ExtractedData(
        value=value or None,  # a zero amount is treated as absent
        category=extract_category(text, interaction_type),
        entities=entities or None,
    )


def should_generate_response(interaction_type: InteractionType, sentiment: SentimentType) -> bool:
    if interaction_type in AUTO_REPLY_TYPES:
        return True
    return interaction_type == InteractionType.FEEDBACK and sentiment == SentimentType.NEGATIVE


def generate_response(
    interaction_type: InteractionType,
    sentiment: SentimentType,
    extracted_data: ExtractedData,
) -> str:
    """Pick the reply template for a classified message"""
    if interaction_type == InteractionType.PURCHASE:
        if extracted_data.value:
            return PURCHASE_WITH_VALUE_TEMPLATE.format(value=extracted_data.value)
        return PURCHASE_TEMPLATE

    if interaction_type == InteractionType.FEEDBACK:
        return FEEDBACK_TEMPLATES[sentiment]

    return RESPONSE_TEMPLATES.get(interaction_type, DEFAULT_TEMPLATE)


def process_message(message: InboundMessage) -> ProcessedMessage:
    """
    Classify one inbound message.

    Non-text messages and empty bodies short-circuit to GENERAL / NEUTRAL
    with nothing extracted and no reply.
    """
    if not message.is_text:
        return ProcessedMessage(
            original_message=message,
            interaction_type=InteractionType.GENERAL,
            sentiment=SentimentType.NEUTRAL,
            extracted_data=ExtractedData(),
            should_respond=False,
        )

    text = message.text_body
    interaction_type = detect_interaction_type(text)
    sentiment = analyze_sentiment(text)
    extracted_data = extract_data(text, interaction_type)
    should_respond = should_generate_response(interaction_type, sentiment)
    suggested_response = (
        generate_response(interaction_type, sentiment, extracted_data) if should_respond else None
    )

    return ProcessedMessage(
        original_message=message,
        interaction_type=interaction_type,
        sentiment=sentiment,
        extracted_data=extracted_data,
        should_respond=should_respond,
        suggested_response=suggested_response,
    )


def process_messages(messages: List[InboundMessage]) -> List[ProcessedMessage]:
    return [process_message(message) for message in messages]


def to_interaction(processed: ProcessedMessage, client_id: str | None = None) -> Optional[Interaction]:
    """
    Build the Interaction record for a processed text message.

    Returns None for non-text messages. Raises EntityValidationError when the
    message body breaks Interaction invariants (e.g. longer than 1000 chars).
    """
    message = processed.original_message
    if not message.is_text:
        return None

    metadata = {"message_id": message.id, "from": message.from_number}
    if processed.extracted_data.entities:
        metadata["entities"] = processed.extracted_data.entities

    return Interaction(
        client_id=client_id or message.from_number,
        type=processed.interaction_type,
        content=message.text_body,
        value=processed.extracted_data.value,
        category=processed.extracted_data.category,
        sentiment=processed.sentiment,
        metadata=metadata,
        created_at=parse_message_timestamp(message.timestamp),
    )
