"""Unit tests for entity invariants and updates"""

import dataclasses
import pytest
from datetime import datetime, timezone
from crm_insights.domain.exceptions import EntityValidationError
from crm_insights.domain.models import (
    ChurnRisk,
    Client,
    ClientSegment,
    Interaction,
    InteractionType,
    SentimentType,
)

OLD_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_client_engagement_score_range():
    """Test engagement score outside 0-100 is rejected"""
    with pytest.raises(EntityValidationError) as exc_info:
        Client(whatsapp_number="5511999999999", engagement_score=150)

    assert exc_info.value.field == "engagement_score"
    assert exc_info.value.value == 150

    assert Client(whatsapp_number="5511999999999", engagement_score=100).engagement_score == 100


def test_client_whatsapp_number_is_canonicalized():
    client = Client(whatsapp_number="+55 (11) 99999-9999")
    assert client.whatsapp_number == "5511999999999"


@pytest.mark.parametrize("number", ["12345", "1234567890123456", ""])
def test_client_rejects_malformed_whatsapp_number(number):
    with pytest.raises(EntityValidationError) as exc_info:
        Client(whatsapp_number=number)
    assert exc_info.value.field == "whatsapp_number"


def test_client_defaults():
    client = Client(whatsapp_number="5511999999999")

    assert client.segment == ClientSegment.OCCASIONAL
    assert client.churn_risk == ChurnRisk.LOW
    assert client.engagement_score == 0


def test_client_updates_refresh_updated_at():
    """Test every update returns a new snapshot with a fresh updated_at"""
    client = Client(whatsapp_number="5511999999999", updated_at=OLD_TIMESTAMP)

    for updated in (
        client.with_segment(ClientSegment.VIP),
        client.with_engagement_score(80),
        client.with_churn_risk(ChurnRisk.HIGH),
        client.with_profile(name="Ana"),
    ):
        assert updated.updated_at > OLD_TIMESTAMP

    assert client.updated_at == OLD_TIMESTAMP
    assert client.segment == ClientSegment.OCCASIONAL


def test_client_invalid_score_update_leaves_original_untouched():
    client = Client(whatsapp_number="5511999999999", engagement_score=40)

    with pytest.raises(EntityValidationError):
        client.with_engagement_score(101)

    assert client.engagement_score == 40


def test_client_with_profile():
    client = Client(whatsapp_number="5511999999999", city="Recife")
    updated = client.with_profile(name="Ana", city=None, age=30)

    assert updated.name == "Ana"
    assert updated.age == 30
    assert updated.city == "Recife"  # None leaves the field untouched

    with pytest.raises(EntityValidationError):
        client.with_profile(segment="VIP")


def test_client_queries():
    client = Client(
        whatsapp_number="5511999999999",
        name="Ana",
        email="ana@example.com",
        age=30,
        city="Recife",
        profession="designer",
        churn_risk=ChurnRisk.CRITICAL,
    )
    assert client.has_complete_profile() is True
    assert client.is_high_risk() is True
    assert client.is_vip() is False
    assert Client(whatsapp_number="5511999999999").has_complete_profile() is False


def test_client_is_frozen():
    client = Client(whatsapp_number="5511999999999")
    with pytest.raises(dataclasses.FrozenInstanceError):
        client.engagement_score = 10


@pytest.mark.parametrize("content", ["", "   "])
def test_interaction_rejects_empty_content(content):
    with pytest.raises(EntityValidationError) as exc_info:
        Interaction(client_id="c1", type=InteractionType.GENERAL, content=content)
    assert exc_info.value.field == "content"


def test_interaction_content_length_limit():
    """Test 1000 characters is accepted and 1001 is not"""
    assert len(Interaction(client_id="c1", type=InteractionType.GENERAL, content="a" * 1000).content) == 1000

    with pytest.raises(EntityValidationError):
        Interaction(client_id="c1", type=InteractionType.GENERAL, content="a" * 1001)


def test_interaction_content_is_trimmed():
    interaction = Interaction(client_id="c1", type=InteractionType.GENERAL, content="  oi  ")
    assert interaction.content == "oi"


def test_interaction_rejects_non_positive_value():
    with pytest.raises(EntityValidationError) as exc_info:
        Interaction(client_id="c1", type=InteractionType.PURCHASE, content="comprei", value=0)
    assert exc_info.value.field == "value"


def test_interaction_amendments():
    """Test sentiment and metadata amendments return new records"""
    interaction = Interaction(client_id="c1", type=InteractionType.FEEDBACK, content="ok")

    amended = interaction.with_sentiment(SentimentType.NEGATIVE).with_metadata("source", "whatsapp")

    assert amended.is_negative()
    assert amended.metadata == {"source": "whatsapp"}
    assert amended.id == interaction.id
    assert interaction.sentiment == SentimentType.NEUTRAL
    assert interaction.metadata == {}


def test_interaction_factories():
    purchase = Interaction.create_purchase("c1", "comprei um sofá", 1200.0, "casa")
    complaint = Interaction.create_complaint("c1", "veio quebrado")
    question = Interaction.create_question("c1", "tem estoque?")
    feedback = Interaction.create_feedback("c1", "adorei", SentimentType.POSITIVE)

    assert purchase.is_purchase() and purchase.is_positive() and purchase.has_value()
    assert purchase.value_or_zero() == 1200.0
    assert complaint.is_complaint() and complaint.is_negative()
    assert question.sentiment == SentimentType.NEUTRAL
    assert question.value_or_zero() == 0
    assert feedback.type == InteractionType.FEEDBACK


def test_entities_treat_naive_timestamps_as_utc():
    naive = datetime(2026, 1, 1, 12, 0)
    interaction = Interaction(client_id="c1", type=InteractionType.GENERAL, content="oi", created_at=naive)
    client = Client(whatsapp_number="5511999999999", created_at=naive, updated_at=naive)

    assert interaction.created_at == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert client.created_at.tzinfo is timezone.utc
    assert client.updated_at.tzinfo is timezone.utc
    assert interaction.with_sentiment(SentimentType.POSITIVE).created_at.tzinfo is timezone.utc
