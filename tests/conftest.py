"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from crm_insights.api.main import create_app
from crm_insights.domain.models import Interaction, InteractionType, SentimentType


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for wall-clock dependent calculations"""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_interaction(now):
    """Factory for interactions created a given number of days before `now`"""

    def _make(
        type: InteractionType = InteractionType.GENERAL,
        days_ago: float = 0,
        value: float | None = None,
        category: str | None = None,
        sentiment: SentimentType = SentimentType.NEUTRAL,
        hour: int | None = None,
    ) -> Interaction:
        created_at = now - timedelta(days=days_ago)
        if hour is not None:
            created_at = created_at.replace(hour=hour)
        return Interaction(
            client_id="client-1",
            type=type,
            content="mensagem de teste",
            value=value,
            category=category,
            sentiment=sentiment,
            created_at=created_at,
        )

    return _make
