"""Insight entity and its factory constructors"""

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from crm_insights.domain.exceptions import EntityValidationError
from crm_insights.utils.date_utils import add_days, ensure_aware, utcnow

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
HIGH_CONFIDENCE = 0.8

CHURN_PREDICTION_TTL_DAYS = 30
RECOMMENDATION_TTL_DAYS = 7
SEGMENTATION_CONFIDENCE = 0.9


class InsightType(str, Enum):
    SEGMENTATION = "SEGMENTATION"
    CHURN_PREDICTION = "CHURN_PREDICTION"
    RECOMMENDATION = "RECOMMENDATION"
    TREND_ANALYSIS = "TREND_ANALYSIS"
    BEHAVIOR_PATTERN = "BEHAVIOR_PATTERN"
    SATISFACTION_SCORE = "SATISFACTION_SCORE"
    ENGAGEMENT_ANALYSIS = "ENGAGEMENT_ANALYSIS"


class InsightPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def _percent(fraction: float) -> int:
    return int(math.floor(fraction * 100 + 0.5))


def _validate_text(field_name: str, text: str, max_length: int) -> str:
    if not text or not text.strip():
        raise EntityValidationError(field_name, f"Insight {field_name} cannot be empty", text)
    if len(text) > max_length:
        raise EntityValidationError(
            field_name, f"Insight {field_name} cannot exceed {max_length} characters", len(text)
        )
    return text.strip()


def _validate_confidence(confidence: float) -> float:
    if not 0 <= confidence <= 1:
        raise EntityValidationError("confidence", "Confidence must be between 0 and 1", confidence)
    return confidence


@dataclass(frozen=True)
class Insight:
    """
    Derived prediction or recommendation about a client (or global when
    client_id is None).

    Title, description and confidence are validated on construction and on
    every `with_*` update. Expiry is a plain timestamp comparison; removing
    expired records is left to whoever stores them.
    """

    type: InsightType
    title: str
    description: str
    confidence: float
    priority: InsightPriority
    actionable: bool
    data: Dict[str, Any] = field(default_factory=dict)
    client_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", _validate_text("title", self.title, MAX_TITLE_LENGTH))
        object.__setattr__(
            self, "description", _validate_text("description", self.description, MAX_DESCRIPTION_LENGTH)
        )
        _validate_confidence(self.confidence)
        object.__setattr__(self, "created_at", ensure_aware(self.created_at))
        if self.expires_at is not None:
            object.__setattr__(self, "expires_at", ensure_aware(self.expires_at))

    # Updates
    def with_priority(self, priority: InsightPriority) -> "Insight":
        return replace(self, priority=priority)

    def with_confidence(self, confidence: float) -> "Insight":
        return replace(self, confidence=confidence)

    def with_data(self, key: str, value: Any) -> "Insight":
        return replace(self, data={**self.data, key: value})

    # Queries
    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return ensure_aware(now or utcnow()) > self.expires_at

    def is_critical(self) -> bool:
        return self.priority == InsightPriority.CRITICAL

    def is_high_confidence(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE

    def is_client_specific(self) -> bool:
        return self.client_id is not None

    def is_global(self) -> bool:
        return self.client_id is None

    @property
    def confidence_percentage(self) -> int:
        return _percent(self.confidence)

    # Factories
    @classmethod
    def create_churn_prediction(
        cls,
        client_id: str,
        churn_probability: float,
        factors: List[str],
        now: datetime | None = None,
    ) -> "Insight":
        """
        Churn prediction, actionable for 30 days.

        Priority bands: >0.7 CRITICAL, >0.5 HIGH, >0.3 MEDIUM, else LOW.
        The probability doubles as the confidence.
        """
        if churn_probability > 0.7:
            priority = InsightPriority.CRITICAL
        elif churn_probability > 0.5:
            priority = InsightPriority.HIGH
        elif churn_probability > 0.3:
            priority = InsightPriority.MEDIUM
        else:
            priority = InsightPriority.LOW

        now = now or utcnow()
        percent = _percent(churn_probability)
        return cls(
            client_id=client_id,
            type=InsightType.CHURN_PREDICTION,
            title=f"Risco de Churn: {percent}%",
            description=(
                f"Cliente com {percent}% de probabilidade de churn. Fatores: {', '.join(factors)}"
            ),
            data={"churn_probability": churn_probability, "factors": list(factors)},
            confidence=churn_probability,
            priority=priority,
            actionable=True,
            expires_at=add_days(now, CHURN_PREDICTION_TTL_DAYS),
            created_at=now,
        )

    @classmethod
    def create_recommendation(
        cls,
        client_id: str,
        products: List[str],
        confidence: float,
        now: datetime | None = None,
    ) -> "Insight":
        now = now or utcnow()
        return cls(
            client_id=client_id,
            type=InsightType.RECOMMENDATION,
            title="Recomendações Personalizadas",
            description=f"Produtos recomendados baseados no perfil: {', '.join(products)}",
            data={"products": list(products), "confidence": confidence},
            confidence=confidence,
            priority=InsightPriority.MEDIUM,
            actionable=True,
            expires_at=add_days(now, RECOMMENDATION_TTL_DAYS),
            created_at=now,
        )

    @classmethod
    def create_segmentation(
        cls,
        client_id: str,
        segment: str,
        characteristics: Dict[str, Any],
    ) -> "Insight":
        segment_name = getattr(segment, "value", segment)
        return cls(
            client_id=client_id,
            type=InsightType.SEGMENTATION,
            title=f"Segmento: {segment_name}",
            description=f"Cliente classificado no segmento {segment_name}",
            data={"segment": segment_name, "characteristics": characteristics},
            confidence=SEGMENTATION_CONFIDENCE,
            priority=InsightPriority.LOW,
            actionable=False,
        )
