"""Domain models - pure Python dataclasses representing business entities"""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from crm_insights.domain.exceptions import EntityValidationError
from crm_insights.utils.date_utils import ensure_aware, utcnow

if TYPE_CHECKING:
    from crm_insights.domain.insights import Insight

MAX_CONTENT_LENGTH = 1000
PROFILE_FIELDS = ("name", "email", "age", "city", "profession", "income")


def _new_id() -> str:
    return str(uuid.uuid4())


class InteractionType(str, Enum):
    PURCHASE = "PURCHASE"
    FEEDBACK = "FEEDBACK"
    QUESTION = "QUESTION"
    COMPLAINT = "COMPLAINT"
    PROFILE_UPDATE = "PROFILE_UPDATE"
    GENERAL = "GENERAL"


class SentimentType(str, Enum):
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class ClientSegment(str, Enum):
    VIP = "VIP"
    FREQUENT = "FREQUENT"
    OCCASIONAL = "OCCASIONAL"
    INACTIVE = "INACTIVE"


class ChurnRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class InboundMessage:
    """Message received from the chat platform"""

    id: str
    from_number: str
    timestamp: str  # unix seconds, as sent by the platform
    type: str  # text | image | audio | video | document | location
    text_body: Optional[str] = None

    @property
    def is_text(self) -> bool:
        return self.type == "text" and bool(self.text_body)


@dataclass(frozen=True)
class ExtractedData:
    """Structured fields pulled out of a message"""

    value: Optional[float] = None
    category: Optional[str] = None
    intent: Optional[str] = None
    entities: Optional[Dict[str, Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        """Only the fields that were actually extracted"""
        data = {
            "value": self.value,
            "category": self.category,
            "intent": self.intent,
            "entities": self.entities,
        }
        return {key: val for key, val in data.items() if val is not None}


@dataclass(frozen=True)
class ProcessedMessage:
    """Output of message classification"""

    original_message: InboundMessage
    interaction_type: InteractionType
    sentiment: SentimentType
    extracted_data: ExtractedData
    should_respond: bool
    suggested_response: Optional[str] = None


@dataclass(frozen=True)
class Interaction:
    """A single classified customer message owned by a client"""

    client_id: str
    type: InteractionType
    content: str
    value: Optional[float] = None
    category: Optional[str] = None
    sentiment: SentimentType = SentimentType.NEUTRAL
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.content or not self.content.strip():
            raise EntityValidationError("content", "Interaction content cannot be empty", self.content)
        if len(self.content) > MAX_CONTENT_LENGTH:
            raise EntityValidationError(
                "content",
                f"Interaction content cannot exceed {MAX_CONTENT_LENGTH} characters",
                len(self.content),
            )
        if self.value is not None and self.value <= 0:
            raise EntityValidationError("value", "Interaction value must be positive", self.value)
        object.__setattr__(self, "content", self.content.strip())
        object.__setattr__(self, "created_at", ensure_aware(self.created_at))

    # Updates
    def with_sentiment(self, sentiment: SentimentType) -> "Interaction":
        return replace(self, sentiment=sentiment)

    def with_metadata(self, key: str, value: Any) -> "Interaction":
        return replace(self, metadata={**self.metadata, key: value})

    # Queries
    def is_purchase(self) -> bool:
        return self.type == InteractionType.PURCHASE

    def is_complaint(self) -> bool:
        return self.type == InteractionType.COMPLAINT

    def is_positive(self) -> bool:
        return self.sentiment == SentimentType.POSITIVE

    def is_negative(self) -> bool:
        return self.sentiment == SentimentType.NEGATIVE

    def has_value(self) -> bool:
        return self.value is not None and self.value > 0

    def value_or_zero(self) -> float:
        return self.value or 0

    # Factories
    @classmethod
    def create_purchase(
        cls, client_id: str, content: str, value: float, category: Optional[str] = None
    ) -> "Interaction":
        return cls(
            client_id=client_id,
            type=InteractionType.PURCHASE,
            content=content,
            value=value,
            category=category,
            sentiment=SentimentType.POSITIVE,
        )

    @classmethod
    def create_feedback(cls, client_id: str, content: str, sentiment: SentimentType) -> "Interaction":
        return cls(client_id=client_id, type=InteractionType.FEEDBACK, content=content, sentiment=sentiment)

    @classmethod
    def create_complaint(cls, client_id: str, content: str) -> "Interaction":
        return cls(
            client_id=client_id,
            type=InteractionType.COMPLAINT,
            content=content,
            sentiment=SentimentType.NEGATIVE,
        )

    @classmethod
    def create_question(cls, client_id: str, content: str) -> "Interaction":
        return cls(client_id=client_id, type=InteractionType.QUESTION, content=content)


@dataclass(frozen=True)
class Client:
    """Customer profile keyed by WhatsApp number"""

    whatsapp_number: str
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    city: Optional[str] = None
    profession: Optional[str] = None
    income: Optional[float] = None
    segment: ClientSegment = ClientSegment.OCCASIONAL
    engagement_score: float = 0
    churn_risk: ChurnRisk = ChurnRisk.LOW
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        # Canonical form: digits only, 10-15 of them
        clean_number = re.sub(r"\D", "", self.whatsapp_number or "")
        if not 10 <= len(clean_number) <= 15:
            raise EntityValidationError("whatsapp_number", "Invalid WhatsApp number format", self.whatsapp_number)
        if not 0 <= self.engagement_score <= 100:
            raise EntityValidationError(
                "engagement_score", "Engagement score must be between 0 and 100", self.engagement_score
            )
        object.__setattr__(self, "whatsapp_number", clean_number)
        # Naive timestamps are taken as UTC
        object.__setattr__(self, "created_at", ensure_aware(self.created_at))
        object.__setattr__(self, "updated_at", ensure_aware(self.updated_at))

    # Updates (each refreshes updated_at)
    def with_profile(self, **fields: Any) -> "Client":
        """Apply profile edits; fields passed as None are left untouched"""
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise EntityValidationError("profile", "Unknown profile field", sorted(unknown))
        changes = {key: val for key, val in fields.items() if val is not None}
        return replace(self, updated_at=utcnow(), **changes)

    def with_segment(self, segment: ClientSegment) -> "Client":
        return replace(self, segment=segment, updated_at=utcnow())

    def with_engagement_score(self, score: float) -> "Client":
        return replace(self, engagement_score=score, updated_at=utcnow())

    def with_churn_risk(self, risk: ChurnRisk) -> "Client":
        return replace(self, churn_risk=risk, updated_at=utcnow())

    # Queries
    def is_vip(self) -> bool:
        return self.segment == ClientSegment.VIP

    def is_high_risk(self) -> bool:
        return self.churn_risk in (ChurnRisk.HIGH, ChurnRisk.CRITICAL)

    def has_complete_profile(self) -> bool:
        return all([self.name, self.email, self.age, self.city, self.profession])


@dataclass
class ClientAnalysisData:
    """Aggregated client history handed to the scoring engine"""

    client: Optional[Client] = None
    interactions: List[Interaction] = field(default_factory=list)
    total_value: float = 0.0
    interaction_count: int = 0
    days_since_last_interaction: float = 0
    average_value: float = 0.0
    purchase_frequency: float = 0.0  # purchases per month
    sentiment_score: float = 0.0  # -1.0 .. 1.0


@dataclass
class ClientProfile:
    """Output of a full client analysis"""

    client: Optional[Client]
    engagement_score: int
    segment: ClientSegment
    churn_risk: ChurnRisk
    churn_score: int
    sentiment_score: float
    purchase_frequency: float
    behavior_patterns: Dict[str, Any]
    recommendations: List[str]
    insights: List["Insight"] = field(default_factory=list)
