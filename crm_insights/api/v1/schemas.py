"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from crm_insights.domain.insights import Insight, InsightPriority, InsightType
from crm_insights.domain.models import (
    ChurnRisk,
    Client,
    ClientAnalysisData,
    ClientProfile,
    ClientSegment,
    InboundMessage,
    Interaction,
    InteractionType,
    ProcessedMessage,
    SentimentType,
)
from crm_insights.utils.date_utils import ensure_aware

MessageType = Literal["text", "image", "audio", "video", "document", "location"]


class TextBody(BaseModel):
    body: str


class InboundMessageSchema(BaseModel):
    """Chat-platform message as delivered by the webhook"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Platform message identifier")
    from_number: str = Field(..., alias="from", description="Sender phone number")
    timestamp: str = Field("", description="Unix seconds")
    type: MessageType
    text: Optional[TextBody] = None

    def to_domain(self) -> InboundMessage:
        return InboundMessage(
            id=self.id,
            from_number=self.from_number,
            timestamp=self.timestamp,
            type=self.type,
            text_body=self.text.body if self.text else None,
        )


class BatchRequest(BaseModel):
    """Request body for POST /v1/messages/batch"""

    messages: List[InboundMessageSchema]


class InteractionSchema(BaseModel):
    """Interaction record, as stored by the persistence layer"""

    id: Optional[str] = None
    client_id: Optional[str] = None
    type: InteractionType
    content: str
    value: Optional[float] = None
    category: Optional[str] = None
    sentiment: SentimentType = SentimentType.NEUTRAL
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    def to_domain(self, client_id: str) -> Interaction:
        optional = {}
        if self.id:
            optional["id"] = self.id
        if self.created_at:
            optional["created_at"] = ensure_aware(self.created_at)
        return Interaction(
            client_id=self.client_id or client_id,
            type=self.type,
            content=self.content,
            value=self.value,
            category=self.category,
            sentiment=self.sentiment,
            metadata=self.metadata,
            **optional,
        )

    @classmethod
    def from_domain(cls, interaction: Interaction) -> "InteractionSchema":
        return cls(
            id=interaction.id,
            client_id=interaction.client_id,
            type=interaction.type,
            content=interaction.content,
            value=interaction.value,
            category=interaction.category,
            sentiment=interaction.sentiment,
            metadata=interaction.metadata,
            created_at=interaction.created_at,
        )


class ProcessedMessageResponse(BaseModel):
    """Response for POST /v1/messages/process"""

    message_id: str
    interaction_type: InteractionType
    sentiment: SentimentType
    extracted_data: Dict[str, Any]
    should_respond: bool
    suggested_response: Optional[str] = None
    interaction: Optional[InteractionSchema] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(
        cls,
        processed: ProcessedMessage,
        interaction: Optional[Interaction] = None,
        error: Optional[str] = None,
    ) -> "ProcessedMessageResponse":
        return cls(
            message_id=processed.original_message.id,
            interaction_type=processed.interaction_type,
            sentiment=processed.sentiment,
            extracted_data=processed.extracted_data.as_dict(),
            should_respond=processed.should_respond,
            suggested_response=processed.suggested_response,
            interaction=InteractionSchema.from_domain(interaction) if interaction else None,
            error=error,
        )


class BatchResponse(BaseModel):
    """Response for POST /v1/messages/batch"""

    processed: int
    results: List[ProcessedMessageResponse]


class ClientSchema(BaseModel):
    """Client snapshot; invariants are checked by the domain entity"""

    id: Optional[str] = None
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
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_domain(self) -> Client:
        optional = {}
        if self.id:
            optional["id"] = self.id
        if self.created_at:
            optional["created_at"] = ensure_aware(self.created_at)
        if self.updated_at:
            optional["updated_at"] = ensure_aware(self.updated_at)
        return Client(
            whatsapp_number=self.whatsapp_number,
            name=self.name,
            email=self.email,
            age=self.age,
            city=self.city,
            profession=self.profession,
            income=self.income,
            segment=self.segment,
            engagement_score=self.engagement_score,
            churn_risk=self.churn_risk,
            **optional,
        )

    @classmethod
    def from_domain(cls, client: Client) -> "ClientSchema":
        return cls(
            id=client.id,
            whatsapp_number=client.whatsapp_number,
            name=client.name,
            email=client.email,
            age=client.age,
            city=client.city,
            profession=client.profession,
            income=client.income,
            segment=client.segment,
            engagement_score=client.engagement_score,
            churn_risk=client.churn_risk,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )


class ClientAnalysisRequest(BaseModel):
    """Request body for POST /v1/clients/analysis"""

    client: ClientSchema
    interactions: List[InteractionSchema] = Field(default_factory=list)


class InsightSchema(BaseModel):
    id: str
    client_id: Optional[str] = None
    type: InsightType
    title: str
    description: str
    data: Dict[str, Any]
    confidence: float
    priority: InsightPriority
    actionable: bool
    expires_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, insight: Insight) -> "InsightSchema":
        return cls(
            id=insight.id,
            client_id=insight.client_id,
            type=insight.type,
            title=insight.title,
            description=insight.description,
            data=insight.data,
            confidence=insight.confidence,
            priority=insight.priority,
            actionable=insight.actionable,
            expires_at=insight.expires_at,
            created_at=insight.created_at,
        )


class ClientProfileResponse(BaseModel):
    """Response for POST /v1/clients/analysis"""

    client: ClientSchema
    engagement_score: int
    segment: ClientSegment
    churn_risk: ChurnRisk
    churn_score: int
    total_value: float
    interaction_count: int
    days_since_last_interaction: float
    average_value: float
    purchase_frequency: float
    sentiment_score: float
    behavior_patterns: Dict[str, Any]
    recommendations: List[str]
    insights: List[InsightSchema]

    @classmethod
    def from_domain(cls, profile: ClientProfile, data: ClientAnalysisData) -> "ClientProfileResponse":
        return cls(
            client=ClientSchema.from_domain(profile.client),
            engagement_score=profile.engagement_score,
            segment=profile.segment,
            churn_risk=profile.churn_risk,
            churn_score=profile.churn_score,
            total_value=data.total_value,
            interaction_count=data.interaction_count,
            days_since_last_interaction=data.days_since_last_interaction,
            average_value=data.average_value,
            purchase_frequency=profile.purchase_frequency,
            sentiment_score=profile.sentiment_score,
            behavior_patterns=profile.behavior_patterns,
            recommendations=profile.recommendations,
            insights=[InsightSchema.from_domain(insight) for insight in profile.insights],
        )
