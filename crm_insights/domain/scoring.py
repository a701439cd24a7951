"""Client scoring engine - engagement, segmentation and churn risk"""

import math
from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from crm_insights.config import settings
from crm_insights.domain.insights import Insight
from crm_insights.domain.models import (
    ChurnRisk,
    Client,
    ClientAnalysisData,
    ClientProfile,
    ClientSegment,
    Interaction,
    InteractionType,
    SentimentType,
)
from crm_insights.utils.date_utils import elapsed_days, utcnow

SENTIMENT_VALUES = {
    SentimentType.POSITIVE: 1,
    SentimentType.NEUTRAL: 0,
    SentimentType.NEGATIVE: -1,
}

SEGMENT_RECOMMENDATIONS = {
    ClientSegment.VIP: [
        "Produtos premium exclusivos",
        "Atendimento personalizado VIP",
        "Ofertas antecipadas de lançamentos",
    ],
    ClientSegment.FREQUENT: [
        "Programa de fidelidade",
        "Descontos por volume",
        "Produtos complementares",
    ],
    ClientSegment.INACTIVE: [
        "Campanha de reativação",
        "Ofertas especiais de retorno",
        "Pesquisa de satisfação",
    ],
}

# Churn insight is only raised from this tier upwards
CHURN_INSIGHT_RISKS = (ChurnRisk.MEDIUM, ChurnRisk.HIGH, ChurnRisk.CRITICAL)


def _round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def calculate_engagement_score(data: ClientAnalysisData) -> int:
    """
    Engagement score from 0 (disengaged) to 100 (highly engaged).

    Scoring weights:
    - 30%: Frequency (5 points per interaction, capped at 100)
    - 25%: Recency (loses 2 points per day since last interaction)
    - 25%: Value (10 points per 1000 spent, capped at 100)
    - 20%: Sentiment (-1..1 mapped onto 0..100)
    """
    frequency_score = min(data.interaction_count * 5, 100)
    recency_score = max(0, 100 - data.days_since_last_interaction * 2)
    value_score = min((data.total_value / 1000) * 10, 100)
    sentiment_score = (data.sentiment_score + 1) * 50

    score = (
        (0.30 * frequency_score)
        + (0.25 * recency_score)
        + (0.25 * value_score)
        + (0.20 * sentiment_score)
    )

    return int(_round_half_up(min(max(score, 0), 100)))


def determine_client_segment(data: ClientAnalysisData) -> ClientSegment:
    """
    Map client behavior to a segment; first matching rule wins.

    - VIP:        total value > 5000, > 20 interactions, active in the last week
    - FREQUENT:   > 0.5 purchases/month, > 10 interactions, active in the last month
    - INACTIVE:   silent for > 90 days or fewer than 3 interactions
    - OCCASIONAL: everyone else
    """
    if data.total_value > 5000 and data.interaction_count > 20 and data.days_since_last_interaction < 7:
        return ClientSegment.VIP
    elif data.purchase_frequency > 0.5 and data.interaction_count > 10 and data.days_since_last_interaction < 30:
        return ClientSegment.FREQUENT
    elif data.days_since_last_interaction > 90 or data.interaction_count < 3:
        return ClientSegment.INACTIVE
    else:
        return ClientSegment.OCCASIONAL


def calculate_churn_risk_score(data: ClientAnalysisData) -> int:
    """
    Additive churn risk score; each factor contributes its worst band only.

    - Recency:   >60 days +30, >30 days +15, >14 days +5
    - Activity:  <5 interactions +20, <10 interactions +10
    - Sentiment: < -0.3 +25, < 0 +10
    - Purchases: <0.1/month +20, <0.3/month +10
    """
    risk_score = 0

    if data.days_since_last_interaction > 60:
        risk_score += 30
    elif data.days_since_last_interaction > 30:
        risk_score += 15
    elif data.days_since_last_interaction > 14:
        risk_score += 5

    if data.interaction_count < 5:
        risk_score += 20
    elif data.interaction_count < 10:
        risk_score += 10

    if data.sentiment_score < -0.3:
        risk_score += 25
    elif data.sentiment_score < 0:
        risk_score += 10

    if data.purchase_frequency < 0.1:
        risk_score += 20
    elif data.purchase_frequency < 0.3:
        risk_score += 10

    return risk_score


def churn_risk_from_score(risk_score: int) -> ChurnRisk:
    if risk_score >= 70:
        return ChurnRisk.CRITICAL
    elif risk_score >= 50:
        return ChurnRisk.HIGH
    elif risk_score >= 25:
        return ChurnRisk.MEDIUM
    else:
        return ChurnRisk.LOW


def calculate_churn_risk(data: ClientAnalysisData) -> ChurnRisk:
    return churn_risk_from_score(calculate_churn_risk_score(data))


def identify_churn_factors(data: ClientAnalysisData) -> List[str]:
    """Human-readable labels for every factor that added to the churn score"""
    factors = []
    if data.days_since_last_interaction > 14:
        factors.append(f"{int(data.days_since_last_interaction)} dias sem interação")
    if data.interaction_count < 10:
        factors.append("poucas interações")
    if data.sentiment_score < 0:
        factors.append("sentimento negativo")
    if data.purchase_frequency < 0.3:
        factors.append("baixa frequência")
    return factors


def calculate_sentiment_score(interactions: List[Interaction]) -> float:
    """Average sentiment (POSITIVE=1, NEUTRAL=0, NEGATIVE=-1), 2 decimal places"""
    if not interactions:
        return 0.0

    values = [SENTIMENT_VALUES.get(i.sentiment, 0) for i in interactions]
    return _round_half_up(sum(values) / len(values), 2)


def calculate_purchase_frequency(interactions: List[Interaction], now: datetime | None = None) -> float:
    """
    Purchases per month since the first purchase.

    Elapsed time is floored at one month so a same-day first purchase
    doesn't blow up the rate.
    """
    purchases = [i for i in interactions if i.type == InteractionType.PURCHASE]
    if not purchases:
        return 0.0

    first_purchase = min(purchases, key=lambda i: i.created_at)
    months_since_first = max(1.0, elapsed_days(first_purchase.created_at, now) / 30)

    return len(purchases) / months_since_first


def identify_behavior_patterns(interactions: List[Interaction]) -> Dict[str, Any]:
    """
    Summarize contact habits.

    Keys:
    - preferred_contact_hour: most common hour of day (ties: first seen)
    - preferred_categories: top 3 categories (omitted when none)
    - purchase_pattern: stats over purchases with a value (omitted when none)
    - communication_pattern: interaction counts by type (always present)
    """
    patterns: Dict[str, Any] = {}

    # Counter.most_common keeps first-seen order among equal counts
    hour_counts = Counter(i.created_at.hour for i in interactions)
    if hour_counts:
        patterns["preferred_contact_hour"] = hour_counts.most_common(1)[0][0]

    category_counts = Counter(i.category for i in interactions if i.category)
    top_categories = [category for category, _ in category_counts.most_common(3)]
    if top_categories:
        patterns["preferred_categories"] = top_categories

    purchase_values = [i.value_or_zero() for i in interactions if i.is_purchase() and i.has_value()]
    if purchase_values:
        patterns["purchase_pattern"] = {
            "average_value": int(_round_half_up(sum(purchase_values) / len(purchase_values))),
            "max_value": max(purchase_values),
            "min_value": min(purchase_values),
            "total_purchases": len(purchase_values),
        }

    patterns["communication_pattern"] = {
        "total_interactions": len(interactions),
        "questions_asked": sum(1 for i in interactions if i.type == InteractionType.QUESTION),
        "complaints_raised": sum(1 for i in interactions if i.type == InteractionType.COMPLAINT),
        "feedback_given": sum(1 for i in interactions if i.type == InteractionType.FEEDBACK),
    }

    return patterns


def generate_recommendations(data: ClientAnalysisData) -> List[str]:
    """
    Segment playbook plus behavior-driven nudges, de-duplicated in order.

    The segment comes from the client snapshot; without one it is derived
    from the aggregates.
    """
    segment = data.client.segment if data.client else determine_client_segment(data)
    recommendations = list(SEGMENT_RECOMMENDATIONS.get(segment, []))

    if data.days_since_last_interaction > 30:
        recommendations.append("Contato proativo para reengajamento")

    if data.sentiment_score < 0:
        recommendations.append("Ação de melhoria da experiência")
        recommendations.append("Follow-up de satisfação")

    if data.total_value > 3000:
        recommendations.append("Upgrade para categoria premium")

    return list(dict.fromkeys(recommendations))


def build_analysis_data(
    client: Client,
    interactions: List[Interaction],
    now: datetime | None = None,
) -> ClientAnalysisData:
    """
    Aggregate a client's history the way the repository layer does.

    Days since last interaction fall back to the client's creation date
    when there is no history.
    """
    now = now or utcnow()
    valued = [i.value_or_zero() for i in interactions if i.has_value()]
    total_value = sum(valued)

    last_seen = max((i.created_at for i in interactions), default=client.created_at)

    return ClientAnalysisData(
        client=client,
        interactions=list(interactions),
        total_value=total_value,
        interaction_count=len(interactions),
        days_since_last_interaction=math.floor(elapsed_days(last_seen, now)),
        average_value=total_value / len(valued) if valued else 0.0,
        purchase_frequency=calculate_purchase_frequency(interactions, now),
        sentiment_score=calculate_sentiment_score(interactions),
    )


def analyze_client(data: ClientAnalysisData, now: datetime | None = None) -> ClientProfile:
    """
    Main entry point: score a client and derive its insights.

    Recommendations use the freshly computed segment. The returned client
    snapshot carries the new score, segment and churn risk.
    """
    now = now or utcnow()
    engagement_score = calculate_engagement_score(data)
    segment = determine_client_segment(data)
    churn_score = calculate_churn_risk_score(data)
    churn_risk = churn_risk_from_score(churn_score)

    client: Optional[Client] = data.client
    if client is not None:
        client = (
            client.with_engagement_score(engagement_score)
            .with_segment(segment)
            .with_churn_risk(churn_risk)
        )

    recommendations = generate_recommendations(replace(data, client=client))
    behavior_patterns = identify_behavior_patterns(data.interactions)

    insights: List[Insight] = []
    if client is not None:
        insights.append(
            Insight.create_segmentation(
                client.id,
                segment.value,
                {
                    "engagement_score": engagement_score,
                    "total_value": data.total_value,
                    "interaction_count": data.interaction_count,
                    "days_since_last_interaction": data.days_since_last_interaction,
                },
            )
        )
        if churn_risk in CHURN_INSIGHT_RISKS:
            insights.append(
                Insight.create_churn_prediction(
                    client.id,
                    min(churn_score, 100) / 100,
                    identify_churn_factors(data),
                    now=now,
                )
            )
        if recommendations:
            insights.append(
                Insight.create_recommendation(
                    client.id, recommendations, settings.recommendation_confidence, now=now
                )
            )

    return ClientProfile(
        client=client,
        engagement_score=engagement_score,
        segment=segment,
        churn_risk=churn_risk,
        churn_score=churn_score,
        sentiment_score=data.sentiment_score,
        purchase_frequency=data.purchase_frequency,
        behavior_patterns=behavior_patterns,
        recommendations=recommendations,
        insights=insights,
    )
