"""Prometheus metrics for classification mix, client segments and churn risk"""

from prometheus_client import Counter, Histogram

from crm_insights.domain.models import ClientProfile, ProcessedMessage

# Classification metrics
message_counter = Counter(
    "crm_messages_processed_total",
    "Inbound messages classified",
    ["interaction_type", "sentiment"],
)

auto_reply_counter = Counter(
    "crm_auto_replies_total",
    "Automatic replies suggested",
    ["interaction_type"],
)

# Scoring metrics
client_segment_counter = Counter(
    "crm_client_segment_total",
    "Client analyses by resulting segment",
    ["segment"],  # VIP | FREQUENT | OCCASIONAL | INACTIVE
)

churn_risk_counter = Counter(
    "crm_churn_risk_total",
    "Client analyses by churn risk tier",
    ["risk"],  # LOW | MEDIUM | HIGH | CRITICAL
)

validation_failure_counter = Counter(
    "crm_validation_failures_total",
    "Requests rejected because an entity invariant was violated",
    ["field"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_processed_message(processed: ProcessedMessage) -> None:
    """Record classification mix and auto-reply volume"""
    message_counter.labels(
        interaction_type=processed.interaction_type.value,
        sentiment=processed.sentiment.value,
    ).inc()

    if processed.should_respond:
        auto_reply_counter.labels(interaction_type=processed.interaction_type.value).inc()


def record_client_profile(profile: ClientProfile) -> None:
    client_segment_counter.labels(segment=profile.segment.value).inc()
    churn_risk_counter.labels(risk=profile.churn_risk.value).inc()
