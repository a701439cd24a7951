"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from crm_insights.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_message_processed(
    request_id: str,
    message_id: str,
    interaction_type: str,
    sentiment: str,
    should_respond: bool,
    duration_ms: float,
) -> None:
    """Log classification outcome for one inbound message"""
    logging.info(
        "Message classified",
        extra={
            "request_id": request_id,
            "message_id": message_id,
            "step": "message_classified",
            "interaction_type": interaction_type,
            "sentiment": sentiment,
            "auto_reply": should_respond,
            "duration_ms": duration_ms,
        },
    )


def log_client_analysis(
    request_id: str,
    client_id: str,
    segment: str,
    churn_risk: str,
    engagement_score: int,
    duration_ms: float,
) -> None:
    """Log structured scoring outcome for analysis"""
    logging.info(
        "Client analysis completed",
        extra={
            "request_id": request_id,
            "client_id": client_id,
            "step": "client_analysis_complete",
            "segment": segment,
            "churn_risk": churn_risk,
            "engagement_score": engagement_score,
            "duration_ms": duration_ms,
        },
    )
