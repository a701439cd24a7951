"""POST /v1/messages/* - classify inbound customer messages"""

import time
import logging
from fastapi import APIRouter, HTTPException, Request

from crm_insights.api.dependencies import get_request_id
from crm_insights.api.v1.schemas import (
    BatchRequest,
    BatchResponse,
    InboundMessageSchema,
    ProcessedMessageResponse,
)
from crm_insights.config import settings
from crm_insights.domain.classifier import process_message, to_interaction
from crm_insights.domain.exceptions import EntityValidationError
from crm_insights.infrastructure.observability.logging import log_message_processed
from crm_insights.infrastructure.observability.metrics import (
    record_processed_message,
    validation_failure_counter,
)

router = APIRouter()


def _classify(message: InboundMessageSchema, request_id: str) -> ProcessedMessageResponse:
    """
    Classify one message and build its interaction record.

    Classification is recorded before the record is built, so a message
    rejected by the interaction invariants still counts as processed.
    """
    start_time = time.time()
    processed = process_message(message.to_domain())

    duration_ms = (time.time() - start_time) * 1000
    record_processed_message(processed)
    log_message_processed(
        request_id,
        message.id,
        processed.interaction_type.value,
        processed.sentiment.value,
        processed.should_respond,
        duration_ms,
    )
    return ProcessedMessageResponse.from_domain(processed, to_interaction(processed))


@router.post("/messages/process", response_model=ProcessedMessageResponse)
def process_inbound_message(message: InboundMessageSchema, request: Request):
    """
    Classify a single inbound message.

    Returns interaction type, sentiment, extracted data, the suggested
    reply (if any) and the interaction record to persist.
    """
    request_id = get_request_id(request)

    try:
        return _classify(message, request_id)

    except EntityValidationError as e:
        validation_failure_counter.labels(field=e.field).inc()
        logging.warning(f"Invalid message {message.id}: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=f"Could not process message: {e}")


@router.post("/messages/batch", response_model=BatchResponse)
def process_message_batch(batch: BatchRequest, request: Request):
    """
    Classify messages in order.

    A message that cannot become an interaction record is reported in its
    own result; the rest of the batch is still processed.
    """
    request_id = get_request_id(request)

    if len(batch.messages) > settings.max_batch_size:
        raise HTTPException(
            status_code=413,
            detail=f"Batch exceeds {settings.max_batch_size} messages",
        )

    results = []
    for message in batch.messages:
        try:
            results.append(_classify(message, request_id))
        except EntityValidationError as e:
            validation_failure_counter.labels(field=e.field).inc()
            logging.warning(f"Invalid message {message.id}: {e}", extra={"request_id": request_id})
            processed = process_message(message.to_domain())
            results.append(
                ProcessedMessageResponse.from_domain(processed, error=f"Could not process message: {e}")
            )

    return BatchResponse(processed=len(results), results=results)
