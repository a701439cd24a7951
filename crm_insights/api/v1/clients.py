"""POST /v1/clients/analysis - score a client from its interaction history"""

import time
import logging
from fastapi import APIRouter, HTTPException, Request

from crm_insights.api.dependencies import get_request_id
from crm_insights.api.v1.schemas import ClientAnalysisRequest, ClientProfileResponse
from crm_insights.domain.exceptions import EntityValidationError
from crm_insights.domain.scoring import analyze_client, build_analysis_data
from crm_insights.infrastructure.observability.logging import log_client_analysis
from crm_insights.infrastructure.observability.metrics import (
    record_client_profile,
    validation_failure_counter,
)

router = APIRouter()


@router.post("/clients/analysis", response_model=ClientProfileResponse)
def analyze_client_history(request_body: ClientAnalysisRequest, request: Request):
    """
    Compute a client's behavioral profile.

    Flow:
    1. Build Client and Interaction entities (invariants enforced here)
    2. Aggregate history (total value, recency, frequency, sentiment)
    3. Score engagement, segment, churn risk; derive patterns and insights
    4. Return the updated client snapshot plus insights to persist
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        client = request_body.client.to_domain()
        interactions = [item.to_domain(client.id) for item in request_body.interactions]
        data = build_analysis_data(client, interactions)
        profile = analyze_client(data)

    except EntityValidationError as e:
        validation_failure_counter.labels(field=e.field).inc()
        logging.warning(f"Invalid client data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=f"Could not process client: {e}")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_client_profile(profile)
    log_client_analysis(
        request_id,
        profile.client.id,
        profile.segment.value,
        profile.churn_risk.value,
        profile.engagement_score,
        duration_ms,
    )

    return ClientProfileResponse.from_domain(profile, data)
