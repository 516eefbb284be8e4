"""MedSim API Routes"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request

from medsim.config import settings
from medsim.core.data.models import LLMCompletionResponse, LLMRequest
from medsim.core.error_handlers import error_response

logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/api", tags=["llm-api"])


@router.post("/llm", response_model=LLMCompletionResponse, response_model_by_alias=True)
async def generate_completion(llm_request: LLMRequest, request: Request):
    """Run a simulation LLM request through the shared rate limiter and retries"""
    try:
        llm_client = request.app.state.llm_client
        response = await llm_client.chat(llm_request)

        return LLMCompletionResponse(
            **response.model_dump(),
            disclaimer=settings.MEDICAL_DISCLAIMER,
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            request_type=llm_request.type,
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("LLM request failed: type=%s, error=%s", llm_request.type, type(e).__name__)
        return error_response(e)


@router.get("/health")
async def health(request: Request):
    """Service health with current rate limiter headroom"""
    rate_limiter = request.app.state.rate_limiter
    return {
        "status": "ok",
        "rate_limiter": {
            "capacity": rate_limiter.capacity,
            "refill_rate": rate_limiter.refill_rate,
            "available_tokens": round(rate_limiter.available_tokens, 2),
        },
    }
