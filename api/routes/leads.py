"""
Lead dashboard endpoints: engagement signals per estimate.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from core.config import get_config
from core.logger import get_logger
from modules.engagement.reader import LeadSignals, ProfileReader
from modules.engagement.readiness import ReadinessTier
from api.middleware.auth import verify_api_key
from api.middleware.rate_limit import limiter
from api.models.schemas import (
    EngagementProfileResponse,
    LeadSignalsListResponse,
    LeadSignalsResponse,
    ReadinessMetadata,
)

router = APIRouter(tags=["leads"])
logger = get_logger(__name__)
config = get_config()

MAX_BATCH_ESTIMATES = 100

# Dashboard guidance per tier; attached here, not computed by the engine
READINESS_METADATA: Dict[ReadinessTier, ReadinessMetadata] = {
    ReadinessTier.READY_FOR_ONSITE: ReadinessMetadata(
        expected_timeline="Within 1-2 weeks",
        recommended_action="Schedule on-site evaluation promptly",
    ),
    ReadinessTier.ACTIVELY_PLANNING: ReadinessMetadata(
        expected_timeline="Within 1-3 months",
        recommended_action="Engage with educational follow-up, answer questions",
    ),
    ReadinessTier.EXPLORING: ReadinessMetadata(
        expected_timeline="3+ months or exploratory",
        recommended_action="Provide educational resources, no pressure",
    ),
}


def get_reader() -> ProfileReader:
    """Get reader instance."""
    return ProfileReader()


def to_response(signals: LeadSignals) -> LeadSignalsResponse:
    """Convert reader output to the API schema."""
    return LeadSignalsResponse(
        estimate_id=signals.estimate_id,
        profile=EngagementProfileResponse.model_validate(signals.profile) if signals.profile else None,
        indicators=[indicator.value for indicator in signals.indicators],
        readiness_tier=signals.tier.value,
        readiness_metadata=READINESS_METADATA[signals.tier],
    )


@router.get("/signals", response_model=LeadSignalsListResponse)
@limiter.limit(config.read_rate_limit)
async def list_lead_signals(
    request: Request,
    estimate_ids: List[str] = Query(..., description="Estimate IDs to look up"),
    api_key: str = Depends(verify_api_key),
    reader: ProfileReader = Depends(get_reader)
):
    """
    Get engagement signals for several estimates.

    Results are ordered most ready first, then by number of indicators.
    Unknown estimates are included with no indicators.
    """
    estimate_ids = estimate_ids[:MAX_BATCH_ESTIMATES]
    ordered = await run_in_threadpool(reader.list_lead_signals, estimate_ids)
    items = [to_response(signals) for signals in ordered]
    return LeadSignalsListResponse(items=items, total=len(items))


@router.get("/{estimate_id}/signals", response_model=LeadSignalsResponse)
@limiter.limit(config.read_rate_limit)
async def get_lead_signals(
    request: Request,
    estimate_id: str,
    api_key: str = Depends(verify_api_key),
    reader: ProfileReader = Depends(get_reader)
):
    """
    Get quality indicators and readiness tier for an estimate.

    An estimate with no recorded events is a valid state: it returns a null
    profile, no indicators and "Exploring options".
    """
    signals = await run_in_threadpool(reader.get_lead_signals, estimate_id)
    logger.debug(
        "Served lead signals",
        estimate_id=estimate_id,
        tier=signals.tier.value,
        indicator_count=len(signals.indicators)
    )
    return to_response(signals)
