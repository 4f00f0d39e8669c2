"""
Engagement gate endpoint.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool

from core.config import get_config
from core.logger import get_logger
from modules.engagement.gate import GateAction, UnknownGateActionError, resolve_action
from modules.engagement.reader import ProfileReader
from api.middleware.auth import verify_api_key
from api.middleware.error_handler import APIError
from api.middleware.rate_limit import limiter
from api.models.schemas import GateDecisionResponse
from api.routes.leads import get_reader

router = APIRouter(tags=["gate"])
logger = get_logger(__name__)
config = get_config()


@router.get("/{estimate_id}", response_model=GateDecisionResponse)
@limiter.limit(config.read_rate_limit)
async def evaluate_gate(
    request: Request,
    estimate_id: str,
    action: str = Query(
        GateAction.REQUEST_ONSITE_EVALUATION.value,
        description="High-commitment action the user is attempting"
    ),
    api_key: str = Depends(verify_api_key),
    reader: ProfileReader = Depends(get_reader)
):
    """
    Check whether a user may proceed directly to ``action``.

    A blocked decision is a nudge, not an error: it returns 200 with
    ``allowed: false`` and a section hint for the UI.
    """
    try:
        resolved = resolve_action(action)
    except UnknownGateActionError as e:
        raise APIError(
            message=str(e),
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="unknown_gate_action",
            details={"allowed_actions": [a.value for a in GateAction]}
        )

    decision = await run_in_threadpool(reader.evaluate_gate, estimate_id, resolved)
    return GateDecisionResponse(
        estimate_id=estimate_id,
        action=resolved.value,
        allowed=decision.allowed,
        reason_if_blocked=decision.reason_if_blocked,
        hint_target_section=decision.hint_target_section,
    )
