"""
Engagement event ingestion endpoint.

Event producers must never be broken by tracking, so this endpoint always
acknowledges with 202, whatever happens to the event afterwards.
"""

from fastapi import APIRouter, Request, status
from starlette.concurrency import run_in_threadpool

from core.logger import get_logger
from modules.engagement.dispatch import run_best_effort, run_best_effort_async
from modules.engagement.ingestor import get_ingestor
from modules.metrics.ingestion_metrics import UNKNOWN_KIND
from api.models.schemas import EventAck

router = APIRouter(tags=["events"])
logger = get_logger(__name__)


@router.post("", response_model=EventAck, status_code=status.HTTP_202_ACCEPTED)
async def ingest_event(request: Request):
    """
    Record one engagement event.

    Body: ``{"estimateId": str, "kind": str, "payload": {...}, "occurredAt": optional}``.
    Malformed bodies, rejected events and an unavailable ingestor are logged
    and still acknowledged.
    """
    # Resolved in the handler so construction failures cannot escape as a 500
    ok, ingestor = run_best_effort("get_ingestor", get_ingestor)
    if not ok:
        return EventAck()

    try:
        raw = await request.json()
    except Exception as e:
        logger.warning("Unreadable event body", path=request.url.path, error=str(e))
        run_best_effort("record_unreadable_body", ingestor.metrics.record_rejected, UNKNOWN_KIND, "unreadable body")
        return EventAck()

    await run_best_effort_async("ingest_event", run_in_threadpool(ingestor.ingest, raw))
    return EventAck()
