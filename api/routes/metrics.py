"""
Metrics endpoints for ingestion statistics and monitoring.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from core.logger import get_logger
from api.middleware.auth import verify_api_key
from modules.metrics.ingestion_metrics import get_metrics_collector

router = APIRouter(tags=["metrics"])
logger = get_logger(__name__)


@router.get("/ingestion/summary")
async def get_ingestion_summary(
    api_key: str = Depends(verify_api_key)
):
    """
    Get summary statistics for event ingestion since process start.

    Returns:
        Totals, per-kind counters and the most common rejection reasons
    """
    collector = get_metrics_collector()
    return {"summary": collector.get_summary_stats()}


@router.get("/ingestion/kind/{kind}")
async def get_kind_metrics(
    kind: str,
    api_key: str = Depends(verify_api_key)
):
    """
    Get counters for a single event kind.

    Args:
        kind: Event kind (e.g., "scroll_depth")
    """
    metrics = get_metrics_collector().get_kind_metrics(kind)
    if metrics is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No events recorded for kind {kind}"
        )
    return metrics.to_dict()
