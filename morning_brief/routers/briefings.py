"""
Briefings router.
"""
import logging

from fastapi import APIRouter, HTTPException, status

from morning_brief.schemas.delivery import DeliveryRequest, DeliveryResponse
from morning_brief.services.briefing import BriefingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/briefings", tags=["Briefings"])


@router.post("/v2", response_model=DeliveryResponse)
async def deliver_briefing(request: DeliveryRequest) -> DeliveryResponse:
    """Produce a precomputed brief, its view and an optional reaction writeback."""
    service = BriefingService()

    try:
        return await service.deliver(request)
    except Exception as e:
        logger.exception("Briefing delivery failed")
        service.telemetry.emit("api.briefing.v2", "error", {"error": str(e)}, level="error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Briefing v2 error",
        )
