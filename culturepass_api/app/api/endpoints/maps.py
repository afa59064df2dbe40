"""Map endpoint: every plottable event, venue and business in one call."""

from fastapi import APIRouter

from culturepass_api.app.schemas.venue import MapData
from culturepass_api.app.services.venue_service import MapService

router = APIRouter()


@router.get("/data", response_model=MapData)
async def map_data() -> MapData:
    return await MapService.map_data()
