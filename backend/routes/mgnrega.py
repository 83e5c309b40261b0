"""MGNREGA dataset routes — cached read and filter."""

import logging

from fastapi import APIRouter, Depends, Query, Request

from services.mgnrega import MgnregaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_service(request: Request) -> MgnregaService:
    return request.app.state.mgnrega


@router.get("/mgnrega")
async def mgnrega_records(service: MgnregaService = Depends(get_service)) -> dict:
    """Cached records, or a live fetch when nothing is cached yet."""
    return await service.get_records()


@router.get("/mgnrega/filter")
async def mgnrega_filter(
    state: str | None = Query(None),
    district: str | None = Query(None),
    service: MgnregaService = Depends(get_service),
) -> dict:
    """Filter cached records by state and/or district. Never fetches live."""
    result = service.filter_records(state=state, district=district)
    logger.debug("Filter state=%s district=%s matched %d records", state, district, result["count"])
    return result
