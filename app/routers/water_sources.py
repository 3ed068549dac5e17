from fastapi import APIRouter, HTTPException, Depends, Query, Path
from fastapi.requests import HTTPConnection
from typing import Dict, Any
import logging

from ..services.display_formatter import to_display_dict
from ..services.water_source_state import WaterSourceStateHolder

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/water-sources",
    tags=["Water Sources"],
    responses={404: {"description": "Not found"}}
)


def get_state_holder(connection: HTTPConnection) -> WaterSourceStateHolder:
    holder = getattr(connection.app.state, "water_sources", None)
    if holder is None:
        raise HTTPException(status_code=503, detail="Water source state is not ready")
    return holder


def state_payload(holder: WaterSourceStateHolder) -> Dict[str, Any]:
    return {"success": True, "data": holder.state.model_dump()}


@router.get("/", response_model=Dict[str, Any])
async def list_water_sources(holder: WaterSourceStateHolder = Depends(get_state_holder)):
    """Current water sources, sorted by name. Does not fetch."""
    sources = holder.sources
    return {
        "success": True,
        "data": [to_display_dict(source) for source in sources],
        "count": len(sources),
        "is_loading": holder.is_loading,
        "error_message": holder.error_message,
    }


@router.get("/state", response_model=Dict[str, Any])
async def get_state(holder: WaterSourceStateHolder = Depends(get_state_holder)):
    return state_payload(holder)


@router.post("/refresh", response_model=Dict[str, Any])
async def refresh_water_sources(
    wait: bool = Query(False, description="Wait for the fetch to finish"),
    holder: WaterSourceStateHolder = Depends(get_state_holder)
):
    """Re-fetch water sources from Firestore"""
    try:
        task = holder.refresh()
        if wait:
            await task
            return state_payload(holder)
        return {"success": True, "message": "Refresh started"}
    except Exception as e:
        logger.exception(f"Error refreshing water sources: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/state/error", response_model=Dict[str, Any])
async def clear_error(holder: WaterSourceStateHolder = Depends(get_state_holder)):
    holder.clear_error()
    return state_payload(holder)


@router.delete("/state/success", response_model=Dict[str, Any])
async def clear_success(holder: WaterSourceStateHolder = Depends(get_state_holder)):
    holder.clear_success()
    return state_payload(holder)


@router.get("/{source_id}", response_model=Dict[str, Any])
async def get_water_source(
    source_id: str = Path(..., description="Water source document ID"),
    holder: WaterSourceStateHolder = Depends(get_state_holder)
):
    source = holder.lookup(source_id)
    if source is None:
        raise HTTPException(status_code=404, detail=f"Water source {source_id} not found")
    return {"success": True, "data": to_display_dict(source)}
