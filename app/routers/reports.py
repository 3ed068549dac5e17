from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel
from typing import Dict, Any
import asyncio
import logging

from ..core.exceptions import ReportValidationError
from ..models.database_models import Report
from ..services.water_source_state import WaterSourceStateHolder
from .water_sources import get_state_holder

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


class ReportRequest(BaseModel):
    source_name: str
    issue: str


@router.post("/", response_model=Dict[str, Any])
async def submit_report(
    body: ReportRequest,
    wait: bool = Query(False, description="Wait for Firestore to accept the report"),
    holder: WaterSourceStateHolder = Depends(get_state_holder)
):
    """Submit an issue report for a water source"""
    completed = asyncio.Event()
    try:
        report = Report(source_name=body.source_name, issue=body.issue)
        task = holder.submit_report(report, on_complete=completed.set)
    except ReportValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except Exception as e:
        logger.exception(f"Error submitting report: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if not wait:
        return {"success": True, "message": "Report submission started"}

    await task
    if completed.is_set():
        return {"success": True, "message": holder.success_message}
    raise HTTPException(status_code=502, detail=holder.error_message)
