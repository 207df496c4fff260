"""
Check-Ins Route - Proactive Check-Ins

Provides endpoints for:
- Evaluating whether a check-in should fire now
- Recording a response
- Today's planned check-ins
- Response statistics
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status

from cadence.dashboard.deps import get_engine, get_now
from cadence.dashboard.models import CheckInResponseRequest
from cadence.engine import CadenceEngine
from cadence.history.models import MoodLevel


router = APIRouter()


@router.post("/evaluate")
async def evaluate_check_in(
    mood: MoodLevel | None = None,
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    """
    Run the check-in rules as of now.

    A fired check-in is persisted and returned; otherwise check_in is null.
    """
    check_in = await engine.check_in(now, mood=mood)
    return {"check_in": check_in.to_dict() if check_in else None}


@router.post("/{check_in_id}/respond")
async def respond_to_check_in(
    check_in_id: str,
    request: CheckInResponseRequest,
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    check_in = await engine.respond_to_check_in(check_in_id, request.response, now)
    if check_in is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Check-in {check_in_id} not found"
        )
    return {"check_in": check_in.to_dict()}


@router.get("/planned")
async def get_planned_check_ins(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    planned = engine.check_ins.get_scheduled_check_ins(now, engine.patterns(now).peak_hours)
    return {"planned": [p.to_dict() for p in planned]}


@router.get("/stats")
async def get_check_in_stats(engine: CadenceEngine = Depends(get_engine)):
    return engine.check_ins.get_check_in_stats()
