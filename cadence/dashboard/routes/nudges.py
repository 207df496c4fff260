"""
Nudges Route - Daily Nudge Schedule

Provides endpoints for:
- Listing the persisted schedule
- Optimal time slots from focus and energy history
- Generating the recommended schedule
- Enabling, disabling and deleting nudges
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status

from cadence.dashboard.deps import get_engine, get_now
from cadence.dashboard.models import ActionResponse, NudgeToggleRequest
from cadence.engagement import store as engagement_store
from cadence.engine import CadenceEngine


router = APIRouter()


@router.get("")
async def list_nudges(
    enabled_only: bool = False,
    engine: CadenceEngine = Depends(get_engine),
):
    nudges = await engagement_store.list_nudges(engine.user_id, enabled_only=enabled_only)
    return {"nudges": [n.to_dict() for n in nudges]}


@router.get("/optimal-slots")
async def get_optimal_slots(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    return {"slots": [s.to_dict() for s in engine.optimal_slots(now)]}


@router.get("/due")
async def get_due_nudges(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    """Enabled nudges inside their fire window right now."""
    nudges = await engine.due_nudges(now)
    return {"nudges": [n.to_dict() for n in nudges]}


@router.post("/recommend")
async def recommend_nudges(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    """Build and persist the recommended schedule."""
    nudges = await engine.recommend_nudges(now)
    return {"nudges": [n.to_dict() for n in nudges]}


@router.patch("/{nudge_id}", response_model=ActionResponse)
async def toggle_nudge(
    nudge_id: str,
    request: NudgeToggleRequest,
    engine: CadenceEngine = Depends(get_engine),
):
    updated = await engagement_store.toggle_nudge(engine.user_id, nudge_id, request.enabled)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Nudge {nudge_id} not found"
        )
    state = "enabled" if request.enabled else "disabled"
    return ActionResponse(success=True, message=f"Nudge {state}")


@router.delete("/{nudge_id}", response_model=ActionResponse)
async def delete_nudge(nudge_id: str, engine: CadenceEngine = Depends(get_engine)):
    deleted = await engagement_store.delete_nudge(engine.user_id, nudge_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Nudge {nudge_id} not found"
        )
    return ActionResponse(success=True, message="Nudge deleted")
