"""
Patterns Route - Learned Rhythms

Provides read-only views over the user's history:
- Peak hours, best days, weekly trend and energy patterns
- Mood/energy and mood/productivity correlations
- Mood pattern and insights
- Weekly focus report
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from cadence.dashboard.deps import get_engine, get_now
from cadence.engine import CadenceEngine
from cadence.history.models import EnergyLevel


router = APIRouter()


@router.get("")
async def get_patterns(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    """Peak hours, best days, trend and per-energy completion stats."""
    return engine.patterns(now).to_dict()


@router.get("/correlations")
async def get_correlations(engine: CadenceEngine = Depends(get_engine)):
    return engine.correlations()


@router.get("/mood")
async def get_mood_pattern(engine: CadenceEngine = Depends(get_engine)):
    return engine.mood_pattern().to_dict()


@router.get("/insights")
async def get_insights(
    energy: EnergyLevel | None = None,
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    insights = engine.insights(now, energy=energy, mood=engine.current_mood(now))
    return {"insights": [i.to_dict() for i in insights]}


@router.get("/weekly-report")
async def get_weekly_report(
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    report = await engine.weekly_report(now)
    return report.to_dict()
