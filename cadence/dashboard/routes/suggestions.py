"""
Suggestions Route - What To Do Next

Scores caller-supplied tasks against the current context and returns the
best few with a reason each.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from cadence.dashboard.deps import get_engine, get_now
from cadence.dashboard.models import SuggestionRequest
from cadence.engine import CadenceEngine
from cadence.suggestions.scorer import get_suggestions


router = APIRouter()


@router.post("")
async def suggest_tasks(
    request: SuggestionRequest,
    engine: CadenceEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
):
    """
    Rank tasks for right now.

    Returns the context used for scoring alongside the suggestions so the
    client can show why a task was picked.
    """
    mood = request.mood or engine.current_mood(now)
    context = engine.context(
        now,
        energy=request.energy,
        mood=mood,
        calendar_events=[e.to_event() for e in request.calendar_events],
    )
    limit = request.limit or engine.config.suggestions.default_limit
    suggestions = get_suggestions([t.to_task() for t in request.tasks], context, now, limit)

    return {
        "context": context.to_dict(),
        "suggestions": [s.to_dict() for s in suggestions],
    }
