"""
Pydantic models for Dashboard API request/response types.

Engine results are returned through their own to_dict(); these models cover
request bodies and the few envelope responses.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from cadence.history.models import CalendarEvent, EnergyLevel, MoodLevel, Task


# =============================================================================
# Health
# =============================================================================


class HealthCheck(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Overall system status")
    version: str = Field(default="0.1.0", description="API version")
    timestamp: datetime = Field(default_factory=datetime.now, description="Check timestamp")
    services: dict[str, str] = Field(
        default_factory=dict, description="Individual service statuses"
    )


class ErrorResponse(BaseModel):
    error: str
    code: str


# =============================================================================
# Suggestions
# =============================================================================


class TaskInput(BaseModel):
    """A candidate task supplied by the caller."""

    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    energy: EnergyLevel = Field(default=EnergyLevel.MEDIUM, description="Energy required")
    created_at: datetime = Field(..., description="Creation timestamp")
    completed: bool = Field(default=False)
    is_micro_step: bool = Field(default=False, description="Already broken into a small step")
    estimated_minutes: int | None = Field(None, ge=0, description="Estimated duration")

    def to_task(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            energy=self.energy,
            created_at=self.created_at,
            completed=self.completed,
            is_micro_step=self.is_micro_step,
            estimated_minutes=self.estimated_minutes,
        )


class CalendarEventInput(BaseModel):
    id: str
    title: str = ""
    start: datetime
    end: datetime

    def to_event(self) -> CalendarEvent:
        return CalendarEvent(id=self.id, title=self.title, start=self.start, end=self.end)


class SuggestionRequest(BaseModel):
    tasks: list[TaskInput] = Field(default_factory=list, description="Candidate tasks")
    energy: EnergyLevel | None = Field(None, description="Current energy, if known")
    mood: MoodLevel | None = Field(None, description="Current mood, if known")
    calendar_events: list[CalendarEventInput] = Field(default_factory=list)
    limit: int | None = Field(None, ge=1, le=20, description="Maximum suggestions")


# =============================================================================
# Check-ins and nudges
# =============================================================================


class CheckInResponseRequest(BaseModel):
    response: str = Field(..., min_length=1, description="The user's answer")


class NudgeToggleRequest(BaseModel):
    enabled: bool


class ActionResponse(BaseModel):
    success: bool
    message: str
