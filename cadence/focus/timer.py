"""
Tool: Focus Timer
Purpose: Pomodoro-style focus timer with ADHD-friendly adaptations

The timer never schedules itself. Time advances only through tick(), either
called directly or from the run() loop, and the tick boundary is the only
suspension point. start/pause/resume/stop are idempotent: pausing a paused
timer or stopping a stopped one does nothing and raises nothing.

Usage:
    from cadence.focus.timer import FocusTimer

    timer = FocusTimer(on_complete=lambda s: print("done", s.id))
    timer.start_focus_session(task_id="task_1")
    await timer.run()          # or call timer.tick() yourself
    session = timer.stop()
    record = session.to_record()
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cadence.config_models import FocusTimerConfig
from cadence.history.models import EnergyLevel, FocusSessionRecord, MoodLevel, generate_id
from cadence.logging_config import get_logger


logger = get_logger(__name__)

# Shorter sessions are more achievable at lower energy
SUGGESTED_MINUTES = {EnergyLevel.LOW: 10, EnergyLevel.MEDIUM: 20, EnergyLevel.HIGH: 25}


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    BREAK = "break"
    COMPLETED = "completed"


class CancellationToken:
    """Signals a run() loop to stop at the next tick boundary."""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass
class FocusSession:
    started_at: datetime
    duration_seconds: int
    task_id: str | None = None
    mood: MoodLevel | None = None
    status: TimerStatus = TimerStatus.RUNNING
    focused_seconds: int = 0
    break_seconds: int = 0
    completed_pomodoros: int = 0
    ended_at: datetime | None = None
    id: str = field(default_factory=lambda: generate_id("focus"))

    def to_record(self) -> FocusSessionRecord:
        """History record for a finished session."""
        return FocusSessionRecord(
            id=self.id,
            task_id=self.task_id,
            started_at=self.started_at,
            ended_at=self.ended_at,
            duration_minutes=self.focused_seconds / 60,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "focused_seconds": self.focused_seconds,
            "break_seconds": self.break_seconds,
            "status": self.status.value,
            "completed_pomodoros": self.completed_pomodoros,
            "mood": self.mood.value if self.mood else None,
        }


class FocusTimer:
    def __init__(
        self,
        config: FocusTimerConfig | None = None,
        on_tick: Callable[[int], None] | None = None,
        on_complete: Callable[[FocusSession], None] | None = None,
        on_break_start: Callable[[], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or FocusTimerConfig()
        self.on_tick = on_tick
        self.on_complete = on_complete
        self.on_break_start = on_break_start
        self.clock = clock

        self.current_session: FocusSession | None = None
        self.remaining_seconds = 0
        self.session_history: list[FocusSession] = []
        self._token = CancellationToken()
        self._paused_from = TimerStatus.RUNNING

    @property
    def status(self) -> TimerStatus:
        return self.current_session.status if self.current_session else TimerStatus.IDLE

    @property
    def is_active(self) -> bool:
        return self.status in (TimerStatus.RUNNING, TimerStatus.BREAK)

    # =========================================================================
    # Controls
    # =========================================================================

    def start_focus_session(
        self, task_id: str | None = None, mood: MoodLevel | None = None
    ) -> FocusSession:
        """Start a new session, finishing any session already in progress."""
        self.stop()

        focus_seconds = self.config.focus_minutes * 60
        self.current_session = FocusSession(
            started_at=self.clock(),
            duration_seconds=focus_seconds,
            task_id=task_id,
            mood=mood,
        )
        self.remaining_seconds = focus_seconds
        self._token = CancellationToken()

        logger.info("focus_session_started", session_id=self.current_session.id, task_id=task_id)
        return self.current_session

    def pause(self) -> None:
        if self.is_active:
            self._paused_from = self.current_session.status
            self.current_session.status = TimerStatus.PAUSED

    def resume(self) -> None:
        """Continue the paused phase; after a finished phase, start the next pomodoro."""
        if self.status != TimerStatus.PAUSED:
            return
        if self.remaining_seconds <= 0:
            self.remaining_seconds = self.config.focus_minutes * 60
            self.current_session.status = TimerStatus.RUNNING
        else:
            self.current_session.status = self._paused_from

    def start_break(self, is_long: bool = False) -> None:
        if self.current_session is None or self.status == TimerStatus.COMPLETED:
            return
        minutes = self.config.long_break_minutes if is_long else self.config.short_break_minutes
        self._enter_break(minutes)

    def skip_break(self) -> None:
        if self.status == TimerStatus.BREAK:
            self.current_session.status = TimerStatus.RUNNING
            self.remaining_seconds = self.config.focus_minutes * 60

    def stop(self) -> FocusSession | None:
        """
        Finish the current session.

        Returns:
            The finished session, or None if nothing was running
        """
        self._token.cancel()
        if self.current_session is None:
            return None

        session = self.current_session
        session.status = TimerStatus.COMPLETED
        session.ended_at = self.clock()
        self.session_history.append(session)
        self.current_session = None
        self.remaining_seconds = 0

        logger.info("focus_session_stopped", session_id=session.id,
                    focused_seconds=session.focused_seconds)
        return session

    # =========================================================================
    # Ticking
    # =========================================================================

    def tick(self, seconds: int = 1) -> None:
        """Advance the timer. No-op unless running or on a break."""
        if not self.is_active:
            return

        session = self.current_session
        step = min(seconds, self.remaining_seconds)
        self.remaining_seconds -= step
        if session.status == TimerStatus.RUNNING:
            session.focused_seconds += step
        else:
            session.break_seconds += step

        if self.on_tick:
            self.on_tick(self.remaining_seconds)

        if self.remaining_seconds <= 0:
            self._handle_phase_complete()

    async def run(
        self,
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Tick once per interval until the session ends or stop() is called.

        A paused timer keeps the loop alive but ticks do nothing.
        """
        token = self._token
        while not token.cancelled and self.current_session is not None:
            await sleep(interval)
            if token.cancelled:
                break
            self.tick()

    def _enter_break(self, minutes: int) -> None:
        self.current_session.status = TimerStatus.BREAK
        self.remaining_seconds = minutes * 60
        if self.on_break_start:
            self.on_break_start()

    def _handle_phase_complete(self) -> None:
        session = self.current_session

        if session.status == TimerStatus.RUNNING:
            session.completed_pomodoros += 1
            is_long = session.completed_pomodoros % self.config.pomodoros_until_long_break == 0
            minutes = self.config.long_break_minutes if is_long else self.config.short_break_minutes

            if self.config.auto_start_breaks:
                self._enter_break(minutes)
            else:
                session.status = TimerStatus.PAUSED
                if self.on_complete:
                    self.on_complete(session)

        elif session.status == TimerStatus.BREAK:
            if self.config.auto_start_next_pomodoro:
                session.status = TimerStatus.RUNNING
                self.remaining_seconds = self.config.focus_minutes * 60
            else:
                finished = self.stop()
                if self.on_complete and finished:
                    self.on_complete(finished)

    # =========================================================================
    # Stats
    # =========================================================================

    def get_total_focus_minutes(self) -> int:
        return sum(s.focused_seconds // 60 for s in self.session_history)

    def get_total_pomodoros(self) -> int:
        return sum(s.completed_pomodoros for s in self.session_history)

    def get_average_session_length(self) -> int:
        if not self.session_history:
            return 0
        return round(self.get_total_focus_minutes() / len(self.session_history))


def suggest_optimal_duration(energy: EnergyLevel | None) -> int:
    """Suggested focus minutes for the current energy."""
    return SUGGESTED_MINUTES.get(energy, 25)


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"
