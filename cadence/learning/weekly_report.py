"""
Tool: Weekly Report
Purpose: Seven-day summary of focus sessions and completed tasks

Weeks run Monday 00:00 to Sunday 23:59:59. Each report compares against
the previous week with whole-number percentage changes.

Usage:
    from cadence.learning.weekly_report import generate_weekly_report

    report = await generate_weekly_report(store, for_date=datetime.now())
    print(report.summary)
"""

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from cadence.history.models import CompletionRecord, FocusSessionRecord, day_of_week
from cadence.history.store import HistoryStore
from cadence.learning.pattern_analyzer import DAY_NAMES
from cadence.logging_config import get_logger


logger = get_logger(__name__)

NOT_ENOUGH_DATA = "Not enough data"


@dataclass(frozen=True)
class DailyStats:
    day: date
    day_name: str
    sessions: int
    focus_minutes: float
    tasks: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "day_name": self.day_name,
            "sessions": self.sessions,
            "focus_minutes": self.focus_minutes,
            "tasks": self.tasks,
        }


@dataclass(frozen=True)
class WeeklyReport:
    week_start: date
    week_end: date
    session_count: int
    total_focus_minutes: float
    tasks_completed: int
    best_day: str
    best_time_of_day: str
    session_change: int
    focus_time_change: int
    tasks_change: int
    summary: str
    daily_stats: list[DailyStats] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "session_count": self.session_count,
            "total_focus_minutes": self.total_focus_minutes,
            "tasks_completed": self.tasks_completed,
            "best_day": self.best_day,
            "best_time_of_day": self.best_time_of_day,
            "comparison": {
                "session_change": self.session_change,
                "focus_time_change": self.focus_time_change,
                "tasks_change": self.tasks_change,
            },
            "summary": self.summary,
            "daily_stats": [d.to_dict() for d in self.daily_stats],
        }


def get_week_start(for_date: datetime) -> datetime:
    """Monday 00:00 of the week containing for_date."""
    monday = for_date - timedelta(days=for_date.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def get_week_end(week_start: datetime) -> datetime:
    return week_start + timedelta(days=6, hours=23, minutes=59, seconds=59, microseconds=999999)


def percent_change(current: float, previous: float) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return round((current - previous) / previous * 100)


def time_of_day_label(hour: int) -> str:
    if hour < 12:
        return "Morning"
    if hour < 17:
        return "Afternoon"
    if hour < 21:
        return "Evening"
    return "Night"


def calculate_daily_stats(
    sessions: Sequence[FocusSessionRecord],
    completions: Sequence[CompletionRecord],
    week_start: datetime,
) -> list[DailyStats]:
    stats = []
    for offset in range(7):
        day = (week_start + timedelta(days=offset)).date()
        day_sessions = [s for s in sessions if s.started_at.date() == day]
        stats.append(DailyStats(
            day=day,
            day_name=DAY_NAMES[day_of_week(datetime.combine(day, datetime.min.time()))],
            sessions=len(day_sessions),
            focus_minutes=sum(s.duration_minutes for s in day_sessions),
            tasks=sum(1 for c in completions if c.completed_at.date() == day),
        ))
    return stats


def find_best_day_and_time(sessions: Sequence[FocusSessionRecord]) -> tuple[str, str]:
    """Day name and time-of-day label with the most focus minutes."""
    if not sessions:
        return NOT_ENOUGH_DATA, NOT_ENOUGH_DATA

    by_day: dict[str, float] = defaultdict(float)
    by_hour: dict[int, float] = defaultdict(float)
    for session in sessions:
        by_day[DAY_NAMES[day_of_week(session.started_at)]] += session.duration_minutes
        by_hour[session.started_at.hour] += session.duration_minutes

    # max() keeps the first of equal values: first-seen day, earliest hour
    best_day = max(by_day, key=lambda d: by_day[d])
    best_hour = max(sorted(by_hour), key=lambda h: by_hour[h])
    return best_day, time_of_day_label(best_hour)


def _format_minutes(total: float) -> str:
    minutes = int(round(total))
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins} minutes"


def generate_summary(
    session_count: int,
    total_focus_minutes: float,
    tasks_completed: int,
    focus_time_change: int,
    best_day: str,
    best_time_of_day: str,
) -> str:
    summary = (
        f"This week you had {session_count} focus sessions totaling "
        f"{_format_minutes(total_focus_minutes)}"
    )
    if tasks_completed > 0:
        plural = "s" if tasks_completed > 1 else ""
        summary += f" and completed {tasks_completed} task{plural}"
    summary += ". "

    if focus_time_change > 0:
        summary += f"That's {focus_time_change}% more focus time than last week! 🎉 "
    elif focus_time_change < 0:
        summary += (
            f"Focus time was down {abs(focus_time_change)}% from last week, "
            "but that's okay - some weeks are like that. "
        )

    if best_day != NOT_ENOUGH_DATA:
        summary += f"Your best day was {best_day}"
        if best_time_of_day != NOT_ENOUGH_DATA:
            summary += f" and you focus best in the {best_time_of_day.lower()}"
        summary += "."

    return summary.strip()


def build_weekly_report(
    week_start: datetime,
    sessions: Sequence[FocusSessionRecord],
    completions: Sequence[CompletionRecord],
    previous_sessions: Sequence[FocusSessionRecord],
    previous_completions: Sequence[CompletionRecord],
) -> WeeklyReport:
    """Assemble the report from already-loaded current and previous week records."""
    best_day, best_time = find_best_day_and_time(sessions)
    focus_minutes = sum(s.duration_minutes for s in sessions)
    previous_focus = sum(s.duration_minutes for s in previous_sessions)

    session_change = percent_change(len(sessions), len(previous_sessions))
    focus_change = percent_change(focus_minutes, previous_focus)
    tasks_change = percent_change(len(completions), len(previous_completions))

    return WeeklyReport(
        week_start=week_start.date(),
        week_end=get_week_end(week_start).date(),
        session_count=len(sessions),
        total_focus_minutes=focus_minutes,
        tasks_completed=len(completions),
        best_day=best_day,
        best_time_of_day=best_time,
        session_change=session_change,
        focus_time_change=focus_change,
        tasks_change=tasks_change,
        summary=generate_summary(
            len(sessions), focus_minutes, len(completions), focus_change, best_day, best_time
        ),
        daily_stats=calculate_daily_stats(sessions, completions, week_start),
    )


async def generate_weekly_report(store: HistoryStore, for_date: datetime) -> WeeklyReport:
    """Load this week and last week from the store and build the report."""
    week_start = get_week_start(for_date)
    week_end = get_week_end(week_start)
    previous_start = week_start - timedelta(days=7)
    previous_end = get_week_end(previous_start)

    sessions = await store.get_focus_sessions(week_start, week_end)
    completions = await store.get_completions(week_start, week_end)
    previous_sessions = await store.get_focus_sessions(previous_start, previous_end)
    previous_completions = await store.get_completions(previous_start, previous_end)

    report = build_weekly_report(
        week_start, sessions, completions, previous_sessions, previous_completions
    )
    logger.info(
        "weekly_report_generated",
        week_start=report.week_start.isoformat(),
        sessions=report.session_count,
        tasks=report.tasks_completed,
    )
    return report


def should_show_weekly_report(now: datetime) -> bool:
    """Monday between 06:00 and 10:59."""
    return day_of_week(now) == 1 and 6 <= now.hour <= 10
