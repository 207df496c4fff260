#!/usr/bin/env python3
"""
Cadence Command Line Interface

Main entry point for the `cadence` command. Every subcommand that reads
history prints JSON to stdout.

Usage:
    cadence log completion "Reply to Sam" --energy low
    cadence log energy 7
    cadence log mood low --context afternoon
    cadence patterns
    cadence correlations
    cadence suggest tasks.json --energy high
    cadence check-in --mood low
    cadence nudges recommend
    cadence nudges list
    cadence nudges toggle nudge_focus_3f9a1c0b2d4e --off
    cadence report
    cadence dashboard
    cadence --version
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from cadence import __version__
from cadence.config_models import load_config
from cadence.engagement import store as engagement_store
from cadence.engine import CadenceEngine
from cadence.history.models import (
    CompletionRecord,
    EnergyEntry,
    MoodEntry,
    Task,
    generate_id,
    ingest_rows,
    parse_energy,
    parse_mood,
)
from cadence.history.store import SQLiteHistoryStore
from cadence.logging_config import setup_logging


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _now(args) -> datetime:
    return datetime.fromisoformat(args.at) if args.at else datetime.now()


async def _engine(args) -> CadenceEngine:
    config = load_config()
    user_id = args.user or config.engine.default_user_id
    engine = CadenceEngine(user_id, SQLiteHistoryStore(user_id), config=config)
    await engine.refresh(_now(args))
    return engine


# =============================================================================
# History logging
# =============================================================================


async def cmd_log(args):
    """Append one record to the user's history."""
    config = load_config()
    store = SQLiteHistoryStore(args.user or config.engine.default_user_id)
    now = _now(args)

    if args.log_command == "completion":
        record = CompletionRecord(
            id=generate_id("cmp"),
            task_id=args.task_id or generate_id("task"),
            task_title=args.title,
            energy=parse_energy(args.energy),
            completed_at=now,
            mood=parse_mood(args.mood) if args.mood else None,
        )
        ok = await store.record_completion(record)
    elif args.log_command == "energy":
        record = EnergyEntry.from_dict({"level": args.level, "timestamp": now, "notes": args.notes})
        ok = await store.record_energy(record)
    elif args.log_command == "mood":
        record = MoodEntry(
            id=generate_id("mood"),
            mood=parse_mood(args.mood),
            timestamp=now,
            energy=parse_energy(args.energy) if args.energy else None,
            notes=args.notes,
            context=args.context,
        )
        ok = await store.record_mood(record)
    else:
        print("Unknown log command. Use --help for available commands.")
        return 1

    _print_json({"success": ok, "record": record.to_dict()})
    return 0 if ok else 1


# =============================================================================
# Analysis
# =============================================================================


async def cmd_patterns(args):
    engine = await _engine(args)
    _print_json(engine.patterns(_now(args)).to_dict())


async def cmd_correlations(args):
    engine = await _engine(args)
    result = engine.correlations()
    result["mood_pattern"] = engine.mood_pattern().to_dict()
    _print_json(result)


async def cmd_insights(args):
    engine = await _engine(args)
    now = _now(args)
    energy = parse_energy(args.energy) if args.energy else None
    _print_json([i.to_dict() for i in engine.insights(now, energy=energy)])


async def cmd_report(args):
    engine = await _engine(args)
    report = await engine.weekly_report(_now(args))
    _print_json(report.to_dict())


async def cmd_suggest(args):
    """Rank tasks read from a JSON file (a list of task objects)."""
    with open(Path(args.tasks_file)) as f:
        rows = json.load(f)

    tasks = ingest_rows(rows, Task)
    engine = await _engine(args)
    suggestions = engine.suggest(
        tasks,
        _now(args),
        energy=parse_energy(args.energy) if args.energy else None,
        mood=parse_mood(args.mood) if args.mood else None,
        limit=args.limit,
    )
    _print_json([s.to_dict() for s in suggestions])


# =============================================================================
# Engagement
# =============================================================================


async def cmd_check_in(args):
    engine = await _engine(args)
    check_in = await engine.check_in(_now(args), mood=parse_mood(args.mood) if args.mood else None)
    _print_json({"check_in": check_in.to_dict() if check_in else None})


async def cmd_nudges(args):
    engine = await _engine(args)

    if args.nudges_command == "recommend":
        nudges = await engine.recommend_nudges(_now(args))
        _print_json([n.to_dict() for n in nudges])
    elif args.nudges_command == "slots":
        _print_json([s.to_dict() for s in engine.optimal_slots(_now(args))])
    elif args.nudges_command == "list":
        nudges = await engagement_store.list_nudges(engine.user_id, enabled_only=args.enabled_only)
        _print_json([n.to_dict() for n in nudges])
    elif args.nudges_command == "toggle":
        ok = await engagement_store.toggle_nudge(engine.user_id, args.nudge_id, not args.off)
        _print_json({"success": ok})
        return 0 if ok else 1
    elif args.nudges_command == "delete":
        ok = await engagement_store.delete_nudge(engine.user_id, args.nudge_id)
        _print_json({"success": ok})
        return 0 if ok else 1
    else:
        print("Unknown nudges command. Use --help for available commands.")
        return 1


def cmd_dashboard(args):
    """Handle dashboard subcommand."""
    import uvicorn

    print(f"Starting Cadence Dashboard at http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "cadence.dashboard.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


def cmd_version(args):
    print(f"Cadence version {__version__}")


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadence",
        description="Cadence - behavioral patterns and adaptive scheduling",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument("--user", "-u", default=None, help="User id (default from config)")
    parser.add_argument(
        "--at", default=None, help="Evaluate as of this ISO timestamp instead of now"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # log
    log_parser = subparsers.add_parser("log", help="Record history")
    log_subparsers = log_parser.add_subparsers(dest="log_command", help="Record types")

    log_completion = log_subparsers.add_parser("completion", help="Record a finished task")
    log_completion.add_argument("title", help="Task title")
    log_completion.add_argument("--task-id", default=None, help="Task id")
    log_completion.add_argument(
        "--energy", default="medium", choices=["low", "medium", "high"],
        help="Energy the task needed",
    )
    log_completion.add_argument("--mood", default=None, choices=["low", "neutral", "high"])
    log_completion.set_defaults(func=cmd_log)

    log_energy = log_subparsers.add_parser("energy", help="Record an energy level (1-10)")
    log_energy.add_argument("level", type=float, help="Energy on the 1-10 scale")
    log_energy.add_argument("--notes", default=None)
    log_energy.set_defaults(func=cmd_log)

    log_mood = log_subparsers.add_parser("mood", help="Record a mood")
    log_mood.add_argument("mood", choices=["low", "neutral", "high"])
    log_mood.add_argument("--energy", default=None, choices=["low", "medium", "high"])
    log_mood.add_argument("--context", default=None, help="morning, afternoon, evening, ...")
    log_mood.add_argument("--notes", default=None)
    log_mood.set_defaults(func=cmd_log)

    # analysis
    patterns_parser = subparsers.add_parser("patterns", help="Peak hours, best days, trend")
    patterns_parser.set_defaults(func=cmd_patterns)

    correlations_parser = subparsers.add_parser(
        "correlations", help="Mood/energy and mood/productivity correlations"
    )
    correlations_parser.set_defaults(func=cmd_correlations)

    insights_parser = subparsers.add_parser("insights", help="Insights from learned patterns")
    insights_parser.add_argument("--energy", default=None, choices=["low", "medium", "high"])
    insights_parser.set_defaults(func=cmd_insights)

    report_parser = subparsers.add_parser("report", help="Weekly focus report")
    report_parser.set_defaults(func=cmd_report)

    suggest_parser = subparsers.add_parser("suggest", help="Rank tasks for right now")
    suggest_parser.add_argument("tasks_file", help="JSON file holding a list of tasks")
    suggest_parser.add_argument("--energy", default=None, choices=["low", "medium", "high"])
    suggest_parser.add_argument("--mood", default=None, choices=["low", "neutral", "high"])
    suggest_parser.add_argument("--limit", type=int, default=None, help="Maximum suggestions")
    suggest_parser.set_defaults(func=cmd_suggest)

    # engagement
    check_in_parser = subparsers.add_parser("check-in", help="Evaluate check-in rules now")
    check_in_parser.add_argument("--mood", default=None, choices=["low", "neutral", "high"])
    check_in_parser.set_defaults(func=cmd_check_in)

    nudges_parser = subparsers.add_parser("nudges", help="Daily nudge schedule")
    nudges_subparsers = nudges_parser.add_subparsers(dest="nudges_command", help="Nudge commands")

    nudges_recommend = nudges_subparsers.add_parser(
        "recommend", help="Generate and save the recommended schedule"
    )
    nudges_recommend.set_defaults(func=cmd_nudges)

    nudges_slots = nudges_subparsers.add_parser("slots", help="Show optimal time slots")
    nudges_slots.set_defaults(func=cmd_nudges)

    nudges_list = nudges_subparsers.add_parser("list", help="List saved nudges")
    nudges_list.add_argument("--enabled-only", action="store_true")
    nudges_list.set_defaults(func=cmd_nudges)

    nudges_toggle = nudges_subparsers.add_parser("toggle", help="Enable or disable a nudge")
    nudges_toggle.add_argument("nudge_id")
    nudges_toggle.add_argument("--off", action="store_true", help="Disable instead of enable")
    nudges_toggle.set_defaults(func=cmd_nudges)

    nudges_delete = nudges_subparsers.add_parser("delete", help="Delete a nudge")
    nudges_delete.add_argument("nudge_id")
    nudges_delete.set_defaults(func=cmd_nudges)

    # dashboard
    dashboard_parser = subparsers.add_parser("dashboard", help="Start the dashboard server")
    dashboard_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    dashboard_parser.add_argument(
        "--port", type=int, default=8080, help="Port to bind to (default: 8080)"
    )
    dashboard_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    dashboard_parser.set_defaults(func=cmd_dashboard)

    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        cmd_version(args)
        return

    if not args.command or not hasattr(args, "func"):
        parser.print_help()
        return

    setup_logging()

    result = args.func(args)
    if asyncio.iscoroutine(result):
        result = asyncio.run(result)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
