"""
Integration tests for cadence/cli.py

Runs main() in-process against isolated databases and reads the JSON
printed to stdout.
"""

import json

import pytest

from cadence import __version__
from cadence.cli import build_parser, main


AT = ["--at", "2026-10-14T10:00:00"]


def _run(capsys, *argv):
    main([*argv])
    return json.loads(capsys.readouterr().out)


class TestParser:
    def test_global_options(self):
        args = build_parser().parse_args(["--user", "alice", *AT, "patterns"])

        assert args.user == "alice"
        assert args.at == "2026-10-14T10:00:00"
        assert args.command == "patterns"

    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == f"Cadence version {__version__}"

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: cadence" in capsys.readouterr().out


class TestLogAndAnalyze:
    """Recording history then reading it back."""

    def test_log_completion_then_patterns(self, isolated_dbs, capsys):
        logged = _run(
            capsys, "--at", "2026-10-14T09:00:00",
            "log", "completion", "Reply to Sam", "--energy", "low",
        )
        assert logged["success"] is True
        assert logged["record"]["energy"] == "low"

        patterns = _run(capsys, *AT, "patterns")

        assert patterns["total_completions"] == 1
        assert patterns["peak_hours"] == [9, 10, 11]
        assert patterns["completions_by_energy"]["low"] == 1

    def test_energy_is_clamped(self, isolated_dbs, capsys):
        logged = _run(capsys, *AT, "log", "energy", "14")
        assert logged["record"]["level"] == 10.0

    def test_mood_then_correlations(self, isolated_dbs, capsys):
        _run(capsys, *AT, "log", "mood", "low", "--energy", "low", "--context", "morning")

        result = _run(capsys, *AT, "correlations")

        assert result["mood_energy"]["strength"] == "neutral"
        assert result["mood_pattern"]["average_mood_by_hour"]["10"] == 1.0

    def test_users_are_separate(self, isolated_dbs, capsys):
        _run(capsys, "--user", "alice", *AT, "log", "completion", "Dishes")

        bob = _run(capsys, "--user", "bob", *AT, "patterns")

        assert bob["total_completions"] == 0


class TestSuggestAndEngage:
    def test_suggest_from_file(self, isolated_dbs, capsys, tmp_path):
        tasks_file = tmp_path / "tasks.json"
        tasks_file.write_text(json.dumps([
            {"id": "big", "title": "Write report", "energy": "high",
             "created_at": "2026-10-13T09:00:00"},
            {"id": "tiny", "title": "Open the doc", "energy": "low", "is_micro_step": True,
             "created_at": "2026-10-13T09:00:00"},
            {"id": "bad", "title": "No energy", "created_at": "2026-10-13T09:00:00"},
        ]))

        suggestions = _run(
            capsys, *AT, "suggest", str(tasks_file), "--energy", "low", "--mood", "low"
        )

        assert [s["task_id"] for s in suggestions] == ["tiny", "big"]
        assert suggestions[0]["score"] == 100

    def test_check_in_for_new_user(self, isolated_dbs, capsys):
        assert _run(capsys, *AT, "check-in") == {"check_in": None}

    def test_nudge_lifecycle(self, isolated_dbs, capsys):
        recommended = _run(capsys, *AT, "nudges", "recommend")
        assert [n["scheduled_time"] for n in recommended] == ["06:00", "07:00", "14:00"]

        toggled = _run(capsys, *AT, "nudges", "toggle", recommended[0]["id"], "--off")
        assert toggled == {"success": True}

        enabled = _run(capsys, *AT, "nudges", "list", "--enabled-only")
        assert len(enabled) == 2

        slots = _run(capsys, *AT, "nudges", "slots")
        assert [s["hour"] for s in slots] == [6, 7, 8]

    def test_deleting_unknown_nudge_exits_non_zero(self, isolated_dbs, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([*AT, "nudges", "delete", "nope"])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out) == {"success": False}
