"""
Integration tests for cadence/dashboard API endpoints.

Tests the FastAPI dashboard routes:
- /api/health
- /api/patterns and its sub-views
- /api/suggestions
- /api/check-ins
- /api/nudges CRUD

Every request pins the clock with ?at= to Wednesday 2026-10-14 10:00.
"""

from datetime import datetime, timedelta

from cadence.history.models import MoodLevel


REFERENCE_NOW = datetime(2026, 10, 14, 10, 0)
AT = {"at": REFERENCE_NOW.isoformat()}


def _params(**extra):
    return {**AT, **extra}


# ─────────────────────────────────────────────────────────────────────────────
# Health Endpoint Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestHealthEndpoint:
    def test_both_databases_healthy(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"] == {"history": "healthy", "engagement": "healthy"}


# ─────────────────────────────────────────────────────────────────────────────
# Patterns Endpoint Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPatternsEndpoint:
    """Tests for /api/patterns."""

    def test_new_user_defaults(self, test_client):
        response = test_client.get("/api/patterns", params=AT)

        assert response.status_code == 200
        data = response.json()
        assert data["peak_hours"] == [9, 10, 11]
        assert data["best_days"] == [1, 2, 3]
        assert data["weekly_trend"] == "stable"
        assert data["total_completions"] == 0

    def test_reflects_seeded_history(self, test_client, seed_history, make_completion):
        seed_history("default", completions=[
            make_completion(REFERENCE_NOW.replace(hour=14) - timedelta(days=d)) for d in range(1, 4)
        ])

        data = test_client.get("/api/patterns", params=AT).json()

        assert data["peak_hours"] == [14, 9, 10]
        assert data["total_completions"] == 3

    def test_scoped_by_user(self, test_client, seed_history, make_completion):
        seed_history("alice", completions=[make_completion(REFERENCE_NOW - timedelta(hours=1))])

        alice = test_client.get("/api/patterns", params=_params(user_id="alice")).json()
        bob = test_client.get("/api/patterns", params=_params(user_id="bob")).json()

        assert alice["total_completions"] == 1
        assert bob["total_completions"] == 0

    def test_correlations_without_data(self, test_client):
        data = test_client.get("/api/patterns/correlations", params=AT).json()

        assert data["mood_energy"] == {"coefficient": 0.0, "strength": "neutral"}
        assert data["mood_productivity"] == {"coefficient": 0.0, "strength": "neutral"}

    def test_mood_pattern(self, test_client):
        data = test_client.get("/api/patterns/mood", params=AT).json()

        assert len(data["average_mood_by_hour"]) == 24
        assert data["average_mood_by_hour"]["10"] == 2.0

    def test_insights_at_peak_hour(self, test_client):
        data = test_client.get("/api/patterns/insights", params=AT).json()

        titles = [i["title"] for i in data["insights"]]
        assert "Peak Time Now!" in titles

    def test_insights_rejects_unknown_energy(self, test_client):
        response = test_client.get("/api/patterns/insights", params=_params(energy="sleepy"))
        assert response.status_code == 422

    def test_weekly_report(self, test_client, seed_history, make_focus_session):
        seed_history("default", focus_sessions=[
            make_focus_session(REFERENCE_NOW.replace(day=12, hour=9), minutes=50),
        ])

        data = test_client.get("/api/patterns/weekly-report", params=AT).json()

        assert data["week_start"] == "2026-10-12"
        assert data["session_count"] == 1
        assert data["best_day"] == "Monday"


# ─────────────────────────────────────────────────────────────────────────────
# Suggestions Endpoint Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSuggestionsEndpoint:
    """Tests for POST /api/suggestions."""

    def _task(self, task_id, energy, is_micro_step=False):
        return {
            "id": task_id,
            "title": task_id,
            "energy": energy,
            "created_at": REFERENCE_NOW.isoformat(),
            "is_micro_step": is_micro_step,
        }

    def test_low_energy_low_mood_prefers_micro_step(self, test_client):
        body = {
            "tasks": [
                self._task("hard", "high"),
                self._task("tiny", "low", is_micro_step=True),
            ],
            "energy": "low",
            "mood": "low",
        }

        response = test_client.post("/api/suggestions", params=AT, json=body)

        assert response.status_code == 200
        data = response.json()
        assert data["context"]["current_energy"] == "low"
        assert data["context"]["is_peak_hour"] is True
        top = data["suggestions"][0]
        assert top["task_id"] == "tiny"
        assert top["score"] == 100
        assert top["confidence"] == 1.0

    def test_mood_falls_back_to_recent_entry(self, test_client, seed_history, make_mood):
        seed_history("default", mood_entries=[
            make_mood(REFERENCE_NOW - timedelta(minutes=30), mood=MoodLevel.LOW)
        ])

        data = test_client.post(
            "/api/suggestions", params=AT, json={"tasks": [self._task("a", "low")]}
        ).json()

        assert data["context"]["current_mood"] == "low"

    def test_busy_soon_from_calendar(self, test_client):
        start = REFERENCE_NOW + timedelta(minutes=10)
        body = {
            "tasks": [self._task("a", "medium")],
            "calendar_events": [{
                "id": "e1",
                "title": "Standup",
                "start": start.isoformat(),
                "end": (start + timedelta(minutes=15)).isoformat(),
            }],
        }

        data = test_client.post("/api/suggestions", params=AT, json=body).json()

        assert data["context"]["calendar_proximity"] == "busy_soon"

    def test_limit_validation(self, test_client):
        response = test_client.post("/api/suggestions", params=AT, json={"tasks": [], "limit": 0})
        assert response.status_code == 422

    def test_no_tasks(self, test_client):
        data = test_client.post("/api/suggestions", params=AT, json={}).json()
        assert data["suggestions"] == []


# ─────────────────────────────────────────────────────────────────────────────
# Check-In Endpoint Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCheckInsEndpoint:
    """Tests for /api/check-ins."""

    def test_new_user_gets_no_check_in(self, test_client):
        response = test_client.post("/api/check-ins/evaluate", params=AT)

        assert response.status_code == 200
        assert response.json() == {"check_in": None}

    def test_check_in_then_respond(self, test_client, seed_history, make_completion):
        seed_history("default", completions=[
            make_completion(REFERENCE_NOW - timedelta(minutes=100))
        ])

        fired = test_client.post("/api/check-ins/evaluate", params=AT).json()["check_in"]
        assert fired["type"] == "long_inactivity"

        again = test_client.post(
            "/api/check-ins/evaluate",
            params={"at": (REFERENCE_NOW + timedelta(minutes=10)).isoformat()},
        ).json()
        assert again["check_in"] is None

        response = test_client.post(
            f"/api/check-ins/{fired['id']}/respond", params=AT, json={"response": "all good"}
        )
        assert response.status_code == 200
        assert response.json()["check_in"]["responded"] is True

        stats = test_client.get("/api/check-ins/stats", params=AT).json()
        assert stats["total_check_ins"] == 1
        assert stats["response_rate"] == 1.0

    def test_respond_unknown_check_in(self, test_client):
        response = test_client.post(
            "/api/check-ins/missing/respond", params=AT, json={"response": "hi"}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Check-in missing not found", "code": "HTTP_404"}

    def test_respond_requires_text(self, test_client):
        response = test_client.post(
            "/api/check-ins/any/respond", params=AT, json={"response": ""}
        )
        assert response.status_code == 422

    def test_planned_check_ins(self, test_client):
        data = test_client.get("/api/check-ins/planned", params=AT).json()

        assert [(p["type"], p["time"]) for p in data["planned"]] == [
            ("peak_time", "2026-10-14T11:00:00"),
            ("energy_dip", "2026-10-14T14:30:00"),
        ]


# ─────────────────────────────────────────────────────────────────────────────
# Nudges Endpoint Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNudgesEndpoint:
    """Tests for /api/nudges."""

    def test_optimal_slots_for_new_user(self, test_client):
        data = test_client.get("/api/nudges/optimal-slots", params=AT).json()

        assert [(s["hour"], s["confidence"]) for s in data["slots"]] == [(6, 40), (7, 40), (8, 40)]

    def test_recommend_then_list(self, test_client):
        recommended = test_client.post("/api/nudges/recommend", params=AT).json()["nudges"]

        listed = test_client.get("/api/nudges", params=AT).json()["nudges"]

        assert [n["scheduled_time"] for n in recommended] == ["06:00", "07:00", "14:00"]
        assert [n["type"] for n in listed] == ["focus_reminder", "energy_check", "task_suggestion"]
        assert listed == recommended

    def test_recommend_twice_keeps_one_schedule(self, test_client):
        first = test_client.post("/api/nudges/recommend", params=AT).json()["nudges"]
        second = test_client.post("/api/nudges/recommend", params=AT).json()["nudges"]

        listed = test_client.get("/api/nudges", params=AT).json()["nudges"]

        assert [n["id"] for n in second] == [n["id"] for n in first]
        assert listed == second

    def test_toggle_and_delete(self, test_client):
        nudges = test_client.post("/api/nudges/recommend", params=AT).json()["nudges"]
        nudge_id = nudges[0]["id"]

        toggled = test_client.patch(f"/api/nudges/{nudge_id}", params=AT, json={"enabled": False})
        assert toggled.json() == {"success": True, "message": "Nudge disabled"}

        enabled = test_client.get("/api/nudges", params=_params(enabled_only=True)).json()
        assert nudge_id not in [n["id"] for n in enabled["nudges"]]

        deleted = test_client.delete(f"/api/nudges/{nudge_id}", params=AT)
        assert deleted.json() == {"success": True, "message": "Nudge deleted"}

        again = test_client.delete(f"/api/nudges/{nudge_id}", params=AT)
        assert again.status_code == 404
        assert again.json()["code"] == "HTTP_404"

    def test_toggle_unknown_nudge(self, test_client):
        response = test_client.patch("/api/nudges/nope", params=AT, json={"enabled": True})
        assert response.status_code == 404

    def test_due_nudges(self, test_client):
        test_client.post("/api/nudges/recommend", params=AT)
        afternoon = {"at": REFERENCE_NOW.replace(hour=14, minute=2).isoformat()}

        data = test_client.get("/api/nudges/due", params=afternoon).json()

        assert [n["scheduled_time"] for n in data["nudges"]] == ["14:00"]
