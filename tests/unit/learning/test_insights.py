"""Tests for cadence/learning/insights.py"""

import random
from dataclasses import replace
from datetime import timedelta

from cadence.history.models import EnergyLevel, MoodLevel
from cadence.learning.insights import InsightType, generate_insights, generate_local_insight
from cadence.learning.pattern_analyzer import WeeklyTrend, analyze_patterns


def _titles(insights):
    return [i.title for i in insights]


class TestGenerateInsights:
    """Tests for insight card generation."""

    def test_sorted_by_priority(self, now):
        insights = generate_insights(analyze_patterns([], now), now)
        priorities = [i.priority for i in insights]

        assert priorities == sorted(priorities)

    def test_peak_time_card_during_peak_hour(self, now):
        # Default peak window is 9-11 and now is 10:00
        insights = generate_insights(analyze_patterns([], now), now)

        assert "Peak Time Now!" in _titles(insights)
        assert insights[0].priority == 0

    def test_no_peak_time_card_outside_peak_hours(self, now):
        evening = now.replace(hour=20)
        insights = generate_insights(analyze_patterns([], evening), evening)

        assert "Peak Time Now!" not in _titles(insights)

    def test_low_energy_card_needs_an_easy_task(self, make_task, now):
        patterns = analyze_patterns([], now)
        easy = make_task(now - timedelta(days=1), energy=EnergyLevel.LOW)
        hard = make_task(now - timedelta(days=1), energy=EnergyLevel.HIGH)

        with_easy = generate_insights(patterns, now, EnergyLevel.LOW, tasks=[easy])
        without = generate_insights(patterns, now, EnergyLevel.LOW, tasks=[hard])

        assert "Low Energy Mode" in _titles(with_easy)
        assert "Low Energy Mode" not in _titles(without)

    def test_low_mood_card(self, now):
        insights = generate_insights(analyze_patterns([], now), now, mood=MoodLevel.LOW)
        card = next(i for i in insights if i.title == "Feeling Down?")

        assert card.type == InsightType.MOOD_CORRELATION

    def test_milestone_on_multiples_of_ten(self, now):
        patterns = analyze_patterns([], now)

        at_twenty = generate_insights(replace(patterns, total_completions=20), now)
        at_fifteen = generate_insights(replace(patterns, total_completions=15), now)

        assert "Milestone!" in _titles(at_twenty)
        assert "Milestone!" not in _titles(at_fifteen)

    def test_declining_trend_is_gentle(self, now):
        patterns = replace(analyze_patterns([], now), weekly_trend=WeeklyTrend.DECLINING)
        trend = next(i for i in generate_insights(patterns, now) if i.title == "Weekly Trend")

        assert "gentle" in trend.message

    def test_to_dict(self, now):
        data = generate_insights(analyze_patterns([], now), now)[0].to_dict()

        assert data["generated_at"] == now.isoformat()
        assert data["id"].startswith("ins")


class TestLocalInsight:
    def test_mentions_first_peak_hour_or_encouragement(self, now):
        patterns = analyze_patterns([], now)
        messages = {generate_local_insight(patterns, random.Random(seed)) for seed in range(50)}

        assert "Your brain loves 9:00 - that's your superpower hour! ⚡" in messages
        assert len(messages) == 4
