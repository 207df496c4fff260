"""Learning - patterns derived from a user's history

Components:
    pattern_analyzer.py: Hourly stats, peak hours, best days, weekly trend
    correlation.py: Pearson correlation over mood/energy/productivity
    mood_tracker.py: Mood patterns, triggers and insight
    insights.py: Human-readable insight cards from pattern data
    weekly_report.py: Seven-day summary report

Every function here is a pure computation over the records handed in.
Nothing is cached; callers refresh the snapshot and call again.
"""
