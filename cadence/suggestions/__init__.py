"""Suggestions - what to work on right now

Components:
    models.py: SuggestionContext and TaskSuggestion
    context.py: Builds the situational snapshot for a moment in time
    scorer.py: Ranks candidate tasks against that snapshot
"""
