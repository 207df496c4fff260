"""Dashboard Package

FastAPI status surface over the Cadence engine: patterns, correlations,
suggestions, check-ins and the nudge schedule.
"""
