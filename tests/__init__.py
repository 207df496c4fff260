"""Cadence Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - history/: Records, parsing and history stores
  - learning/: Pattern analysis, correlations, mood, insights, weekly report
  - suggestions/: Context building and task scoring
  - engagement/: Check-ins, nudges, throttle, sink and engagement store
  - focus/: Focus timer
- integration/: Engine flows, dashboard API and CLI

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/engagement/

    # With coverage
    pytest --cov=cadence --cov-report=term-missing
"""
