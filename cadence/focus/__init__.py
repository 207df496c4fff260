"""Focus - Pomodoro-style focus timer

Components:
    timer.py: Tick-driven focus timer with a cancellation token

Finished sessions become FocusSessionRecords for the history store.
"""
