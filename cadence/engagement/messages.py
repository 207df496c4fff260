"""
Message pools for check-ins and smart notifications.

Selection always goes through pick_message() with an injected
random.Random so tests can fix the outcome with a seed.
"""

import random
from collections.abc import Sequence

from cadence.engagement.models import CheckInType, NotificationStyle


CHECK_IN_MESSAGES: dict[CheckInType, list[str]] = {
    CheckInType.ENERGY_DIP: [
        "I noticed you usually hit a bit of a slump around now. How's your energy? 🌙",
        "This time of day can be tricky. Want to try a low-energy task? 💙",
        "Energy feeling low? That's okay! Let's find something manageable. ✨",
    ],
    CheckInType.PEAK_TIME: [
        "This is usually your peak hour! Want to tackle something bigger? ⚡",
        "Your data shows you rock at this time! Ready for a challenge? 🚀",
        "Prime time! Let's make the most of your energy. 💪",
    ],
    CheckInType.LONG_INACTIVITY: [
        "Hey, just checking in! Everything okay? 💙",
        "Been a while! No pressure, but I'm here when you're ready. 🤗",
        "Taking a break? That's valid! Let me know when you want to dive back in. 🌿",
    ],
    CheckInType.SCHEDULED: [
        "Time for your check-in! How are you feeling? 📋",
        "Check-in time! What's on your mind? 💭",
        "Hey there! Ready to set your energy and plan your next move? 🎯",
    ],
    CheckInType.MOOD_BASED: [
        "I sense things might be feeling heavy. Want to talk or tackle something small? 💙",
        "Your mood pattern suggests now might be a good time for a win. One tiny task? ✨",
        "Checking in on how you're really doing. No task required - just here for you. 🤗",
    ],
    CheckInType.PATTERN_BASED: [
        "Based on your patterns, you often get things done around now. Ready? 📊",
        "Your data shows this is often a productive window for you! ⏰",
        "Historical you tends to crush it at this hour. Feeling it? 🎯",
    ],
}

NOTIFICATION_MESSAGES: dict[NotificationStyle, list[str]] = {
    NotificationStyle.GENTLE: [
        "Hey, just checking in 💙",
        "No pressure, but you've got this!",
        "Tiny step whenever you're ready",
        "Your future self will thank you",
    ],
    NotificationStyle.VARIABLE: [
        "⚡ Quick! Do one tiny thing!",
        "🎯 Focus mode: activated?",
        "💪 You're stronger than the task!",
        "🚀 3... 2... 1... GO!",
    ],
    NotificationStyle.PERSISTENT: [
        "Task waiting for you!",
        "Don't forget your goal!",
        "Time to make progress!",
        "You committed to this!",
    ],
}

LOW_MOOD_MESSAGES = [
    "No pressure, just a gentle nudge 💙",
    "Take it easy. One tiny step counts.",
    "Here when you're ready. No rush.",
]

PEAK_ENERGY_MESSAGES = [
    "⚡ Peak energy detected! Perfect time to tackle something!",
    "🚀 You're in the zone! What's the biggest thing you could do?",
    "💪 High energy hour - make it count!",
]

# Nudge message per type
NUDGE_MESSAGES = {
    "focus_reminder": "Hey! This is usually a great time for you to focus. Ready to start a session?",
    "energy_check": "Quick check-in: How's your energy right now?",
    "task_suggestion": "Afternoon slump? Here's a quick win you could tackle right now.",
}


def pick_message(pool: Sequence[str], rng: random.Random) -> str:
    """Uniform choice from a message pool."""
    if not pool:
        raise ValueError("Message pool is empty")
    return rng.choice(list(pool))
