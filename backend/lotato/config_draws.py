"""
backend/lotato/config_draws.py

Purpose:
    Draw schedule reference data. Each draw publishes a morning and an evening
    result; times are local to settings.DRAW_TIMEZONE.
"""

DRAW_SLOTS = ("morning", "evening")

DRAWS: dict[str, dict] = {
    "miami": {
        "name": "Miami (Florida)",
        "times": {"morning": (13, 30), "evening": (21, 50)},
    },
    "georgia": {
        "name": "Georgia",
        "times": {"morning": (12, 30), "evening": (19, 0)},
    },
    "newyork": {
        "name": "New York",
        "times": {"morning": (14, 30), "evening": (20, 0)},
    },
    "texas": {
        "name": "Texas",
        "times": {"morning": (12, 0), "evening": (18, 0)},
    },
    "tunisia": {
        "name": "Tunisie",
        "times": {"morning": (10, 30), "evening": (14, 0)},
    },
}
