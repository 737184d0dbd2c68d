"""Demo data — seeds a fresh data directory with a short journaling history."""

import logging

from emochild.engine import StateEngine

logger = logging.getLogger(__name__)

DEMO_LOGS = [
    ("nervous about the interview", "suppressed", None, "anxious"),
    ("told my sister I missed her", "expressed", "pink", None),
    ("cried during the movie and let it happen", "expressed", "lavender", "sad"),
    ("snapped at a coworker, pretended it was fine", "suppressed", None, "angry"),
    ("proud of finishing the run", "expressed", "yellow", "excited"),
    ("thankful for a quiet morning", "expressed", "mint", "grateful"),
]


def create_demo_data(engine: StateEngine) -> None:
    """Wipe the engine's state and replay the demo history through it."""
    engine.clear_all()
    engine.set_customization({"name": "Pip", "color": "lavender", "has_bow": True})
    for text, action, color, quick in DEMO_LOGS:
        engine.add_log(text, action, text_color=color, quick_emotion=quick)
    engine.acknowledge_animation()
    snap = engine.snapshot
    logger.info(
        "Demo data created: %d logs, safety=%d, brightness=%d",
        len(snap.logs), snap.safety_score, snap.creature_state.brightness,
    )
