"""Derivation rules — pure functions from an event to new derived state.

Per event:
  expressed   safety +1   brightness +5   size +2   → grow
                                                      (celebrate at brightness 100)
  suppressed  safety ±0   brightness -3   size -1   → curl
  no event    safety ±0   unchanged                 → idle

Brightness and size are clamped to [0, 100] after every step. The safety
score has no upper bound. Nothing here runs in reverse: deleting a log
leaves the derived state alone.
"""

from emochild.models import Animation, CreatureState, EmotionAction

MIN_LEVEL = 0
MAX_LEVEL = 100

# action → (brightness step, size step)
STEPS: dict[str, tuple[int, int]] = {
    "expressed": (5, 2),
    "suppressed": (-3, -1),
}


def clamp(value: int, low: int = MIN_LEVEL, high: int = MAX_LEVEL) -> int:
    return max(low, min(high, value))


def safety_delta(action: EmotionAction) -> int:
    return 1 if action == "expressed" else 0


def creature_delta(action: EmotionAction, state: CreatureState) -> CreatureState:
    """Apply the brightness/size step for `action`. Animation is left as-is."""
    d_brightness, d_size = STEPS[action]
    return state.model_copy(update={
        "brightness": clamp(state.brightness + d_brightness),
        "size": clamp(state.size + d_size),
    })


def select_animation(action: EmotionAction | None, state: CreatureState) -> Animation:
    """Pick the animation for an event given the state it produced."""
    if action is None:
        return "idle"
    if action == "suppressed":
        return "curl"
    if state.brightness >= MAX_LEVEL:
        return "celebrate"
    return "grow"


def apply_event(
    state: CreatureState, safety_score: int, action: EmotionAction
) -> tuple[CreatureState, int]:
    """Return (new creature state, new safety score) after one logged event."""
    stepped = creature_delta(action, state)
    animated = stepped.model_copy(update={"animation": select_animation(action, stepped)})
    return animated, safety_score + safety_delta(action)


def settle(state: CreatureState) -> CreatureState:
    """The no-event rule: revert to idle, levels unchanged."""
    return state.model_copy(update={"animation": select_animation(None, state)})
