"""State engine — owns the authoritative in-memory snapshot.

Operation flow (add_log):
  1. Validate input; raise ValidationError before touching anything.
  2. Build the EmotionLog (fresh id, non-decreasing timestamp).
  3. Append it and apply the derivation rule to creature + safety.
  4. Persist logs, creature and safety as three independent writes.
  5. Return a copy of the fresh snapshot.

Persistence failures do not roll back the in-memory change; the snapshot is
the source of truth for the session even when the durable copy falls
behind. Failures are logged and kept on the adapter (see last_error).
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, get_args

from pydantic import ValidationError as PydanticValidationError

from emochild import rules
from emochild.errors import ValidationError
from emochild.models import (
    MAX_LOG_TEXT,
    CreatureCustomization,
    EmotionAction,
    EmotionLog,
    QuickEmotion,
    Snapshot,
    StorageResult,
    TextColor,
)
from emochild.storage import Storage

logger = logging.getLogger(__name__)

ACTIONS: tuple[str, ...] = get_args(EmotionAction)
TEXT_COLORS: tuple[str, ...] = get_args(TextColor)
QUICK_EMOTIONS: tuple[str, ...] = get_args(QuickEmotion)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_id() -> str:
    return uuid.uuid4().hex


class StateEngine:
    """Single-writer orchestrator over one Storage.

    Args:
        storage:    Persistence adapter for all six slices.
        clock:      Returns the current time in ms. Defaults to wall clock.
        id_factory: Returns a fresh unique log id. Defaults to uuid4 hex.
    """

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self._state = Snapshot()
        self._last_results: list[StorageResult] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self._state.model_copy(deep=True)

    @property
    def last_error(self) -> str | None:
        return self._storage.get_last_error()

    @property
    def last_results(self) -> list[StorageResult]:
        """StorageResults of the most recent mutation, in write order."""
        return list(self._last_results)

    def history(self, newest_first: bool = True) -> list[EmotionLog]:
        """Logs in chronological order. Equal timestamps count later insertions as newer."""
        ordered = sorted(self._state.logs, key=lambda log: log.timestamp)
        if newest_first:
            ordered.reverse()
        return ordered

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> Snapshot:
        """Load every slice from storage. A slice that fails to load takes its default."""
        creature = self._storage.load_creature_state()
        self._state = Snapshot(
            logs=self._storage.load_logs(),
            # transient animations are not replayed after a reload
            creature_state=rules.settle(creature),
            safety_score=self._storage.load_safety_score(),
            customization=self._storage.load_customization(),
            text_color_preference=self._storage.load_text_color_preference(),
            micro_sentence_index=self._storage.load_micro_sentence_index(),
        )
        self._last_results = []
        logger.info(
            "Initialized: %d logs, safety=%d, brightness=%d, size=%d",
            len(self._state.logs), self._state.safety_score,
            self._state.creature_state.brightness, self._state.creature_state.size,
        )
        return self.snapshot

    def clear_all(self) -> Snapshot:
        """Reset every slice to its default and erase all persisted keys."""
        self._state = Snapshot()
        self._record(self._storage.clear_all())
        logger.info("Cleared all state")
        return self.snapshot

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def add_log(
        self,
        text: str,
        action: str,
        text_color: str | None = None,
        quick_emotion: str | None = None,
    ) -> Snapshot:
        """Record one emotion and let the creature react to it."""
        if not isinstance(text, str):
            raise ValidationError(f"Log text must be a string, got {type(text).__name__}")
        text = text.strip()
        if not text:
            raise ValidationError("Log text must not be empty")
        if len(text) > MAX_LOG_TEXT:
            raise ValidationError(f"Log text must be at most {MAX_LOG_TEXT} characters, got {len(text)}")
        if action not in ACTIONS:
            raise ValidationError(f"Unknown action {action!r}; expected one of {', '.join(ACTIONS)}")
        if text_color is None:
            text_color = self._state.text_color_preference
        elif text_color not in TEXT_COLORS:
            raise ValidationError(f"Unknown text colour {text_color!r}")
        if quick_emotion is not None and quick_emotion not in QUICK_EMOTIONS:
            raise ValidationError(f"Unknown quick emotion {quick_emotion!r}")

        # never stamp a log earlier than the previous one, even if the clock moved back
        timestamp = self._clock()
        if self._state.logs:
            timestamp = max(timestamp, self._state.logs[-1].timestamp)

        log = EmotionLog(
            id=self._id_factory(),
            text=text,
            action=action,
            timestamp=timestamp,
            text_color=text_color,
            quick_emotion=quick_emotion,
        )
        creature, safety = rules.apply_event(
            self._state.creature_state, self._state.safety_score, action,
        )
        self._state.logs = [*self._state.logs, log]
        self._state.creature_state = creature
        self._state.safety_score = safety
        logger.debug(
            "add_log %s action=%s → brightness=%d size=%d animation=%s safety=%d",
            log.id, action, creature.brightness, creature.size, creature.animation, safety,
        )

        self._record(
            self._storage.save_logs(self._state.logs),
            self._storage.save_creature_state(creature),
            self._storage.save_safety_score(safety),
        )
        return self.snapshot

    def delete_log(self, log_id: str) -> Snapshot:
        """Remove a log by id. Unknown ids are a no-op.

        Derived state is left alone: the creature keeps what it grew and
        the safety score keeps what it counted.
        """
        remaining = [log for log in self._state.logs if log.id != log_id]
        if len(remaining) == len(self._state.logs):
            logger.debug("delete_log %s: no such log", log_id)
            self._last_results = []
            return self.snapshot
        self._state.logs = remaining
        self._record(self._storage.save_logs(remaining))
        return self.snapshot

    # ------------------------------------------------------------------
    # Creature
    # ------------------------------------------------------------------

    def acknowledge_animation(self) -> Snapshot:
        """The presentation layer has shown the last animation; go back to idle."""
        self._state.creature_state = rules.settle(self._state.creature_state)
        self._record(self._storage.save_creature_state(self._state.creature_state))
        return self.snapshot

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_customization(self, customization: CreatureCustomization | dict) -> Snapshot:
        if not isinstance(customization, CreatureCustomization):
            try:
                customization = CreatureCustomization.model_validate(customization)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid customization: {e.error_count()} error(s)") from e
        self._state.customization = customization
        self._record(self._storage.save_customization(customization))
        return self.snapshot

    def set_text_color_preference(self, color: str) -> Snapshot:
        if color not in TEXT_COLORS:
            raise ValidationError(f"Unknown text colour {color!r}")
        self._state.text_color_preference = color
        self._record(self._storage.save_text_color_preference(color))
        return self.snapshot

    def set_micro_sentence_index(self, index: int) -> Snapshot:
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValidationError(f"Micro-sentence index must be a non-negative integer, got {index!r}")
        self._state.micro_sentence_index = index
        self._record(self._storage.save_micro_sentence_index(index))
        return self.snapshot

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _record(self, *results: StorageResult) -> None:
        self._last_results = list(results)
        for result in results:
            if not result.success:
                logger.warning("Persistence failed, keeping in-memory state: %s", result.error)
