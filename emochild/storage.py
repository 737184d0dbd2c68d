"""Persistence adapter.

Typed save/load for every entity over a raw key/value store. Writes never
raise: each returns a StorageResult, and the most recent failure message is
kept on the instance for later inspection. Reads never raise either:
missing, unreadable or malformed content yields the entity's default.

Key layout (logical → physical):

    logs             → emochild_logs             JSON list of EmotionLog
    creature         → emochild_creature         JSON CreatureState
    safety           → emochild_safety           decimal text
    customization    → emochild_customization    JSON CreatureCustomization
    micro_index      → emochild_micro_index      decimal text
    text_color_pref  → emochild_text_color_pref  raw string

Each entity has its own key, so corruption or a failed write in one never
affects the others.
"""

from __future__ import annotations

import logging
from typing import Any

from emochild import schema
from emochild.errors import StoreCorrupt, StoreError, StoreQuotaExceeded, StoreUnavailable
from emochild.models import CreatureCustomization, CreatureState, EmotionLog, StorageResult
from emochild.store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "emochild_"
PROBE_KEY = "__emochild_probe__"

UNAVAILABLE_MESSAGE = "Storage is not available - data won't persist between sessions"
QUOTA_MESSAGE = "Storage full - some logs may not save"


def physical_key(key: str) -> str:
    return f"{KEY_PREFIX}{key}"


class Storage:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._last_error: str | None = None

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # ------------------------------------------------------------------
    # Availability and error tracking
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        """Probe the store with a throwaway write and delete."""
        try:
            self._store.set_item(PROBE_KEY, PROBE_KEY)
            self._store.remove_item(PROBE_KEY)
        except Exception as e:
            logger.debug("Store probe failed: %s", e)
            return False
        return True

    def get_last_error(self) -> str | None:
        return self._last_error

    def _fail(self, message: str) -> StorageResult:
        self._last_error = message
        return StorageResult(success=False, error=message)

    # ------------------------------------------------------------------
    # Generic save/load
    # ------------------------------------------------------------------

    def save(self, key: str, value: Any) -> StorageResult:
        """Serialise and write one entity. Never raises."""
        if key not in schema.ENTITIES:
            raise KeyError(f"Unknown storage key {key!r}")
        if not self.is_available():
            logger.error("Store is not available; %s not saved", key)
            return self._fail(UNAVAILABLE_MESSAGE)
        try:
            self._store.set_item(physical_key(key), schema.encode(key, value))
        except StoreQuotaExceeded as e:
            logger.warning("Store quota exceeded saving %s: %s", key, e)
            return self._fail(QUOTA_MESSAGE)
        except StoreUnavailable as e:
            logger.error("Store became unavailable saving %s: %s", key, e)
            return self._fail(UNAVAILABLE_MESSAGE)
        except Exception as e:
            logger.warning("Failed to save %s: %s", key, e)
            return self._fail(schema.ENTITIES[key].failure)
        logger.debug("Saved %s", key)
        self._last_error = None
        return StorageResult(success=True)

    def load(self, key: str) -> Any:
        """Read and validate one entity, falling back to its default. Never raises."""
        if key not in schema.ENTITIES:
            raise KeyError(f"Unknown storage key {key!r}")
        if not self.is_available():
            logger.error("Store is not available; using default %s", key)
            return schema.default(key)
        try:
            text = self._store.get_item(physical_key(key))
        except StoreError as e:
            logger.error("Failed to read %s: %s", key, e)
            return schema.default(key)
        if not text:
            return schema.default(key)
        result = schema.decode(key, text)
        if not result.ok:
            logger.warning("Discarding stored record: %s", StoreCorrupt(key, result.reason or ""))
            return schema.default(key)
        return result.value

    def clear_all(self) -> StorageResult:
        """Remove every entity key. The probe key is never left behind."""
        if not self.is_available():
            logger.error("Store is not available; nothing cleared")
            return self._fail(UNAVAILABLE_MESSAGE)
        try:
            for key in schema.ENTITIES:
                self._store.remove_item(physical_key(key))
        except StoreError as e:
            logger.warning("Failed to clear storage: %s", e)
            return self._fail("Failed to clear data")
        self._last_error = None
        return StorageResult(success=True)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def save_logs(self, logs: list[EmotionLog]) -> StorageResult:
        return self.save("logs", logs)

    def load_logs(self) -> list[EmotionLog]:
        """Load logs, migrating records written before `text_color` existed."""
        return self.load("logs")

    # ------------------------------------------------------------------
    # Creature state and safety score
    # ------------------------------------------------------------------

    def save_creature_state(self, state: CreatureState) -> StorageResult:
        return self.save("creature", state)

    def load_creature_state(self) -> CreatureState:
        return self.load("creature")

    def save_safety_score(self, score: int) -> StorageResult:
        return self.save("safety", score)

    def load_safety_score(self) -> int:
        return self.load("safety")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def save_customization(self, customization: CreatureCustomization) -> StorageResult:
        return self.save("customization", customization)

    def load_customization(self) -> CreatureCustomization:
        return self.load("customization")

    def save_micro_sentence_index(self, index: int) -> StorageResult:
        return self.save("micro_index", index)

    def load_micro_sentence_index(self) -> int:
        return self.load("micro_index")

    def save_text_color_preference(self, color: str) -> StorageResult:
        return self.save("text_color_pref", color)

    def load_text_color_preference(self) -> str:
        return self.load("text_color_pref")
