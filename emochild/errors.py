"""Exception taxonomy.

ValidationError is raised to the caller of an engine operation and is never
partially applied. The Store* errors are raised by store backends and the
schema layer; the persistence adapter catches them and turns them into
StorageResult values, so they never reach the engine's callers.
"""


class EmoChildError(Exception):
    """Base exception for the package."""


class ValidationError(EmoChildError, ValueError):
    """Bad input to an engine operation (empty or over-length text, unknown action...)."""


class StoreError(EmoChildError):
    """Base for key/value store failures."""


class StoreUnavailable(StoreError):
    """The store cannot be probed or written at all."""


class StoreQuotaExceeded(StoreError):
    """A write was rejected because the store is out of space."""


class StoreCorrupt(StoreError):
    """Stored content failed to parse or failed its shape check."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason
