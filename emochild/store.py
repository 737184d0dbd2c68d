"""Raw key/value text stores.

The persistence adapter sits on top of a store matching the protocol:

    get_item(key) -> str | None
    set_item(key, value) -> None
    remove_item(key) -> None
    keys() -> list[str]

Two implementations are provided:

    FileStore    — one UTF-8 file per key under a base directory. Durable
                   across sessions. Writes are atomic (temp file + replace).
    MemoryStore  — dict-backed, optionally capped at a number of stored
                   characters. Useful for ephemeral sessions and tests.

Stores raise StoreUnavailable when they cannot be used at all and
StoreQuotaExceeded when a write is rejected for capacity. Anything else is
left to propagate; the adapter classifies it as a generic failure.
"""

from __future__ import annotations

import errno
import logging
import os
import re
from pathlib import Path
from typing import Protocol

from emochild.errors import StoreQuotaExceeded, StoreUnavailable

logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT}
_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# FileStore — durable, one file per key
# ---------------------------------------------------------------------------

class FileStore:
    """Directory-backed store.

    Layout:

        {base}/
          emochild_logs          ← JSON list of EmotionLog
          emochild_creature      ← JSON CreatureState
          emochild_safety        ← decimal text
          ...

    The directory is created lazily on first use, so constructing a
    FileStore never fails; an unusable path surfaces as StoreUnavailable
    on the first call instead.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid store key {key!r}")
        return self._base / key

    def _ensure_dir(self) -> None:
        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create store directory {self._base}: {e}") from e

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # undecodable bytes read as missing
            logger.warning("Store file %s is not valid UTF-8", path)
            return None
        except OSError as e:
            raise StoreUnavailable(f"Cannot read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        self._ensure_dir()
        tmp = path.with_name(f".{key}.tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            if e.errno in _QUOTA_ERRNOS:
                raise StoreQuotaExceeded(f"No space left writing {path}") from e
            if isinstance(e, (PermissionError, FileNotFoundError, NotADirectoryError)):
                raise StoreUnavailable(f"Cannot write {path}: {e}") from e
            raise

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot remove {path}: {e}") from e

    def keys(self) -> list[str]:
        if not self._base.is_dir():
            return []
        return sorted(
            p.name for p in self._base.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )


# ---------------------------------------------------------------------------
# MemoryStore — volatile, optional capacity
# ---------------------------------------------------------------------------

class MemoryStore:
    """Dict-backed store.

    Args:
        quota:     Maximum total characters (keys + values) the store may
                   hold, or None for no limit.
        available: When False every call raises StoreUnavailable. Flip it
                   at runtime to simulate a store going away.
    """

    def __init__(self, quota: int | None = None, available: bool = True) -> None:
        self.quota = quota
        self.available = available
        self._items: dict[str, str] = {}

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailable("Memory store is disabled")

    def _used(self, excluding: str | None = None) -> int:
        return sum(len(k) + len(v) for k, v in self._items.items() if k != excluding)

    def get_item(self, key: str) -> str | None:
        self._check()
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check()
        if self.quota is not None:
            needed = self._used(excluding=key) + len(key) + len(value)
            if needed > self.quota:
                raise StoreQuotaExceeded(
                    f"Writing {key!r} needs {needed} chars, quota is {self.quota}"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._check()
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        self._check()
        return sorted(self._items)
