"""Persistent map of Drive file id -> last downloaded (modifiedTime, size)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from gdrivemirror.log import get_logger
from gdrivemirror.util.time import stamp

logger = get_logger(__name__)

DEFAULT_CACHE_FILENAME = ".gdrivemirror-cache.json"

ModifiedTime = Union[datetime, str, None]


@dataclass(slots=True, frozen=True)
class CacheEntry:
    file_id: str
    modified_time: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {"fileId": self.file_id, "modifiedTime": self.modified_time, "size": self.size}


class ChangeCache:
    """
    Dirty-state cache keyed by Drive file id.

    The (modifiedTime, size) pair is the only dirtiness signal; content is
    never compared. Entries are written after a verified download and are
    never removed automatically.

    A missing or unreadable cache file loads as an empty map, which only
    costs extra downloads. ``save()`` overwrites the file in place.
    """

    def __init__(self, cache_dir: str, filename: str = DEFAULT_CACHE_FILENAME) -> None:
        self.path = os.path.join(cache_dir, filename)
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._entries

    def load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            self._entries = _entries_from_payload(payload)
        except FileNotFoundError:
            self._entries = {}
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("cache_unreadable", path=self.path, error=str(exc))
            self._entries = {}
        logger.debug("cache_loaded", path=self.path, entries=len(self._entries))

    def save(self) -> None:
        cache_dir = os.path.dirname(self.path)
        if cache_dir:
            os.makedirs(cache_dir, exist_ok=True)

        payload = {file_id: entry.to_dict() for file_id, entry in self._entries.items()}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        logger.debug("cache_saved", path=self.path, entries=len(self._entries))

    def get(self, file_id: str) -> Optional[CacheEntry]:
        return self._entries.get(file_id)

    def set(self, file_id: str, modified_time: ModifiedTime, size: Optional[int]) -> None:
        self._entries[file_id] = CacheEntry(
            file_id=file_id,
            modified_time=stamp(modified_time),
            size=size or 0,
        )

    def needs_update(
        self,
        file_id: str,
        modified_time: ModifiedTime,
        size: Optional[int],
    ) -> bool:
        """True if there is no entry or either recorded field differs."""
        entry = self._entries.get(file_id)
        if entry is None:
            return True
        return entry.modified_time != stamp(modified_time) or entry.size != (size or 0)


class NullChangeCache(ChangeCache):
    """Cache used when caching is disabled: everything is always dirty."""

    def __init__(self) -> None:
        super().__init__(cache_dir="", filename="")

    def load(self) -> None:
        return None

    def save(self) -> None:
        return None

    def set(self, file_id: str, modified_time: ModifiedTime, size: Optional[int]) -> None:
        return None

    def needs_update(
        self,
        file_id: str,
        modified_time: ModifiedTime,
        size: Optional[int],
    ) -> bool:
        return True


def _entries_from_payload(payload: Any) -> dict[str, CacheEntry]:
    if not isinstance(payload, dict):
        raise ValueError("cache file must contain a JSON object")

    entries: dict[str, CacheEntry] = {}
    for file_id, raw in payload.items():
        if not isinstance(raw, dict):
            raise ValueError(f"invalid cache entry for {file_id!r}")
        entries[file_id] = CacheEntry(
            file_id=str(raw.get("fileId", file_id)),
            modified_time=stamp(raw.get("modifiedTime") or None),
            size=int(raw.get("size", 0)),
        )
    return entries
