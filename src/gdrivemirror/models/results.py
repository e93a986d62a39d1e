"""Result models for file downloads and whole sync runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional

from .records import LocalFolderRecord

ItemKind = Literal["file", "folder"]


class DownloadOutcome(str, Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"


@dataclass(slots=True)
class ItemFailure:
    """A file or folder that could not be produced during a run."""

    kind: ItemKind
    id: str
    path: str
    error_type: str
    error_message: str


@dataclass(slots=True)
class SyncResult:
    """Aggregate result of GDriveMirror.sync()."""

    roots: list[LocalFolderRecord]
    manifest_path: Optional[str]
    failures: list[ItemFailure] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures
