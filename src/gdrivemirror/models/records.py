"""Local folder-tree records written to the output manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from gdrivemirror.util.mime import FOLDER_MIME
from gdrivemirror.util.time import to_rfc3339


def _format_time(dt: Optional[datetime]) -> str:
    return to_rfc3339(dt) if dt is not None else ""


@dataclass(slots=True)
class LocalFileRecord:
    """A file that was downloaded and verified (or found up to date)."""

    id: str
    name: str
    path: str
    modified_time: Optional[datetime] = None
    mime_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "mimeType": self.mime_type,
            "modifiedTime": _format_time(self.modified_time),
        }


@dataclass(slots=True)
class LocalFolderRecord:
    """
    A mirrored folder and the children that were produced under it.

    Children appear in listing order. Failed files and sub-folders are left
    out; they are reported through events instead.
    """

    id: str
    name: str
    path: str
    modified_time: Optional[datetime] = None
    folders: list[LocalFolderRecord] = field(default_factory=list)
    files: list[LocalFileRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "mimeType": FOLDER_MIME,
            "modifiedTime": _format_time(self.modified_time),
            "folders": [f.to_dict() for f in self.folders],
            "files": [f.to_dict() for f in self.files],
        }

    def iter_files(self):
        """Yield every file record in this subtree (depth-first)."""
        yield from self.files
        for sub in self.folders:
            yield from sub.iter_files()
