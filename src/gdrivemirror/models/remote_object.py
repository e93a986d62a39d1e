"""Snapshots of Drive objects as seen at listing time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from gdrivemirror.util.mime import is_folder
from gdrivemirror.util.time import parse_optional


class RemoteKind(str, Enum):
    FOLDER = "folder"
    FILE = "file"


@dataclass(slots=True, frozen=True)
class RemoteObject:
    """
    A remote folder or file.

    Notes:
        - ``parent_id`` is the first listed parent; None for top-level items
          and for items whose parents are hidden from the caller.
        - ``size`` is only reported for files with binary content.
    """

    id: str
    name: str
    kind: RemoteKind
    mime_type: str = ""
    parent_id: Optional[str] = None
    modified_time: Optional[datetime] = None
    size: Optional[int] = None

    @property
    def is_folder(self) -> bool:
        return self.kind is RemoteKind.FOLDER


@dataclass(slots=True, frozen=True)
class RemoteMetadata:
    """Metadata fetched for a single file right before it is downloaded."""

    name: str
    mime_type: str = ""
    modified_time: Optional[datetime] = None
    size: Optional[int] = None


def _parse_size(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def remote_object_from_dict(data: dict[str, Any]) -> RemoteObject:
    """Build a RemoteObject from a Drive v3 ``files`` resource dict."""
    mime_type = data.get("mimeType") if isinstance(data.get("mimeType"), str) else ""
    parents = data.get("parents") or []
    parent_id = parents[0] if isinstance(parents, list) and parents else None

    name = data.get("name")
    return RemoteObject(
        id=str(data.get("id") or ""),
        name=name if isinstance(name, str) else "",
        kind=RemoteKind.FOLDER if is_folder(mime_type) else RemoteKind.FILE,
        mime_type=mime_type or "",
        parent_id=parent_id if isinstance(parent_id, str) else None,
        modified_time=parse_optional(data.get("modifiedTime")),
        size=_parse_size(data.get("size")),
    )


def remote_metadata_from_dict(data: dict[str, Any]) -> RemoteMetadata:
    name = data.get("name")
    mime_type = data.get("mimeType")
    return RemoteMetadata(
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        modified_time=parse_optional(data.get("modifiedTime")),
        size=_parse_size(data.get("size")),
    )
