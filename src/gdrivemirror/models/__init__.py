"""Public model exports for gdrivemirror."""

from __future__ import annotations

from .records import LocalFileRecord, LocalFolderRecord
from .remote_object import (
    RemoteKind,
    RemoteMetadata,
    RemoteObject,
    remote_metadata_from_dict,
    remote_object_from_dict,
)
from .results import DownloadOutcome, ItemFailure, SyncResult

__all__ = [
    "RemoteKind",
    "RemoteObject",
    "RemoteMetadata",
    "remote_object_from_dict",
    "remote_metadata_from_dict",
    "LocalFileRecord",
    "LocalFolderRecord",
    "DownloadOutcome",
    "ItemFailure",
    "SyncResult",
]
