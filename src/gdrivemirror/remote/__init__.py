"""Remote Drive access for gdrivemirror."""

from __future__ import annotations

from .drive_client import CallRetryPolicy, DriveApiClient
from .protocol import RemoteDriveApi
from .queries import children_query, connectivity_query, folder_query

__all__ = [
    "RemoteDriveApi",
    "DriveApiClient",
    "CallRetryPolicy",
    "folder_query",
    "children_query",
    "connectivity_query",
]
