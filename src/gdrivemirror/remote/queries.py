"""Drive v3 ``fields`` selectors and ``q`` search expressions."""

from __future__ import annotations

from gdrivemirror.util.mime import FOLDER_MIME

OBJECT_FIELDS: str = "id,name,mimeType,parents,modifiedTime,size"

LIST_FIELDS: str = f"nextPageToken,files({OBJECT_FIELDS})"

METADATA_FIELDS: str = "name,size,mimeType,modifiedTime"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def folder_query() -> str:
    """Every folder the caller can see, trashed ones excluded."""
    return f"mimeType = {_quote(FOLDER_MIME)} and trashed = false"


def children_query(folder_id: str) -> str:
    """Immediate children of ``folder_id``, trashed ones excluded."""
    return f"{_quote(folder_id)} in parents and trashed = false"


def connectivity_query() -> str:
    return "trashed = false"
