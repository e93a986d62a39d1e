"""The three remote operations the sync engine depends on."""

from __future__ import annotations

from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from gdrivemirror.models import RemoteMetadata, RemoteObject


@runtime_checkable
class RemoteDriveApi(Protocol):
    """
    Narrow view of a cloud-drive client.

    Implementations raise gdrivemirror errors (NotFoundError, NetworkError,
    RateLimitError, ...) rather than SDK-specific exceptions.
    """

    async def list_objects(
        self,
        query: str,
        page_token: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> tuple[list[RemoteObject], Optional[str]]:
        """Return one page of objects matching ``query`` and the next page token."""
        ...

    async def get_metadata(self, file_id: str) -> Optional[RemoteMetadata]:
        """Return name/size/mimeType/modifiedTime, or None if the object is gone."""
        ...

    def iter_content(self, file_id: str) -> AsyncIterator[bytes]:
        """Stream the object's bytes in chunks."""
        ...
