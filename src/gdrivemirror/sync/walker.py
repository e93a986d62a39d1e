"""Remote folder discovery and root detection."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from gdrivemirror.log import get_logger
from gdrivemirror.models import RemoteObject
from gdrivemirror.remote import RemoteDriveApi, children_query, connectivity_query, folder_query
from gdrivemirror.throttle import TokenBucketRateLimiter

from .events import EventBus, EventName

logger = get_logger(__name__)

DEFAULT_PAGE_DELAY_SEC = 0.1


class RemoteTreeWalker:
    """Paginated listings over a RemoteDriveApi, throttled by a shared limiter."""

    def __init__(
        self,
        api: RemoteDriveApi,
        rate_limiter: TokenBucketRateLimiter,
        *,
        page_delay_sec: float = DEFAULT_PAGE_DELAY_SEC,
        events: Optional[EventBus] = None,
    ) -> None:
        self._api = api
        self._rate_limiter = rate_limiter
        self._page_delay_sec = page_delay_sec
        self._events = events or EventBus()

    async def test_connection(self) -> bool:
        """Fetch a single item; any failure propagates to the caller."""
        await self._rate_limiter.acquire()
        await self._api.list_objects(connectivity_query(), None, page_size=1)
        return True

    async def list_folders(self) -> list[RemoteObject]:
        """Every non-trashed folder visible to the caller."""
        folders = [obj for obj in await self._list_all(folder_query()) if obj.is_folder]
        logger.info("folders_listed", count=len(folders))
        self._events.emit(EventName.FOLDERS_LISTED, count=len(folders), folders=folders)
        return folders

    async def list_children(self, folder_id: str) -> list[RemoteObject]:
        """Immediate non-trashed children (files and folders) of ``folder_id``."""
        children = await self._list_all(children_query(folder_id))
        logger.debug("children_listed", folder_id=folder_id, count=len(children))
        return children

    async def list_files(self, folder_id: str) -> list[RemoteObject]:
        """Immediate non-folder children of ``folder_id``."""
        files, _ = await self.list_contents(folder_id)
        return files

    async def list_contents(
        self,
        folder_id: str,
    ) -> tuple[list[RemoteObject], list[RemoteObject]]:
        """Immediate children of ``folder_id`` split into (files, folders)."""
        files: list[RemoteObject] = []
        subfolders: list[RemoteObject] = []
        for obj in await self.list_children(folder_id):
            (subfolders if obj.is_folder else files).append(obj)

        self._events.emit(
            EventName.FILES_LISTED,
            folder_id=folder_id,
            count=len(files),
            files=files,
        )
        return files, subfolders

    async def _list_all(self, query: str) -> list[RemoteObject]:
        results: list[RemoteObject] = []
        page_token: Optional[str] = None

        while True:
            await self._rate_limiter.acquire()
            objects, page_token = await self._api.list_objects(query, page_token)
            results.extend(objects)

            if not page_token:
                break
            if self._page_delay_sec > 0:
                await asyncio.sleep(self._page_delay_sec)

        return results


def find_roots(folders: Iterable[RemoteObject]) -> list[RemoteObject]:
    """
    Return the top-most folder of every ancestor chain, in listing order.

    A folder is a root if it has no parent, or if following ``parent_id``
    leads to an id outside ``folders`` (e.g. a shared-with-me folder whose
    owner's tree is not visible). A parent cycle ends the walk at the node
    where the revisit was detected, so corrupt data cannot loop forever.
    """
    ordered = list(folders)
    by_id = {f.id: f for f in ordered}

    roots: list[RemoteObject] = []
    seen_roots: set[str] = set()

    for folder in ordered:
        current = folder
        visited: set[str] = {current.id}
        while current.parent_id is not None:
            parent = by_id.get(current.parent_id)
            if parent is None or parent.id in visited:
                break
            visited.add(parent.id)
            current = parent

        if current.id not in seen_roots:
            seen_roots.add(current.id)
            roots.append(current)

    return roots
