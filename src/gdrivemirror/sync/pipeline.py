"""Folder-by-folder download pipeline with bounded parallelism."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import aiofiles.os

from gdrivemirror.cache import ChangeCache
from gdrivemirror.errors import (
    EmptyDownloadError,
    NotFoundError,
    SizeMismatchError,
)
from gdrivemirror.log import get_logger
from gdrivemirror.models import (
    DownloadOutcome,
    ItemFailure,
    LocalFileRecord,
    LocalFolderRecord,
    RemoteMetadata,
    RemoteObject,
)
from gdrivemirror.remote import RemoteDriveApi
from gdrivemirror.throttle import TokenBucketRateLimiter
from gdrivemirror.util.mime import is_downloadable
from gdrivemirror.util.paths import local_name, temp_path

from .events import EventBus, EventName
from .retry_queue import RetryQueue, RetryQueueItem
from .transfer import RetryPolicy, Transfer
from .walker import DEFAULT_PAGE_DELAY_SEC, RemoteTreeWalker

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 5


@dataclass(slots=True)
class PipelineStats:
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    folders: int = 0
    recovered: int = 0
    failures: list[ItemFailure] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "downloaded": self.downloaded,
            "skipped": self.skipped,
            "failed": self.failed,
            "folders": self.folders,
            "recovered": self.recovered,
        }


@dataclass(slots=True)
class _FolderTask:
    folder_id: str
    name: str
    path: str
    modified_time: Optional[datetime]
    parent: Optional[LocalFolderRecord]
    record: Optional[LocalFolderRecord] = None


class DownloadPipeline:
    """
    Mirror one remote folder subtree onto local disk.

    Traversal uses an explicit stack of folder tasks instead of nested
    coroutine recursion. Within a folder, files are downloaded in batches of
    ``batch_size``; the next batch starts only once the previous one has
    fully settled, so at most ``batch_size`` transfers are in flight per
    folder. A folder record is attached to its parent after its whole subtree
    has been attempted.
    """

    def __init__(
        self,
        api: RemoteDriveApi,
        rate_limiter: TokenBucketRateLimiter,
        cache: ChangeCache,
        *,
        events: Optional[EventBus] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        policy: Optional[RetryPolicy] = None,
        page_delay_sec: float = DEFAULT_PAGE_DELAY_SEC,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")

        self._api = api
        self._rate_limiter = rate_limiter
        self._cache = cache
        self._events = events or EventBus()
        self.batch_size = batch_size
        self.policy = policy or RetryPolicy()

        self.walker = RemoteTreeWalker(
            api,
            rate_limiter,
            page_delay_sec=page_delay_sec,
            events=self._events,
        )
        self.transfer = Transfer(api, rate_limiter, policy=self.policy, events=self._events)
        self.retry_queue = RetryQueue(
            self.retry,
            max_attempts=self.policy.max_attempts,
            events=self._events,
        )
        self.stats = PipelineStats()

    # ----------------------------
    # Folders
    # ----------------------------
    async def sync_folder(
        self,
        folder_id: str,
        local_path: str,
        *,
        name: Optional[str] = None,
        modified_time: Optional[datetime] = None,
    ) -> LocalFolderRecord:
        """
        Mirror ``folder_id`` into ``local_path`` and return its record.

        Failures below the top folder are reported and left out of the
        record. A failure to create or list the top folder itself is raised.
        """
        root = _FolderTask(
            folder_id=folder_id,
            name=name or os.path.basename(os.path.normpath(local_path)),
            path=local_path,
            modified_time=modified_time,
            parent=None,
        )
        stack: list[tuple[_FolderTask, bool]] = [(root, False)]

        while stack:
            task, expanded = stack.pop()
            if expanded:
                self._finish_folder(task)
                continue

            try:
                record, subfolders = await self._expand_folder(task)
            except Exception as exc:
                self._report_folder_failure(task, exc)
                if task.parent is None:
                    raise
                continue

            task.record = record
            stack.append((task, True))
            # Reversed so sub-folders are processed (and attached) in listing order.
            for sub in reversed(subfolders):
                stack.append((self._child_task(sub, task.path, record), False))

        assert root.record is not None
        return root.record

    def _child_task(
        self,
        sub: RemoteObject,
        parent_path: str,
        parent_record: LocalFolderRecord,
    ) -> _FolderTask:
        return _FolderTask(
            folder_id=sub.id,
            name=sub.name,
            path=os.path.join(parent_path, local_name(sub.name, sub.id)),
            modified_time=sub.modified_time,
            parent=parent_record,
        )

    async def _expand_folder(
        self,
        task: _FolderTask,
    ) -> tuple[LocalFolderRecord, list[RemoteObject]]:
        logger.info("folder_download_started", folder_id=task.folder_id, path=task.path)
        self._events.emit(
            EventName.FOLDER_DOWNLOAD_STARTED,
            folder_id=task.folder_id,
            folder_path=task.path,
        )

        await aiofiles.os.makedirs(task.path, exist_ok=True)
        files, subfolders = await self.walker.list_contents(task.folder_id)

        record = LocalFolderRecord(
            id=task.folder_id,
            name=task.name,
            path=os.path.abspath(task.path),
            modified_time=task.modified_time,
        )

        for start in range(0, len(files), self.batch_size):
            batch = files[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._download_child(remote, task.path) for remote in batch),
                return_exceptions=True,
            )
            for remote, result in zip(batch, results):
                if isinstance(result, Exception):
                    self._report_file_failure(remote, task.path, result)
                elif isinstance(result, BaseException):
                    raise result
                elif result is not None:
                    record.files.append(result)

        return record, subfolders

    def _finish_folder(self, task: _FolderTask) -> None:
        assert task.record is not None
        if task.parent is not None:
            task.parent.folders.append(task.record)
        self.stats.folders += 1

        logger.info(
            "folder_downloaded",
            folder_id=task.folder_id,
            path=task.path,
            files=len(task.record.files),
            folders=len(task.record.folders),
        )
        self._events.emit(
            EventName.FOLDER_DOWNLOADED,
            folder_id=task.folder_id,
            folder_path=task.path,
            structure=task.record,
        )

    def _report_folder_failure(self, task: _FolderTask, exc: Exception) -> None:
        self.stats.failures.append(
            ItemFailure(
                kind="folder",
                id=task.folder_id,
                path=task.path,
                error_type=exc.__class__.__name__,
                error_message=str(exc),
            )
        )
        logger.error(
            "folder_download_error",
            folder_id=task.folder_id,
            path=task.path,
            error=str(exc),
        )
        self._events.emit(
            EventName.FOLDER_DOWNLOAD_ERROR,
            folder_id=task.folder_id,
            folder_path=task.path,
            error=exc,
        )

    # ----------------------------
    # Files
    # ----------------------------
    async def _download_child(
        self,
        remote: RemoteObject,
        folder_path: str,
    ) -> Optional[LocalFileRecord]:
        file_path = os.path.join(folder_path, local_name(remote.name, remote.id))
        self._events.emit(EventName.FILE_DOWNLOAD_STARTED, file=remote, file_path=file_path)

        outcome = await self.download_file(remote.id, file_path)
        if outcome is DownloadOutcome.UNSUPPORTED:
            return None

        self._events.emit(EventName.FILE_DOWNLOADED, file=remote, file_path=file_path)
        return LocalFileRecord(
            id=remote.id,
            name=remote.name,
            path=os.path.abspath(file_path),
            modified_time=remote.modified_time,
            mime_type=remote.mime_type,
        )

    def _report_file_failure(self, remote: RemoteObject, folder_path: str, exc: Exception) -> None:
        self.stats.failed += 1
        self.stats.failures.append(
            ItemFailure(
                kind="file",
                id=remote.id,
                path=os.path.join(folder_path, local_name(remote.name, remote.id)),
                error_type=exc.__class__.__name__,
                error_message=str(exc),
            )
        )

    async def download_file(self, file_id: str, target_path: str) -> DownloadOutcome:
        """
        Download one file if its cached (modifiedTime, size) is stale.

        Raises:
            NotFoundError: Drive returned no metadata (not retried).
            GDriveMirrorError / OSError: transfer or verification failed after
                the inline retries; the file is also put on the retry queue.
        """
        try:
            return await self._download(file_id, target_path)
        except NotFoundError as exc:
            self._report_download_error(file_id, target_path, exc)
            raise
        except Exception as exc:
            self.retry_queue.enqueue(RetryQueueItem(file_id=file_id, target_path=target_path))
            self._report_download_error(file_id, target_path, exc)
            raise

    async def retry(self, item: RetryQueueItem) -> DownloadOutcome:
        """
        Retry-queue handler: same as download_file, minus re-enqueueing.

        The file's failure was reported when it was enqueued, so a round only
        emits success events.
        """
        outcome = await self._download(item.file_id, item.target_path, report=False)
        if outcome is DownloadOutcome.VERIFIED:
            self.stats.recovered += 1
        return outcome

    async def _download(
        self,
        file_id: str,
        target_path: str,
        *,
        report: bool = True,
    ) -> DownloadOutcome:
        metadata = await self._fetch_metadata(file_id, report=report)

        if not is_downloadable(metadata.mime_type):
            logger.info("file_unsupported", file_id=file_id, mime_type=metadata.mime_type)
            self._events.emit(
                EventName.FILE_SKIPPED,
                file_id=file_id,
                name=metadata.name,
                reason="unsupported-type",
            )
            return DownloadOutcome.UNSUPPORTED

        if not self._cache.needs_update(file_id, metadata.modified_time, metadata.size):
            logger.info("file_up_to_date", file_id=file_id, name=metadata.name)
            self.stats.skipped += 1
            self._events.emit(
                EventName.FILE_SKIPPED,
                file_id=file_id,
                name=metadata.name,
                reason="up-to-date",
            )
            return DownloadOutcome.SKIPPED

        size = await self._fetch_verified(file_id, target_path, metadata, report=report)

        self._cache.set(file_id, metadata.modified_time, metadata.size)
        self.stats.downloaded += 1
        logger.info("file_verified", file_id=file_id, name=metadata.name, size=size)
        self._events.emit(EventName.FILE_VERIFIED, file_id=file_id, name=metadata.name, size=size)
        return DownloadOutcome.VERIFIED

    async def _fetch_metadata(self, file_id: str, *, report: bool = True) -> RemoteMetadata:
        await self._rate_limiter.acquire()
        metadata = await self._api.get_metadata(file_id)
        if metadata is None:
            if report:
                self._events.emit(EventName.FILE_NOT_FOUND, file_id=file_id)
            raise NotFoundError(f"File {file_id} not found", details={"file_id": file_id})
        return metadata

    async def _fetch_verified(
        self,
        file_id: str,
        target_path: str,
        metadata: RemoteMetadata,
        *,
        report: bool = True,
    ) -> int:
        tmp_path = temp_path(target_path, file_id)
        parent_dir = os.path.dirname(target_path)
        if parent_dir:
            await aiofiles.os.makedirs(parent_dir, exist_ok=True)

        try:
            await self.transfer.transfer(file_id, tmp_path, report=report)
            actual_size = (await aiofiles.os.stat(tmp_path)).st_size
            self._verify(file_id, target_path, metadata.size, actual_size, report=report)
            await aiofiles.os.replace(tmp_path, target_path)
        except Exception:
            await _remove_quietly(tmp_path)
            raise

        return actual_size

    def _verify(
        self,
        file_id: str,
        target_path: str,
        expected_size: Optional[int],
        actual_size: int,
        *,
        report: bool = True,
    ) -> None:
        details = {"file_id": file_id, "file_path": target_path}

        if actual_size == 0:
            logger.warning("file_empty", **details)
            if report:
                self._events.emit(EventName.FILE_EMPTY, **details)
            raise EmptyDownloadError(f"Downloaded file is empty: {target_path}", details=details)

        if expected_size and expected_size > 0 and actual_size != expected_size:
            details.update(expected_size=expected_size, actual_size=actual_size)
            logger.warning("file_size_mismatch", **details)
            if report:
                self._events.emit(EventName.FILE_SIZE_MISMATCH, **details)
            raise SizeMismatchError(
                f"File size mismatch for {target_path}. "
                f"Expected: {expected_size}, Got: {actual_size}",
                details=details,
            )

    def _report_download_error(self, file_id: str, target_path: str, exc: Exception) -> None:
        logger.error("file_download_error", file_id=file_id, path=target_path, error=str(exc))
        self._events.emit(
            EventName.FILE_DOWNLOAD_ERROR,
            file_id=file_id,
            file_path=target_path,
            error=exc,
        )


async def _remove_quietly(path: str) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("temp_cleanup_failed", path=path, error=str(exc))
