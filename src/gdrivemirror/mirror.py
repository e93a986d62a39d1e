"""GDriveMirror: authenticate, discover roots, mirror them, persist results."""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Mapping, Optional

import aiofiles
import aiofiles.os

from gdrivemirror.auth import AuthInfo, validate_credentials
from gdrivemirror.cache import ChangeCache, NullChangeCache
from gdrivemirror.errors import (
    AuthError,
    GDriveMirrorError,
    InvalidCredentialsError,
    InvalidStateError,
)
from gdrivemirror.log import get_logger, set_logging_enabled
from gdrivemirror.models import LocalFolderRecord, SyncResult
from gdrivemirror.options import SyncOptions
from gdrivemirror.remote import DriveApiClient, RemoteDriveApi
from gdrivemirror.sync import (
    DownloadPipeline,
    EventBus,
    EventName,
    Listener,
    RetryPolicy,
    RemoteTreeWalker,
    find_roots,
)
from gdrivemirror.throttle import TokenBucketRateLimiter
from gdrivemirror.util.paths import local_name

logger = get_logger(__name__)


class GDriveMirror:
    """
    One-way mirror of every Drive folder tree visible to the credentials.

    Usage:
        mirror = GDriveMirror(SyncOptions(download_path="./drive"), auth_info)
        await mirror.initialize()
        result = await mirror.sync()

    ``sync()`` requires a successful ``initialize()`` first and raises
    InvalidStateError otherwise. Only fatal preconditions (credentials,
    connectivity, download root) and orchestration failures raise; failures
    of individual files and folders are reported through events and
    ``SyncResult.failures``.
    """

    def __init__(
        self,
        options: Optional[SyncOptions] = None,
        auth_info: Optional[AuthInfo] = None,
        *,
        enable_logging: bool = True,
    ) -> None:
        set_logging_enabled(enable_logging)
        self.options = options or SyncOptions()
        self._auth_info: Optional[AuthInfo] = None
        self._events = EventBus()
        self._api: Optional[RemoteDriveApi] = None
        self._cache: Optional[ChangeCache] = None
        self._rate_limiter: Optional[TokenBucketRateLimiter] = None
        self._pipeline: Optional[DownloadPipeline] = None
        self._initialized = False

        if auth_info is not None:
            self.set_credentials(auth_info)

    @classmethod
    def from_api(
        cls,
        api: RemoteDriveApi,
        options: Optional[SyncOptions] = None,
        *,
        enable_logging: bool = True,
    ) -> GDriveMirror:
        """Create a mirror over an injected remote API (useful for tests)."""
        obj = cls(options, enable_logging=enable_logging)
        obj._api = api
        return obj

    async def __aenter__(self) -> GDriveMirror:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    # ----------------------------
    # Observers
    # ----------------------------
    def on(self, event: EventName | str, listener: Listener) -> None:
        self._events.on(event, listener)
        logger.debug("listener_added", event_name=str(event))

    def off(self, event: EventName | str, listener: Listener) -> None:
        self._events.off(event, listener)
        logger.debug("listener_removed", event_name=str(event))

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def cache(self) -> ChangeCache:
        if self._cache is None:
            raise InvalidStateError("Cache is not loaded. Call initialize() first.")
        return self._cache

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def set_credentials(self, auth_info: AuthInfo | Mapping[str, Any]) -> None:
        """
        Validate and store credentials.

        A plain mapping is treated as a service-account record.

        Raises:
            InvalidCredentialsError: if the record has malformed fields.
        """
        if not isinstance(auth_info, AuthInfo):
            auth_info = AuthInfo.service_account(dict(auth_info))

        if auth_info.is_service_account:
            validation = validate_credentials(auth_info.data)
            if not validation.is_valid:
                message = "Invalid credentials:\n" + "\n".join(validation.errors)
                logger.error("invalid_credentials", errors=validation.errors)
                self._events.emit(EventName.ERROR, message=message)
                raise InvalidCredentialsError(message, details={"errors": validation.errors})

        self._auth_info = auth_info
        logger.info("credentials_set", kind=auth_info.kind)

    async def initialize(self) -> None:
        """
        Load the cache, prepare the download root and check connectivity.

        Raises:
            AuthError: no credentials, or they could not be loaded.
            GDriveMirrorError: download root cannot be created, or the
                connectivity check failed.
        """
        if self._initialized:
            logger.info("already_initialized")
            self._events.emit(EventName.ALREADY_INITIALIZED)
            return

        logger.info("initializing")
        self._events.emit(EventName.INITIALIZING)

        await self._load_cache()
        await self._create_download_root()

        if self._api is None:
            self._api = await self._build_api()

        self._rate_limiter = TokenBucketRateLimiter(
            self.options.requests_per_second,
            burst_size=self.options.burst_size,
        )
        await self._test_connection()

        self._initialized = True
        logger.info("initialized")
        self._events.emit(EventName.INITIALIZED)

    async def sync(self) -> SyncResult:
        """
        Mirror every root folder, then write the manifest and save the cache.

        Raises:
            InvalidStateError: if initialize() has not completed.
        """
        if not self._initialized:
            logger.warning("not_initialized")
            self._events.emit(EventName.NOT_INITIALIZED)
            raise InvalidStateError("GDriveMirror is not initialized. Call initialize() first.")

        logger.info("sync_started", download_path=self.options.download_path)
        self._events.emit(EventName.SYNC_STARTED)

        pipeline = self._new_pipeline()
        self._pipeline = pipeline
        try:
            records = await self._sync_roots(pipeline)

            if self.options.wait_for_retries:
                await pipeline.retry_queue.join()

            manifest_path = await self._write_manifest(records)
        except Exception as exc:
            logger.error("sync_failed", error=str(exc))
            self._events.emit(EventName.ERROR, message=f"Failed to sync: {exc}", error=exc)
            raise

        summary = pipeline.stats.summary()
        if not await self._save_cache():
            summary["cache_save_failed"] = 1

        result = SyncResult(
            roots=records,
            manifest_path=manifest_path,
            failures=list(pipeline.stats.failures),
            summary=summary,
        )
        logger.info("sync_completed", **summary)
        self._events.emit(EventName.SYNC_COMPLETED, structure=records, result=result)
        return result

    async def shutdown(self) -> None:
        """Drop pending retries and save the cache best-effort."""
        if self._pipeline is not None:
            self._pipeline.retry_queue.cancel()
        if self._initialized:
            await self._save_cache()

    # ----------------------------
    # Internals
    # ----------------------------
    async def _load_cache(self) -> None:
        if not self.options.enable_cache:
            self._cache = NullChangeCache()
            return

        cache = ChangeCache(self.options.cache_dir)
        await asyncio.to_thread(cache.load)
        self._cache = cache
        logger.info("cache_loaded", path=cache.path, entries=len(cache))
        self._events.emit(EventName.CACHE_LOADED, path=cache.path, entries=len(cache))

    async def _save_cache(self) -> bool:
        assert self._cache is not None
        try:
            await asyncio.to_thread(self._cache.save)
        except OSError as exc:
            logger.error("cache_save_failed", path=self._cache.path, error=str(exc))
            self._events.emit(EventName.ERROR, message=f"Failed to save cache: {exc}", error=exc)
            return False

        self._events.emit(EventName.CACHE_SAVED, path=self._cache.path)
        return True

    async def _create_download_root(self) -> None:
        path = self.options.download_path
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as exc:
            logger.error("download_root_failed", path=path, error=str(exc))
            raise GDriveMirrorError(
                "Cannot create download directory",
                details={"path": path},
                cause=exc,
            ) from exc

        self._events.emit(EventName.DIRECTORY_CREATED, path=path)

    async def _build_api(self) -> RemoteDriveApi:
        if self._auth_info is None:
            logger.error("no_credentials")
            self._events.emit(EventName.ERROR, message="No credentials found.")
            raise AuthError("No credentials found. Please set credentials first.")

        return await asyncio.to_thread(
            DriveApiClient.from_auth_info,
            self._auth_info,
            scopes=self.options.scopes,
            supports_all_drives=self.options.supports_all_drives,
        )

    async def _test_connection(self) -> None:
        assert self._api is not None and self._rate_limiter is not None
        walker = RemoteTreeWalker(self._api, self._rate_limiter, events=self._events)
        try:
            await walker.test_connection()
        except GDriveMirrorError as exc:
            logger.error("connection_error", error=str(exc))
            self._events.emit(EventName.CONNECTION_ERROR, error=exc)
            raise

        self._events.emit(EventName.CONNECTION_TESTED, success=True)

    def _new_pipeline(self) -> DownloadPipeline:
        assert self._api is not None and self._rate_limiter is not None
        assert self._cache is not None
        return DownloadPipeline(
            self._api,
            self._rate_limiter,
            self._cache,
            events=self._events,
            batch_size=self.options.batch_size,
            policy=RetryPolicy(
                max_attempts=self.options.max_attempts,
                initial_delay_sec=self.options.initial_delay_sec,
            ),
            page_delay_sec=self.options.page_delay_sec,
        )

    async def _sync_roots(self, pipeline: DownloadPipeline) -> list[LocalFolderRecord]:
        folders = await pipeline.walker.list_folders()
        roots = find_roots(folders)
        logger.info("roots_found", count=len(roots))
        self._events.emit(EventName.ROOTS_FOUND, count=len(roots), folders=roots)

        records: list[LocalFolderRecord] = []
        for root in roots:
            root_path = os.path.join(self.options.download_path, local_name(root.name, root.id))
            logger.info("root_download_started", folder=root.name, path=root_path)
            try:
                record = await pipeline.sync_folder(
                    root.id,
                    root_path,
                    name=root.name,
                    modified_time=root.modified_time,
                )
            except Exception as exc:
                logger.error("root_folder_error", folder=root.name, error=str(exc))
                self._events.emit(EventName.FOLDER_ERROR, folder=root, error=exc)
                continue
            records.append(record)

        return records

    async def _write_manifest(self, records: list[LocalFolderRecord]) -> str:
        path = os.path.join(self.options.download_path, self.options.manifest_name)
        payload = json.dumps([r.to_dict() for r in records], indent=2)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(payload)

        logger.info("manifest_written", path=path, roots=len(records))
        self._events.emit(EventName.MANIFEST_WRITTEN, path=path)
        return path
