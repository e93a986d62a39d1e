"""Google Drive v3 implementation of RemoteDriveApi."""

from __future__ import annotations

import asyncio
import io
import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional, Sequence, TypeVar

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from gdrivemirror.auth import READONLY_SCOPES, AuthInfo, DriveAuthClient
from gdrivemirror.errors import (
    ApiError,
    GDriveMirrorError,
    HttpErrorInfo,
    NetworkError,
    NotFoundError,
    is_transient,
    map_http_error,
)
from gdrivemirror.log import get_logger
from gdrivemirror.models import (
    RemoteMetadata,
    RemoteObject,
    remote_metadata_from_dict,
    remote_object_from_dict,
)

from .queries import LIST_FIELDS, METADATA_FIELDS

T = TypeVar("T")

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


@dataclass(frozen=True)
class CallRetryPolicy:
    """Backoff for list/metadata calls; content streams are retried by Transfer."""

    max_retries: int = 3
    initial_delay_sec: float = 1.0


class DriveApiClient:
    """
    Drive API client exposing only list/metadata/content.

    Notes:
        - The Drive ``service`` object is not exposed.
        - Blocking ``execute()``/``next_chunk()`` calls run in worker threads
          so the event loop keeps scheduling other downloads.
        - ``supports_all_drives`` is applied to every request.
    """

    def __init__(
        self,
        service: Any,
        *,
        supports_all_drives: bool = True,
        retry_policy: Optional[CallRetryPolicy] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._service = service
        self._supports_all_drives = supports_all_drives
        self._retry_policy = retry_policy or CallRetryPolicy()
        self._chunk_size = chunk_size

    @classmethod
    def from_service(cls, service: Any, **kwargs: Any) -> DriveApiClient:
        """Wrap a pre-built Drive service (useful for tests)."""
        return cls(service, **kwargs)

    @classmethod
    def from_auth_info(
        cls,
        auth_info: AuthInfo,
        *,
        scopes: Sequence[str] = READONLY_SCOPES,
        **kwargs: Any,
    ) -> DriveApiClient:
        service = DriveAuthClient(auth_info).build_drive_service(scopes)
        return cls(service, **kwargs)

    # ----------------------------
    # RemoteDriveApi
    # ----------------------------
    async def list_objects(
        self,
        query: str,
        page_token: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> tuple[list[RemoteObject], Optional[str]]:
        kwargs: dict[str, Any] = {
            "q": query,
            "fields": LIST_FIELDS,
            "spaces": "drive",
            "pageToken": page_token,
            **self._common_list_kwargs(),
        }
        if page_size is not None:
            kwargs["pageSize"] = page_size

        req = self._service.files().list(**kwargs)
        data = await self._execute(req.execute)

        objects = [remote_object_from_dict(f) for f in data.get("files", []) or []]
        next_token = data.get("nextPageToken") or None
        return objects, next_token

    async def get_metadata(self, file_id: str) -> Optional[RemoteMetadata]:
        req = self._service.files().get(
            fileId=file_id,
            fields=METADATA_FIELDS,
            **self._common_get_kwargs(),
        )
        try:
            data = await self._execute(req.execute)
        except NotFoundError:
            return None

        if not data:
            return None
        return remote_metadata_from_dict(data)

    async def iter_content(self, file_id: str) -> AsyncIterator[bytes]:
        req = self._service.files().get_media(fileId=file_id, **self._common_get_kwargs())
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req, chunksize=self._chunk_size)

        done = False
        while not done:
            _, done = await self._call(downloader.next_chunk)
            chunk = buffer.getvalue()
            if chunk:
                yield chunk
            buffer.seek(0)
            buffer.truncate(0)

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_get_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    async def _call(self, func: Callable[[], T]) -> T:
        """Run one blocking SDK call in a thread, mapping its failures."""
        try:
            return await asyncio.to_thread(func)
        except GDriveMirrorError:
            raise
        except Exception as exc:
            raise _map_exception(exc) from exc

    async def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return await self._call(func)
            except GDriveMirrorError as exc:
                if is_transient(exc) and attempt < self._retry_policy.max_retries:
                    logger.warning(
                        "drive_call_retry",
                        attempt=attempt + 1,
                        delay_seconds=delay,
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)
                    delay *= 2
                    continue
                raise

        raise ApiError("Unexpected retry loop termination")


def _map_exception(exc: Exception) -> GDriveMirrorError:
    if isinstance(exc, HttpError):
        return map_http_error(_http_error_to_info(exc), cause=exc)

    if isinstance(exc, (OSError, TimeoutError)):
        return NetworkError("Network error", details={"error": str(exc)}, cause=exc)

    return ApiError("Drive API error", details={"error": str(exc)}, cause=exc)


def _http_error_to_info(exc: HttpError) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None

        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        try:
            status_code = int(status_code)  # httplib2 may hand back a str
        except (TypeError, ValueError):
            status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
