"""One-way lifecycle notifications from the sync engine to observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from gdrivemirror.log import get_logger

logger = get_logger(__name__)


class EventName(str, Enum):
    """Names of the lifecycle events the engine emits."""

    # Orchestrator
    INITIALIZING = "initializing"
    ALREADY_INITIALIZED = "already_initialized"
    CACHE_LOADED = "cache_loaded"
    DIRECTORY_CREATED = "directory_created"
    CONNECTION_TESTED = "connection_tested"
    CONNECTION_ERROR = "connection_error"
    INITIALIZED = "initialized"
    NOT_INITIALIZED = "not_initialized"
    SYNC_STARTED = "sync_started"
    ROOTS_FOUND = "roots_found"
    FOLDER_ERROR = "folder_error"
    MANIFEST_WRITTEN = "manifest_written"
    CACHE_SAVED = "cache_saved"
    SYNC_COMPLETED = "sync_completed"

    # Walker
    FOLDERS_LISTED = "folders_listed"
    FILES_LISTED = "files_listed"

    # Pipeline
    FOLDER_DOWNLOAD_STARTED = "folder_download_started"
    FOLDER_DOWNLOADED = "folder_downloaded"
    FOLDER_DOWNLOAD_ERROR = "folder_download_error"
    FILE_DOWNLOAD_STARTED = "file_download_started"
    FILE_DOWNLOADED = "file_downloaded"
    FILE_SKIPPED = "file_skipped"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EMPTY = "file_empty"
    FILE_SIZE_MISMATCH = "file_size_mismatch"
    FILE_VERIFIED = "file_verified"
    FILE_DOWNLOAD_ERROR = "file_download_error"

    # Transfer / retry queue
    FILE_RETRY = "file_retry"
    RETRY_ENQUEUED = "retry_enqueued"
    RETRY_SUCCEEDED = "retry_succeeded"

    ERROR = "error"


@dataclass(slots=True, frozen=True)
class SyncEvent:
    name: EventName
    data: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[SyncEvent], Any]


class EventBus:
    """
    Observer registry keyed by event name.

    Listeners cannot influence the engine: their return values are ignored
    and their exceptions are logged, never propagated to the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventName, list[Listener]] = {}

    def on(self, name: Union[EventName, str], listener: Listener) -> None:
        self._listeners.setdefault(EventName(name), []).append(listener)

    def off(self, name: Union[EventName, str], listener: Listener) -> None:
        listeners = self._listeners.get(EventName(name))
        if not listeners:
            return
        self._listeners[EventName(name)] = [cb for cb in listeners if cb != listener]

    def listener_count(self, name: Union[EventName, str]) -> int:
        return len(self._listeners.get(EventName(name), []))

    def emit(self, event_name: EventName, /, **data: Any) -> None:
        # Positional-only so payloads may carry a "name" key.
        listeners = self._listeners.get(event_name)
        if not listeners:
            return

        event = SyncEvent(name=event_name, data=data)
        for listener in list(listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("event_listener_failed", event_name=event_name.value)
