"""Configuration for a GDriveMirror instance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from gdrivemirror.auth.client import READONLY_SCOPES
from gdrivemirror.throttle import DEFAULT_BURST_SIZE, DEFAULT_REQUESTS_PER_SECOND

DEFAULT_DOWNLOAD_PATH = "./gdrivemirror-downloads"
DEFAULT_MANIFEST_NAME = "folder_structure.json"


@dataclass(slots=True, frozen=True)
class SyncOptions:
    """
    Tunables for a sync run.

    download_path: local root; every remote root folder becomes a sub-directory.
    enable_cache / cache_dir: whether and where the change cache is kept.
    batch_size: files downloaded concurrently within one folder.
    max_attempts / initial_delay_sec: inline backoff and retry-queue budget.
    requests_per_second / burst_size: token-bucket limits for Drive calls.
    page_delay_sec: pause between listing pages.
    wait_for_retries: let the retry queue drain before the cache is saved.
    """

    download_path: str = DEFAULT_DOWNLOAD_PATH
    enable_cache: bool = True
    cache_dir: str = "./"
    batch_size: int = 5
    max_attempts: int = 3
    initial_delay_sec: float = 1.0
    requests_per_second: int = DEFAULT_REQUESTS_PER_SECOND
    burst_size: int = DEFAULT_BURST_SIZE
    page_delay_sec: float = 0.1
    wait_for_retries: bool = True
    manifest_name: str = DEFAULT_MANIFEST_NAME
    scopes: Sequence[str] = field(default=READONLY_SCOPES)
    supports_all_drives: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.download_path, str) or not self.download_path.strip():
            raise ValueError("download_path must be a non-empty string")
        if not isinstance(self.manifest_name, str) or not self.manifest_name.strip():
            raise ValueError("manifest_name must be a non-empty string")
        for name in ("batch_size", "max_attempts", "requests_per_second", "burst_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer")
        for name in ("initial_delay_sec", "page_delay_sec"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
