"""gdrivemirror public API."""

from __future__ import annotations

from gdrivemirror.auth import AuthInfo, CredentialValidation, DriveAuthClient, validate_credentials
from gdrivemirror.cache import CacheEntry, ChangeCache
from gdrivemirror.errors import (
    ApiError,
    AuthError,
    ConflictError,
    EmptyDownloadError,
    GDriveMirrorError,
    InvalidArgumentError,
    InvalidCredentialsError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    SizeMismatchError,
    VerificationError,
)
from gdrivemirror.log import configure_logging
from gdrivemirror.mirror import GDriveMirror
from gdrivemirror.models import (
    DownloadOutcome,
    ItemFailure,
    LocalFileRecord,
    LocalFolderRecord,
    RemoteKind,
    RemoteMetadata,
    RemoteObject,
    SyncResult,
)
from gdrivemirror.options import SyncOptions
from gdrivemirror.remote import DriveApiClient, RemoteDriveApi
from gdrivemirror.sync import EventName, SyncEvent
from gdrivemirror.throttle import TokenBucketRateLimiter

__all__ = [
    # High-level
    "GDriveMirror",
    "SyncOptions",
    "configure_logging",
    # Auth
    "AuthInfo",
    "DriveAuthClient",
    "CredentialValidation",
    "validate_credentials",
    # Engine pieces
    "ChangeCache",
    "CacheEntry",
    "TokenBucketRateLimiter",
    "RemoteDriveApi",
    "DriveApiClient",
    "EventName",
    "SyncEvent",
    # Models
    "RemoteKind",
    "RemoteObject",
    "RemoteMetadata",
    "LocalFileRecord",
    "LocalFolderRecord",
    "DownloadOutcome",
    "ItemFailure",
    "SyncResult",
    # Errors
    "GDriveMirrorError",
    "InvalidStateError",
    "AuthError",
    "InvalidCredentialsError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "VerificationError",
    "EmptyDownloadError",
    "SizeMismatchError",
]
