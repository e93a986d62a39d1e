"""Public error exports for gdrivemirror."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    EmptyDownloadError,
    GDriveMirrorError,
    HttpErrorInfo,
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
    is_transient,
    map_http_error,
)

__all__ = [
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
    "HttpErrorInfo",
    "is_transient",
    "map_http_error",
]
