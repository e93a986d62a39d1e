"""Exception hierarchy and HTTP error mapping for gdrivemirror."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GDriveMirrorError(Exception):
    """
    Base exception for gdrivemirror.

    Attributes:
        details: Structured context (file_id, path, HTTP status, ...).
        cause: The lower-level exception this error wraps, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidStateError(GDriveMirrorError):
    """Raised when the mirror is used out of order (e.g. sync before initialize)."""


class AuthError(GDriveMirrorError):
    """Raised when credentials are missing or cannot be loaded/refreshed."""


class InvalidCredentialsError(AuthError):
    """Raised when the credentials record fails validation."""


class PermissionError(GDriveMirrorError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(GDriveMirrorError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class NotFoundError(GDriveMirrorError):
    """Raised when a Drive object (or its metadata) cannot be found."""


class ConflictError(GDriveMirrorError):
    """Raised on HTTP 409/412 responses."""


class RateLimitError(GDriveMirrorError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(GDriveMirrorError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GDriveMirrorError):
    """Raised when network/timeout issues interrupt a request or a stream."""


class ApiError(GDriveMirrorError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class VerificationError(GDriveMirrorError):
    """Raised when a downloaded file fails its post-transfer check."""


class EmptyDownloadError(VerificationError):
    """Raised when a transfer produced zero bytes."""


class SizeMismatchError(VerificationError):
    """Raised when the downloaded size differs from the size Drive reported."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivemirror exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)

# 403 with these reasons is throttling, not a permission problem.
_RATE_REASON_KEYWORDS: tuple[str, ...] = (
    "rateLimitExceeded",
    "userRateLimitExceeded",
)

_STATUS_TO_ERROR: dict[int, type[GDriveMirrorError]] = {
    400: InvalidArgumentError,
    401: AuthError,
    404: NotFoundError,
    409: ConflictError,
    412: ConflictError,
    429: RateLimitError,
}


def _reason_matches(reason: str | None, keywords: tuple[str, ...]) -> bool:
    if not reason:
        return False
    lowered = reason.lower()
    return any(key.lower() in lowered for key in keywords)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveMirrorError:
    """
    Map an HTTP error to a gdrivemirror exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> RateLimitError for per-user rate reasons,
                 QuotaExceededError for quota reasons,
                 PermissionError otherwise
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - anything else (5xx included) -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 403:
        if _reason_matches(info.reason, _RATE_REASON_KEYWORDS):
            return RateLimitError(message, details=details, cause=cause)
        if _reason_matches(info.reason, _QUOTA_REASON_KEYWORDS):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)

    error_cls = _STATUS_TO_ERROR.get(info.status_code, ApiError)
    return error_cls(message, details=details, cause=cause)


def is_transient(exc: BaseException) -> bool:
    """
    Return True if a failure is worth retrying.

    Transient: throttling, network trouble, server-side (5xx or unknown status)
    API errors, verification failures and local write errors. Everything else
    (auth, permission, not found, bad request, quota) is permanent.
    """
    if isinstance(exc, (RateLimitError, NetworkError, VerificationError)):
        return True
    if isinstance(exc, ApiError):
        status_code = exc.details.get("status_code")
        if not isinstance(status_code, int) or status_code == 0:
            return True
        return 500 <= status_code <= 599
    if isinstance(exc, GDriveMirrorError):
        return False
    return isinstance(exc, OSError)
