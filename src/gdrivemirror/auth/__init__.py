"""Public auth exports for gdrivemirror."""

from __future__ import annotations

from .auth_info import OAUTH, SERVICE_ACCOUNT, AuthInfo
from .client import READONLY_SCOPES, DriveAuthClient
from .validation import CredentialValidation, validate_credentials

__all__ = [
    "AuthInfo",
    "SERVICE_ACCOUNT",
    "OAUTH",
    "DriveAuthClient",
    "READONLY_SCOPES",
    "CredentialValidation",
    "validate_credentials",
]
