"""Authentication information for gdrivemirror."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SERVICE_ACCOUNT = "service_account"
OAUTH = "oauth"

SERVICE_ACCOUNT_FIELDS: tuple[str, ...] = (
    "type",
    "client_email",
    "private_key_id",
    "private_key",
    "project_id",
    "client_id",
)


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    kind = "service_account":
        data is the service-account credentials record with the keys in
        SERVICE_ACCOUNT_FIELDS (the JSON key file downloaded from Google
        Cloud). Field formats are checked by ``validate_credentials``.
    kind = "oauth":
        data must include ``client_secrets_file`` and ``token_file``.
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in (SERVICE_ACCOUNT, OAUTH):
            raise ValueError("AuthInfo.kind must be 'service_account' or 'oauth'")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        if self.kind == OAUTH:
            for key in ("client_secrets_file", "token_file"):
                value = self.data.get(key)
                if not isinstance(value, str) or not value.strip():
                    raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    @classmethod
    def service_account(cls, credentials: dict[str, Any]) -> AuthInfo:
        return cls(kind=SERVICE_ACCOUNT, data=dict(credentials))

    @property
    def is_service_account(self) -> bool:
        return self.kind == SERVICE_ACCOUNT

    @property
    def client_secrets_file(self) -> str:
        """Path to OAuth client secrets JSON."""
        return str(self.data["client_secrets_file"])

    @property
    def token_file(self) -> str:
        """Path to OAuth token JSON (authorized user)."""
        return str(self.data["token_file"])
