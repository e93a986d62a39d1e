"""Credential loading and Drive service construction."""

from __future__ import annotations

import os
from typing import Sequence

from gdrivemirror.errors import AuthError, InvalidArgumentError
from gdrivemirror.log import get_logger

from .auth_info import AuthInfo

logger = get_logger(__name__)

READONLY_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive.readonly",)


class DriveAuthClient:
    """Turn an AuthInfo into google-auth credentials and a Drive v3 service."""

    def __init__(self, auth_info: AuthInfo) -> None:
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str] = READONLY_SCOPES):
        """
        Return credentials for the given scopes.

        Returns:
            google.oauth2.service_account.Credentials for service accounts,
            google.oauth2.credentials.Credentials for OAuth users.

        Raises:
            AuthError: on load/refresh/flow failures.
            InvalidArgumentError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")

        if self._auth_info.is_service_account:
            return self._service_account_credentials(scopes)
        return self._oauth_credentials(scopes)

    def build_drive_service(self, scopes: Sequence[str] = READONLY_SCOPES):
        """
        Build a Drive API service resource.

        Returns:
            googleapiclient.discovery.Resource
        """
        from googleapiclient.discovery import build

        creds = self.get_credentials(scopes)
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc

    def _service_account_credentials(self, scopes: Sequence[str]):
        from google.oauth2 import service_account

        try:
            creds = service_account.Credentials.from_service_account_info(
                self._auth_info.data,
                scopes=list(scopes),
            )
        except (ValueError, KeyError) as exc:
            raise AuthError(
                "Failed to load service account credentials",
                details={"client_email": self._auth_info.data.get("client_email")},
                cause=exc,
            ) from exc

        logger.debug("service_account_loaded", client_email=creds.service_account_email)
        return creds

    def _oauth_credentials(self, scopes: Sequence[str]):
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow

        token_file = self._auth_info.token_file

        if os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(token_file, scopes=list(scopes))
            except (ValueError, OSError) as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not creds.valid and creds.refresh_token:
                try:
                    creds.refresh(Request())
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc
                self._save_token(creds)

            if creds.valid:
                return creds

        # No usable token: run the installed-app consent flow.
        client_secrets = self._auth_info.client_secrets_file
        try:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes=list(scopes))
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={"client_secrets_file": client_secrets, "token_file": token_file},
                cause=exc,
            ) from exc

        self._save_token(creds)
        return creds

    def _save_token(self, creds) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        try:
            if token_dir:
                os.makedirs(token_dir, exist_ok=True)
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
