import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from gdrivemirror.auth import READONLY_SCOPES, AuthInfo, DriveAuthClient
from gdrivemirror.errors import AuthError, InvalidArgumentError


class TestDriveAuthClient(unittest.TestCase):
    def test_oauth_loads_token_file_without_flow(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            token_file = tmp_path / "token.json"

            token_payload = {
                "token": "fake-token",
                "refresh_token": "fake-refresh-token",
                "token_uri": "https://oauth2.googleapis.com/token",
                "client_id": "fake-client-id",
                "client_secret": "fake-client-secret",
                "scopes": list(READONLY_SCOPES),
                "type": "authorized_user",
                # Far-future expiry keeps the loaded token valid without a refresh.
                "expiry": "2999-01-01T00:00:00Z",
            }
            token_file.write_text(json.dumps(token_payload), encoding="utf-8")

            info = AuthInfo(
                kind="oauth",
                data={
                    "client_secrets_file": str(tmp_path / "client_secrets.json"),
                    "token_file": str(token_file),
                },
            )
            with patch("google.oauth2.credentials.Credentials.refresh") as refresh:
                creds = DriveAuthClient(info).get_credentials(READONLY_SCOPES)

            refresh.assert_not_called()
            self.assertEqual(creds.refresh_token, "fake-refresh-token")
            self.assertTrue(creds.valid)

    def test_service_account_passes_record_and_scopes(self) -> None:
        info = AuthInfo.service_account({"type": "service_account", "client_email": "a@b"})
        fake_creds = Mock(service_account_email="a@b")

        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_info",
            return_value=fake_creds,
        ) as loader:
            creds = DriveAuthClient(info).get_credentials(READONLY_SCOPES)

        self.assertIs(creds, fake_creds)
        args, kwargs = loader.call_args
        self.assertEqual(args[0]["client_email"], "a@b")
        self.assertEqual(kwargs["scopes"], list(READONLY_SCOPES))

    def test_service_account_load_failure_is_auth_error(self) -> None:
        info = AuthInfo.service_account({"type": "service_account"})

        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_info",
            side_effect=ValueError("bad key"),
        ):
            with self.assertRaises(AuthError):
                DriveAuthClient(info).get_credentials(READONLY_SCOPES)

    def test_empty_scopes_rejected(self) -> None:
        info = AuthInfo.service_account({"type": "service_account"})
        with self.assertRaises(InvalidArgumentError):
            DriveAuthClient(info).get_credentials([])


if __name__ == "__main__":
    unittest.main()
