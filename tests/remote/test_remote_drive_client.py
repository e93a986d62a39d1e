import json
import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

from googleapiclient.errors import HttpError

from gdrivemirror.errors import (
    ApiError,
    NetworkError,
    PermissionError,
    RateLimitError,
)
from gdrivemirror.remote import DriveApiClient, children_query, folder_query
from gdrivemirror.remote.drive_client import CallRetryPolicy, _http_error_to_info, _map_exception


def _http_error(status: int, reason: str = "", body=None) -> HttpError:
    resp = Mock()
    resp.status = status
    resp.reason = reason
    content = json.dumps(body).encode("utf-8") if body is not None else b"{}"
    return HttpError(resp=resp, content=content)


class _FakeDownloader:
    def __init__(self, fd, request, chunksize) -> None:
        self._fd = fd
        self._chunks = [b"abc", b"de"]

    def next_chunk(self):
        self._fd.write(self._chunks.pop(0))
        return None, not self._chunks


class TestDriveApiClient(unittest.IsolatedAsyncioTestCase):
    def _service(self):
        service = Mock()
        files_resource = Mock()
        service.files.return_value = files_resource
        return service, files_resource

    async def test_list_objects_builds_request_and_parses_page(self) -> None:
        service, files_resource = self._service()
        files_resource.list.return_value.execute.return_value = {
            "files": [
                {
                    "id": "F1",
                    "name": "a.txt",
                    "mimeType": "text/plain",
                    "parents": ["P1"],
                    "modifiedTime": "2025-01-01T00:00:00.000Z",
                    "size": "3",
                }
            ],
            "nextPageToken": "T2",
        }
        client = DriveApiClient.from_service(service)

        objects, token = await client.list_objects(children_query("P1"), "T1", page_size=50)

        self.assertEqual(token, "T2")
        self.assertEqual(objects[0].id, "F1")
        self.assertEqual(objects[0].size, 3)
        self.assertEqual(objects[0].modified_time, datetime(2025, 1, 1, tzinfo=timezone.utc))

        kwargs = files_resource.list.call_args.kwargs
        self.assertIn("'P1' in parents", kwargs["q"])
        self.assertIn("trashed = false", kwargs["q"])
        self.assertEqual(kwargs["pageToken"], "T1")
        self.assertEqual(kwargs["pageSize"], 50)
        self.assertTrue(kwargs["supportsAllDrives"])
        self.assertTrue(kwargs["includeItemsFromAllDrives"])

    async def test_list_objects_without_all_drives(self) -> None:
        service, files_resource = self._service()
        files_resource.list.return_value.execute.return_value = {"files": []}
        client = DriveApiClient.from_service(service, supports_all_drives=False)

        objects, token = await client.list_objects(folder_query())

        self.assertEqual(objects, [])
        self.assertIsNone(token)
        kwargs = files_resource.list.call_args.kwargs
        self.assertNotIn("supportsAllDrives", kwargs)
        self.assertNotIn("pageSize", kwargs)

    async def test_get_metadata_returns_none_on_404(self) -> None:
        service, files_resource = self._service()
        files_resource.get.return_value.execute.side_effect = _http_error(404, "Not Found")
        client = DriveApiClient.from_service(service)

        self.assertIsNone(await client.get_metadata("X"))

    async def test_get_metadata_parses_fields(self) -> None:
        service, files_resource = self._service()
        files_resource.get.return_value.execute.return_value = {
            "name": "a.bin",
            "size": "10",
            "mimeType": "application/octet-stream",
            "modifiedTime": "2025-01-01T00:00:00Z",
        }
        client = DriveApiClient.from_service(service)

        meta = await client.get_metadata("F1")

        self.assertEqual(meta.size, 10)
        self.assertEqual(files_resource.get.call_args.kwargs["fields"], "name,size,mimeType,modifiedTime")

    async def test_retry_on_429_then_success(self) -> None:
        service, files_resource = self._service()
        err = _http_error(
            429,
            "rateLimitExceeded",
            {"error": {"message": "rate limited", "errors": [{"reason": "rateLimitExceeded"}]}},
        )
        request = files_resource.get.return_value
        request.execute.side_effect = [err, err, {"name": "n", "mimeType": "text/plain"}]
        client = DriveApiClient.from_service(
            service, retry_policy=CallRetryPolicy(max_retries=3, initial_delay_sec=1.0)
        )

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            meta = await client.get_metadata("F1")

        self.assertEqual(meta.name, "n")
        self.assertEqual(request.execute.call_count, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])

    async def test_permission_error_is_not_retried(self) -> None:
        service, files_resource = self._service()
        request = files_resource.list.return_value
        request.execute.side_effect = _http_error(403, "forbidden")
        client = DriveApiClient.from_service(service)

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with self.assertRaises(PermissionError):
                await client.list_objects(folder_query())

        self.assertEqual(request.execute.call_count, 1)
        sleep.assert_not_called()

    async def test_iter_content_yields_chunks(self) -> None:
        service, files_resource = self._service()
        client = DriveApiClient.from_service(service)

        with patch("gdrivemirror.remote.drive_client.MediaIoBaseDownload", _FakeDownloader):
            chunks = [c async for c in client.iter_content("F1")]

        self.assertEqual(chunks, [b"abc", b"de"])
        self.assertEqual(files_resource.get_media.call_args.kwargs["fileId"], "F1")


class TestErrorMapping(unittest.TestCase):
    def test_http_error_to_info_reads_body_reason(self) -> None:
        err = _http_error(
            403,
            "Forbidden",
            {"error": {"message": "slow down", "errors": [{"reason": "userRateLimitExceeded", "domain": "usageLimits"}]}},
        )
        info = _http_error_to_info(err)
        self.assertEqual(info.status_code, 403)
        self.assertEqual(info.reason, "userRateLimitExceeded")
        self.assertEqual(info.message, "slow down")
        self.assertEqual(info.details, {"domain": "usageLimits"})
        self.assertIsInstance(_map_exception(err), RateLimitError)

    def test_map_exception_network_and_unknown(self) -> None:
        self.assertIsInstance(_map_exception(ConnectionResetError("reset")), NetworkError)
        self.assertIsInstance(_map_exception(TimeoutError("slow")), NetworkError)
        self.assertIsInstance(_map_exception(RuntimeError("odd")), ApiError)


if __name__ == "__main__":
    unittest.main()
