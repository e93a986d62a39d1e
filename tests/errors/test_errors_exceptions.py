import unittest

from gdrivemirror.errors.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    EmptyDownloadError,
    GDriveMirrorError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidCredentialsError,
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


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = GDriveMirrorError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_hierarchy(self) -> None:
        self.assertTrue(issubclass(InvalidCredentialsError, AuthError))
        self.assertTrue(issubclass(EmptyDownloadError, VerificationError))
        self.assertTrue(issubclass(SizeMismatchError, VerificationError))
        self.assertTrue(issubclass(VerificationError, GDriveMirrorError))

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)
        self.assertEqual(str(err), "not found")
        self.assertEqual(err.details["status_code"], 404)

        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, InvalidArgumentError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=412, message="precondition"))
        self.assertIsInstance(err, ConflictError)

        err = map_http_error(HttpErrorInfo(status_code=401))
        self.assertIsInstance(err, AuthError)
        self.assertEqual(str(err), "HTTP error 401")

    def test_map_http_error_403_variants(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=403, reason="userRateLimitExceeded"))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=403, reason="dailyLimitExceeded"))
        self.assertIsInstance(err, QuotaExceededError)

        err = map_http_error(HttpErrorInfo(status_code=403, reason="insufficientPermissions"))
        self.assertIsInstance(err, PermissionError)

    def test_map_http_error_5xx_and_unknown_are_api_errors(self) -> None:
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=503)), ApiError)
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=418)), ApiError)

    def test_map_http_error_merges_details(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=500, reason="backendError", details={"domain": "global"})
        )
        self.assertEqual(err.details["domain"], "global")
        self.assertEqual(err.details["reason"], "backendError")


class TestIsTransient(unittest.TestCase):
    def test_transient_errors(self) -> None:
        self.assertTrue(is_transient(RateLimitError("x")))
        self.assertTrue(is_transient(NetworkError("x")))
        self.assertTrue(is_transient(SizeMismatchError("x")))
        self.assertTrue(is_transient(EmptyDownloadError("x")))
        self.assertTrue(is_transient(OSError("disk")))

    def test_api_error_depends_on_status(self) -> None:
        self.assertTrue(is_transient(map_http_error(HttpErrorInfo(status_code=503))))
        self.assertTrue(is_transient(ApiError("no status")))
        self.assertFalse(is_transient(map_http_error(HttpErrorInfo(status_code=418))))

    def test_permanent_errors(self) -> None:
        self.assertFalse(is_transient(NotFoundError("x")))
        self.assertFalse(is_transient(PermissionError("x")))
        self.assertFalse(is_transient(AuthError("x")))
        self.assertFalse(is_transient(QuotaExceededError("x")))
        self.assertFalse(is_transient(ValueError("x")))


if __name__ == "__main__":
    unittest.main()
