import unittest
from datetime import datetime, timedelta, timezone

from gdrivemirror.util.time import now_utc, parse_optional, parse_rfc3339, stamp, to_rfc3339


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_millis_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56.123Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, 123000, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_naive_and_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("2025-01-01T12:34:56")
        with self.assertRaises(ValueError):
            parse_rfc3339("  ")

    def test_to_rfc3339_millisecond_z(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, 5000, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.005Z")

    def test_to_rfc3339_rejects_naive(self) -> None:
        with self.assertRaises(ValueError):
            to_rfc3339(datetime(2025, 1, 1))

    def test_stamp_normalizes_equivalent_instants(self) -> None:
        jst = timezone(timedelta(hours=9))
        a = stamp(datetime(2025, 1, 1, 9, 0, 0, tzinfo=jst))
        b = stamp("2025-01-01T00:00:00Z")
        c = stamp("2025-01-01T00:00:00.000Z")
        self.assertEqual(a, b)
        self.assertEqual(b, c)

    def test_stamp_edge_values(self) -> None:
        self.assertEqual(stamp(None), "")
        self.assertEqual(stamp(""), "")
        self.assertEqual(stamp("not-a-date"), "not-a-date")

    def test_parse_optional(self) -> None:
        self.assertIsNone(parse_optional(None))
        self.assertIsNone(parse_optional("garbage"))
        self.assertIsNotNone(parse_optional("2025-01-01T00:00:00Z"))


if __name__ == "__main__":
    unittest.main()
