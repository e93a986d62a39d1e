import logging
import unittest

from gdrivemirror import GDriveMirror, SyncOptions
from gdrivemirror.log import LOGGER_NAMESPACE, get_logger, set_logging_enabled


class TestLogging(unittest.TestCase):
    def tearDown(self) -> None:
        set_logging_enabled(True)

    def test_mirror_leaves_root_logging_alone(self) -> None:
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level

        GDriveMirror(SyncOptions(), enable_logging=True)

        self.assertEqual(root.handlers, handlers)
        self.assertEqual(root.level, level)

    def test_records_go_to_stdlib_logger_of_module(self) -> None:
        with self.assertLogs("gdrivemirror.sync.pipeline", level="INFO") as cm:
            get_logger("gdrivemirror.sync.pipeline").info("file_verified", file_id="F1")

        self.assertEqual(len(cm.records), 1)
        self.assertIn("file_verified", cm.records[0].getMessage())
        self.assertIn("F1", cm.records[0].getMessage())

    def test_disabling_only_touches_package_logger(self) -> None:
        other = logging.getLogger("someapp")
        other_level = other.level

        set_logging_enabled(False)

        self.assertGreater(logging.getLogger(LOGGER_NAMESPACE).level, logging.CRITICAL)
        self.assertFalse(logging.getLogger("gdrivemirror.sync").isEnabledFor(logging.CRITICAL))
        self.assertEqual(other.level, other_level)

        set_logging_enabled(True)
        self.assertEqual(logging.getLogger(LOGGER_NAMESPACE).level, logging.NOTSET)


if __name__ == "__main__":
    unittest.main()
