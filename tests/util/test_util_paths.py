import unittest

from gdrivemirror.util.paths import local_name, temp_path


class TestUtilPaths(unittest.TestCase):
    def test_local_name_replaces_separators(self) -> None:
        self.assertEqual(local_name("a/b.txt", "F1"), "a_b.txt")

    def test_local_name_falls_back_to_id(self) -> None:
        self.assertEqual(local_name("", "F1"), "F1")
        self.assertEqual(local_name("..", "F1"), "F1")
        self.assertEqual(local_name("  ", "F1"), "F1")

    def test_local_name_keeps_regular_names(self) -> None:
        self.assertEqual(local_name("report 2025.pdf", "F1"), "report 2025.pdf")

    def test_temp_path(self) -> None:
        self.assertEqual(temp_path("/x/a.bin", "F1"), "/x/a.bin.F1.tmp")

    def test_temp_path_differs_per_file(self) -> None:
        self.assertNotEqual(temp_path("/x/a.bin", "F1"), temp_path("/x/a.bin", "F2"))


if __name__ == "__main__":
    unittest.main()
