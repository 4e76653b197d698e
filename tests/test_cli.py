import errno
import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from file_organizer.__main__ import EXIT_FAILURE, EXIT_OK, main
from file_organizer.executor import _rename_no_replace

REAL_MOVE = _rename_no_replace


def snapshot(root: Path) -> dict:
    state = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            path = Path(dirpath) / name
            state[str(path.relative_to(root))] = ("dir", path.stat().st_mtime_ns)
        for name in filenames:
            path = Path(dirpath) / name
            state[str(path.relative_to(root))] = (path.read_bytes(), path.stat().st_mtime_ns)
    return state


class TestCli(unittest.TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp()).resolve()

    def tearDown(self):
        shutil.rmtree(self.root)

    def organize(self, *extra):
        return main(["organize", str(self.root), "--no-progress", *extra])

    def test_no_command_prints_help(self):
        self.assertEqual(main([]), EXIT_OK)

    def test_help_exits_zero(self):
        with self.assertRaises(SystemExit) as ctx:
            main(["--help"])
        self.assertEqual(ctx.exception.code, 0)

    def test_scan(self):
        (self.root / "a.txt").write_text("hello")
        (self.root / "README").touch()
        self.assertEqual(main(["scan", str(self.root)]), EXIT_OK)

    def test_scan_empty_folder(self):
        self.assertEqual(main(["scan", str(self.root), "--recursive"]), EXIT_OK)

    def test_scan_fatal_errors(self):
        self.assertEqual(main(["scan", str(self.root / "missing")]), EXIT_FAILURE)
        (self.root / "file.txt").touch()
        self.assertEqual(main(["scan", str(self.root / "file.txt")]), EXIT_FAILURE)

    def test_scan_defaults_to_current_directory(self):
        (self.root / "a.txt").touch()
        cwd = os.getcwd()
        os.chdir(self.root)
        try:
            with patch("file_organizer.__main__.print_scan_table") as mock_table:
                self.assertEqual(main(["scan"]), EXIT_OK)
        finally:
            os.chdir(cwd)
        stats = mock_table.call_args[0][0]
        self.assertEqual(stats.root, self.root)
        self.assertEqual(stats.files, 1)

    def test_organize_round_trip(self):
        (self.root / "a.txt").write_text("abc")

        self.assertEqual(self.organize(), EXIT_OK)

        self.assertTrue((self.root / "txt" / "a.txt").is_file())
        self.assertFalse((self.root / "a.txt").exists())

    def test_organize_scenario(self):
        for name in ["photo.jpg", "notes.txt", "README", "archive.tar.gz"]:
            (self.root / name).touch()

        self.assertEqual(self.organize(), EXIT_OK)

        for rel in ["jpg/photo.jpg", "txt/notes.txt", "no_extension/README", "gz/archive.tar.gz"]:
            self.assertTrue((self.root / rel).is_file(), rel)

    def test_organize_collision(self):
        (self.root / "a.txt").write_text("new")
        (self.root / "txt").mkdir()
        (self.root / "txt" / "a.txt").write_text("old")

        self.assertEqual(self.organize(), EXIT_OK)

        self.assertEqual((self.root / "txt" / "a.txt").read_text(), "old")
        self.assertEqual((self.root / "txt" / "a (1).txt").read_text(), "new")

    def test_dry_run_does_not_change_anything(self):
        (self.root / "a.txt").write_text("abc")
        (self.root / "b.png").write_text("png")
        (self.root / "sub").mkdir()
        (self.root / "sub" / "c.md").write_text("md")
        before = snapshot(self.root)

        self.assertEqual(self.organize("--dry-run", "--recursive"), EXIT_OK)

        self.assertEqual(before, snapshot(self.root))

    def test_second_run_has_empty_plan(self):
        for name in ["a.txt", "b.jpg", "Makefile", ".hidden"]:
            (self.root / name).touch()
        self.assertEqual(self.organize(), EXIT_OK)
        after_first = snapshot(self.root)

        with patch("file_organizer.__main__.apply_plan") as mock_apply:
            self.assertEqual(self.organize(), EXIT_OK)
            mock_apply.assert_not_called()

        self.assertEqual(after_first, snapshot(self.root))

    def test_file_named_like_category_folder(self):
        (self.root / "a.txt").write_text("abc")
        (self.root / "txt").write_text("plain")

        self.assertEqual(self.organize(), EXIT_OK)

        self.assertEqual((self.root / "txt" / "a.txt").read_text(), "abc")
        self.assertEqual((self.root / "no_extension" / "txt").read_text(), "plain")
        with patch("file_organizer.__main__.apply_plan") as mock_apply:
            self.assertEqual(self.organize(), EXIT_OK)
            mock_apply.assert_not_called()

    def test_root_under_unsearchable_parent_is_fatal(self):
        with patch("file_organizer.scanner.os.stat", side_effect=PermissionError(13, "Permission denied")):
            self.assertEqual(main(["scan", str(self.root / "inner")]), EXIT_FAILURE)
            self.assertEqual(self.organize("--dry-run"), EXIT_FAILURE)

    def test_recursive_run_is_idempotent(self):
        (self.root / "top.txt").touch()
        (self.root / "projects").mkdir()
        (self.root / "projects" / "main.py").touch()
        (self.root / "projects" / "notes.txt").touch()

        self.assertEqual(self.organize("--recursive"), EXIT_OK)

        self.assertTrue((self.root / "py" / "main.py").is_file())
        self.assertTrue((self.root / "txt" / "notes.txt").is_file())
        self.assertTrue((self.root / "txt" / "top.txt").is_file())

        with patch("file_organizer.__main__.apply_plan") as mock_apply:
            self.assertEqual(self.organize("--recursive"), EXIT_OK)
            mock_apply.assert_not_called()

    def test_organize_into_separate_destination(self):
        dest = Path(tempfile.mkdtemp()).resolve()
        self.addCleanup(shutil.rmtree, dest)
        (self.root / "a.txt").touch()

        self.assertEqual(self.organize("--dest", str(dest)), EXIT_OK)

        self.assertTrue((dest / "txt" / "a.txt").is_file())
        self.assertFalse((self.root / "a.txt").exists())

    def test_destination_that_is_a_file_is_fatal(self):
        (self.root / "a.txt").touch()
        blocker = self.root / "dest.bin"
        blocker.touch()

        self.assertEqual(self.organize("--dest", str(blocker)), EXIT_FAILURE)
        self.assertTrue((self.root / "a.txt").is_file())

    def test_failed_action_gives_non_zero_exit(self):
        (self.root / "a.txt").touch()
        (self.root / "locked.txt").touch()

        def fake_move(src, dst):
            if Path(src).name == "locked.txt":
                raise PermissionError(errno.EACCES, "Permission denied")
            return REAL_MOVE(src, dst)

        with patch("file_organizer.executor._rename_no_replace", side_effect=fake_move):
            self.assertEqual(self.organize(), EXIT_FAILURE)

        self.assertTrue((self.root / "locked.txt").is_file())
        self.assertTrue((self.root / "txt" / "a.txt").is_file())

    def test_report_out(self):
        out_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, out_dir)
        report_path = out_dir / "report.json"
        (self.root / "a.txt").write_text("abc")

        self.assertEqual(self.organize("--report-out", str(report_path)), EXIT_OK)

        data = json.loads(report_path.read_text(encoding="utf-8"))
        self.assertEqual(data["succeeded_count"], 1)
        self.assertEqual(data["bytes_moved"], 3)
        self.assertEqual(data["results"][0]["category"], "txt")

    def test_missing_root_is_fatal(self):
        self.assertEqual(main(["organize", str(self.root / "nope"), "--dry-run"]), EXIT_FAILURE)


if __name__ == "__main__":
    unittest.main()
