"""Tests for the content scanner."""

from pathlib import Path

import pytest

from godojo_content.errors import DirectoryNotFound, ValidationError
from godojo_content.ingestion.scanner import list_dirs, scan_files, suffix_filter


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")


class TestScanFiles:
    """Tests for recursive file discovery."""

    def test_depth_first_sorted_order(self, tmp_path: Path) -> None:
        for name in ["b/02.md", "a/z.md", "a/sub/y.md", "c.md", "a/01.md"]:
            _touch(tmp_path / name)

        found = [p.relative_to(tmp_path).as_posix() for p in scan_files(tmp_path)]
        assert found == ["a/01.md", "a/sub/y.md", "a/z.md", "b/02.md", "c.md"]

    def test_repeated_scans_identical(self, tmp_path: Path) -> None:
        for name in ["x/1.md", "y/2.md", "3.md"]:
            _touch(tmp_path / name)
        assert list(scan_files(tmp_path)) == list(scan_files(tmp_path))

    def test_hidden_entries_skipped(self, tmp_path: Path) -> None:
        _touch(tmp_path / ".git" / "config.md")
        _touch(tmp_path / ".draft.md")
        _touch(tmp_path / "visible.md")

        found = [p.name for p in scan_files(tmp_path)]
        assert found == ["visible.md"]

    def test_suffix_filter(self, tmp_path: Path) -> None:
        _touch(tmp_path / "a.md")
        _touch(tmp_path / "b.MD")
        _touch(tmp_path / "c.txt")

        found = [p.name for p in scan_files(tmp_path, suffix_filter(".md"))]
        assert found == ["a.md", "b.MD"]

    def test_missing_root_raises_immediately(self, tmp_path: Path) -> None:
        with pytest.raises(DirectoryNotFound):
            scan_files(tmp_path / "missing")

    def test_directory_not_found_is_validation_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            scan_files(tmp_path / "missing")


class TestListDirs:
    def test_sorted_non_hidden(self, tmp_path: Path) -> None:
        for name in ["02-b", "01-a", ".hidden"]:
            (tmp_path / name).mkdir()
        _touch(tmp_path / "file.md")
        assert [p.name for p in list_dirs(tmp_path)] == ["01-a", "02-b"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert list_dirs(tmp_path / "missing") == []
