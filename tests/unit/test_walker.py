"""Unit tests for input file discovery."""

from pathlib import Path

import pytest

from acd_batch.walker import DirectoryWalker


def _write(path: Path, content: str = "some text") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestDirectoryWalker:
    """Tests for DirectoryWalker.walk."""

    @pytest.mark.unit
    def test_lists_plain_files_in_order(self, data_dir: Path) -> None:
        _write(data_dir / "b.txt")
        _write(data_dir / "a.txt")
        _write(data_dir / "note")

        result = DirectoryWalker(data_dir).walk()

        assert result.files == ["a.txt", "b.txt", "note"]
        assert result.total == 3

    @pytest.mark.unit
    def test_excludes_hidden_files(self, data_dir: Path) -> None:
        _write(data_dir / ".hidden")
        _write(data_dir / ".gitignore")
        _write(data_dir / "visible.txt")

        assert DirectoryWalker(data_dir).walk().files == ["visible.txt"]

    @pytest.mark.unit
    def test_excludes_prior_json_outputs(self, data_dir: Path) -> None:
        _write(data_dir / "report.txt")
        _write(data_dir / "report.txt.json", "{}")

        assert DirectoryWalker(data_dir).walk().files == ["report.txt"]

    @pytest.mark.unit
    def test_excludes_zero_byte_files_with_notice(
        self, data_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        empty = _write(data_dir / "empty.txt", "")
        _write(data_dir / "full.txt")

        with caplog.at_level("INFO", logger="acd_batch"):
            result = DirectoryWalker(data_dir).walk()

        assert result.files == ["full.txt"]
        assert f"skipping zero size file: {empty}" in caplog.text

    @pytest.mark.unit
    def test_subdirectories_ignored_without_recursion(self, data_dir: Path) -> None:
        _write(data_dir / "top.txt")
        _write(data_dir / "sub" / "nested.txt")

        result = DirectoryWalker(data_dir, recurse=False).walk()

        assert result.files == ["top.txt"]
        assert result.total == 1

    @pytest.mark.unit
    def test_recursion_prefixes_subdirectory_names(self, data_dir: Path) -> None:
        _write(data_dir / "top.txt")
        _write(data_dir / "sub" / "nested.txt")
        _write(data_dir / "sub" / "deeper" / "leaf.txt")
        _write(data_dir / "sub" / "deeper" / "leaf.txt.json", "{}")
        _write(data_dir / "sub" / "zero.txt", "")

        result = DirectoryWalker(data_dir, recurse=True).walk()

        assert result.files == ["sub/deeper/leaf.txt", "sub/nested.txt", "top.txt"]
        assert result.total == 3

    @pytest.mark.unit
    def test_hidden_directories_are_not_entered(self, data_dir: Path) -> None:
        _write(data_dir / ".git" / "config")
        _write(data_dir / "doc.txt")

        assert DirectoryWalker(data_dir, recurse=True).walk().files == ["doc.txt"]

    @pytest.mark.unit
    def test_empty_directory(self, data_dir: Path) -> None:
        result = DirectoryWalker(data_dir, recurse=True).walk()
        assert result.files == []
        assert result.total == 0
