"""Unit tests for JSON output writing."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from acd_batch.writer import OutputWriter, output_path_for


class TestOutputPath:
    """Tests for output_path_for."""

    @pytest.mark.unit
    def test_appends_json_suffix(self, output_dir: Path) -> None:
        assert output_path_for(output_dir, "note.txt") == output_dir / "note.txt.json"

    @pytest.mark.unit
    def test_mirrors_subdirectories(self, output_dir: Path) -> None:
        expected = output_dir / "2023" / "jan" / "note.txt.json"
        assert output_path_for(output_dir, "2023/jan/note.txt") == expected


class TestOutputWriter:
    """Tests for OutputWriter.write."""

    @pytest.mark.unit
    def test_creates_missing_directories(self, output_dir: Path) -> None:
        written = OutputWriter(output_dir).write("a/b/note.txt", {"filename": "a/b/note.txt"})

        assert written == output_dir / "a" / "b" / "note.txt.json"
        assert written.is_file()

    @pytest.mark.unit
    def test_existing_directories_are_fine(self, output_dir: Path) -> None:
        writer = OutputWriter(output_dir)
        writer.write("sub/one.txt", {"n": 1})
        assert writer.write("sub/two.txt", {"n": 2}) is not None

    @pytest.mark.unit
    def test_two_space_pretty_print(self, output_dir: Path) -> None:
        result = {"filename": "note.txt", "unstructured": [{"data": {}}]}
        written = OutputWriter(output_dir).write("note.txt", result)

        assert written is not None
        content = written.read_text(encoding="utf-8")
        assert content == json.dumps(result, indent=2)
        assert '\n  "filename"' in content

    @pytest.mark.unit
    def test_non_ascii_written_verbatim(self, output_dir: Path) -> None:
        written = OutputWriter(output_dir).write("note.txt", {"coveredText": "fièvre"})

        assert written is not None
        assert "fièvre" in written.read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_write_failure_is_logged_not_raised(
        self, output_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.object(Path, "write_text", side_effect=PermissionError("read-only")):
            with caplog.at_level("ERROR", logger="acd_batch"):
                result = OutputWriter(output_dir).write("note.txt", {"filename": "note.txt"})

        assert result is None
        assert "Failed to write" in caplog.text
        assert "read-only" in caplog.text

    @pytest.mark.unit
    def test_unserializable_result_is_logged(self, output_dir: Path) -> None:
        assert OutputWriter(output_dir).write("note.txt", {"bad": object()}) is None
        assert not (output_dir / "note.txt.json").exists()

    @pytest.mark.unit
    def test_success_message(self, output_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO", logger="acd_batch"):
            OutputWriter(output_dir).write("sub/note.txt", {})

        assert "sub/note.txt successfully processed!" in caplog.text
