"""JSON output for annotated files.

Output paths mirror the input layout: ``<output_dir>/<relative_path>.json``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from acd_batch.walker import OUTPUT_SUFFIX

logger = logging.getLogger(__name__)

JSON_INDENT = 2


def output_path_for(output_dir: Path, relative_path: str) -> Path:
    """Return the output file path for an input path relative to the data directory."""
    return output_dir / f"{relative_path}{OUTPUT_SUFFIX}"


class OutputWriter:
    """Writes annotation results as pretty-printed JSON."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def write(self, relative_path: str, result: dict[str, Any]) -> Path | None:
        """Serialize and write one result.

        Missing parent directories are created. Errors are logged, not raised.

        Args:
            relative_path: Input path relative to the data directory
            result: JSON-serializable annotation result

        Returns:
            Path written, or None if the write failed
        """
        out_file = output_path_for(self.output_dir, relative_path)
        try:
            content = json.dumps(result, indent=JSON_INDENT, ensure_ascii=False)
            out_file.parent.mkdir(parents=True, exist_ok=True)
            out_file.write_text(content, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write %s: %s: %s", out_file, type(e).__name__, e)
            return None

        logger.info("%s successfully processed!", relative_path)
        return out_file
