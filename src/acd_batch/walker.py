"""Discovery of input files under the data directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."
OUTPUT_SUFFIX = ".json"


@dataclass
class WalkResult:
    """Files eligible for annotation.

    Attributes:
        files: Paths relative to the data directory, '/'-separated, in walk order
        total: Number of eligible files
    """

    files: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.files)


class DirectoryWalker:
    """Enumerates input files below a base directory.

    Hidden files, prior ``.json`` outputs and zero-byte files are left out.
    Subdirectories are only entered when ``recurse`` is set.
    """

    def __init__(self, base_dir: Path, recurse: bool = False) -> None:
        self.base_dir = base_dir
        self.recurse = recurse

    def walk(self) -> WalkResult:
        result = WalkResult()
        self._walk_dir(self.base_dir, "", result)
        return result

    def _walk_dir(self, folder: Path, subtree: str, result: WalkResult) -> None:
        with os.scandir(folder) as it:
            entries = sorted(it, key=lambda entry: entry.name)

        for entry in entries:
            if entry.name.startswith(HIDDEN_PREFIX):
                continue

            # Symlinked directories are not followed to avoid cycles
            if entry.is_dir(follow_symlinks=False):
                if self.recurse:
                    self._walk_dir(Path(entry.path), f"{subtree}{entry.name}/", result)
                continue

            if not entry.is_file() or entry.name.endswith(OUTPUT_SUFFIX):
                continue

            if entry.stat().st_size == 0:
                logger.info("skipping zero size file: %s", entry.path)
                continue

            result.files.append(f"{subtree}{entry.name}")
