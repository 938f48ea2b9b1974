"""Sequential batch processing of input files.

Each file goes through read → annotate (with retries) → extend → write,
and the next file starts only after the current one has settled. Keeping a
single request in flight bounds the load on the annotation service.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from acd_batch.client import AnnotationClient
from acd_batch.extender import SpanExtender
from acd_batch.walker import DirectoryWalker
from acd_batch.writer import OutputWriter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from acd_batch.config import BatchConfig

logger = logging.getLogger(__name__)

# Always skipped without logging
IGNORED_FILENAMES = frozenset({".gitignore", ".DS_Store"})


class FileStatus(str, Enum):
    """Final state of one file."""

    DONE = "done"
    SKIPPED = "skipped"
    READ_FAILED = "read_failed"
    ANNOTATION_FAILED = "annotation_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class RunSummary:
    """Outcome of a batch run.

    Attributes:
        eligible: Files found eligible by the directory walk
        statuses: Number of files that settled in each FileStatus
    """

    eligible: int = 0
    statuses: Counter[FileStatus] = field(default_factory=Counter)

    @property
    def succeeded(self) -> int:
        return self.statuses[FileStatus.DONE]

    @property
    def failed(self) -> int:
        return (
            self.statuses[FileStatus.READ_FAILED]
            + self.statuses[FileStatus.ANNOTATION_FAILED]
            + self.statuses[FileStatus.WRITE_FAILED]
        )


def _read_text(path: Path) -> str:
    # Line endings are kept as stored; service offsets index this exact text
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


class BatchSequencer:
    """Runs files through the annotation chain one at a time."""

    def __init__(
        self,
        config: BatchConfig,
        client: AnnotationClient,
        extender: SpanExtender,
        writer: OutputWriter,
    ) -> None:
        self.config = config
        self.client = client
        self.extender = extender
        self.writer = writer

    async def process_file(self, relative_path: str) -> FileStatus:
        """Process a single file; never raises for per-file failures."""
        if PurePosixPath(relative_path).name in IGNORED_FILENAMES:
            return FileStatus.SKIPPED

        logger.info("reading file: %s", relative_path)
        path = self.config.data_dir / relative_path
        try:
            text = await asyncio.to_thread(_read_text, path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read file %s: %s", relative_path, e)
            return FileStatus.READ_FAILED

        response = await self.client.annotate(relative_path, text)
        if response is None:
            return FileStatus.ANNOTATION_FAILED

        result = self._finish(relative_path, text, response)
        written = await asyncio.to_thread(self.writer.write, relative_path, result)
        return FileStatus.DONE if written is not None else FileStatus.WRITE_FAILED

    def _finish(self, relative_path: str, text: str, response: dict[str, Any]) -> dict[str, Any]:
        result = self.extender.apply(text, response)
        result["filename"] = relative_path
        return result

    async def process_files(self, files: Iterable[str]) -> RunSummary:
        """Process files strictly in order, awaiting each before the next."""
        summary = RunSummary()
        for relative_path in files:
            status = await self.process_file(relative_path)
            logger.debug("%s: %s", relative_path, status.value)
            summary.statuses[status] += 1
        return summary


def build_sequencer(config: BatchConfig, template: dict[str, Any]) -> BatchSequencer:
    """Wire up client, extender and writer from the configuration."""
    return BatchSequencer(
        config=config,
        client=AnnotationClient(config, template),
        extender=SpanExtender(config.extend_words_by, config.extend_annotations),
        writer=OutputWriter(config.output_dir),
    )


async def run_batch(config: BatchConfig, template: dict[str, Any]) -> RunSummary:
    """Walk the data directory and annotate every eligible file.

    Args:
        config: Batch configuration
        template: Annotator request template

    Returns:
        RunSummary with the eligible count and per-status counts
    """
    if config.extend_words_by > 0:
        logger.info(
            "Adding extendedText set to coveredText +/- %d words for the following "
            "annotations: %s.",
            config.extend_words_by,
            ",".join(config.extend_annotations),
        )

    walk = DirectoryWalker(config.data_dir, recurse=config.recurse).walk()
    sequencer = build_sequencer(config, template)
    summary = await sequencer.process_files(walk.files)
    summary.eligible = walk.total
    logger.info("processed %d files!", walk.total)
    return summary
