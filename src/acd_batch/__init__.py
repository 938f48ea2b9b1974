"""Batch client for a clinical text-annotation service."""

from acd_batch.client import AnnotationClient, build_request
from acd_batch.config import BatchConfig, load_annotator_config, load_config
from acd_batch.extender import SpanExtender, extend_span
from acd_batch.pipeline import BatchSequencer, FileStatus, RunSummary, run_batch
from acd_batch.walker import DirectoryWalker, WalkResult
from acd_batch.writer import OutputWriter

__all__ = [
    "AnnotationClient",
    "BatchConfig",
    "BatchSequencer",
    "DirectoryWalker",
    "FileStatus",
    "OutputWriter",
    "RunSummary",
    "SpanExtender",
    "WalkResult",
    "build_request",
    "extend_span",
    "load_annotator_config",
    "load_config",
    "run_batch",
]
