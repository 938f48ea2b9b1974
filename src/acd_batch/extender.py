"""Widening of annotation spans with surrounding word context.

For selected annotators, each annotation record gets an ``extendedText``
field: the covered text plus up to N whitespace-delimited words on each
side. A word is a maximal run of non-whitespace characters, so punctuation
attached to a word travels with it.

Offsets follow the service convention: ``begin`` is the index of the first
covered character and ``end`` is one past the last. The record's own
``begin``/``end`` are left untouched.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from acd_batch.config import DEFAULT_EXTEND_ANNOTATIONS

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")


def _is_space(ch: str) -> bool:
    return _WHITESPACE.match(ch) is not None


def extend_backward(text: str, begin: int, words: int) -> int:
    """Move ``begin`` back over up to ``words`` words.

    Each step skips whitespace, then the word before it. Reaching the start
    of the text clamps the result to 0.

    Args:
        text: Source text
        begin: Index of the first covered character
        words: Number of words to take in

    Returns:
        Index of the first character of the widened span
    """
    start = begin
    i = begin - 1
    count = 0
    while i >= 0 and count < words:
        while i >= 0 and _is_space(text[i]):
            i -= 1
        while i >= 0 and not _is_space(text[i]):
            i -= 1
        if i < 0:
            start = 0
        else:
            start = i + 1
            count += 1
    return start


def extend_forward(text: str, end: int, words: int) -> int:
    """Move the span end forward over up to ``words`` words.

    Each step skips whitespace, then the following word. Reaching the end
    of the text clamps the result to ``len(text) - 1``.

    Args:
        text: Source text
        end: Index one past the last covered character
        words: Number of words to take in

    Returns:
        Index of the last character of the widened span (inclusive)
    """
    length = len(text)
    last = end - 1
    i = end
    count = 0
    while i < length and count < words:
        while i < length and _is_space(text[i]):
            i += 1
        while i < length and not _is_space(text[i]):
            i += 1
        if i == length:
            last = length - 1
        else:
            last = i - 1
            count += 1
    return last


def extend_span(text: str, begin: int, end: int, words: int) -> tuple[int, int]:
    """Widen ``[begin, end)`` by ``words`` words on each side.

    Returns:
        (first, last) character indexes of the widened span, both inclusive,
        with ``0 <= first`` and ``last <= len(text) - 1``
    """
    length = len(text)
    begin = min(max(begin, 0), length)
    end = min(max(end, begin), length)
    return extend_backward(text, begin, words), extend_forward(text, end, words)


class SpanExtender:
    """Adds ``extendedText`` to the records of selected annotators.

    Attributes:
        words: Words of context to add on each side (0 disables extension)
        annotators: Annotator names whose records are extended
    """

    def __init__(
        self,
        words: int = 5,
        annotators: tuple[str, ...] = DEFAULT_EXTEND_ANNOTATIONS,
    ) -> None:
        self.words = words
        self.annotators = annotators

    @property
    def enabled(self) -> bool:
        return self.words > 0

    def apply(self, text: str, response: dict[str, Any]) -> dict[str, Any]:
        """Extend spans in place and drop the echoed input text.

        The ``text`` field of the first ``unstructured`` element is always
        removed, whether or not extension is enabled.

        Args:
            text: Text that was submitted for annotation
            response: Parsed service response (modified in place)

        Returns:
            The same response object
        """
        unstructured = response.get("unstructured")
        if not isinstance(unstructured, list) or not unstructured:
            return response
        first = unstructured[0]
        if not isinstance(first, dict):
            return response

        echoed = first.pop("text", None)
        source = text or echoed or ""
        if not self.enabled or not source:
            return response

        data = first.get("data") or {}
        extended = 0
        for annotator in self.annotators:
            for record in data.get(annotator) or []:
                record["extendedText"] = self._extended_text(source, record)
                extended += 1

        logger.debug("Added extendedText to %d annotations", extended)
        return response

    def _extended_text(self, text: str, record: dict[str, Any]) -> str:
        begin = record.get("begin")
        end = record.get("end")
        if begin is None:
            begin = 0
        if end is None:
            end = len(text)
        first, last = extend_span(text, begin, end, self.words)
        return text[first : last + 1]
