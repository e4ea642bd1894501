"""Split a doc comment run into summary text and annotation lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .models import CodeBlock, CommentLine, CommentRun, SummaryItem

_ANNOTATION_LINE = re.compile(r"^\s*@(?P<tag>[A-Za-z_][\w.-]*)")
_FENCE_OPEN = re.compile(r"^(?P<fence>`{3,}|~{3,})\s*(?P<hint>[^\s`]*)\s*$")
_HEADING = re.compile(r"^#+\s*(?P<title>.*?)\s*#*$")
_EXAMPLE_TITLES = {"example", "examples"}


@dataclass
class AnnotationLine:
    """An ``@tag`` line (or a ``---|`` variant line) awaiting parsing."""

    line: CommentLine
    number: int
    tag: Optional[str] = None
    continuation: List[CommentLine] = field(default_factory=list)


class CommentBlockExtractor:
    """Separates summary lines, fenced code and annotation lines of one comment run."""

    def split(self, run: CommentRun, first_line: int = 0) -> Tuple[List[SummaryItem], List[AnnotationLine]]:
        summary: List[SummaryItem] = []
        annotations: List[AnnotationLine] = []
        usage: Optional[AnnotationLine] = None

        lines = run.lines
        index = 0
        while index < len(lines):
            line = lines[index]
            # Plain ``--`` lines are not documentation; they stay as written.
            if not line.is_doc:
                summary.append(line)
                usage = None
                index += 1
                continue

            tag_match = _ANNOTATION_LINE.match(line.text)
            if tag_match:
                entry = AnnotationLine(line=line, number=first_line + index, tag=tag_match.group("tag").lower())
                annotations.append(entry)
                usage = entry if entry.tag == "usage" else None
                index += 1
                continue
            if line.text.startswith("|"):
                annotations.append(AnnotationLine(line=line, number=first_line + index))
                index += 1
                continue
            # Lines after @usage belong to it, as LDoc reads them.
            if usage is not None:
                usage.continuation.append(line)
                index += 1
                continue

            fence = _FENCE_OPEN.match(line.text.strip())
            closing = _find_closing_fence(lines, index, fence.group("fence")) if fence else None
            if fence is None or closing is None:
                summary.append(line)
                index += 1
                continue

            block = CodeBlock(
                language_hint=fence.group("hint"),
                lines=[inner.text for inner in lines[index + 1 : closing]],
                marker=line.marker,
            )
            if summary and isinstance(summary[-1], CommentLine) and is_example_heading(summary[-1].text):
                summary.pop()
                block.is_example = True
            summary.append(block)
            index = closing + 1

        return summary, annotations


def is_example_heading(text: str) -> bool:
    """Return True for markdown headings reading ``Example`` or ``Examples``."""
    match = _HEADING.match(text.strip())
    return bool(match) and match.group("title").strip().lower() in _EXAMPLE_TITLES


def _find_closing_fence(lines: List[CommentLine], start: int, fence: str) -> Optional[int]:
    closing = re.compile(rf"^{re.escape(fence[0])}{{{len(fence)},}}\s*$")
    for index in range(start + 1, len(lines)):
        if closing.match(lines[index].text.strip()):
            return index
    return None


__all__ = ["AnnotationLine", "CommentBlockExtractor", "is_example_heading"]
