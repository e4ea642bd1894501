"""Translate fenced code spans into LDoc-friendly comment text."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import CodeBlock, CommentLine, SummaryItem

CODE_INDENT = "    "
USAGE_LINE = "---@usage"


class CodeBlockTranslator:
    """Renders summary items, promoting example blocks to ``@usage`` annotations.

    Code lines keep their text exactly as written after the comment marker.
    """

    def translate(self, summary: Sequence[SummaryItem]) -> Tuple[List[str], List[str]]:
        """Return ``(summary_lines, usage_lines)`` for one doc block."""
        summary_lines: List[str] = []
        usage_lines: List[str] = []
        for item in summary:
            if isinstance(item, CommentLine):
                summary_lines.append(item.render())
            elif item.is_example:
                usage_lines.extend(self.usage(item))
            else:
                summary_lines.extend(self.indented(item))
        return summary_lines, usage_lines

    @staticmethod
    def usage(block: CodeBlock) -> List[str]:
        return [USAGE_LINE] + [f"{block.marker}{line}" for line in block.lines]

    @staticmethod
    def indented(block: CodeBlock) -> List[str]:
        return [f"{block.marker}{CODE_INDENT}{line}" if line.strip() else block.marker for line in block.lines]


__all__ = ["CODE_INDENT", "CodeBlockTranslator", "USAGE_LINE"]
