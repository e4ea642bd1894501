"""Emit body-less declarations preceded by their rewritten doc comment."""

from __future__ import annotations

from typing import Sequence

from .models import Declaration

EMPTY_BODY = "\n\n"


class DummyBodyGenerator:
    """Renders a declaration as its verbatim signature followed by an empty body."""

    def render(self, declaration: Declaration, comment_lines: Sequence[str] = (), indent: str = "") -> str:
        comment = "".join(f"{indent}{line}\n" for line in comment_lines)
        return f"{comment}{indent}{self.stub(declaration)}"

    @staticmethod
    def stub(declaration: Declaration) -> str:
        if not declaration.kind.has_body:
            return declaration.signature_text
        return f"{declaration.signature_text}{EMPTY_BODY}{declaration.closing_text}"


__all__ = ["DummyBodyGenerator", "EMPTY_BODY"]
