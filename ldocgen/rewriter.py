"""Map parsed LuaLS annotations onto LDoc annotation lines."""

from __future__ import annotations

from typing import List, Optional, Tuple

from .models import Annotation, Declaration, Diagnostic, DiagnosticKind, DocBlock, Tag

LDOC_MARKER = "---"


def _with_description(head: str, description: str) -> str:
    return f"{head} {description}" if description else head


class TagRewriter:
    """Produces the LDoc annotation lines for a doc block, in source order."""

    def rewrite(
        self, block: DocBlock, declaration: Optional[Declaration] = None
    ) -> Tuple[List[str], List[Diagnostic]]:
        if block.suppressed:
            return [], []

        diagnostics = self._check_parameters(block, declaration)
        class_annotation = next((item for item in block.annotations if item.tag is Tag.CLASS), None)
        folded = class_annotation is not None and any(
            item.tag is Tag.CLASSMOD and not item.description for item in block.annotations
        )

        lines: List[str] = []
        for annotation in block.annotations:
            if annotation.tag is Tag.CLASS and folded:
                continue
            if annotation.tag is Tag.CLASSMOD and folded and not annotation.description:
                lines.append(f"{LDOC_MARKER}@classmod {class_annotation.name}")
                continue
            lines.extend(self.rewrite_one(annotation))
        return lines, diagnostics

    def rewrite_one(self, annotation: Annotation) -> List[str]:
        tag = annotation.tag
        if tag is Tag.PARAM:
            head = f"{LDOC_MARKER}@tparam {annotation.type} {annotation.name}"
            return [_with_description(head, annotation.description)]
        if tag is Tag.FIELD:
            head = f"{LDOC_MARKER}@tfield {annotation.type} {annotation.name}"
            return [_with_description(head, annotation.description)]
        if tag is Tag.RETURN:
            return [_with_description(f"{LDOC_MARKER}@treturn {annotation.type}", annotation.description)]
        if tag is Tag.CLASS:
            return [f"{LDOC_MARKER}@module {annotation.name}"]
        if tag is Tag.SEE:
            return [f"{LDOC_MARKER}@see {annotation.name}"]
        if tag is Tag.NODOC:
            return []
        # ClassMod, Usage and anything opaque go out exactly as written.
        return annotation.render_raw()

    @staticmethod
    def _check_parameters(block: DocBlock, declaration: Optional[Declaration]) -> List[Diagnostic]:
        if declaration is None or not declaration.kind.has_body:
            return []
        documented = [item for item in block.annotations if item.tag is Tag.PARAM]
        actual = list(declaration.parameters)
        if actual and actual[0] == "self" and (not documented or documented[0].name != "self"):
            actual = actual[1:]

        diagnostics: List[Diagnostic] = []
        for position, annotation in enumerate(documented):
            expected = actual[position] if position < len(actual) else None
            if annotation.name != expected:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.PARSE_MISMATCH,
                        message=(
                            f"@param {annotation.name} does not match parameter {position + 1} "
                            f"of {declaration.name or 'function'} ({expected or 'none'})"
                        ),
                        line=annotation.line,
                    )
                )
        return diagnostics


__all__ = ["LDOC_MARKER", "TagRewriter"]
