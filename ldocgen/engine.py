"""Per-file conversion pipeline from LuaLS-annotated Lua to LDoc dummy code."""

from __future__ import annotations

from typing import List, Optional, Tuple

from .annotations import AnnotationParser
from .codeblocks import CodeBlockTranslator
from .dummy import DummyBodyGenerator
from .extractor import CommentBlockExtractor
from .models import Annotation, ConversionResult, Declaration, Diagnostic, DocBlock
from .rewriter import TagRewriter
from .walker import SourceWalker


class LuaDocConverter:
    """Runs walker, extractor, parser, rewriters and generator over one source text.

    Only declaration spans (and the doc comments directly above them) are
    replaced; every other byte of the input is copied through unchanged.
    Instances hold no per-file state, so one converter can be shared by a
    worker pool.
    """

    def __init__(
        self,
        walker: SourceWalker | None = None,
        extractor: CommentBlockExtractor | None = None,
        parser: AnnotationParser | None = None,
        rewriter: TagRewriter | None = None,
        translator: CodeBlockTranslator | None = None,
        generator: DummyBodyGenerator | None = None,
        *,
        nodoc_drops_declaration: bool = False,
    ) -> None:
        self.walker = walker or SourceWalker()
        self.extractor = extractor or CommentBlockExtractor()
        self.parser = parser or AnnotationParser()
        self.rewriter = rewriter or TagRewriter()
        self.translator = translator or CodeBlockTranslator()
        self.generator = generator or DummyBodyGenerator()
        self.nodoc_drops_declaration = nodoc_drops_declaration

    def convert(self, text: str) -> ConversionResult:
        source = text.encode("utf-8")
        walked = self.walker.walk(source)
        diagnostics: List[Diagnostic] = list(walked.diagnostics)

        blocks: List[DocBlock] = []
        for declaration in walked.declarations:
            block, block_diagnostics = self.build_doc_block(declaration)
            blocks.append(block)
            diagnostics.extend(block_diagnostics)
        _mark_class_like(walked.declarations, blocks)

        pieces: List[bytes] = []
        cursor = 0
        for declaration, block in zip(walked.declarations, blocks):
            run = declaration.comment
            if run is not None and run.is_doc:
                region_start, indent = run.start, run.indent
            else:
                region_start, indent = declaration.start, ""
            region_end = declaration.end

            if block.suppressed and self.nodoc_drops_declaration:
                replacement = ""
                region_end = _skip_newline(source, region_end)
            else:
                comment_lines, rewrite_diagnostics = self.render_comment(block, declaration)
                diagnostics.extend(rewrite_diagnostics)
                replacement = self.generator.render(declaration, comment_lines, indent)

            pieces.append(source[cursor:region_start])
            pieces.append(replacement.encode("utf-8"))
            cursor = region_end
        pieces.append(source[cursor:])

        diagnostics.sort(key=lambda item: item.line)
        return ConversionResult(
            text=b"".join(pieces).decode("utf-8"),
            declarations=walked.declarations,
            diagnostics=diagnostics,
        )

    def build_doc_block(self, declaration: Declaration) -> Tuple[DocBlock, List[Diagnostic]]:
        """Parse the comment run above ``declaration``; plain ``--`` runs yield an empty block."""
        run = declaration.comment
        if run is None or not run.is_doc:
            return DocBlock(), []

        first_line = declaration.line - len(run.lines)
        summary, annotation_lines = self.extractor.split(run, first_line)
        annotations: List[Annotation] = []
        diagnostics: List[Diagnostic] = []
        for entry in annotation_lines:
            annotation, diagnostic = self.parser.parse(entry.line, entry.number)
            annotation.continuation = entry.continuation
            annotations.append(annotation)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
        return DocBlock(summary=summary, annotations=annotations), diagnostics

    def render_comment(
        self, block: DocBlock, declaration: Optional[Declaration] = None
    ) -> Tuple[List[str], List[Diagnostic]]:
        """Return the LDoc comment lines: summary, promoted examples, then annotations."""
        if block.suppressed:
            return [], []
        summary_lines, usage_lines = self.translator.translate(block.summary)
        annotation_lines, diagnostics = self.rewriter.rewrite(block, declaration)
        return summary_lines + usage_lines + annotation_lines, diagnostics


def convert_source(text: str, *, nodoc_drops_declaration: bool = False) -> ConversionResult:
    """Convert one Lua source text with a fresh converter."""
    return LuaDocConverter(nodoc_drops_declaration=nodoc_drops_declaration).convert(text)


def _mark_class_like(declarations: List[Declaration], blocks: List[DocBlock]) -> None:
    classes = set()
    for declaration, block in zip(declarations, blocks):
        if block.class_like:
            declaration.class_like = True
            if declaration.name:
                classes.add(declaration.name)
    for declaration in declarations:
        if declaration.owner in classes:
            declaration.class_like = True


def _skip_newline(source: bytes, offset: int) -> int:
    if source.startswith(b"\r\n", offset):
        return offset + 2
    if source.startswith(b"\n", offset):
        return offset + 1
    return offset


__all__ = ["LuaDocConverter", "convert_source"]
