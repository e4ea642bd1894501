"""Tree-sitter powered walker that locates Lua declarations and their doc comments."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from .models import (
    CommentLine,
    CommentRun,
    Declaration,
    DeclarationKind,
    Diagnostic,
    DiagnosticKind,
)

_LANGUAGE_KEY = "lua"
_BLOCK_COMMENT = re.compile(rb"^--\[=*\[")
_COMMENT_MARKER = re.compile(r"^(?P<marker>-{2,})(?P<text>.*)$", re.DOTALL)
_FUNCTION_NODES = {"function_declaration", "function_definition"}


@dataclass
class WalkResult:
    """Declarations found in one source text plus any constructs that were skipped."""

    declarations: List[Declaration] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class SourceWalker:
    """Enumerates top-level declarations using the tree-sitter Lua grammar.

    Only the statements directly under the chunk are considered. Anything nested
    lives inside a function body and is dropped together with it. Parsers are
    kept per thread so one walker can serve a whole worker pool.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def walk(self, source: bytes) -> WalkResult:
        result = WalkResult()
        tree = self._get_parser().parse(source)
        if tree.root_node.type == "ERROR":
            result.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNSUPPORTED_CONSTRUCT,
                    message="source could not be parsed; left unchanged",
                    line=1,
                )
            )
            return result

        pending: List[Node] = []
        for child in tree.root_node.children:
            if child.type == "comment":
                pending = self._extend_run(pending, child, source)
                continue

            run = pending if pending and _row(child) == _row(pending[-1]) + 1 else []
            pending = []

            if child.type == "ERROR" or child.has_error:
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNSUPPORTED_CONSTRUCT,
                        message=f"could not parse `{_first_line(child, source)}`; left unchanged",
                        line=_row(child) + 1,
                    )
                )
                continue

            declaration = self._to_declaration(child, source, result.diagnostics)
            if (declaration is None or not declaration.kind.has_body) and _contains_function(child):
                result.diagnostics.append(
                    _unsupported(child, source, "functions nested in this statement keep their bodies")
                )
            if declaration is None:
                continue
            if run:
                declaration.comment = _comment_run(run, source)
                declaration.comment_span = (declaration.comment.start, declaration.comment.end)
            result.declarations.append(declaration)

        return result

    def _get_parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(get_language(_LANGUAGE_KEY))
            self._local.parser = parser
        return parser

    @staticmethod
    def _extend_run(pending: List[Node], comment: Node, source: bytes) -> List[Node]:
        if _BLOCK_COMMENT.match(_node_bytes(comment, source)):
            return []
        if not _starts_line(comment, source):
            return []
        if pending and _row(comment) == _row(pending[-1]) + 1:
            pending.append(comment)
            return pending
        return [comment]

    def _to_declaration(
        self, node: Node, source: bytes, diagnostics: List[Diagnostic]
    ) -> Optional[Declaration]:
        if node.type == "function_declaration":
            return self._function_declaration(node, source, diagnostics)
        if node.type == "variable_declaration":
            assignment = _first_child(node, "assignment_statement")
            if assignment is not None:
                return self._assignment(node, assignment, source, diagnostics)
            names = _first_child(node, "variable_list")
            return Declaration(
                kind=DeclarationKind.VARIABLE,
                signature_text=_text(node, source),
                start=node.start_byte,
                end=node.end_byte,
                name=_text(names.named_children[0], source) if names and names.named_children else None,
                line=_row(node) + 1,
            )
        if node.type == "assignment_statement":
            return self._assignment(node, node, source, diagnostics)
        return None

    def _function_declaration(
        self, node: Node, source: bytes, diagnostics: List[Diagnostic]
    ) -> Optional[Declaration]:
        name_node = node.child_by_field_name("name")
        span = _function_span(node)
        if name_node is None or span is None:
            diagnostics.append(_unsupported(node, source, "function declaration without a name or parameter list"))
            return None
        parameters, closing = span

        kind = DeclarationKind.FUNCTION
        owner = None
        if name_node.type == "method_index_expression":
            kind = DeclarationKind.METHOD
            owner = _field_text(name_node, "table", source)
        elif name_node.type == "dot_index_expression":
            owner = _field_text(name_node, "table", source)

        return _with_body(
            Declaration(
                kind=kind,
                signature_text="",
                start=node.start_byte,
                end=node.end_byte,
                name=_text(name_node, source),
                owner=owner,
                parameters=_parameter_names(parameters, source),
                line=_row(node) + 1,
            ),
            parameters,
            closing,
            source,
        )

    def _assignment(
        self, statement: Node, assignment: Node, source: bytes, diagnostics: List[Diagnostic]
    ) -> Optional[Declaration]:
        names = _first_child(assignment, "variable_list")
        values = _first_child(assignment, "expression_list")
        targets = [child for child in names.named_children if child.type != "attribute"] if names else []
        expressions = [child for child in values.named_children if child.type != "comment"] if values else []
        target = targets[0] if targets else None

        declaration = Declaration(
            kind=DeclarationKind.VARIABLE,
            signature_text=_text(statement, source),
            start=statement.start_byte,
            end=statement.end_byte,
            name=_text(target, source) if target is not None else None,
            owner=_field_text(target, "table", source) if target is not None else None,
            line=_row(statement) + 1,
        )

        if len(targets) == 1 and len(expressions) == 1 and expressions[0].type == "function_definition":
            span = _function_span(expressions[0])
            if span is None:
                diagnostics.append(_unsupported(statement, source, "function value without a parameter list"))
                return None
            parameters, closing = span
            declaration.kind = DeclarationKind.FIELD_FUNCTION
            declaration.parameters = _parameter_names(parameters, source)
            return _with_body(declaration, parameters, closing, source)

        if expressions and all(expression.type == "table_constructor" for expression in expressions):
            declaration.kind = DeclarationKind.TABLE
        return declaration


def _with_body(declaration: Declaration, parameters: Node, closing: Node, source: bytes) -> Declaration:
    declaration.signature_text = source[declaration.start : parameters.end_byte].decode("utf-8")
    declaration.body_span = (parameters.end_byte, closing.start_byte)
    declaration.closing_text = source[closing.start_byte : declaration.end].decode("utf-8")
    return declaration


def _function_span(node: Node) -> Optional[Tuple[Node, Node]]:
    parameters = node.child_by_field_name("parameters")
    closing = None
    for child in reversed(node.children):
        if child.type == "end":
            closing = child
            break
    if parameters is None or closing is None:
        return None
    return parameters, closing


def _contains_function(node: Node) -> bool:
    pending = list(node.children)
    while pending:
        current = pending.pop()
        if current.type in _FUNCTION_NODES:
            return True
        pending.extend(current.children)
    return False


def _parameter_names(parameters: Node, source: bytes) -> List[str]:
    names: List[str] = []
    for child in parameters.named_children:
        if child.type == "identifier":
            names.append(_text(child, source))
        elif child.type == "vararg_expression":
            names.append("...")
    return names


def _comment_run(nodes: List[Node], source: bytes) -> CommentRun:
    first = nodes[0]
    line_start = source.rfind(b"\n", 0, first.start_byte) + 1
    lines = []
    for node in nodes:
        match = _COMMENT_MARKER.match(_text(node, source).rstrip("\r"))
        if match is None:
            lines.append(CommentLine(marker="--", text=_text(node, source)[2:]))
        else:
            lines.append(CommentLine(marker=match.group("marker"), text=match.group("text")))
    return CommentRun(
        lines=lines,
        start=line_start,
        end=nodes[-1].end_byte,
        indent=source[line_start : first.start_byte].decode("utf-8"),
    )


def _unsupported(node: Node, source: bytes, reason: str) -> Diagnostic:
    return Diagnostic(
        kind=DiagnosticKind.UNSUPPORTED_CONSTRUCT,
        message=f"{reason}: `{_first_line(node, source)}`; left unchanged",
        line=_row(node) + 1,
    )


def _first_child(node: Node, node_type: str) -> Optional[Node]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _field_text(node: Node, field_name: str, source: bytes) -> Optional[str]:
    child = node.child_by_field_name(field_name)
    return _text(child, source) if child is not None else None


def _starts_line(node: Node, source: bytes) -> bool:
    line_start = source.rfind(b"\n", 0, node.start_byte) + 1
    return not source[line_start : node.start_byte].strip()


def _row(node: Node) -> int:
    return node.start_point[0]


def _node_bytes(node: Node, source: bytes) -> bytes:
    return source[node.start_byte : node.end_byte]


def _text(node: Node, source: bytes) -> str:
    return _node_bytes(node, source).decode("utf-8", errors="replace")


def _first_line(node: Node, source: bytes) -> str:
    return _text(node, source).splitlines()[0] if node.end_byte > node.start_byte else ""


__all__ = ["SourceWalker", "WalkResult"]
