"""Table-driven parsing of LuaLS annotation lines.

Each recognized tag maps to a small grammar handler returning an
``Annotation`` or ``None`` when the arguments do not fit. Tags missing from
the table, and lines whose arguments do not fit, come back as ``OPAQUE`` so
the rewriter can re-emit them untouched.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple

from .models import Annotation, CommentLine, Diagnostic, DiagnosticKind, Tag

_TAG_LINE = re.compile(r"^\s*@(?P<tag>[A-Za-z_][\w.-]*)(?P<rest>.*)$", re.DOTALL)
_NAME = re.compile(r"^(?P<name>[A-Za-z_]\w*|\.\.\.)(?P<optional>\?)?(?=\s|$)")
_IDENTIFIER = re.compile(r"^[A-Za-z_]\w*$")
_CLASS_NAME = re.compile(r"^(?:\(\w+\)\s*)?(?P<name>[A-Za-z_][\w.]*)(?P<rest>.*)$")
_FIELD_SCOPES = {"public", "private", "protected", "package"}
_OPENERS = {"(": ")", "<": ">", "{": "}", "[": "]"}
_CLOSERS = set(_OPENERS.values())
_QUOTES = "\"'`"

# Words that usually open a sentence rather than name a return value.
_DESCRIPTION_LEADS = {
    "a",
    "all",
    "an",
    "and",
    "any",
    "false",
    "if",
    "is",
    "nil",
    "none",
    "or",
    "otherwise",
    "returns",
    "the",
    "this",
    "true",
    "when",
    "whether",
    "which",
}

Grammar = Callable[[str], Optional[Annotation]]


def scan_type(text: str) -> int:
    """Return the length of the LuaLS type expression at the start of ``text``.

    Balances ``()``, ``<>``, ``{}``, ``[]`` and quotes, and keeps going across
    whitespace around ``|``, after the ``:`` of a ``fun(...): R`` return type
    and after ``,`` (multiple returns). A trailing ``:`` anywhere else
    separates the description and is not part of the type. Returns 0 when no
    well-formed type is present.
    """
    stack: List[Tuple[str, bool]] = []
    fun_close = -1
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char in _QUOTES:
            close = text.find(char, index + 1)
            if close == -1:
                return 0
            index = close + 1
            continue
        if char in _OPENERS:
            stack.append((_OPENERS[char], char == "(" and text[:index].endswith("fun")))
        elif char in _CLOSERS:
            if not stack:
                break
            closer, is_fun = stack.pop()
            if closer != char:
                return 0
            if is_fun and not stack:
                fun_close = index
        elif char.isspace() and not stack:
            after = index
            while after < length and text[after].isspace():
                after += 1
            previous = text[index - 1] if index else ""
            following = text[after] if after < length else ""
            return_colon = previous == ":" and index - 2 == fun_close
            if following and (previous in "|," or following == "|" or return_colon):
                index = after
                continue
            break
        index += 1
    if stack:
        return 0
    end = len(text[:index].rstrip())
    if end and text[end - 1] == ":" and end - 2 != fun_close:
        end -= 1
    return end


def normalize_type(type_text: str) -> str:
    """Rewrite a LuaLS type into the spelling LDoc understands."""
    alternatives = []
    optional = False
    for part in _split_union(type_text):
        part = part.strip()
        if part.endswith("?"):
            part = part[:-1].rstrip()
            optional = True
        if part.startswith("fun(") or part == "fun":
            part = "function"
        elif part.startswith("{"):
            suffix = ""
            while part.endswith("[]"):
                suffix += "[]"
                part = part[:-2]
            part = f"table{suffix}" if part.endswith("}") else f"{part}{suffix}"
        if part and part not in alternatives:
            alternatives.append(part)
    if optional and "nil" not in alternatives:
        alternatives.append("nil")
    return "|".join(alternatives)


def _split_union(type_text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    quote: Optional[str] = None
    for char in type_text:
        if quote:
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        elif char == "|" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _clean_description(text: str) -> str:
    text = text.strip()
    if text.startswith(("#", ":")):
        text = text[1:].strip()
    return text


def _split_typed(text: str) -> Optional[Tuple[str, str]]:
    """Split ``<type> [rest]`` returning the raw type and the remaining text."""
    text = text.strip()
    end = scan_type(text)
    if end == 0:
        return None
    return text[:end], text[end:]


def _parse_named_typed(tag: Tag, text: str) -> Optional[Annotation]:
    text = text.strip()
    match = _NAME.match(text)
    if match is None:
        return None
    typed = _split_typed(text[match.end() :])
    if typed is None:
        return None
    raw_type, rest = typed
    type_text = normalize_type(raw_type)
    if match.group("optional") and "nil" not in type_text.split("|"):
        type_text = f"{type_text}|nil"
    return Annotation(
        tag=tag,
        raw="",
        name=match.group("name"),
        type=type_text,
        description=_clean_description(rest),
    )


def _parse_param(text: str) -> Optional[Annotation]:
    return _parse_named_typed(Tag.PARAM, text)


def _parse_field(text: str) -> Optional[Annotation]:
    text = text.strip()
    scope, _, rest = text.partition(" ")
    if scope in _FIELD_SCOPES:
        text = rest
    return _parse_named_typed(Tag.FIELD, text)


def _looks_like_name(token: str, rest: str) -> bool:
    if not _IDENTIFIER.match(token):
        return False
    if rest.startswith("#"):
        return True
    if token.lower() in _DESCRIPTION_LEADS:
        return False
    if token[0].isupper() and "_" not in token and not any(char.isdigit() for char in token):
        return False
    return True


def _parse_return(text: str) -> Optional[Annotation]:
    typed = _split_typed(text)
    if typed is None:
        return None
    raw_type, rest = typed
    rest = rest.strip()
    name = None
    description = rest
    tokens = rest.split(None, 1)
    if len(tokens) == 2 and _looks_like_name(tokens[0], tokens[1]):
        name, description = tokens
    return Annotation(
        tag=Tag.RETURN,
        raw="",
        name=name,
        type=normalize_type(raw_type),
        description=_clean_description(description),
    )


def _parse_nodoc(text: str) -> Optional[Annotation]:
    if text.strip():
        return None
    return Annotation(tag=Tag.NODOC, raw="")


def _parse_classmod(text: str) -> Optional[Annotation]:
    return Annotation(tag=Tag.CLASSMOD, raw="", description=text.strip())


def _parse_class(text: str) -> Optional[Annotation]:
    match = _CLASS_NAME.match(text.strip())
    if match is None:
        return None
    rest = match.group("rest").strip()
    parent = rest[1:].strip() if rest.startswith(":") else None
    return Annotation(tag=Tag.CLASS, raw="", name=match.group("name"), type=parent or None)


def _parse_see(text: str) -> Optional[Annotation]:
    tokens = text.strip().split(None, 1)
    if not tokens:
        return None
    return Annotation(
        tag=Tag.SEE,
        raw="",
        name=tokens[0],
        description=_clean_description(tokens[1]) if len(tokens) > 1 else "",
    )


def _parse_usage(text: str) -> Optional[Annotation]:
    return Annotation(tag=Tag.USAGE, raw="", description=text.strip())


GRAMMARS: Dict[str, Grammar] = {
    "param": _parse_param,
    "return": _parse_return,
    "field": _parse_field,
    "nodoc": _parse_nodoc,
    "classmod": _parse_classmod,
    "class": _parse_class,
    "see": _parse_see,
    "usage": _parse_usage,
}


class AnnotationParser:
    """Parses annotation lines against a tag grammar table."""

    def __init__(self, grammars: Optional[Dict[str, Grammar]] = None) -> None:
        self._grammars = dict(GRAMMARS if grammars is None else grammars)

    def parse(self, line: CommentLine, number: int = 0) -> Tuple[Annotation, Optional[Diagnostic]]:
        """Return the parsed annotation and a warning when a known tag was demoted."""
        match = _TAG_LINE.match(line.text)
        grammar = self._grammars.get(match.group("tag").lower()) if match else None
        if match is None or grammar is None:
            return self._opaque(line, number), None

        rest = match.group("rest")
        if rest and not rest[0].isspace():
            return self._opaque(line, number), None

        annotation = grammar(rest)
        if annotation is None:
            diagnostic = Diagnostic(
                kind=DiagnosticKind.PARSE_MISMATCH,
                message=f"@{match.group('tag')} arguments not understood: `{line.text.strip()}`",
                line=number,
            )
            return self._opaque(line, number), diagnostic

        annotation.raw = line.text
        annotation.marker = line.marker
        annotation.line = number
        return annotation, None

    @staticmethod
    def _opaque(line: CommentLine, number: int) -> Annotation:
        return Annotation(tag=Tag.OPAQUE, raw=line.text, marker=line.marker, line=number)


__all__ = ["AnnotationParser", "GRAMMARS", "normalize_type", "scan_type"]
