"""Core data models shared across ldocgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union


class DeclarationKind(str, Enum):
    """Shapes of top-level Lua statements the walker understands."""

    FUNCTION = "function"
    METHOD = "method"
    FIELD_FUNCTION = "field-assigned-function"
    TABLE = "table"
    VARIABLE = "variable"

    @property
    def has_body(self) -> bool:
        return self in (
            DeclarationKind.FUNCTION,
            DeclarationKind.METHOD,
            DeclarationKind.FIELD_FUNCTION,
        )


class Tag(str, Enum):
    """Annotation tags recognized by the parser."""

    PARAM = "param"
    RETURN = "return"
    NODOC = "nodoc"
    CLASSMOD = "classmod"
    FIELD = "field"
    USAGE = "usage"
    CLASS = "class"
    SEE = "see"
    OPAQUE = "opaque"


class DiagnosticKind(str, Enum):
    """Recoverable conditions recorded while converting a file."""

    PARSE_MISMATCH = "parse-mismatch"
    UNSUPPORTED_CONSTRUCT = "unsupported-construct"


class FailureKind(str, Enum):
    """Conditions that abort the conversion of a single file."""

    IO = "io"
    CONVERSION = "conversion"


@dataclass(frozen=True)
class SourceFile:
    """Raw Lua text plus where it came from."""

    path: Path
    text: str
    relative_path: Optional[Path] = None


@dataclass(frozen=True)
class CommentLine:
    """One line comment with its leading marker split off."""

    marker: str
    text: str

    @property
    def is_doc(self) -> bool:
        return self.marker.startswith("---")

    def render(self) -> str:
        return f"{self.marker}{self.text}"


@dataclass
class CommentRun:
    """Contiguous line comments sitting directly above a declaration."""

    lines: List[CommentLine]
    start: int
    end: int
    indent: str = ""

    @property
    def is_doc(self) -> bool:
        return any(line.is_doc for line in self.lines)


@dataclass
class Declaration:
    """A located top-level construct and the byte spans needed to rewrite it."""

    kind: DeclarationKind
    signature_text: str
    start: int
    end: int
    name: Optional[str] = None
    owner: Optional[str] = None
    parameters: List[str] = field(default_factory=list)
    body_span: Optional[Tuple[int, int]] = None
    closing_text: str = ""
    comment_span: Optional[Tuple[int, int]] = None
    comment: Optional[CommentRun] = None
    line: int = 0
    class_like: bool = False


@dataclass
class CodeBlock:
    """Fenced code span found inside summary text."""

    language_hint: str
    lines: List[str]
    is_example: bool = False
    marker: str = "---"


@dataclass
class Annotation:
    """A parsed annotation line. ``raw`` always holds the original text after the marker."""

    tag: Tag
    raw: str
    name: Optional[str] = None
    type: Optional[str] = None
    description: str = ""
    marker: str = "---"
    line: int = 0
    continuation: List[CommentLine] = field(default_factory=list)

    def render_raw(self) -> List[str]:
        return [f"{self.marker}{self.raw}"] + [line.render() for line in self.continuation]


SummaryItem = Union[CommentLine, CodeBlock]


@dataclass
class DocBlock:
    """Summary text and annotations derived from one comment run."""

    summary: List[SummaryItem] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    @property
    def suppressed(self) -> bool:
        return any(annotation.tag is Tag.NODOC for annotation in self.annotations)

    @property
    def class_like(self) -> bool:
        return any(annotation.tag is Tag.CLASSMOD for annotation in self.annotations)


@dataclass(frozen=True)
class Diagnostic:
    """Warning recorded against a file; never stops processing."""

    kind: DiagnosticKind
    message: str
    line: int = 0


@dataclass
class ConversionResult:
    """Output of converting one Lua source text."""

    text: str
    declarations: List[Declaration] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class FileResult:
    """Outcome of processing one input file during a run."""

    path: Path
    output_path: Optional[Path] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def warning_count(self) -> int:
        return len(self.diagnostics)


@dataclass
class RunReport:
    """Per-file results for a whole run, in input order."""

    results: List[FileResult] = field(default_factory=list)

    @property
    def failed(self) -> List[FileResult]:
        return [result for result in self.results if not result.ok]

    @property
    def has_io_failure(self) -> bool:
        return any(result.failure is FailureKind.IO for result in self.results)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
