"""Convert LuaLS annotations into LDoc annotations over body-less Lua code."""

from .engine import LuaDocConverter, convert_source
from .models import ConversionResult, Diagnostic, DiagnosticKind, FailureKind, FileResult, RunReport
from .orchestrator import Orchestrator

__all__ = [
    "ConversionResult",
    "Diagnostic",
    "DiagnosticKind",
    "FailureKind",
    "FileResult",
    "LuaDocConverter",
    "Orchestrator",
    "RunReport",
    "convert_source",
]
