"""
Syntax layer: parsing, the mutable source model, and serialization.

The codemod treats this package as its tree-transformation toolkit. It
parses JavaScript / TypeScript with tree-sitter, exposes a small mutable
model of imports and classes, and serializes edits lazily through
SourceEditor so untouched code is reproduced exactly.
"""

from .editor import EditConflictError, SourceEditor
from .parser import SourceParseError, dialect_for_path, load_language, parse_source
from .printer import Printer
from .reader import SourceFile, read_source_file

__all__ = [
    "EditConflictError",
    "Printer",
    "SourceEditor",
    "SourceFile",
    "SourceParseError",
    "dialect_for_path",
    "load_language",
    "parse_source",
    "read_source_file",
]
