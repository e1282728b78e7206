"""
Non-fatal, line-located diagnostics.

Nothing the codemod encounters aborts a file. Unsupported shapes are left
unchanged and reported here instead. Each diagnostic is kept on the per-file
collector (so callers can inspect or render them) and also written to this
module's logger, which acts as the shared process-wide output stream.

Format of a located diagnostic::

    [mobx:undecorate] <message> at (<path>:<line>:<col>):
    \t<source line without indentation>
    \t<caret under the offending column>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from tree_sitter import Node

from ..syntax.reader import SourceFile
from .names import DIAGNOSTIC_PREFIX

logger = logging.getLogger(__name__)


class DiagnosticCategory(Enum):
    """Why a construct was left unchanged."""

    STRUCTURAL_MISMATCH = "structural_mismatch"
    UNSUPPORTED_COMPOSITION = "unsupported_composition"
    AMBIGUOUS_TARGET = "ambiguous_target"
    UNSUPPORTED_CONTEXT = "unsupported_context"
    UNKNOWN_CASE = "unknown_case"
    MANUAL_REVIEW = "manual_review"
    MISSING_IMPORT = "missing_import"


@dataclass(frozen=True)
class Diagnostic:
    category: DiagnosticCategory
    message: str
    path: str
    line: Optional[int] = None
    column: Optional[int] = None
    source_line: str = ""

    def format(self) -> str:
        if self.line is None or self.column is None:
            return f"{DIAGNOSTIC_PREFIX} {self.message} in {self.path}"
        short_line = self.source_line.lstrip()
        offset = len(self.source_line) - len(short_line) if short_line else 0
        caret = "^".rjust(self.column + 1 - offset)
        return (
            f"{DIAGNOSTIC_PREFIX} {self.message} at ({self.path}:{self.line}:{self.column}):"
            f"\n\t{short_line}\n\t{caret}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "column": self.column,
        }

    def __str__(self) -> str:
        return self.format()


class Diagnostics:
    """Collects the diagnostics of one file."""

    def __init__(self, source_file: SourceFile):
        self.file = source_file
        self._items: List[Diagnostic] = []

    def warn(
        self,
        message: str,
        node: Optional[Node] = None,
        category: DiagnosticCategory = DiagnosticCategory.STRUCTURAL_MISMATCH,
    ) -> Diagnostic:
        if node is None:
            diagnostic = Diagnostic(category, message, self.file.path)
        else:
            line, column = self.file.location(node)
            source_line = self.file.lines[line - 1] if line <= len(self.file.lines) else ""
            diagnostic = Diagnostic(
                category,
                message,
                self.file.path,
                line=line,
                column=column,
                source_line=source_line.rstrip("\r"),
            )
        self._items.append(diagnostic)
        logger.warning(diagnostic.format())
        return diagnostic

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[Diagnostic]:
        return list(self._items)
