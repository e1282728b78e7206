"""
Per-file orchestration of the undecorate rewrite.

Classes:
    TransformStatus: MODIFIED, UNCHANGED or FAILED
    TransformResult: Output text together with diagnostics and step outcomes
    UndecoratePipeline: Runs every rewrite step over one parsed file

Example:
    >>> result = transform_source("store.ts", source)
    >>> if result.changed:
    ...     Path("store.ts").write_text(result.output)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Dict, List, Optional

from ..config import TransformOptions
from ..syntax.parser import SourceParseError
from ..syntax.reader import read_source_file
from .constructors import ConstructorSynthesizer
from .context import CodemodContext
from .diagnostics import Diagnostic
from .imports import ImportPatcher, ImportResolver
from .legacy_calls import LegacyCallRewriter
from .members import MemberRewriter
from .outcomes import StepOutcome

logger = logging.getLogger(__name__)


class TransformStatus(Enum):
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class TransformResult:
    path: str
    status: TransformStatus
    output: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    outcomes: List[StepOutcome] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status == TransformStatus.MODIFIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "status": self.status.value,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "outcomes": [o.to_dict() for o in self.outcomes],
            "error": self.error,
        }


class UndecoratePipeline:
    """Runs import resolution, member rewriting and constructor synthesis."""

    def __init__(self, context: CodemodContext):
        self.context = context
        self.file = context.file

    def run(self) -> TransformResult:
        scope = ImportResolver(self.context).resolve()
        if scope.is_empty:
            logger.debug("No decorators in scope for %s", self.file.path)
            return self._result(TransformStatus.UNCHANGED)

        if scope.uses_legacy_call:
            LegacyCallRewriter(self.context).rewrite_all()

        rewriter = MemberRewriter(self.context)
        synthesizer = ConstructorSynthesizer(self.context)
        constructors_changed = False
        for declaration in self.file.classes:
            effects = rewriter.rewrite_class(declaration)
            if effects.needs_constructor and synthesizer.ensure_initialization(declaration):
                constructors_changed = True

        patcher = ImportPatcher(self.context)
        if constructors_changed:
            patcher.add_initialization_hook()

        self._materialize(patcher)
        if not self.context.editor.changed:
            return self._result(TransformStatus.UNCHANGED)
        output = self.context.editor.render()
        if output == self.file.source.decode("utf-8"):
            return self._result(TransformStatus.UNCHANGED)
        return self._result(TransformStatus.MODIFIED, output)

    def _materialize(self, patcher: ImportPatcher) -> None:
        printer = self.context.printer
        for declaration in self.file.classes:
            if declaration.dirty:
                self.context.editor.replace(
                    declaration.body.start_byte,
                    declaration.body.end_byte,
                    partial(printer.class_body, declaration),
                )
        patcher.materialize()

    def _result(self, status: TransformStatus, output: Optional[str] = None) -> TransformResult:
        return TransformResult(
            path=self.file.path,
            status=status,
            output=output,
            diagnostics=self.context.diagnostics.items,
            outcomes=list(self.context.outcomes),
        )


def transform_source(
    path: str, source: str, options: Optional[TransformOptions] = None
) -> TransformResult:
    """
    Rewrite decorator usage in one source file.

    Args:
        path: File path, used to pick the grammar and in diagnostics
        source: Source text
        options: Transform options, defaults to TransformOptions()

    Returns:
        TransformResult with status MODIFIED (and the new text), UNCHANGED or
        FAILED (when the source does not parse).
    """
    try:
        source_file = read_source_file(path, source)
    except SourceParseError as e:
        logger.error("Failed to parse %s: %s", path, e)
        return TransformResult(path=path, status=TransformStatus.FAILED, error=str(e))

    context = CodemodContext(source_file, options or TransformOptions())
    result = UndecoratePipeline(context).run()
    logger.debug(
        "%s: %s with %d diagnostics", path, result.status.value, len(result.diagnostics)
    )
    return result
