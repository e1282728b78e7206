"""
Shared state for rewriting a single file.

Classes:
    ImportScope: Local decorator names bound to the library and legacy-call usage
    CodemodContext: Bundles the source model, options, scope and collectors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from tree_sitter import Node

from ..config import TransformOptions
from ..syntax.editor import SourceEditor
from ..syntax.nodes import ClassMember
from ..syntax.printer import Printer
from ..syntax.reader import SourceFile
from .diagnostics import Diagnostic, DiagnosticCategory, Diagnostics
from .outcomes import StepOutcome


@dataclass
class ImportScope:
    """
    Which local names refer to the library's decorators.

    ``decorators`` maps a local binding (possibly an alias) to the canonical
    decorator name it was imported as.
    """

    decorators: Dict[str, str] = field(default_factory=dict)
    legacy_names: Set[str] = field(default_factory=set)
    uses_legacy_call: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.decorators and not self.uses_legacy_call

    def canonical(self, local: str) -> Optional[str]:
        return self.decorators.get(local)


@dataclass(eq=False)
class CodemodContext:
    file: SourceFile
    options: TransformOptions = field(default_factory=TransformOptions)
    scope: ImportScope = field(default_factory=ImportScope)
    outcomes: List[StepOutcome] = field(default_factory=list)

    def __post_init__(self):
        self.diagnostics = Diagnostics(self.file)
        self.printer = Printer(self.file)

    @property
    def editor(self) -> SourceEditor:
        return self.file.editor

    def warn(
        self,
        message: str,
        node: Optional[Node] = None,
        category: DiagnosticCategory = DiagnosticCategory.STRUCTURAL_MISMATCH,
    ) -> Diagnostic:
        return self.diagnostics.warn(message, node, category)

    def record(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome

    def skip(
        self,
        step: str,
        target: str,
        message: str,
        node: Optional[Node],
        category: DiagnosticCategory,
    ) -> StepOutcome:
        """Emit a diagnostic and record the step as skipped."""
        self.warn(message, node, category)
        return self.record(StepOutcome.skipped(step, target, message))

    def describe(self, member: ClassMember) -> str:
        if member.key_name is not None:
            return member.key_name
        if member.key.origin is not None:
            return self.file.text(member.key.origin)
        return "<member>"
