"""
Import resolution and patching.

The resolver finds which local names refer to the library's decorators and
whether the legacy ``decorate`` helper is used. The patcher adds the
initialization hook to the library import once constructors call it.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from ..syntax.nodes import ImportDeclaration, ImportSpecifier
from .context import CodemodContext, ImportScope
from .diagnostics import DiagnosticCategory
from .names import INITIALIZATION_HOOK, LEGACY_FUNCTION, LIBRARY_SOURCE, SUPPORTED_DECORATORS
from .outcomes import StepOutcome

logger = logging.getLogger(__name__)

STEP = "import"


class ImportResolver:
    """Builds the ImportScope of a file and drops legacy helper imports."""

    def __init__(self, context: CodemodContext):
        self.context = context

    def resolve(self) -> ImportScope:
        scope = ImportScope()
        if self.context.options.ignore_imports:
            scope.decorators = {name: name for name in SUPPORTED_DECORATORS}
            scope.legacy_names.add(LEGACY_FUNCTION)
            scope.uses_legacy_call = True

        for declaration in self.context.file.imports:
            if declaration.source != LIBRARY_SOURCE:
                continue
            for specifier in list(declaration.specifiers):
                if specifier.imported in SUPPORTED_DECORATORS:
                    scope.decorators[specifier.local] = specifier.imported
                elif specifier.imported == LEGACY_FUNCTION:
                    scope.uses_legacy_call = True
                    scope.legacy_names.add(specifier.local)
                    declaration.specifiers.remove(specifier)
                    declaration.dirty = True
                    self.context.record(
                        StepOutcome.applied(STEP, specifier.local, "removed legacy helper import")
                    )

        logger.debug(
            "Import scope for %s: %s (legacy call: %s)",
            self.context.file.path,
            sorted(scope.decorators),
            scope.uses_legacy_call,
        )
        self.context.scope = scope
        return scope


class ImportPatcher:
    """Adds the initialization hook to the library import."""

    def __init__(self, context: CodemodContext):
        self.context = context

    def library_import(self) -> Optional[ImportDeclaration]:
        for declaration in self.context.file.imports:
            if declaration.source == LIBRARY_SOURCE:
                return declaration
        return None

    def add_initialization_hook(self) -> StepOutcome:
        declaration = self.library_import()
        if declaration is None:
            return self.context.skip(
                STEP,
                INITIALIZATION_HOOK,
                f"Failed to find {LIBRARY_SOURCE} import, can't add {INITIALIZATION_HOOK} as dependency",
                None,
                DiagnosticCategory.MISSING_IMPORT,
            )
        if any(s.local == INITIALIZATION_HOOK for s in declaration.specifiers):
            return self.context.record(
                StepOutcome.untouched(STEP, INITIALIZATION_HOOK, "already imported")
            )
        if declaration.named is None and (
            declaration.default is None or declaration.namespace is not None
        ):
            return self.context.skip(
                STEP,
                INITIALIZATION_HOOK,
                f"Cannot add {INITIALIZATION_HOOK} to a namespace import of {LIBRARY_SOURCE}",
                declaration.origin,
                DiagnosticCategory.MISSING_IMPORT,
            )
        declaration.specifiers.append(ImportSpecifier(INITIALIZATION_HOOK, INITIALIZATION_HOOK))
        declaration.dirty = True
        return self.context.record(StepOutcome.applied(STEP, INITIALIZATION_HOOK))

    def materialize(self) -> None:
        """Register editor changes for every import whose specifiers changed."""
        printer = self.context.printer
        editor = self.context.editor
        for declaration in self.context.file.imports:
            if not declaration.dirty:
                continue
            if declaration.named is not None:
                editor.replace(
                    declaration.named.start_byte,
                    declaration.named.end_byte,
                    partial(printer.named_imports, declaration),
                )
            elif declaration.default is not None and declaration.specifiers:
                editor.insert(
                    declaration.default.end_byte,
                    partial(_after_default, printer, declaration),
                )


def _after_default(printer, declaration: ImportDeclaration) -> str:
    return ", " + printer.named_imports(declaration)
