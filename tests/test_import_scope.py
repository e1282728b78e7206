"""
Tests for import resolution and the initialization hook import.
"""

from undecorator.codemod.diagnostics import DiagnosticCategory
from undecorator.codemod.imports import ImportPatcher
from undecorator.codemod.outcomes import StepStatus


class TestImportResolver:
    """Tests for ImportResolver."""

    def test_aliases_map_to_canonical_names(self, make_context):
        """Test that aliased decorators are recorded under their local name."""
        context = make_context('import { observable as obs, action, toJS } from "mobx"\n')
        assert context.scope.decorators == {"obs": "observable", "action": "action"}
        assert not context.scope.uses_legacy_call

    def test_legacy_helper_is_detected_and_removed(self, make_context):
        """Test that decorate is tracked by local name and dropped from the import."""
        context = make_context('import { decorate as dec, observable } from "mobx"\n')
        assert context.scope.uses_legacy_call
        assert context.scope.legacy_names == {"dec"}
        declaration = context.file.imports[0]
        assert declaration.dirty
        assert [s.imported for s in declaration.specifiers] == ["observable"]

    def test_other_sources_are_ignored(self, make_context):
        """Test that same-named imports from other modules are not in scope."""
        context = make_context('import { observable, decorate } from "./state"\n')
        assert context.scope.is_empty
        assert not context.file.imports[0].dirty

    def test_ignore_imports_assumes_full_scope(self, make_context):
        """Test the ignore_imports flag."""
        context = make_context('import { observable } from "./state"\n', ignore_imports=True)
        assert context.scope.decorators == {
            "action": "action",
            "observable": "observable",
            "computed": "computed",
        }
        assert context.scope.uses_legacy_call
        assert "decorate" in context.scope.legacy_names


class TestImportPatcher:
    """Tests for ImportPatcher."""

    def _patch(self, context):
        patcher = ImportPatcher(context)
        outcome = patcher.add_initialization_hook()
        patcher.materialize()
        return outcome, context.editor.render()

    def test_appends_to_named_imports(self, make_context):
        """Test adding the hook to an existing named import list."""
        context = make_context('import { observable } from "mobx"\n')
        outcome, output = self._patch(context)
        assert outcome.status == StepStatus.APPLIED
        assert output == 'import { observable, initializeObservables } from "mobx"\n'

    def test_preserves_multiline_import(self, make_context):
        """Test that multi-line specifier lists stay multi-line."""
        context = make_context('import {\n    observable,\n    computed,\n} from "mobx"\n')
        _, output = self._patch(context)
        assert output == (
            'import {\n    observable,\n    computed,\n    initializeObservables\n} from "mobx"\n'
        )

    def test_adds_named_clause_after_default(self, make_context):
        """Test that a default-only import receives a named clause."""
        context = make_context('import mobx from "mobx"\n')
        _, output = self._patch(context)
        assert output == 'import mobx, { initializeObservables } from "mobx"\n'

    def test_already_imported(self, make_context):
        """Test that an existing hook import is left alone."""
        context = make_context('import { observable, initializeObservables } from "mobx"\n')
        outcome, output = self._patch(context)
        assert outcome.status == StepStatus.UNTOUCHED
        assert not context.editor.changed

    def test_namespace_import_is_reported(self, make_context):
        """Test that a namespace import cannot receive the hook."""
        context = make_context('import * as mobx from "mobx"\n')
        outcome, _ = self._patch(context)
        assert outcome.status == StepStatus.SKIPPED
        assert [d.category for d in context.diagnostics] == [DiagnosticCategory.MISSING_IMPORT]

    def test_missing_library_import_is_reported(self, make_context):
        """Test the file-level diagnostic when no mobx import exists."""
        context = make_context('import { observable } from "./state"\n', ignore_imports=True)
        outcome, _ = self._patch(context)
        assert outcome.status == StepStatus.SKIPPED
        diagnostic = context.diagnostics.items[0]
        assert diagnostic.line is None
        assert diagnostic.format() == (
            "[mobx:undecorate] Failed to find mobx import, can't add "
            "initializeObservables as dependency in store.ts"
        )
