"""
Tests for diagnostic formatting and collection.
"""

import logging

from undecorator.codemod.diagnostics import Diagnostic, DiagnosticCategory


class TestDiagnosticFormat:
    """Tests for Diagnostic.format."""

    def test_file_level(self):
        diagnostic = Diagnostic(DiagnosticCategory.MISSING_IMPORT, "No import", "a.ts")
        assert diagnostic.format() == "[mobx:undecorate] No import in a.ts"
        assert str(diagnostic) == diagnostic.format()

    def test_located_trims_indentation(self):
        """Test that the source line is shown without indentation and the caret follows it."""
        diagnostic = Diagnostic(
            DiagnosticCategory.STRUCTURAL_MISMATCH,
            "Bad thing",
            "a.ts",
            line=3,
            column=10,
            source_line="    foo = bar(1)",
        )
        assert diagnostic.format() == (
            "[mobx:undecorate] Bad thing at (a.ts:3:10):\n\tfoo = bar(1)\n\t      ^"
        )

    def test_to_dict(self):
        diagnostic = Diagnostic(DiagnosticCategory.UNKNOWN_CASE, "Huh", "a.ts", line=1, column=0)
        assert diagnostic.to_dict() == {
            "category": "unknown_case",
            "message": "Huh",
            "path": "a.ts",
            "line": 1,
            "column": 0,
        }


class TestDiagnosticsCollector:
    """Tests for diagnostics emitted during a rewrite."""

    def test_multiple_decorators_are_located(self, transform):
        result = transform(
            """
            import { observable, action } from "mobx"

            class A {
                @observable @action x = 1
            }
            """
        )
        assert result.status.value == "unchanged"
        [diagnostic] = result.diagnostics
        assert diagnostic.category == DiagnosticCategory.UNSUPPORTED_COMPOSITION
        assert (diagnostic.line, diagnostic.column) == (4, 4)
        assert diagnostic.format() == (
            "[mobx:undecorate] Found multiple decorators, skipping.. at (store.ts:4:4):"
            "\n\t@observable @action x = 1\n\t^"
        )

    def test_diagnostics_are_logged(self, transform, caplog):
        """Test that every diagnostic is also written to the logger."""
        with caplog.at_level(logging.WARNING, logger="undecorator.codemod.diagnostics"):
            result = transform(
                """
                import { observable } from "mobx"

                class A {
                    @observable static x = 1
                }
                """
            )
        assert len(result.diagnostics) == 1
        assert "Static properties are not supported" in caplog.text
        assert "(store.ts:4:4)" in caplog.text

    def test_column_counts_characters(self, transform):
        """Test that columns are character based for non-ASCII lines."""
        result = transform(
            """
            import { observable, action } from "mobx"

            class A {
                /* ü */ @observable @action x = 1
            }
            """
        )
        assert result.diagnostics[0].column == 12
