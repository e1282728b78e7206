"""
Tests for the lazy splice editor.
"""

import pytest

from undecorator.syntax.editor import EditConflictError, SourceEditor


class TestSourceEditor:
    """Tests for SourceEditor."""

    def test_unchanged_document(self):
        """Test that a document without edits renders as the original."""
        editor = SourceEditor(b"const a = 1\n")
        assert not editor.changed
        assert editor.render() == "const a = 1\n"

    def test_replace(self):
        """Test replacing a range."""
        editor = SourceEditor(b"hello world")
        editor.replace(0, 5, "HELLO")
        assert editor.changed
        assert editor.render() == "HELLO world"

    def test_remove(self):
        """Test removing a range."""
        editor = SourceEditor(b"hello world")
        editor.remove(5, 11)
        assert editor.render() == "hello"

    def test_insert_at_start_and_end(self):
        """Test insertions at both document boundaries."""
        editor = SourceEditor(b"abc")
        editor.insert(0, "<")
        editor.insert(3, ">")
        assert editor.render() == "<abc>"

    def test_insertions_at_same_offset_keep_order(self):
        """Test that insertions at one offset render in registration order."""
        editor = SourceEditor(b"ab")
        editor.insert(1, "1")
        editor.insert(1, "2")
        assert editor.render() == "a12b"

    def test_insertion_before_replacement_at_same_offset(self):
        """Test that an insertion at a replacement's start renders before it."""
        editor = SourceEditor(b"abc")
        editor.replace(0, 3, "X")
        editor.insert(0, "<")
        assert editor.render() == "<X"

    def test_lazy_renderer_sees_nested_edits(self):
        """Test that a renderer slicing its own range sees nested edits."""
        editor = SourceEditor(b"hello world")
        editor.replace(6, 11, lambda: "[" + editor.slice(6, 11) + "]")
        editor.replace(6, 7, "W")
        assert editor.render() == "hello [World]"

    def test_nested_insertion_through_slice(self):
        """Test that insertions strictly inside a replacement appear via slice."""
        editor = SourceEditor(b"abc")
        editor.replace(0, 3, lambda: editor.slice(0, 3).upper())
        editor.insert(1, "y")
        assert editor.render() == "AYBC"

    def test_renderer_is_called_lazily(self):
        """Test that renderers run at render time, not registration time."""
        editor = SourceEditor(b"x")
        state = {"value": "before"}
        editor.replace(0, 1, lambda: state["value"])
        state["value"] = "after"
        assert editor.render() == "after"

    def test_partial_overlap_raises(self):
        """Test that partially overlapping edits are rejected."""
        editor = SourceEditor(b"hello world")
        editor.replace(0, 5, "a")
        editor.replace(3, 8, "b")
        with pytest.raises(EditConflictError):
            editor.render()

    def test_invalid_range(self):
        """Test that an inverted range is rejected."""
        editor = SourceEditor(b"abc")
        with pytest.raises(ValueError):
            editor.replace(2, 1, "x")

    def test_slice_of_untouched_range(self):
        """Test slicing a range that has no edits."""
        editor = SourceEditor("ünïcode text".encode("utf-8"))
        editor.replace(0, 2, "u")
        assert editor.slice(2, len(editor.source)) == "nïcode text"
        assert editor.render() == "unïcode text"
