"""
Lazy splice editor over the original source bytes.

The editor never rewrites the source eagerly. Every edit is a byte range plus
a renderer that is only called when the document is serialized. A renderer
may itself call :meth:`SourceEditor.slice` for sub-ranges of the original
text, and those slices include every edit nested inside them. This is what
lets an outer class body be re-rendered while a nested class inside one of
its methods is rewritten independently.

Edits must either nest or be disjoint. Partial overlaps are a programming
error and raise EditConflictError at render time.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Union

Renderer = Union[str, Callable[[], str]]


class EditConflictError(Exception):
    """Raised when two edits overlap without nesting."""


@dataclass
class Edit:
    start: int
    end: int
    renderer: Renderer = field(repr=False)
    order: int = 0

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end

    def render(self) -> str:
        if callable(self.renderer):
            return self.renderer()
        return self.renderer

    def contains(self, other: "Edit") -> bool:
        if self is other or self.is_insertion:
            return False
        if other.is_insertion:
            return self.start < other.start < self.end
        if (self.start, self.end) == (other.start, other.end):
            return self.order < other.order
        return self.start <= other.start and other.end <= self.end


class SourceEditor:
    """Records byte-range edits and renders the edited document on demand."""

    def __init__(self, source: bytes):
        self.source = source
        self._edits: List[Edit] = []
        self._counter = itertools.count()
        self._rendering: List[Edit] = []

    @property
    def changed(self) -> bool:
        return bool(self._edits)

    def replace(self, start: int, end: int, renderer: Renderer) -> Edit:
        if start > end:
            raise ValueError(f"Invalid range {start}..{end}")
        edit = Edit(start, end, renderer, next(self._counter))
        self._edits.append(edit)
        return edit

    def insert(self, offset: int, renderer: Renderer) -> Edit:
        return self.replace(offset, offset, renderer)

    def remove(self, start: int, end: int) -> Edit:
        return self.replace(start, end, "")

    def original(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def slice(self, start: int, end: int) -> str:
        """Render the original range ``start..end`` with nested edits applied."""
        at_document_end = end == len(self.source)
        candidates = [
            edit
            for edit in self._edits
            if not any(edit is active for active in self._rendering)
            and start <= edit.start
            and edit.end <= end
            and (not edit.is_insertion or edit.start < end or at_document_end)
        ]
        top_level = [
            edit
            for edit in candidates
            if not any(outer.contains(edit) for outer in candidates)
        ]
        top_level.sort(key=lambda e: (e.start, 0 if e.is_insertion else 1, e.order))

        parts: List[str] = []
        position = start
        for edit in top_level:
            if edit.start < position:
                raise EditConflictError(
                    f"Edit {edit.start}..{edit.end} overlaps a previous edit ending at {position}"
                )
            parts.append(self.original(position, edit.start))
            parts.append(self._render_edit(edit))
            position = edit.end
        parts.append(self.original(position, end))
        return "".join(parts)

    def _render_edit(self, edit: Edit) -> str:
        # A renderer slicing its own range must not see itself.
        self._rendering.append(edit)
        try:
            return edit.render()
        finally:
            self._rendering.pop()

    def render(self) -> str:
        return self.slice(0, len(self.source))
