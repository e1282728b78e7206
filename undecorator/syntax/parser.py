"""
Grammar loading and parsing for JavaScript / TypeScript sources.

The codemod parses with tree-sitter using the grammars shipped by the
``tree-sitter-typescript`` distribution. Plain TypeScript files use the
``typescript`` dialect; everything that may contain JSX (``.tsx``, ``.js``,
``.jsx``) uses the ``tsx`` dialect, which is a superset for our purposes.

Classes:
    SourceParseError: Raised when a file does not parse cleanly

Example:
    >>> tree = parse_source(b"class A {}", dialect_for_path("a.ts"))
    >>> tree.root_node.type
    'program'
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import PurePath
from typing import Iterator, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

TYPESCRIPT = "typescript"
TSX = "tsx"

DIALECT_BY_SUFFIX = {
    ".ts": TYPESCRIPT,
    ".mts": TYPESCRIPT,
    ".cts": TYPESCRIPT,
    ".tsx": TSX,
    ".js": TSX,
    ".jsx": TSX,
    ".mjs": TSX,
    ".cjs": TSX,
}


class SourceParseError(Exception):
    """Raised when source text contains syntax errors."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line:
            return f"{self.args[0]} (line {self.line}, column {self.column})"
        return str(self.args[0])


@lru_cache(maxsize=None)
def load_language(dialect: str) -> Language:
    """
    Load a tree-sitter grammar for the given dialect.

    Args:
        dialect: Either ``"typescript"`` or ``"tsx"``

    Returns:
        A tree-sitter Language object, cached for the lifetime of the process.

    Raises:
        ValueError: If the dialect is unknown.
    """
    if dialect == TYPESCRIPT:
        capsule = tree_sitter_typescript.language_typescript()
    elif dialect == TSX:
        capsule = tree_sitter_typescript.language_tsx()
    else:
        raise ValueError(f"Unknown dialect: {dialect}")
    logger.debug("Loaded tree-sitter grammar for %s", dialect)
    return Language(capsule)


def dialect_for_path(path: str) -> str:
    """Pick the grammar dialect for a file path, defaulting to tsx."""
    return DIALECT_BY_SUFFIX.get(PurePath(path).suffix.lower(), TSX)


def parse_source(source: bytes, dialect: str = TSX) -> Tree:
    """
    Parse source bytes into a tree-sitter tree.

    A new Parser is created for every call: parsers hold mutable state and
    must not be shared between threads.

    Raises:
        SourceParseError: If the resulting tree contains error or missing nodes.
    """
    parser = Parser(load_language(dialect))
    tree = parser.parse(source)
    if tree.root_node.has_error:
        error = _first_error(tree.root_node)
        if error is not None:
            row, column = error.start_point
            kind = "Missing " + error.type if error.is_missing else "Syntax error"
            raise SourceParseError(kind, row + 1, column)
        raise SourceParseError("Syntax error")
    return tree


def _first_error(node: Node) -> Optional[Node]:
    for child in walk(node):
        if child.type == "ERROR" or child.is_missing:
            return child
    return None


def walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))
