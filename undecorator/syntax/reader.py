"""
Builds the mutable source model from a tree-sitter tree.

The reader walks the tree once and collects import declarations and every
class (declarations and expressions, in traversal order) together with their
members, decorators and the whitespace layout of each class body. The model
keeps references back into the tree so untouched code can be reproduced
byte-for-byte by the editor.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from tree_sitter import Node, Tree

from .editor import SourceEditor
from .nodes import (
    CallExpression,
    ClassDeclaration,
    ClassField,
    ClassMember,
    ClassMethod,
    Decorator,
    Expression,
    Identifier,
    ImportDeclaration,
    ImportSpecifier,
    MemberExpression,
    OpaqueMember,
    SourceExpression,
    ThisExpression,
    Trivia,
)
from .parser import dialect_for_path, parse_source, walk

logger = logging.getLogger(__name__)

CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
FIELD_TYPES = frozenset({"public_field_definition", "field_definition"})
STATEMENT_LISTS = frozenset({"program", "statement_block"})
SEMICOLON_STATEMENTS = frozenset(
    {
        "expression_statement",
        "lexical_declaration",
        "variable_declaration",
        "import_statement",
        "return_statement",
    }
)
MODIFIER_TYPES = frozenset({"accessibility_modifier", "override_modifier"})


@dataclass(eq=False)
class SourceFile:
    """A parsed file together with its model and pending edits."""

    path: str
    source: bytes
    tree: Tree = field(repr=False)
    editor: SourceEditor = field(repr=False)
    imports: List[ImportDeclaration] = field(default_factory=list)
    classes: List[ClassDeclaration] = field(default_factory=list)
    uses_semicolons: bool = True
    newline: str = "\n"
    lines: List[str] = field(default_factory=list, repr=False)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def semicolon(self) -> str:
        return ";" if self.uses_semicolons else ""

    def text(self, node: Node) -> str:
        return self.editor.original(node.start_byte, node.end_byte)

    def line_indent(self, offset: int) -> str:
        """Leading whitespace of the line that contains byte ``offset``."""
        line_start = self.source.rfind(b"\n", 0, offset) + 1
        match = re.match(rb"[ \t]*", self.source[line_start:offset])
        return match.group(0).decode("utf-8") if match else ""

    def location(self, node: Node) -> Tuple[int, int]:
        """1-based line and 0-based character column of a node."""
        row, byte_column = node.start_point
        lines = self.source.split(b"\n")
        line = lines[row] if row < len(lines) else b""
        return row + 1, len(line[:byte_column].decode("utf-8", errors="replace"))

    def iter_nodes(self, *types: str) -> Iterator[Node]:
        """Yield nodes of the given types in document order."""
        wanted = set(types)
        for node in walk(self.root):
            if node.type in wanted:
                yield node


def named_children(node: Node) -> List[Node]:
    """Named children with comments filtered out."""
    return [child for child in node.named_children if child.type != "comment"]


def code_end(node: Node) -> int:
    """End of ``node`` without the comments tree-sitter attaches after its last token."""
    code = [child for child in node.children if child.type != "comment"]
    if not code:
        return node.end_byte
    return code_end(code[-1])


def statement_list_of(node: Node) -> Tuple[Optional[Node], Node]:
    """Return (statement list, statement) enclosing ``node``."""
    current = node
    while current.parent is not None and current.parent.type not in STATEMENT_LISTS:
        current = current.parent
    return current.parent, current


def read_source_file(path: str, source: str) -> SourceFile:
    """
    Parse ``source`` and build its model.

    Raises:
        SourceParseError: If the source does not parse cleanly.
    """
    data = source.encode("utf-8")
    tree = parse_source(data, dialect_for_path(path))
    reader = ModelReader(
        SourceFile(
            path=path,
            source=data,
            tree=tree,
            editor=SourceEditor(data),
            lines=source.split("\n"),
            newline=_line_terminator(data),
        )
    )
    return reader.read()


class ModelReader:
    """Populates a SourceFile with imports and classes."""

    def __init__(self, source_file: SourceFile):
        self.file = source_file

    def read(self) -> SourceFile:
        statements_with_semicolon = 0
        statements = 0
        for node in walk(self.file.root):
            if node.type == "import_statement":
                self.file.imports.append(self.read_import(node))
            elif node.type in CLASS_TYPES and node.child_by_field_name("body") is not None:
                self.file.classes.append(self.read_class(node))
            if node.type in SEMICOLON_STATEMENTS:
                statements += 1
                if node.children and node.children[-1].type == ";":
                    statements_with_semicolon += 1
        if statements:
            self.file.uses_semicolons = statements_with_semicolon * 2 >= statements
        logger.debug(
            "Read %s: %d imports, %d classes",
            self.file.path,
            len(self.file.imports),
            len(self.file.classes),
        )
        return self.file

    # Imports

    def read_import(self, node: Node) -> ImportDeclaration:
        source_node = node.child_by_field_name("source")
        declaration = ImportDeclaration(
            source=_unquote(self.file.text(source_node)) if source_node is not None else "",
            origin=node,
        )
        clause = next((c for c in node.children if c.type == "import_clause"), None)
        if clause is None:
            return declaration
        for child in named_children(clause):
            if child.type == "identifier":
                declaration.default = child
            elif child.type == "namespace_import":
                declaration.namespace = child
            elif child.type == "named_imports":
                declaration.named = child
                for specifier in named_children(child):
                    if specifier.type == "import_specifier":
                        declaration.specifiers.append(self.read_import_specifier(specifier))
        return declaration

    def read_import_specifier(self, node: Node) -> ImportSpecifier:
        name = node.child_by_field_name("name")
        alias = node.child_by_field_name("alias")
        imported = _unquote(self.file.text(name)) if name is not None else self.file.text(node)
        local = self.file.text(alias) if alias is not None else imported
        return ImportSpecifier(imported=imported, local=local, origin=node)

    # Classes

    def read_class(self, node: Node) -> ClassDeclaration:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        statement_list, statement = statement_list_of(node)
        declaration = ClassDeclaration(
            name=self.file.text(name_node) if name_node is not None else None,
            superclass=self._superclass(node),
            origin=node,
            body=body,
            statement=statement,
            statement_list=statement_list,
            is_expression=node.type == "class",
            indent=self.file.line_indent(node.start_byte),
        )
        declaration.members = self.read_members(body)
        self._read_layout(declaration)
        return declaration

    def _superclass(self, node: Node) -> Optional[Node]:
        heritage = next((c for c in node.children if c.type == "class_heritage"), None)
        if heritage is None:
            return None
        extends = next((c for c in heritage.children if c.type == "extends_clause"), None)
        if extends is not None:
            return extends.child_by_field_name("value") or next(iter(named_children(extends)), None)
        if any(c.type == "extends" for c in heritage.children):
            return next(iter(named_children(heritage)), None)
        return None

    def read_members(self, body: Node) -> List[ClassMember]:
        members: List[ClassMember] = []
        pending: List[Node] = []
        for child in body.children:
            if child.type == "decorator":
                pending.append(child)
            elif child.type == "method_definition":
                members.append(self.read_method(child, pending))
                pending = []
            elif child.type in FIELD_TYPES:
                members.append(self.read_field(child, pending))
                pending = []
            elif child.is_named and child.type != "comment":
                members.append(self.read_opaque(child, pending))
                pending = []
        return members

    def read_field(self, node: Node, outer_decorators: Sequence[Node]) -> ClassField:
        name = node.child_by_field_name("name") or node.child_by_field_name("property")
        decorators = list(outer_decorators) + [c for c in node.children if c.type == "decorator"]
        value = node.child_by_field_name("value")
        return ClassField(
            key=self.read_key(name),
            decorators=[self.read_decorator(d) for d in decorators],
            static="static" in self._leading_tokens(node, name),
            origin=node,
            span=(decorators[0].start_byte if decorators else node.start_byte, node.end_byte),
            code_start=self._code_start(node),
            value=SourceExpression(origin=value) if value is not None else None,
        )

    def read_method(self, node: Node, outer_decorators: Sequence[Node]) -> ClassMethod:
        name = node.child_by_field_name("name")
        decorators = list(outer_decorators) + [c for c in node.children if c.type == "decorator"]
        tokens = self._leading_tokens(node, name)
        key = self.read_key(name)
        if "get" in tokens:
            kind = "get"
        elif "set" in tokens:
            kind = "set"
        elif isinstance(key, Identifier) and key.name == "constructor":
            kind = "constructor"
        else:
            kind = "method"
        return ClassMethod(
            key=key,
            decorators=[self.read_decorator(d) for d in decorators],
            static="static" in tokens,
            modifiers=[
                self.file.text(c)
                for c in self._children_before(node, name)
                if c.type in MODIFIER_TYPES
            ],
            origin=node,
            span=(decorators[0].start_byte if decorators else node.start_byte, node.end_byte),
            code_start=self._code_start(node),
            kind=kind,
            parameters=node.child_by_field_name("parameters"),
            body=node.child_by_field_name("body"),
            return_type=node.child_by_field_name("return_type"),
            type_parameters=node.child_by_field_name("type_parameters"),
            is_async="async" in tokens,
            is_generator="*" in tokens,
        )

    def read_opaque(self, node: Node, outer_decorators: Sequence[Node]) -> OpaqueMember:
        start = outer_decorators[0].start_byte if outer_decorators else node.start_byte
        return OpaqueMember(
            key=SourceExpression(origin=node),
            origin=node,
            span=(start, node.end_byte),
            code_start=node.start_byte,
        )

    def read_key(self, node: Optional[Node]) -> Expression:
        if node is not None and node.type == "property_identifier":
            return Identifier(self.file.text(node), origin=node)
        return SourceExpression(origin=node)

    def read_decorator(self, node: Node) -> Decorator:
        expression = next(iter(named_children(node)), None)
        return Decorator(
            expression=self.read_expression(expression) if expression is not None else SourceExpression(),
            origin=node,
        )

    def read_expression(self, node: Node) -> Expression:
        """Model an expression deeply enough to classify decorators."""
        if node.type in ("identifier", "property_identifier"):
            return Identifier(self.file.text(node), origin=node)
        if node.type == "this":
            return ThisExpression(origin=node)
        if node.type == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            if obj is not None and prop is not None:
                return MemberExpression(
                    self.read_expression(obj), self.read_expression(prop), origin=node
                )
        if node.type == "call_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is not None and arguments is not None and arguments.type == "arguments":
                return CallExpression(
                    self.read_expression(function),
                    [self.read_expression(a) for a in named_children(arguments)],
                    origin=node,
                )
        return SourceExpression(origin=node)

    def _children_before(self, node: Node, name: Optional[Node]) -> List[Node]:
        before = []
        for child in node.children:
            if name is not None and child.start_byte >= name.start_byte:
                break
            before.append(child)
        return before

    def _leading_tokens(self, node: Node, name: Optional[Node]) -> List[str]:
        return [c.type for c in self._children_before(node, name) if not c.is_named]

    def _code_start(self, node: Node) -> int:
        for child in node.children:
            if child.type not in ("decorator", "comment"):
                return child.start_byte
        return node.start_byte

    # Layout

    def _read_layout(self, declaration: ClassDeclaration) -> None:
        body = declaration.body
        open_end = body.children[0].end_byte if body.children else body.start_byte
        close_start = body.children[-1].start_byte if body.children else body.end_byte
        inner = self.file.editor.original(open_end, close_start)
        declaration.multiline = "\n" in inner

        members = declaration.members
        for member in members:
            member.comments = Trivia()
        previous_end = open_end
        gaps = []
        for member in members:
            gaps.append(self.file.editor.original(previous_end, member.span[0]))
            previous_end = member.span[1]
        final_gap = self.file.editor.original(previous_end, close_start)

        if not members:
            declaration.head, declaration.tail = _split_gap(final_gap)
        else:
            declaration.head, members[0].comments.leading = _split_gap(gaps[0])
            for index in range(1, len(members)):
                members[index - 1].comments.trailing, members[index].comments.leading = _split_gap(
                    gaps[index]
                )
            members[-1].comments.trailing, declaration.tail = _split_gap(final_gap)

        fallback = declaration.indent + "    "
        if members and declaration.multiline:
            last_line = members[0].comments.leading.split("\n")[-1]
            declaration.member_indent = last_line if last_line.strip() == "" and last_line else fallback
        else:
            declaration.member_indent = fallback
        if not declaration.multiline and not members:
            declaration.tail = declaration.indent


def _split_gap(gap: str) -> Tuple[str, str]:
    """Split whitespace between members into (trailing of previous, leading of next)."""
    if "\n" in gap:
        index = gap.index("\n")
        return gap[: index + 1], gap[index + 1 :]
    match = re.match(r"[ \t]*;", gap)
    if match:
        return match.group(0), gap[match.end() :]
    return "", gap


def _line_terminator(data: bytes) -> str:
    if data.count(b"\r\n") * 2 > data.count(b"\n"):
        return "\r\n"
    return "\n"


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text
