"""
Mutable model of the constructs the codemod rewrites.

Only the parts of a JavaScript / TypeScript module that the codemod needs to
inspect or mutate are modelled: import declarations, class declarations,
their members, decorators and decorator expressions. Everything else stays
in the tree-sitter tree and is reproduced verbatim through the editor.

Model objects compare by identity (``eq=False``) so they can be used as
stable handles in lists and sets while the lists around them are edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node

Span = Tuple[int, int]


class Expression:
    """Base class for modelled expressions."""

    origin: Optional[Node] = None


@dataclass(eq=False)
class Identifier(Expression):
    name: str
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class MemberExpression(Expression):
    object: Expression
    property: Expression
    computed: bool = False
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class CallExpression(Expression):
    callee: Expression
    arguments: List[Expression] = field(default_factory=list)
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class ThisExpression(Expression):
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class SourceExpression(Expression):
    """An expression reproduced from source text as-is."""

    origin: Optional[Node] = field(default=None, repr=False)

    @property
    def node_type(self) -> str:
        return self.origin.type if self.origin is not None else ""


@dataclass(eq=False)
class FunctionExpression(Expression):
    """A function built from a class method's parts."""

    method: "ClassMethod"
    arrow: bool = True
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class Decorator:
    expression: Expression
    origin: Optional[Node] = field(default=None, repr=False)

    @property
    def location(self) -> Optional[Node]:
        return self.origin if self.origin is not None else self.expression.origin


@dataclass
class Trivia:
    """Whitespace and comments surrounding a class member."""

    leading: str = ""
    trailing: str = ""


@dataclass(eq=False)
class ClassMember:
    key: Expression
    decorators: List[Decorator] = field(default_factory=list)
    static: bool = False
    modifiers: List[str] = field(default_factory=list)
    comments: Optional[Trivia] = None
    origin: Optional[Node] = field(default=None, repr=False)
    span: Optional[Span] = None
    code_start: Optional[int] = None
    dirty: bool = False

    @property
    def is_new(self) -> bool:
        return self.origin is None

    @property
    def key_name(self) -> Optional[str]:
        """Name of a plain identifier key, None for computed / string keys."""
        if isinstance(self.key, Identifier):
            return self.key.name
        return None

    @property
    def location(self) -> Optional[Node]:
        if self.origin is not None:
            return self.origin
        if self.decorators:
            return self.decorators[0].location
        return self.key.origin


@dataclass(eq=False)
class ClassField(ClassMember):
    value: Optional[Expression] = None
    value_changed: bool = False


@dataclass(eq=False)
class ClassMethod(ClassMember):
    kind: str = "method"
    parameters: Optional[Node] = field(default=None, repr=False)
    body: Optional[Node] = field(default=None, repr=False)
    return_type: Optional[Node] = field(default=None, repr=False)
    type_parameters: Optional[Node] = field(default=None, repr=False)
    is_async: bool = False
    is_generator: bool = False
    statements: List[str] = field(default_factory=list)


@dataclass(eq=False)
class OpaqueMember(ClassMember):
    """A class element the codemod never rewrites (signatures, static blocks)."""


@dataclass(eq=False)
class ClassDeclaration:
    name: Optional[str]
    members: List[ClassMember] = field(default_factory=list)
    superclass: Optional[Node] = field(default=None, repr=False)
    origin: Optional[Node] = field(default=None, repr=False)
    body: Optional[Node] = field(default=None, repr=False)
    statement: Optional[Node] = field(default=None, repr=False)
    statement_list: Optional[Node] = field(default=None, repr=False)
    is_expression: bool = False
    head: str = ""
    tail: str = ""
    indent: str = ""
    member_indent: str = "    "
    multiline: bool = True
    dirty: bool = False

    @property
    def constructor(self) -> Optional[ClassMethod]:
        for member in self.members:
            if isinstance(member, ClassMethod) and member.kind == "constructor":
                return member
        return None

    @property
    def indent_unit(self) -> str:
        if self.member_indent.startswith(self.indent) and len(self.member_indent) > len(self.indent):
            return self.member_indent[len(self.indent):]
        return "    "


@dataclass(eq=False)
class ImportSpecifier:
    imported: str
    local: str
    origin: Optional[Node] = field(default=None, repr=False)


@dataclass(eq=False)
class ImportDeclaration:
    source: str
    specifiers: List[ImportSpecifier] = field(default_factory=list)
    default: Optional[Node] = field(default=None, repr=False)
    namespace: Optional[Node] = field(default=None, repr=False)
    named: Optional[Node] = field(default=None, repr=False)
    origin: Optional[Node] = field(default=None, repr=False)
    dirty: bool = False
