"""
Rewrites legacy ``decorate(Class, { member: decorator })`` calls.

Each entry of the decorator map is attached to the matching class member as
if it had been written inline, so the member rewriter handles both forms the
same way. A call is only removed when every entry could be attached;
otherwise it stays in place as a marker for manual migration.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from ..syntax.nodes import (
    ClassDeclaration,
    ClassField,
    ClassMember,
    ClassMethod,
    Decorator,
    Expression,
    Identifier,
    MemberExpression,
)
from ..syntax.reader import ModelReader, named_children, statement_list_of
from .context import CodemodContext
from .diagnostics import DiagnosticCategory
from .names import OBSERVABLE
from .outcomes import StepOutcome

logger = logging.getLogger(__name__)

STEP = "legacy-call"


class InsertionCursor:
    """
    Inserts new members into a list at an advancing position.

    Members added through one cursor keep their relative order and all land
    before the members that were already in the list at that point.
    """

    def __init__(self, members: List[ClassMember], position: int = 0):
        self.members = members
        self.position = position

    def insert(self, member: ClassMember) -> None:
        self.members.insert(self.position, member)
        self.position += 1


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return (a.type, a.start_byte, a.end_byte) == (b.type, b.start_byte, b.end_byte)


class LegacyCallRewriter:
    """Converts legacy decorate calls into inline member decorators."""

    def __init__(self, context: CodemodContext):
        self.context = context
        self.file = context.file
        self.reader = ModelReader(context.file)

    def rewrite_all(self) -> int:
        """Process every legacy call in the file, returning how many were removed."""
        removed = 0
        for call in list(self.file.iter_nodes("call_expression")):
            function = call.child_by_field_name("function")
            if function is None or function.type != "identifier":
                continue
            if self.file.text(function) not in self.context.scope.legacy_names:
                continue
            if self.rewrite_call(call):
                removed += 1
        return removed

    def rewrite_call(self, call: Node) -> bool:
        arguments_node = call.child_by_field_name("arguments")
        arguments = named_children(arguments_node) if arguments_node is not None else []
        if len(arguments) != 2:
            self.context.skip(
                STEP,
                self.file.text(call),
                "Expected exactly two arguments to decorate",
                call,
                DiagnosticCategory.STRUCTURAL_MISMATCH,
            )
            return False
        target, decorator_map = arguments
        if target.type != "identifier":
            self.context.skip(
                STEP,
                self.file.text(target),
                "Expected a class identifier as first argument to decorate",
                target,
                DiagnosticCategory.STRUCTURAL_MISMATCH,
            )
            return False
        if decorator_map.type != "object":
            self.context.skip(
                STEP,
                self.file.text(target),
                "Expected an object literal as second argument to decorate",
                decorator_map,
                DiagnosticCategory.STRUCTURAL_MISMATCH,
            )
            return False

        class_name = self.file.text(target)
        declaration = self.resolve_target(call, target, class_name)
        if declaration is None:
            return False

        cursor = InsertionCursor(declaration.members)
        removable = True
        for entry in named_children(decorator_map):
            if not self.attach_entry(entry, declaration, cursor):
                removable = False

        if not removable:
            self.context.record(
                StepOutcome.skipped(STEP, class_name, "call kept for manual migration")
            )
            return False
        self.remove_call(call, class_name)
        self.context.record(StepOutcome.applied(STEP, class_name))
        return True

    def resolve_target(
        self, call: Node, target: Node, class_name: str
    ) -> Optional[ClassDeclaration]:
        """Find the class a legacy call refers to, preferring the call's own block."""
        candidates = [
            c for c in self.file.classes if not c.is_expression and c.name == class_name
        ]
        if not candidates:
            self.context.skip(
                STEP,
                class_name,
                f"Expected exactly one class declaration for '{class_name}' but found 0",
                target,
                DiagnosticCategory.AMBIGUOUS_TARGET,
            )
            return None
        call_block, _ = statement_list_of(call)
        for candidate in candidates:
            if same_node(candidate.statement_list, call_block):
                return candidate
        if len(candidates) > 1:
            self.context.warn(
                f"Found {len(candidates)} class declarations for '{class_name}' outside "
                f"the block of the decorate call, using the first one",
                target,
                DiagnosticCategory.AMBIGUOUS_TARGET,
            )
        return candidates[0]

    def attach_entry(
        self, entry: Node, declaration: ClassDeclaration, cursor: InsertionCursor
    ) -> bool:
        key = entry.child_by_field_name("key") if entry.type == "pair" else None
        value = entry.child_by_field_name("value") if entry.type == "pair" else None
        if key is None or value is None or key.type != "property_identifier":
            self.context.skip(
                STEP,
                self.file.text(entry),
                "Expected plain property definition",
                entry,
                DiagnosticCategory.UNSUPPORTED_CONTEXT,
            )
            return False
        name = self.file.text(key)
        if value.type == "array":
            self.context.skip(
                STEP,
                name,
                "Cannot undecorate composed decorators",
                value,
                DiagnosticCategory.UNSUPPORTED_COMPOSITION,
            )
            return False

        expression = self.reader.read_expression(value)
        member = self.find_member(declaration, name)
        if member is None:
            if not self.is_observable(expression):
                self.context.skip(
                    STEP,
                    name,
                    f"Failed to find member '{name}' in class '{declaration.name}'",
                    key,
                    DiagnosticCategory.STRUCTURAL_MISMATCH,
                )
                return False
            # Observable members may exist only as assignments in the constructor.
            member = ClassField(key=Identifier(name))
            cursor.insert(member)
            declaration.dirty = True
            logger.debug("Created field %s in class %s", name, declaration.name)

        member.decorators = [Decorator(expression)]
        return True

    def find_member(self, declaration: ClassDeclaration, name: str) -> Optional[ClassMember]:
        matches = [
            m
            for m in declaration.members
            if isinstance(m, (ClassField, ClassMethod)) and m.key_name == name
        ]
        for member in matches:
            if not (isinstance(member, ClassMethod) and member.kind == "set"):
                return member
        return matches[0] if matches else None

    def is_observable(self, expression: Expression) -> bool:
        if isinstance(expression, MemberExpression):
            expression = expression.object
        return (
            isinstance(expression, Identifier)
            and self.context.scope.canonical(expression.name) == OBSERVABLE
        )

    def remove_call(self, call: Node, class_name: str) -> None:
        parent = call.parent
        if parent is not None and parent.type == "expression_statement":
            start, end = self._line_range(parent)
            self.context.editor.remove(start, end)
        else:
            # Used as a value, e.g. `export default decorate(A, {...})`.
            self.context.editor.replace(call.start_byte, call.end_byte, class_name)

    def _line_range(self, node: Node):
        source = self.file.source
        start, end = node.start_byte, node.end_byte
        line_start = source.rfind(b"\n", 0, start) + 1
        if not source[line_start:start].strip():
            start = line_start
        line_end = source.find(b"\n", end)
        if line_end == -1:
            line_end = len(source)
        if not source[end:line_end].strip():
            end = min(line_end + 1, len(source))
        return start, end
