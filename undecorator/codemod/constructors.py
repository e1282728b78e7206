"""
Ensures classes with observable state call the initialization hook.
"""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Node

from ..syntax.nodes import ClassDeclaration, ClassMethod, Identifier
from ..syntax.reader import named_children
from .context import CodemodContext
from .diagnostics import DiagnosticCategory
from .names import INITIALIZATION_HOOK
from .outcomes import StepOutcome

logger = logging.getLogger(__name__)

STEP = "constructor"


class ConstructorSynthesizer:
    """Adds ``initializeObservables(this)`` to a class constructor."""

    def __init__(self, context: CodemodContext):
        self.context = context
        self.file = context.file

    @property
    def hook_statement(self) -> str:
        return f"{INITIALIZATION_HOOK}(this){self.file.semicolon}"

    def ensure_initialization(self, declaration: ClassDeclaration) -> bool:
        """
        Make sure the class initializes its observables.

        Returns:
            True if a constructor was created or modified.
        """
        constructor = declaration.constructor
        if constructor is None:
            self.create_constructor(declaration)
            return True
        return self.extend_constructor(declaration, constructor)

    def create_constructor(self, declaration: ClassDeclaration) -> ClassMethod:
        statements = []
        if declaration.superclass is not None:
            self.context.warn(
                f"Generated new constructor for class {declaration.name or '<anonymous>'}. "
                "But since the class does have a base class, it might be needed to revisit "
                "the arguments that are passed to `super()`",
                declaration.origin,
                DiagnosticCategory.MANUAL_REVIEW,
            )
            statements.append("super()" + self.file.semicolon)
        statements.append(self.hook_statement)

        constructor = ClassMethod(
            key=Identifier("constructor"), kind="constructor", statements=statements
        )
        index = next(
            (i for i, m in enumerate(declaration.members) if isinstance(m, ClassMethod)),
            len(declaration.members),
        )
        declaration.members.insert(index, constructor)
        declaration.dirty = True
        self.context.record(
            StepOutcome.applied(STEP, declaration.name or "<anonymous>", "created constructor")
        )
        return constructor

    def extend_constructor(self, declaration: ClassDeclaration, constructor: ClassMethod) -> bool:
        body = constructor.body
        name = declaration.name or "<anonymous>"
        if body is None:
            self.context.record(StepOutcome.untouched(STEP, name, "constructor has no body"))
            return False
        statements = named_children(body)
        if any(self.is_hook_call(statement) for statement in statements):
            self.context.record(StepOutcome.untouched(STEP, name, "already initialized"))
            return False

        editor = self.context.editor
        newline = self.file.newline
        first = statements[0] if statements else None
        if first is not None and self.is_super_call(first):
            indent = self.file.line_indent(first.start_byte)
            editor.insert(first.end_byte, f"{newline}{indent}{self.hook_statement}")
        elif first is not None:
            indent = self.file.line_indent(first.start_byte)
            editor.insert(first.start_byte, f"{self.hook_statement}{newline}{indent}")
        else:
            self.insert_into_empty_body(declaration, body)

        self.context.record(StepOutcome.applied(STEP, name, "extended constructor"))
        return True

    def insert_into_empty_body(self, declaration: ClassDeclaration, body: Node) -> None:
        open_end = body.children[0].end_byte if body.children else body.start_byte
        close_start = body.children[-1].start_byte if body.children else body.end_byte
        member_indent = self.file.line_indent(body.start_byte)
        indent = member_indent + declaration.indent_unit
        newline = self.file.newline
        if "\n" in self.file.editor.original(open_end, close_start):
            text = f"{newline}{indent}{self.hook_statement}"
        else:
            text = f"{newline}{indent}{self.hook_statement}{newline}{member_indent}"
        self.context.editor.insert(open_end, text)

    def is_super_call(self, statement: Node) -> bool:
        expression = self._call_of(statement)
        if expression is None:
            return False
        function = expression.child_by_field_name("function")
        return function is not None and function.type == "super"

    def is_hook_call(self, statement: Node) -> bool:
        expression = self._call_of(statement)
        if expression is None:
            return False
        function = expression.child_by_field_name("function")
        arguments = expression.child_by_field_name("arguments")
        if function is None or self.file.text(function) != INITIALIZATION_HOOK:
            return False
        args = named_children(arguments) if arguments is not None else []
        return len(args) == 1 and args[0].type == "this"

    def _call_of(self, statement: Node) -> Optional[Node]:
        if statement.type != "expression_statement":
            return None
        expression = next(iter(named_children(statement)), None)
        if expression is None or expression.type != "call_expression":
            return None
        return expression
