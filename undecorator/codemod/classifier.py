"""
Classifies a decorated class member.

Classes:
    PropertyInfo: Normalized description of one decorated member
    DecoratorClassifier: Turns a member's decorator into a PropertyInfo

Recognized decorator shapes (``x``, ``x.y`` and a single call argument)::

    @observable            -> base "observable", sub None
    @observable.ref        -> base "observable", sub "ref"
    @action("name")        -> base "action",     sub None,  argument "name"
    @action.bound("name")  -> base "action",     sub "bound", argument "name"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..syntax.nodes import (
    CallExpression,
    ClassDeclaration,
    ClassField,
    ClassMember,
    ClassMethod,
    Expression,
    Identifier,
    MemberExpression,
)
from .context import CodemodContext
from .diagnostics import DiagnosticCategory

logger = logging.getLogger(__name__)

STEP = "member"

FIELD = "field"
METHOD = "method"
GETTER = "getter"


@dataclass
class PropertyInfo:
    base_decorator: str
    sub_decorator: Optional[str]
    kind: str
    expr: Union[ClassMember, Expression, None]
    call_arg: Optional[Expression]
    setter: Optional[ClassMethod]
    callee_name: str


@dataclass
class DecoratorShape:
    base: str
    sub: Optional[str]
    call_arg: Optional[Expression]


class DecoratorClassifier:
    """Validates a member's decorator and extracts its PropertyInfo."""

    def __init__(self, context: CodemodContext):
        self.context = context

    def classify(
        self, member: ClassMember, declaration: ClassDeclaration
    ) -> Optional[PropertyInfo]:
        """
        Classify ``member``.

        Returns:
            PropertyInfo, or None when the member has no decorator or cannot
            be migrated. In the latter case a diagnostic has been emitted.
        """
        decorators = member.decorators
        if not decorators:
            return None
        target = self.context.describe(member)
        location = decorators[0].location or member.location
        if len(decorators) > 1:
            self.context.skip(
                STEP,
                target,
                "Found multiple decorators, skipping..",
                location,
                DiagnosticCategory.UNSUPPORTED_COMPOSITION,
            )
            return None

        shape = self.parse_shape(decorators[0].expression)
        if shape is None:
            self.context.skip(
                STEP,
                target,
                "Decorator expression too complex, please convert manually",
                location,
                DiagnosticCategory.STRUCTURAL_MISMATCH,
            )
            return None

        canonical = self.context.scope.canonical(shape.base)
        if canonical is None:
            self.context.skip(
                STEP,
                target,
                f"Found non-mobx decorator @{shape.base}",
                location,
                DiagnosticCategory.UNSUPPORTED_CONTEXT,
            )
            return None

        if member.static:
            self.context.skip(
                STEP,
                target,
                f"Static properties are not supported: {target}",
                member.location,
                DiagnosticCategory.UNSUPPORTED_CONTEXT,
            )
            return None

        expression = decorators[0].expression
        if isinstance(expression, CallExpression) and len(expression.arguments) != 1:
            self.context.warn(
                "Expected exactly one argument",
                expression.origin,
                DiagnosticCategory.STRUCTURAL_MISMATCH,
            )

        if isinstance(member, ClassMethod):
            kind = GETTER if member.kind == "get" else METHOD
            expr = member
            setter = self.find_setter(member, declaration)
        else:
            kind = FIELD
            expr = member.value if isinstance(member, ClassField) else None
            setter = None

        return PropertyInfo(
            base_decorator=canonical,
            sub_decorator=shape.sub,
            kind=kind,
            expr=expr,
            call_arg=shape.call_arg,
            setter=setter,
            callee_name=shape.base,
        )

    def parse_shape(self, expression: Expression) -> Optional[DecoratorShape]:
        call_arg = None
        callee = expression
        if isinstance(expression, CallExpression):
            callee = expression.callee
            call_arg = expression.arguments[0] if expression.arguments else None

        if isinstance(callee, Identifier):
            return DecoratorShape(callee.name, None, call_arg)
        if (
            isinstance(callee, MemberExpression)
            and not callee.computed
            and isinstance(callee.object, Identifier)
            and isinstance(callee.property, Identifier)
        ):
            return DecoratorShape(callee.object.name, callee.property.name, call_arg)
        return None

    def find_setter(
        self, member: ClassMethod, declaration: ClassDeclaration
    ) -> Optional[ClassMethod]:
        if member.key_name is None:
            return None
        for other in declaration.members:
            if (
                other is not member
                and isinstance(other, ClassMethod)
                and other.kind == "set"
                and other.key_name == member.key_name
            ):
                return other
        return None
