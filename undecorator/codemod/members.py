"""
Decorator-free rewrites of classified class members.

| base       | kind   | sub   | rewrite                                           |
|------------|--------|-------|---------------------------------------------------|
| action     | field  | bound | value -> action[.bound](arg?, value)              |
| action     | method | bound | field key = action[.bound](arg?, wrap(method))    |
| action     | field  | none  | value -> action(arg?, value)                      |
| action     | method | none  | Class.prototype.key = action(arg?, ...) after class |
| observable | field  | any   | value -> observable[.sub](value)                  |
| computed   | getter | any   | field key = computed[.sub](get, set?, arg?)       |

``.bound`` survives only around non-arrow functions: arrows already capture
``this``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import List, Optional, Tuple, Union

from ..syntax.nodes import (
    CallExpression,
    ClassDeclaration,
    ClassField,
    ClassMember,
    ClassMethod,
    Expression,
    FunctionExpression,
    Identifier,
    MemberExpression,
    SourceExpression,
    Trivia,
)
from .classifier import FIELD, GETTER, METHOD, DecoratorClassifier, PropertyInfo
from .context import CodemodContext
from .diagnostics import DiagnosticCategory
from .names import ACTION, BOUND, COMPUTED, OBSERVABLE
from .outcomes import StepOutcome

logger = logging.getLogger(__name__)

STEP = "member"

FUNCTION_NODE_TYPES = frozenset({"function_expression", "function", "generator_function"})


@dataclass
class RewriteEffects:
    needs_constructor: bool = False
    members_to_remove: List[ClassMember] = field(default_factory=list)


def wrap(value: Union[ClassMember, Expression, None]) -> Optional[Expression]:
    """Turn a method into a function expression; other values pass through."""
    if isinstance(value, ClassMethod):
        return FunctionExpression(method=value, arrow=not value.is_generator)
    return value


def is_plain_function(value: Optional[Expression]) -> bool:
    """True for non-arrow function expressions, which need ``.bound``."""
    if isinstance(value, FunctionExpression):
        return not value.arrow
    if isinstance(value, SourceExpression):
        return value.node_type in FUNCTION_NODE_TYPES
    return False


def call(name: str, sub: Optional[str], arguments: List[Optional[Expression]]) -> CallExpression:
    callee: Expression = Identifier(name)
    if sub:
        callee = MemberExpression(callee, Identifier(sub))
    return CallExpression(callee, [a for a in arguments if a is not None])


class MemberRewriter:
    """Rewrites every decorated member of a class."""

    def __init__(self, context: CodemodContext):
        self.context = context
        self.classifier = DecoratorClassifier(context)

    def rewrite_class(self, declaration: ClassDeclaration) -> RewriteEffects:
        effects = RewriteEffects()
        rewritten: List[ClassMember] = []
        for member in list(declaration.members):
            replacement = member
            if isinstance(member, (ClassField, ClassMethod)):
                replacement = self.rewrite_member(member, declaration, effects)
            if replacement is not member or replacement.dirty:
                declaration.dirty = True
            rewritten.append(replacement)
        if effects.members_to_remove:
            declaration.dirty = True
            rewritten = [
                m for m in rewritten if not any(m is r for r in effects.members_to_remove)
            ]
        declaration.members = rewritten
        return effects

    def rewrite_member(
        self, member: ClassMember, declaration: ClassDeclaration, effects: RewriteEffects
    ) -> ClassMember:
        info = self.classifier.classify(member, declaration)
        if info is None:
            return member
        target = self.context.describe(member)
        base = info.base_decorator

        if base == ACTION and info.kind in (FIELD, METHOD):
            result = self.rewrite_action(member, info, declaration)
        elif base == OBSERVABLE and info.kind == FIELD:
            result = self.rewrite_observable(member, info)
            effects.needs_constructor = True
        elif base == COMPUTED and info.kind == GETTER:
            result = self.rewrite_computed(member, info, effects)
            effects.needs_constructor = True
        else:
            self.context.skip(
                STEP,
                target,
                f"Unknown case for undecorate {base}",
                member.location,
                DiagnosticCategory.UNKNOWN_CASE,
            )
            return member

        if result is not None:
            self.context.record(StepOutcome.applied(STEP, target, base))
            return result
        return member

    def rewrite_action(
        self, member: ClassMember, info: PropertyInfo, declaration: ClassDeclaration
    ) -> Optional[ClassMember]:
        if info.kind == FIELD:
            value = info.expr
            sub = BOUND if info.sub_decorator == BOUND and is_plain_function(value) else None
            self.replace_value(member, call(info.callee_name, sub, [info.call_arg, value]))
            return member

        if info.sub_decorator == BOUND:
            wrapped = wrap(member)
            sub = BOUND if is_plain_function(wrapped) else None
            return self.replace_with_field(
                member, call(info.callee_name, sub, [info.call_arg, wrapped])
            )

        if info.sub_decorator is None:
            return self.assign_to_prototype(member, info, declaration)

        self.context.skip(
            STEP,
            self.context.describe(member),
            f"Unknown case for undecorate {ACTION}.{info.sub_decorator}",
            member.location,
            DiagnosticCategory.UNKNOWN_CASE,
        )
        return None

    def rewrite_observable(self, member: ClassMember, info: PropertyInfo) -> ClassMember:
        self.replace_value(member, call(info.callee_name, info.sub_decorator, [info.expr]))
        return member

    def rewrite_computed(
        self, member: ClassMember, info: PropertyInfo, effects: RewriteEffects
    ) -> ClassMember:
        arguments = [wrap(member), wrap(info.setter), info.call_arg]
        if info.setter is not None:
            effects.members_to_remove.append(info.setter)
        return self.replace_with_field(
            member,
            call(info.callee_name, info.sub_decorator, arguments),
            absorbed=[info.setter] if info.setter is not None else [],
        )

    def assign_to_prototype(
        self, member: ClassMember, info: PropertyInfo, declaration: ClassDeclaration
    ) -> Optional[ClassMember]:
        target = self.context.describe(member)
        if declaration.name is None or declaration.is_expression:
            self.context.skip(
                STEP,
                target,
                "Cannot undecorate action methods of anonymous classes or class expressions",
                member.location,
                DiagnosticCategory.UNSUPPORTED_CONTEXT,
            )
            return None
        key = self.prototype_key(member)
        if key is None:
            self.context.skip(
                STEP,
                target,
                f"Cannot undecorate action on private method {target}",
                member.location,
                DiagnosticCategory.UNSUPPORTED_CONTEXT,
            )
            return None

        prototype = MemberExpression(Identifier(declaration.name), Identifier("prototype"))
        reference = MemberExpression(prototype, key[0], computed=key[1])
        assignment = call(info.callee_name, None, [info.call_arg, reference])
        member.decorators = []
        member.dirty = True
        statement = declaration.statement
        self.context.editor.insert(
            statement.end_byte,
            partial(self._render_assignment, declaration.indent, reference, assignment),
        )
        return member

    def prototype_key(self, member: ClassMember) -> Optional[Tuple[Expression, bool]]:
        """The key as (expression, computed) for ``Class.prototype`` access."""
        key = member.key
        if isinstance(key, Identifier):
            return key, False
        node = key.origin
        if node is None or node.type == "private_property_identifier":
            return None
        if node.type == "computed_property_name":
            inner = next((c for c in node.named_children if c.type != "comment"), None)
            if inner is None:
                return None
            return SourceExpression(origin=inner), True
        return SourceExpression(origin=node), True

    def _render_assignment(
        self, indent: str, reference: Expression, value: Expression
    ) -> str:
        printer = self.context.printer
        newline = self.context.file.newline
        return f"{newline}{indent}{printer.expression(reference)} = {printer.statement(value)}"

    def replace_value(self, member: ClassMember, value: Expression) -> None:
        if isinstance(member, ClassField):
            member.value = value
            member.value_changed = True
        member.decorators = []
        member.dirty = True

    def replace_with_field(
        self,
        member: ClassMember,
        value: Expression,
        absorbed: Optional[List[ClassMember]] = None,
    ) -> ClassField:
        """
        A brand-new field that takes the place of ``member``.

        Comments trailing the replaced method bodies (``member`` and any
        ``absorbed`` setter) move behind the field, out of the wrapped function.
        """
        comments = member.comments
        printer = self.context.printer
        moved = "".join(
            printer.trailing_comments(m.origin) for m in [member] + list(absorbed or [])
        )
        if moved and comments is not None:
            trailing = comments.trailing
            if "//" in moved and "\n" not in trailing:
                trailing = self.context.file.newline + trailing
            comments = Trivia(leading=comments.leading, trailing=moved + trailing)
        return ClassField(
            key=member.key,
            modifiers=list(member.modifiers),
            comments=comments,
            value=value,
        )
