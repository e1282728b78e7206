"""
Renders model nodes back to source text.

Nodes that still have an origin in the tree are rendered through
``SourceEditor.slice`` so their original formatting, and any edits nested
inside them, are preserved. Only synthesized nodes are printed from scratch,
using the file's semicolon style and the class body's indentation.
"""

from __future__ import annotations

from typing import List

from .nodes import (
    CallExpression,
    ClassDeclaration,
    ClassField,
    ClassMember,
    ClassMethod,
    Expression,
    FunctionExpression,
    Identifier,
    ImportDeclaration,
    MemberExpression,
    ThisExpression,
)
from .reader import SourceFile, code_end

# A field initializer followed by a line starting with one of these would
# continue into it without an explicit semicolon.
CONTINUATION_PREFIXES = ("[", "(", "*")


class Printer:
    """Prints expressions, members, class bodies and import lists."""

    def __init__(self, source_file: SourceFile):
        self.file = source_file
        self.editor = source_file.editor

    # Expressions

    def expression(self, expression: Expression) -> str:
        if isinstance(expression, FunctionExpression):
            return self.function(expression)
        if expression.origin is not None:
            return self._node(expression.origin)
        if isinstance(expression, Identifier):
            return expression.name
        if isinstance(expression, ThisExpression):
            return "this"
        if isinstance(expression, MemberExpression):
            obj = self.expression(expression.object)
            prop = self.expression(expression.property)
            return f"{obj}[{prop}]" if expression.computed else f"{obj}.{prop}"
        if isinstance(expression, CallExpression):
            arguments = ", ".join(self.expression(a) for a in expression.arguments)
            return f"{self.expression(expression.callee)}({arguments})"
        return ""

    def function(self, expression: FunctionExpression) -> str:
        method = expression.method
        prefix = "async " if method.is_async else ""
        type_parameters = self._node(method.type_parameters)
        parameters = self._node(method.parameters) or "()"
        return_type = self._node(method.return_type)
        body = self._node(method.body) or "{}"
        if expression.arrow:
            return f"{prefix}{type_parameters}{parameters}{return_type} => {body}"
        star = "*" if method.is_generator else ""
        return f"{prefix}function{star}{type_parameters}{parameters}{return_type} {body}"

    def statement(self, expression: Expression) -> str:
        return self.expression(expression) + self.file.semicolon

    def _node(self, node) -> str:
        if node is None:
            return ""
        return self.editor.slice(node.start_byte, code_end(node))

    def trailing_comments(self, node) -> str:
        """Comments tree-sitter keeps inside ``node`` after its last token."""
        if node is None:
            return ""
        return self.editor.original(code_end(node), node.end_byte)

    # Members

    def member(
        self, member: ClassMember, declaration: ClassDeclaration, following: str = ""
    ) -> str:
        if member.is_new:
            if isinstance(member, ClassMethod):
                return self._new_method(member, declaration)
            return self._new_field(member, following)
        start, end = member.span
        if not member.dirty:
            return self.editor.slice(start, end)
        if isinstance(member, ClassField) and member.value_changed:
            value_node = member.origin.child_by_field_name("value")
            if value_node is not None:
                return (
                    self.editor.slice(member.code_start, value_node.start_byte)
                    + self.expression(member.value)
                    + self.editor.slice(code_end(value_node), end)
                )
            return self.editor.slice(member.code_start, end) + " = " + self.expression(member.value)
        return self.editor.slice(member.code_start, end)

    def _new_field(self, member: ClassField, following: str = "") -> str:
        text = " ".join(member.modifiers + [self.expression(member.key)])
        if member.value is not None:
            text += " = " + self.expression(member.value)
        trailing = member.comments.trailing if member.comments else ""
        if not trailing.lstrip(" \t").startswith(";"):
            if following.startswith(CONTINUATION_PREFIXES):
                text += ";"
            else:
                text += self.file.semicolon
        return text

    def _new_method(self, member: ClassMethod, declaration: ClassDeclaration) -> str:
        indent = declaration.member_indent
        unit = declaration.indent_unit
        head = " ".join(member.modifiers + [self.expression(member.key)])
        lines = [f"{head}() {{"]
        lines.extend(f"{indent}{unit}{statement}" for statement in member.statements)
        lines.append(f"{indent}}}")
        return self.file.newline.join(lines)

    def class_body(self, declaration: ClassDeclaration) -> str:
        newline = self.file.newline
        members = declaration.members
        texts = [""] * len(members)
        # Back to front, so a generated field knows what follows it.
        for index in reversed(range(len(members))):
            following = texts[index + 1] if index + 1 < len(members) else ""
            texts[index] = self.member(members[index], declaration, following)

        parts: List[str] = ["{", declaration.head]
        for member, text in zip(members, texts):
            if member.comments is not None:
                parts.append(member.comments.leading + text + member.comments.trailing)
                continue
            if not _ends_with_newline(parts):
                parts.append(newline)
            parts.append(declaration.member_indent + text + newline)
        parts.append(declaration.tail)
        parts.append("}")
        return "".join(parts)

    # Imports

    def named_imports(self, declaration: ImportDeclaration) -> str:
        names = []
        for specifier in declaration.specifiers:
            if specifier.origin is not None:
                names.append(self._node(specifier.origin))
            elif specifier.local != specifier.imported:
                names.append(f"{specifier.imported} as {specifier.local}")
            else:
                names.append(specifier.imported)
        if not names:
            return "{}"
        original = self._node(declaration.named) if declaration.named is not None else ""
        if "\n" in original:
            first = next((s.origin for s in declaration.specifiers if s.origin is not None), None)
            indent = self.file.line_indent(first.start_byte) if first is not None else "    "
            closing = self.file.line_indent(declaration.named.end_byte - 1)
            newline = self.file.newline
            return (
                "{" + newline + ("," + newline).join(indent + name for name in names)
                + f"{newline}{closing}}}"
            )
        return "{ " + ", ".join(names) + " }"


def _ends_with_newline(parts: List[str]) -> bool:
    for part in reversed(parts):
        if part:
            return part.endswith("\n")
    return False
