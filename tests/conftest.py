"""Shared fixtures for the undecorator test suite."""

from textwrap import dedent

import pytest

from undecorator.codemod.context import CodemodContext
from undecorator.codemod.imports import ImportResolver
from undecorator.codemod.pipeline import transform_source
from undecorator.config import TransformOptions
from undecorator.syntax.reader import read_source_file


def source(text: str) -> str:
    """Dedent a triple-quoted source snippet."""
    return dedent(text).lstrip("\n")


@pytest.fixture
def transform():
    """Run the full rewrite on a dedented snippet."""

    def _transform(text, path="store.ts", ignore_imports=False):
        return transform_source(path, source(text), TransformOptions(ignore_imports=ignore_imports))

    return _transform


@pytest.fixture
def make_context():
    """Parse a snippet and build a context with the import scope resolved."""

    def _make_context(text, path="store.ts", ignore_imports=False):
        context = CodemodContext(
            read_source_file(path, source(text)),
            TransformOptions(ignore_imports=ignore_imports),
        )
        ImportResolver(context).resolve()
        return context

    return _make_context
