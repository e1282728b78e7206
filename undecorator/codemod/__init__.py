"""
The undecorate rewrite: import resolution, legacy-call conversion, member
rewriting and constructor synthesis.
"""

from .diagnostics import Diagnostic, DiagnosticCategory, Diagnostics
from .outcomes import StepOutcome, StepStatus
from .pipeline import TransformResult, TransformStatus, UndecoratePipeline, transform_source

__all__ = [
    "Diagnostic",
    "DiagnosticCategory",
    "Diagnostics",
    "StepOutcome",
    "StepStatus",
    "TransformResult",
    "TransformStatus",
    "UndecoratePipeline",
    "transform_source",
]
