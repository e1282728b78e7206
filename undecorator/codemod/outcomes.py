"""
Per-step outcomes accumulated while rewriting a file.

Every rewrite step reports what happened instead of short-circuiting, so one
unsupported member never prevents the remaining members from being migrated.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class StepStatus(Enum):
    """Result of a single rewrite step."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    UNTOUCHED = "untouched"


@dataclass(frozen=True)
class StepOutcome:
    step: str
    target: str
    status: StepStatus
    reason: str = ""

    @classmethod
    def applied(cls, step: str, target: str, reason: str = "") -> "StepOutcome":
        return cls(step, target, StepStatus.APPLIED, reason)

    @classmethod
    def skipped(cls, step: str, target: str, reason: str) -> "StepOutcome":
        return cls(step, target, StepStatus.SKIPPED, reason)

    @classmethod
    def untouched(cls, step: str, target: str, reason: str = "") -> "StepOutcome":
        return cls(step, target, StepStatus.UNTOUCHED, reason)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data
