"""
Value objects for variance analysis.

Responsibility:
    Closed workflow enums (status, root cause), grouping dimensions, the
    significance thresholds and the comment value object.  Everything here is
    immutable and hashable.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Imported by every other layer.

Invariants enforced:
    - Percent variance is 0 when the base is 0, never NaN or Infinity.
    - Significance is an OR rule: either threshold alone flags a variance.
    - Thresholds are finite and non-negative.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class VarianceStatus(str, Enum):
    """Workflow state of a variance line."""

    NEW = "new"
    INVESTIGATING = "investigating"
    EXPLAINED = "explained"
    CLOSED = "closed"

    @property
    def is_resolved(self) -> bool:
        """Explained and closed variances no longer need attention."""
        return self in (VarianceStatus.EXPLAINED, VarianceStatus.CLOSED)

    @property
    def label(self) -> str:
        return self.value.capitalize()


class RootCause(str, Enum):
    """Why a variance happened. UNTAGGED means nobody has said yet."""

    TIMING = "timing"
    VOLUME = "volume"
    PRICE = "price"
    MIX = "mix"
    ONE_TIME = "one-time"
    FX = "fx"
    OTHER = "other"
    UNTAGGED = ""

    @property
    def label(self) -> str:
        if self is RootCause.UNTAGGED:
            return "Untagged"
        if self is RootCause.FX:
            return "FX"
        return self.value.capitalize()


class GroupBy(str, Enum):
    """Dimension used to roll records up."""

    NONE = "none"
    COST_CENTER = "cost_center"
    GL_ACCOUNT = "gl_account"


def compute_percent_variance(dollar_variance: float, base: float) -> float:
    """Variance as a percentage of ``base``; 0 when the base is 0."""
    if base == 0:
        return 0.0
    return dollar_variance / base * 100


@dataclass(frozen=True)
class VarianceThresholds:
    """
    Tolerance for flagging a variance as significant.

    A variance is significant when ``abs(percent) > percent`` OR
    ``abs(dollars) > dollar``.  Both comparisons are strict.
    """

    percent: float = 10.0
    dollar: float = 50000.0

    def __post_init__(self) -> None:
        for name in ("percent", "dollar"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"threshold {name} must be a number, got {type(value).__name__}")
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"threshold {name} must be a finite, non-negative number: {value}")
            object.__setattr__(self, name, float(value))

    def is_significant(self, dollar_variance: float, percent_variance: float) -> bool:
        return abs(percent_variance) > self.percent or abs(dollar_variance) > self.dollar

    def to_dict(self) -> dict[str, float]:
        return {"percent": self.percent, "dollar": self.dollar}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VarianceThresholds:
        defaults = cls()
        return cls(
            percent=data.get("percent", defaults.percent),
            dollar=data.get("dollar", defaults.dollar),
        )


@dataclass(frozen=True)
class Comment:
    """One entry in a variance's discussion thread."""

    author: str
    text: str
    timestamp: datetime
    comment_id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": str(self.comment_id),
            "author": self.author,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        return cls(
            comment_id=UUID(data["id"]) if data.get("id") else uuid4(),
            author=data.get("author", ""),
            text=data["text"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )
