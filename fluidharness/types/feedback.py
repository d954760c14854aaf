"""Feedback and reputation data models."""

from dataclasses import dataclass, field
from typing import Any, NamedTuple


class FeedbackId(NamedTuple):
    """Feedback identity: (agent id, reviewer address, sequence index)."""

    agent_id: str
    reviewer: str
    index: int


@dataclass
class FeedbackDraft:
    """Unsigned feedback prepared before submission."""

    agent_id: str
    score: int
    tags: list[str] = field(default_factory=list)
    text: str | None = None
    capability: str | None = None
    name: str | None = None
    skill: str | None = None
    task: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    proof_of_payment: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    feedback_auth: str | None = None

    @property
    def tag1(self) -> str | None:
        return self.tags[0] if len(self.tags) > 0 else None

    @property
    def tag2(self) -> str | None:
        return self.tags[1] if len(self.tags) > 1 else None

    @property
    def tag3(self) -> str | None:
        return self.tags[2] if len(self.tags) > 2 else None


@dataclass
class Feedback:
    """Submitted feedback record."""

    id: FeedbackId
    reviewer: str
    score: int
    tags: list[str]
    text: str | None
    capability: str | None = None
    skill: str | None = None
    task: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0  # unix seconds


@dataclass
class ReputationSummary:
    """Aggregate reputation for an agent."""

    count: int
    average_score: float
