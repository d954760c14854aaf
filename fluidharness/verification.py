"""
Reputation and search verification.

Three independent reads confirm that submitted feedback is visible: a
direct lookup, a filtered search and the aggregate reputation summary.
Each read may fail on its own without hiding the result of the others.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fluidharness.logging import get_logger
from fluidharness.types.feedback import Feedback, ReputationSummary

if TYPE_CHECKING:
    from fluidharness.client import FluidClient

T = TypeVar("T")

logger = get_logger("verification")


@dataclass
class CheckResult(Generic[T]):
    """Outcome of one advisory read."""

    name: str
    ok: bool
    value: T | None = None
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.ok


def run_check(name: str, fn: Callable[[], T]) -> CheckResult[T]:
    """
    Run a read, capturing any failure into the result.

    Args:
        name: Label used in log lines and reports
        fn: The read to perform

    Returns:
        CheckResult with the value, or with the error that was raised
    """
    try:
        value = fn()
    except Exception as e:
        logger.warning("%s failed: %s", name, e)
        return CheckResult(name=name, ok=False, error=e)
    return CheckResult(name=name, ok=True, value=value)


@dataclass
class VerificationReport:
    """Results of the three verification reads."""

    feedback: CheckResult[Feedback]
    search: CheckResult[list[Feedback]]
    summary: CheckResult[ReputationSummary]
    notes: list[str] = field(default_factory=list)

    @property
    def checks(self) -> list[CheckResult[Any]]:
        return [self.feedback, self.search, self.summary]

    @property
    def all_ok(self) -> bool:
        return all(check.ok for check in self.checks)

    @property
    def failures(self) -> list[CheckResult[Any]]:
        return [check for check in self.checks if not check.ok]


class ReputationVerifier:
    """
    Verify feedback through direct lookup, search and summary.

    Example:
        ```python
        verifier = ReputationVerifier(client)
        report = verifier.verify("11155111:1555", reviewer_address, 0, tag="data_analyst")
        if report.feedback.ok:
            print(report.feedback.value.score)
        ```
    """

    def __init__(self, client: "FluidClient") -> None:
        self.client = client

    def verify(
        self,
        agent_id: str,
        reviewer: str,
        index: int,
        tag: str | None = None,
        capability: str | None = None,
        skill: str | None = None,
    ) -> VerificationReport:
        """
        Run the three reads sequentially.

        Args:
            agent_id: Reviewed agent
            reviewer: Reviewer address
            index: Feedback index for the direct lookup
            tag: Tag filter for the search and summary (optional)
            capability: Capability filter for the search (optional)
            skill: Skill filter for the search (optional)

        Returns:
            VerificationReport; failures are recorded, never raised
        """
        feedback_client = self.client.feedback

        feedback = run_check(
            "feedback lookup",
            lambda: feedback_client.get(agent_id, reviewer, index),
        )
        if feedback.ok and feedback.value is not None:
            logger.info(
                "Feedback retrieved: score=%d tags=%s",
                feedback.value.score,
                ", ".join(feedback.value.tags) or "-",
            )

        search = run_check(
            "feedback search",
            lambda: feedback_client.search(
                agent_id,
                tags=[tag] if tag else None,
                capabilities=[capability] if capability else None,
                skills=[skill] if skill else None,
            ),
        )
        if search.ok and search.value is not None:
            logger.info("Found %d feedback entr%s", len(search.value), "y" if len(search.value) == 1 else "ies")

        summary = run_check(
            "reputation summary",
            lambda: feedback_client.reputation_summary(agent_id, tag),
        )
        if summary.ok and summary.value is not None:
            logger.info(
                "Reputation summary: count=%d average=%.2f",
                summary.value.count,
                summary.value.average_score,
            )

        report = VerificationReport(feedback=feedback, search=search, summary=summary)
        if feedback.ok and feedback.value is not None and search.ok and search.value is not None:
            if not any(item.id == feedback.value.id for item in search.value):
                report.notes.append("Feedback found by lookup but not yet in search results")
        return report
