"""Feedback and reputation resource client."""

from typing import TYPE_CHECKING, Any

from fluidharness.logging import get_logger, log_signing_operation
from fluidharness.types.feedback import Feedback, FeedbackDraft, ReputationSummary

if TYPE_CHECKING:
    from fluidharness.sdk import AgentSDK
    from fluidharness.signers import SignerSet

logger = get_logger("feedback")


class FeedbackClient:
    """Client for feedback submission and reputation reads."""

    def __init__(self, sdk: "AgentSDK", signers: "SignerSet") -> None:
        """
        Initialize the feedback client.

        Args:
            sdk: SDK facade
            signers: Configured signing identities
        """
        self.sdk = sdk
        self.signers = signers

    def prepare(
        self,
        agent_id: str,
        score: int,
        tags: list[str] | None = None,
        text: str | None = None,
        capability: str | None = None,
        name: str | None = None,
        skill: str | None = None,
        task: str | None = None,
        context: dict[str, Any] | None = None,
        proof_of_payment: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> FeedbackDraft:
        """
        Prepare a feedback draft. Nothing is submitted.

        Args:
            agent_id: Agent being reviewed ("chainId:tokenId")
            score: Score from 1 to 5
            tags: Up to three tags

        Returns:
            FeedbackDraft carrying the SDK's authorization token

        Raises:
            ValidationError: If the SDK rejects the values (e.g. score out of range)
        """
        draft = self.sdk.prepare_feedback(
            agent_id,
            score,
            tags=tags,
            text=text,
            capability=capability,
            name=name,
            skill=skill,
            task=task,
            context=context,
            proof_of_payment=proof_of_payment,
            extra=extra,
        )
        logger.info("Feedback prepared for %s (score %d)", agent_id, draft.score)
        return draft

    def give(self, agent_id: str, draft: FeedbackDraft) -> Feedback:
        """
        Submit a prepared draft with the reviewer identity.

        The reviewer is resolved before anything reaches the SDK, so a missing
        second wallet or a reviewer that owns the agent never costs a
        transaction.

        Returns:
            The submitted Feedback record

        Raises:
            ConfigurationError: If FEEDBACK_PRIVATE_KEY is not set
            SelfFeedbackError: If the reviewer is the agent owner
        """
        reviewer = self.signers.require_reviewer()
        log_signing_operation("give_feedback", reviewer.address, agent_id)
        feedback = self.sdk.give_feedback(agent_id, draft, draft.feedback_auth, reviewer)
        logger.info(
            "Feedback submitted: agent=%s reviewer=%s index=%d",
            agent_id,
            feedback.reviewer,
            feedback.id.index,
        )
        return feedback

    def get(self, agent_id: str, reviewer: str, index: int) -> Feedback:
        return self.sdk.get_feedback(agent_id, reviewer, index)

    def search(
        self,
        agent_id: str,
        tags: list[str] | None = None,
        capabilities: list[str] | None = None,
        skills: list[str] | None = None,
        min_score: int | None = None,
        max_score: int | None = None,
    ) -> list[Feedback]:
        """Search indexed feedback for an agent."""
        return self.sdk.search_feedback(
            agent_id,
            tags=tags,
            capabilities=capabilities,
            skills=skills,
            min_score=min_score,
            max_score=max_score,
        )

    def reputation_summary(self, agent_id: str, tag: str | None = None) -> ReputationSummary:
        return self.sdk.get_reputation_summary(agent_id, tag)
