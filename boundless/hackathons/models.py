"""Data models for the hackathons blueprint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, TypedDict

from boundless.core.constants import FIRESTORE_MAX_INTEGER
from boundless.core.types import FirestoreDocument
from boundless.errors import ValidationError


class PrizeTier(TypedDict, total=False):
    """A configured prize for a placement, e.g. position "1st Place"."""

    position: str
    amount: float
    currency: str
    description: str
    passMark: float


class JudgingCriterion(TypedDict, total=False):
    """A weighted judging criterion; weights sum to 100."""

    title: str
    weight: float
    description: str


class EscrowDetails(TypedDict, total=False):
    """Escrow state written by the chain integration."""

    isFunded: bool
    balance: Any
    milestones: list[dict[str, Any]]


class Hackathon(FirestoreDocument, total=False):
    """A hackathon document in Firestore."""

    organizationId: str
    title: str
    slug: str
    prizeTiers: list[PrizeTier]
    criteria: list[JudgingCriterion]
    escrowAddress: str
    contractId: str
    escrowDetails: EscrowDetails
    winnersAnnounced: bool
    winnersAnnouncedAt: Any
    winnersAnnouncement: str


class TeamMember(TypedDict, total=False):
    """A member of a participating team."""

    userId: str
    name: str
    role: str


class Submission(TypedDict, total=False):
    """The project a participant submitted."""

    projectName: str
    category: str
    description: str
    logo: str
    videoUrl: str
    introduction: str
    links: list[dict[str, Any]]
    status: str  # submitted/shortlisted/disqualified
    votes: int
    comments: int
    submissionDate: Any
    disqualificationReason: str
    reviewedBy: str
    reviewedAt: Any


class Participant(FirestoreDocument, total=False):
    """A registration for one hackathon, optionally with a submission."""

    hackathonId: str
    organizationId: str
    userId: str
    email: str
    name: str
    participationType: str  # individual/team
    teamId: str
    teamName: str
    teamMembers: list[TeamMember]
    submission: Submission
    rank: int
    registeredAt: Any


class CriterionScore(TypedDict):
    """One judge's score for one criterion."""

    criterionTitle: str
    score: float


class JudgingScore(FirestoreDocument, total=False):
    """One judge's grade for one submission."""

    submissionId: str
    judgeId: str
    judgeEmail: str
    hackathonId: str
    organizationId: str
    scores: list[CriterionScore]
    weightedScore: float
    notes: str


def _is_positive_int(value: Any) -> bool:
    # Firestore stores integers as signed 64-bit values.
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 < value <= FIRESTORE_MAX_INTEGER
    )


def _require_list(payload: Any, name: str) -> list[Any]:
    if not isinstance(payload, list) or not payload:
        raise ValidationError(f"{name.capitalize()} array is required and cannot be empty")
    return payload


@dataclass(frozen=True)
class RankAssignment:
    """A requested (participant, rank) pair."""

    participant_id: str
    rank: int

    @classmethod
    def from_payload(cls, item: Any) -> RankAssignment:
        """Build from a ``{participantId, rank}`` mapping."""
        if not isinstance(item, dict):
            raise ValidationError("Each rank entry must be an object")
        participant_id = item.get("participantId")
        rank = item.get("rank")
        if not isinstance(participant_id, str) or not participant_id:
            raise ValidationError("Each rank entry requires a participantId")
        if not _is_positive_int(rank):
            raise ValidationError(f"Rank must be a positive integer, got {rank!r}")
        return cls(participant_id=participant_id, rank=rank)

    @staticmethod
    def parse_batch(payload: Any) -> list[RankAssignment]:
        """Parse and validate a batch; ranks and participants must be unique."""
        items = [RankAssignment.from_payload(i) for i in _require_list(payload, "ranks")]
        seen_ranks: set[int] = set()
        seen_participants: set[str] = set()
        for item in items:
            if item.rank in seen_ranks:
                raise ValidationError(
                    f"Duplicate rank found: {item.rank}. Ranks must be unique."
                )
            if item.participant_id in seen_participants:
                raise ValidationError(
                    f"Duplicate participant ID found: {item.participant_id}"
                )
            seen_ranks.add(item.rank)
            seen_participants.add(item.participant_id)
        return items


@dataclass(frozen=True)
class WinnerMilestone:
    """A winner to be paid out through an escrow milestone."""

    participant_id: str
    rank: int
    wallet_address: str

    @classmethod
    def from_payload(cls, item: Any) -> WinnerMilestone:
        """Build from a ``{participantId, rank, walletAddress}`` mapping."""
        if not isinstance(item, dict):
            raise ValidationError("Each winner entry must be an object")
        participant_id = item.get("participantId")
        rank = item.get("rank")
        wallet_address = item.get("walletAddress")
        if not isinstance(participant_id, str) or not participant_id:
            raise ValidationError("Each winner entry requires a participantId")
        if not _is_positive_int(rank):
            raise ValidationError(f"Rank must be a positive integer, got {rank!r}")
        return cls(
            participant_id=participant_id,
            rank=rank,
            wallet_address=wallet_address if isinstance(wallet_address, str) else "",
        )

    @staticmethod
    def parse_batch(payload: Any) -> list[WinnerMilestone]:
        """Parse a non-empty winners list."""
        return [WinnerMilestone.from_payload(i) for i in _require_list(payload, "winners")]


@dataclass(frozen=True)
class AnnouncedWinner:
    """A submission announced at a rank."""

    submission_id: str
    rank: int

    @classmethod
    def from_payload(cls, item: Any) -> AnnouncedWinner:
        """Build from a ``{submissionId, rank}`` mapping."""
        if not isinstance(item, dict):
            raise ValidationError("Each winner entry must be an object")
        submission_id = item.get("submissionId")
        rank = item.get("rank")
        if not isinstance(submission_id, str) or not submission_id:
            raise ValidationError("Each winner entry requires a submissionId")
        if not _is_positive_int(rank):
            raise ValidationError(f"Rank must be a positive integer, got {rank!r}")
        return cls(submission_id=submission_id, rank=rank)

    @staticmethod
    def parse_batch(payload: Any) -> list[AnnouncedWinner]:
        """Parse a non-empty winners list."""
        return [AnnouncedWinner.from_payload(i) for i in _require_list(payload, "winners")]


@dataclass
class GradeSubmission:
    """A judge's scores for every criterion of a hackathon."""

    scores: list[CriterionScore] = field(default_factory=list)
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> GradeSubmission:
        """Build from a request body ``{scores: [...], notes}``."""
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object")
        scores = payload.get("scores")
        if not isinstance(scores, list):
            raise ValidationError("Scores must be an array")
        if not all(isinstance(s, dict) for s in scores):
            raise ValidationError("Each score must be an object")
        notes = payload.get("notes")
        return cls(
            scores=scores,
            notes=notes if isinstance(notes, str) and notes else None,
        )
