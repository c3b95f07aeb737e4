"""Service layer for rank assignment, winner milestones and announcements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from boundless.core.constants import (
    FIRESTORE_IN_QUERY_LIMIT,
    HACKATHONS_COLLECTION,
    PARTICIPANTS_COLLECTION,
)
from boundless.errors import ConflictError, NotFoundError, ValidationError

from ..escrow import EscrowClient, EscrowState, StoredEscrowClient
from ..models import AnnouncedWinner, RankAssignment, WinnerMilestone
from ..utils import (
    chunked,
    map_rank_to_prize_amount,
    utc_now,
    validate_stellar_address,
)
from .hackathon_service import HackathonService

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.transaction import Transaction

    from boundless.auth.tokens import Identity


class RewardsService:
    """Handles the judging outcome: ranks, payouts and the public announcement."""

    @staticmethod
    def _apply_rank_assignments(
        transaction: Transaction,
        db: Client,
        hackathon_id: str,
        org_id: str,
        assignments: list[RankAssignment],
    ) -> int:
        """Move ranks to the batch participants inside one transaction.

        Firestore requires every read to happen before the first write, so
        both the batch participants and the current holders of the requested
        ranks are read up front.
        """
        batch_ids = [a.participant_id for a in assignments]
        participants = HackathonService.get_participants(
            db, batch_ids, hackathon_id, org_id, transaction=transaction
        )
        if len(participants) != len(batch_ids):
            raise ValidationError(
                "One or more participant IDs are invalid or do not belong to this hackathon"
            )

        collection = db.collection(PARTICIPANTS_COLLECTION)
        requested_ranks = sorted({a.rank for a in assignments})
        displaced = []
        for chunk in chunked(requested_ranks, FIRESTORE_IN_QUERY_LIMIT):
            holders = (
                collection.where(
                    filter=firestore.FieldFilter("hackathonId", "==", hackathon_id)
                )
                .where(filter=firestore.FieldFilter("rank", "in", chunk))
                .stream(transaction=transaction)
            )
            displaced.extend(doc.id for doc in holders if doc.id not in participants)

        for participant_id in displaced:
            transaction.update(
                collection.document(participant_id),
                {"rank": firestore.DELETE_FIELD, "updatedAt": firestore.SERVER_TIMESTAMP},
            )

        for assignment in assignments:
            transaction.update(
                collection.document(assignment.participant_id),
                {"rank": assignment.rank, "updatedAt": firestore.SERVER_TIMESTAMP},
            )
        return len(assignments)

    @staticmethod
    def assign_ranks(
        db: Client,
        hackathon_id: str,
        org_id: str,
        identity: Identity,
        ranks: Any,
    ) -> dict[str, int]:
        """Validate a batch of (participant, rank) pairs and commit it atomically.

        A rank already held by a participant outside the batch is cleared
        from that participant in the same transaction. Any failure rolls the
        whole batch back.
        """
        HackathonService.authorize(
            db, org_id, hackathon_id, identity, "assign ranks"
        )
        assignments = RankAssignment.parse_batch(ranks)

        apply_ranks = firestore.transactional(RewardsService._apply_rank_assignments)
        updated = apply_ranks(
            db.transaction(), db, hackathon_id, org_id, assignments
        )
        return {"updated": updated}

    @staticmethod
    def create_winner_milestones(
        db: Client,
        hackathon_id: str,
        org_id: str,
        identity: Identity,
        winners: Any,
        escrow_client: EscrowClient | None = None,
    ) -> dict[str, Any]:
        """Check that winners can be paid from the hackathon's escrow.

        Nothing is written and the chain is not called; the chain integration
        creates the milestones once this validation passes.
        """
        escrow_client = escrow_client or StoredEscrowClient()
        hackathon = HackathonService.authorize(
            db, org_id, hackathon_id, identity, "create milestones"
        )

        state = escrow_client.get_state(hackathon)
        if state is EscrowState.NO_ESCROW:
            raise ValidationError(
                "Escrow not found. Please create an escrow for this hackathon first."
            )
        if state is EscrowState.FUNDED:
            raise ConflictError(
                "Escrow is funded and cannot be updated. "
                "Milestones cannot be created for a funded escrow."
            )

        milestones = WinnerMilestone.parse_batch(winners)

        participant_ids = [m.participant_id for m in milestones]
        participants = HackathonService.get_participants(
            db, participant_ids, hackathon_id, org_id
        )
        if len(participants) != len(participant_ids):
            raise ValidationError(
                "One or more participant IDs are invalid or do not belong to this hackathon"
            )

        seen_wallets: set[str] = set()
        for milestone in milestones:
            if not validate_stellar_address(milestone.wallet_address):
                raise ValidationError(
                    f"Invalid Stellar wallet address: {milestone.wallet_address}"
                )
            if milestone.wallet_address in seen_wallets:
                raise ValidationError(
                    f"Duplicate wallet address found: {milestone.wallet_address}. "
                    "Each winner must have a unique wallet address."
                )
            seen_wallets.add(milestone.wallet_address)

        prize_tiers = hackathon.get("prizeTiers") or []
        if not prize_tiers:
            raise ValidationError("Hackathon has no prize tiers configured")

        for milestone in milestones:
            if map_rank_to_prize_amount(milestone.rank, prize_tiers) is None:
                raise ValidationError(
                    f"No prize tier found for rank {milestone.rank}. "
                    "Please configure prize tiers for this hackathon."
                )

        for milestone in milestones:
            participant = participants.get(milestone.participant_id)
            if participant is None or participant.get("rank") != milestone.rank:
                raise ValidationError(
                    f"Participant {milestone.participant_id} does not have rank "
                    f"{milestone.rank} assigned. Please assign ranks first."
                )

        return {
            "milestonesCreated": len(milestones),
            "message": (
                "Winner data validated successfully. "
                "Milestones will be created by the escrow integration."
            ),
        }

    @staticmethod
    def get_escrow_details(
        db: Client,
        hackathon_id: str,
        org_id: str,
        identity: Identity,
        escrow_client: EscrowClient | None = None,
    ) -> dict[str, Any]:
        """Snapshot of the hackathon's escrow for the organizer."""
        escrow_client = escrow_client or StoredEscrowClient()
        hackathon = HackathonService.authorize(
            db, org_id, hackathon_id, identity, "view escrow details"
        )
        details = escrow_client.get_details(hackathon)
        if details is None:
            raise NotFoundError("Escrow not found for this hackathon")
        return details

    @staticmethod
    def announce_winners(
        db: Client,
        hackathon_id: str,
        org_id: str,
        identity: Identity,
        winners: Any,
        announcement: str | None = None,
    ) -> dict[str, str]:
        """Publish the winners once every announced rank matches the stored one."""
        HackathonService.authorize(
            db, org_id, hackathon_id, identity, "announce winners"
        )
        announced = AnnouncedWinner.parse_batch(winners)

        submission_ids = [w.submission_id for w in announced]
        participants = {
            pid: p
            for pid, p in HackathonService.get_participants(
                db, submission_ids, hackathon_id, org_id
            ).items()
            if p.get("submission")
        }
        if len(participants) != len(submission_ids):
            raise ValidationError(
                "One or more submission IDs are invalid or do not belong to this hackathon"
            )

        for winner in announced:
            participant = participants.get(winner.submission_id)
            if participant is None:
                raise ValidationError(
                    f"Submission {winner.submission_id} not found or invalid"
                )
            if participant.get("rank") != winner.rank:
                raise ValidationError(
                    f"Submission {winner.submission_id} does not have rank "
                    f"{winner.rank} assigned"
                )

        announced_at = utc_now()
        update: dict[str, Any] = {
            "winnersAnnounced": True,
            "winnersAnnouncedAt": announced_at,
        }
        if announcement:
            update["winnersAnnouncement"] = announcement
        db.collection(HACKATHONS_COLLECTION).document(hackathon_id).update(update)

        return {"announcedAt": announced_at.isoformat()}
