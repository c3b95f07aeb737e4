"""Service layer for hackathon and participant lookups."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from boundless.core.constants import (
    DEFAULT_PRIZE_CURRENCY,
    HACKATHONS_COLLECTION,
    PARTICIPANTS_COLLECTION,
)
from boundless.errors import NotFoundError, ValidationError
from boundless.organizations.services import OrganizationService, is_valid_document_id

from ..models import Hackathon, Participant
from ..utils import (
    build_participant_statistics,
    format_timestamp,
    resolve_prize_tier,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.transaction import Transaction

    from boundless.auth.tokens import Identity


class HackathonService:
    """Scoped reads shared by the judging and rewards workflows."""

    @staticmethod
    def get_hackathon(db: Client, hackathon_id: str) -> Hackathon | None:
        """Fetch a hackathon by id regardless of organization."""
        if not is_valid_document_id(hackathon_id):
            raise ValidationError("Invalid hackathon ID")
        doc = cast(
            "DocumentSnapshot",
            db.collection(HACKATHONS_COLLECTION).document(hackathon_id).get(),
        )
        if not doc.exists:
            return None
        data = cast(Hackathon, doc.to_dict() or {})
        data["id"] = doc.id
        return data

    @staticmethod
    def get_org_hackathon(db: Client, hackathon_id: str, org_id: str) -> Hackathon:
        """Fetch a hackathon that belongs to the organization or raise 404."""
        hackathon = HackathonService.get_hackathon(db, hackathon_id)
        if hackathon is None or hackathon.get("organizationId") != org_id:
            raise NotFoundError("Hackathon not found")
        return hackathon

    @staticmethod
    def authorize(
        db: Client, org_id: str, hackathon_id: str, identity: Identity, action: str
    ) -> Hackathon:
        """Check manager permissions, then load the scoped hackathon."""
        OrganizationService.require_manager(db, org_id, identity["email"], action)
        return HackathonService.get_org_hackathon(db, hackathon_id, org_id)

    @staticmethod
    def get_participants(
        db: Client,
        participant_ids: Iterable[str],
        hackathon_id: str,
        org_id: str,
        transaction: Transaction | None = None,
    ) -> dict[str, Participant]:
        """Resolve participant ids that belong to the hackathon and organization.

        Ids that are malformed, missing or out of scope are left out of the
        returned map, so callers compare its size with what they asked for.
        """
        valid_ids = [pid for pid in participant_ids if is_valid_document_id(pid)]
        if not valid_ids:
            return {}
        collection = db.collection(PARTICIPANTS_COLLECTION)
        refs = [collection.document(pid) for pid in valid_ids]
        docs = cast(list[Any], db.get_all(refs, transaction=transaction))

        participants: dict[str, Participant] = {}
        for doc in docs:
            if not doc.exists:
                continue
            data = cast(Participant, doc.to_dict() or {})
            if (
                data.get("hackathonId") != hackathon_id
                or data.get("organizationId") != org_id
            ):
                continue
            data["id"] = doc.id
            participants[doc.id] = data
        return participants

    @staticmethod
    def get_participant(
        db: Client, participant_id: str, hackathon_id: str, org_id: str
    ) -> Participant:
        """Fetch a single scoped participant or raise."""
        if not is_valid_document_id(participant_id):
            raise ValidationError("Invalid participant ID")
        found = HackathonService.get_participants(
            db, [participant_id], hackathon_id, org_id
        )
        if participant_id not in found:
            raise NotFoundError("Participant not found")
        return found[participant_id]

    @staticmethod
    def list_participants(db: Client, hackathon_id: str) -> list[Participant]:
        """Stream every participant registered for a hackathon."""
        docs = (
            db.collection(PARTICIPANTS_COLLECTION)
            .where(filter=firestore.FieldFilter("hackathonId", "==", hackathon_id))
            .stream()
        )
        participants = []
        for doc in docs:
            data = cast(Participant, doc.to_dict() or {})
            data["id"] = doc.id
            participants.append(data)
        return participants

    @staticmethod
    def get_statistics(
        db: Client, hackathon_id: str, org_id: str, identity: Identity
    ) -> dict[str, Any]:
        """Participant and submission counts for the organizer dashboard."""
        HackathonService.authorize(
            db, org_id, hackathon_id, identity, "view hackathon statistics"
        )
        participants = [
            p
            for p in HackathonService.list_participants(db, hackathon_id)
            if p.get("organizationId") == org_id
        ]
        return build_participant_statistics(participants)

    @staticmethod
    def get_public_winners(db: Client, hackathon_id: str) -> dict[str, Any]:
        """Announced winners ordered by rank with their prizes."""
        hackathon = HackathonService.get_hackathon(db, hackathon_id)
        if hackathon is None:
            raise NotFoundError("Hackathon not found")
        if not hackathon.get("winnersAnnounced"):
            raise NotFoundError("Winners have not been announced yet")

        tiers = hackathon.get("prizeTiers") or []
        ranked = sorted(
            (
                p
                for p in HackathonService.list_participants(db, hackathon_id)
                if p.get("rank") is not None and p.get("submission")
            ),
            key=lambda p: p["rank"],
        )

        winners = []
        for participant in ranked:
            tier = resolve_prize_tier(participant["rank"], tiers) or {}
            submission = participant.get("submission") or {}
            winners.append({
                "participantId": participant["id"],
                "rank": participant["rank"],
                "projectName": submission.get("projectName"),
                "participationType": participant.get("participationType", "individual"),
                "teamName": participant.get("teamName"),
                "name": participant.get("name"),
                "prizeAmount": tier.get("amount"),
                "currency": (tier.get("currency") or DEFAULT_PRIZE_CURRENCY) if tier else None,
            })

        return {
            "hackathonId": hackathon["id"],
            "title": hackathon.get("title"),
            "announcedAt": format_timestamp(hackathon.get("winnersAnnouncedAt")),
            "announcement": hackathon.get("winnersAnnouncement"),
            "winners": winners,
        }
