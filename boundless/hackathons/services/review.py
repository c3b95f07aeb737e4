"""Service layer for shortlisting and disqualifying submissions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from boundless.core.constants import (
    DEFAULT_FRONTEND_URL,
    PARTICIPANTS_COLLECTION,
    SUBMISSION_DISQUALIFIED,
    SUBMISSION_SHORTLISTED,
    SUBMISSION_SUBMITTED,
)
from boundless.errors import ValidationError

from ..models import Hackathon, Participant
from ..utils import format_timestamp, utc_now
from .hackathon_service import HackathonService

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from boundless.auth.tokens import Identity
    from boundless.utils import EmailSender


class ReviewService:
    """Toggles submission review states and notifies participants."""

    @staticmethod
    def _load_submission(
        db: Client, hackathon_id: str, org_id: str, participant_id: str, identity: Identity
    ) -> tuple[Hackathon, Participant]:
        hackathon = HackathonService.authorize(
            db, org_id, hackathon_id, identity, "review submissions"
        )
        participant = HackathonService.get_participant(
            db, participant_id, hackathon_id, org_id
        )
        if not participant.get("submission"):
            raise ValidationError("Participant has no submission to review")
        return hackathon, participant

    @staticmethod
    def _submission_view(participant: Participant) -> dict[str, Any]:
        submission = participant.get("submission") or {}
        return {
            "participantId": participant["id"],
            "projectName": submission.get("projectName"),
            "status": submission.get("status", SUBMISSION_SUBMITTED),
            "disqualificationReason": submission.get("disqualificationReason"),
            "reviewedBy": submission.get("reviewedBy"),
            "reviewedAt": format_timestamp(submission.get("reviewedAt")),
        }

    @staticmethod
    def _clear_fields(
        submission: dict[str, Any], changes: dict[str, Any], *fields: str
    ) -> None:
        """Delete review fields that are currently set on the submission."""
        for name in fields:
            if name in submission:
                changes[f"submission.{name}"] = firestore.DELETE_FIELD
                del submission[name]

    @staticmethod
    def shortlist_submission(
        db: Client,
        hackathon_id: str,
        org_id: str,
        participant_id: str,
        identity: Identity,
        email_sender: EmailSender | None = None,
    ) -> dict[str, Any]:
        """Shortlist a submission, or return a shortlisted one to submitted."""
        hackathon, participant = ReviewService._load_submission(
            db, hackathon_id, org_id, participant_id, identity
        )
        submission = participant["submission"]

        changes: dict[str, Any] = {}
        if submission.get("status") == SUBMISSION_SHORTLISTED:
            submission["status"] = SUBMISSION_SUBMITTED
            ReviewService._clear_fields(submission, changes, "reviewedBy", "reviewedAt")
        else:
            submission["status"] = SUBMISSION_SHORTLISTED
            submission["reviewedBy"] = identity["uid"]
            submission["reviewedAt"] = utc_now()
            changes["submission.reviewedBy"] = submission["reviewedBy"]
            changes["submission.reviewedAt"] = submission["reviewedAt"]
            ReviewService._clear_fields(submission, changes, "disqualificationReason")
        changes["submission.status"] = submission["status"]

        db.collection(PARTICIPANTS_COLLECTION).document(participant_id).update(changes)

        if submission["status"] == SUBMISSION_SHORTLISTED:
            ReviewService._notify(
                email_sender,
                participant,
                hackathon,
                subject=f"Submission shortlisted for {hackathon.get('title') or 'Hackathon'}",
                template="email/submission_shortlisted.html",
            )
        return ReviewService._submission_view(participant)

    @staticmethod
    def disqualify_submission(
        db: Client,
        hackathon_id: str,
        org_id: str,
        participant_id: str,
        identity: Identity,
        comment: str | None = None,
        email_sender: EmailSender | None = None,
    ) -> dict[str, Any]:
        """Disqualify a submission, or reinstate a disqualified one."""
        hackathon, participant = ReviewService._load_submission(
            db, hackathon_id, org_id, participant_id, identity
        )
        submission = participant["submission"]

        changes: dict[str, Any] = {}
        if submission.get("status") == SUBMISSION_DISQUALIFIED:
            submission["status"] = SUBMISSION_SUBMITTED
            ReviewService._clear_fields(
                submission, changes, "disqualificationReason", "reviewedBy", "reviewedAt"
            )
        else:
            submission["status"] = SUBMISSION_DISQUALIFIED
            submission["reviewedBy"] = identity["uid"]
            submission["reviewedAt"] = utc_now()
            changes["submission.reviewedBy"] = submission["reviewedBy"]
            changes["submission.reviewedAt"] = submission["reviewedAt"]
            if comment:
                submission["disqualificationReason"] = comment
                changes["submission.disqualificationReason"] = comment
            else:
                ReviewService._clear_fields(submission, changes, "disqualificationReason")
        changes["submission.status"] = submission["status"]

        db.collection(PARTICIPANTS_COLLECTION).document(participant_id).update(changes)

        if submission["status"] == SUBMISSION_DISQUALIFIED:
            ReviewService._notify(
                email_sender,
                participant,
                hackathon,
                subject=f"Submission disqualified for {hackathon.get('title') or 'Hackathon'}",
                template="email/submission_disqualified.html",
                reason=submission.get("disqualificationReason"),
            )
        return ReviewService._submission_view(participant)

    @staticmethod
    def _notify(
        email_sender: EmailSender | None,
        participant: Participant,
        hackathon: Hackathon,
        subject: str,
        template: str,
        **context: Any,
    ) -> None:
        """Email the participant; delivery problems never fail the review."""
        recipient = participant.get("email")
        if email_sender is None or not recipient:
            return
        base_url = current_app.config.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL
        try:
            email_sender.send(
                recipient,
                subject,
                template,
                participant=participant,
                hackathon=hackathon,
                hackathon_url=f"{base_url}/hackathons/{hackathon.get('slug') or hackathon['id']}",
                **context,
            )
        except Exception as e:
            current_app.logger.error(f"Review notification failed: {e}")
