"""Tests for ReviewService."""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

from firebase_admin import firestore

from boundless.errors import ValidationError
from boundless.hackathons.services import HackathonService, ReviewService
from boundless.utils import EmailError
from tests.mock_utils import (
    HACKATHON_ID,
    ORG_ID,
    OWNER,
    FakeEmailSender,
    make_test_app,
)

HACKATHON = {
    "id": HACKATHON_ID,
    "organizationId": ORG_ID,
    "title": "Soroban Sprint",
    "slug": "soroban-sprint",
}


def _participant(status="submitted", **submission):
    return {
        "id": "alice",
        "hackathonId": HACKATHON_ID,
        "organizationId": ORG_ID,
        "email": "alice@example.com",
        "name": "Alice",
        "submission": {"projectName": "Lumen Lens", "status": status, **submission},
    }


class ReviewServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app = make_test_app(FRONTEND_URL="https://app.example.com")
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.addCleanup(self.ctx.pop)

        self.db = MagicMock()
        self.doc_ref = self.db.collection.return_value.document.return_value
        self.sender = FakeEmailSender()

        authorize = patch.object(HackathonService, "authorize", return_value=HACKATHON)
        self.mock_authorize = authorize.start()
        self.addCleanup(authorize.stop)

    def _with_participant(self, participant):
        patcher = patch.object(
            HackathonService, "get_participant", return_value=participant
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_shortlist_submitted(self) -> None:
        self._with_participant(_participant())

        view = ReviewService.shortlist_submission(
            self.db, HACKATHON_ID, ORG_ID, "alice", OWNER, email_sender=self.sender
        )

        self.assertEqual(view["status"], "shortlisted")
        self.assertEqual(view["reviewedBy"], OWNER["uid"])
        self.assertIsNotNone(view["reviewedAt"])
        changes = self.doc_ref.update.call_args[0][0]
        self.assertEqual(changes["submission.status"], "shortlisted")
        self.assertNotIn("submission.disqualificationReason", changes)
        self.mock_authorize.assert_called_once_with(
            self.db, ORG_ID, HACKATHON_ID, OWNER, "review submissions"
        )

        self.assertEqual(len(self.sender.sent), 1)
        email = self.sender.sent[0]
        self.assertEqual(email["to"], "alice@example.com")
        self.assertEqual(email["template"], "email/submission_shortlisted.html")
        self.assertEqual(
            email["context"]["hackathon_url"],
            "https://app.example.com/hackathons/soroban-sprint",
        )

    def test_shortlist_clears_previous_disqualification(self) -> None:
        self._with_participant(
            _participant("disqualified", disqualificationReason="Late")
        )

        view = ReviewService.shortlist_submission(
            self.db, HACKATHON_ID, ORG_ID, "alice", OWNER, email_sender=self.sender
        )

        self.assertEqual(view["status"], "shortlisted")
        self.assertIsNone(view["disqualificationReason"])
        changes = self.doc_ref.update.call_args[0][0]
        self.assertIs(
            changes["submission.disqualificationReason"], firestore.DELETE_FIELD
        )

    def test_shortlist_toggles_back_without_email(self) -> None:
        self._with_participant(_participant("shortlisted", reviewedBy="someone"))

        view = ReviewService.shortlist_submission(
            self.db, HACKATHON_ID, ORG_ID, "alice", OWNER, email_sender=self.sender
        )

        self.assertEqual(view["status"], "submitted")
        self.assertIsNone(view["reviewedBy"])
        changes = self.doc_ref.update.call_args[0][0]
        self.assertEqual(changes["submission.status"], "submitted")
        self.assertIs(changes["submission.reviewedBy"], firestore.DELETE_FIELD)
        self.assertEqual(self.sender.sent, [])

    def test_disqualify_with_reason(self) -> None:
        self._with_participant(_participant())

        view = ReviewService.disqualify_submission(
            self.db,
            HACKATHON_ID,
            ORG_ID,
            "alice",
            OWNER,
            comment="Plagiarized code",
            email_sender=self.sender,
        )

        self.assertEqual(view["status"], "disqualified")
        self.assertEqual(view["disqualificationReason"], "Plagiarized code")
        changes = self.doc_ref.update.call_args[0][0]
        self.assertEqual(changes["submission.disqualificationReason"], "Plagiarized code")
        self.assertEqual(self.sender.sent[0]["context"]["reason"], "Plagiarized code")
        self.assertEqual(
            self.sender.sent[0]["template"], "email/submission_disqualified.html"
        )

    def test_disqualify_toggles_back(self) -> None:
        self._with_participant(
            _participant("disqualified", disqualificationReason="Late")
        )

        view = ReviewService.disqualify_submission(
            self.db, HACKATHON_ID, ORG_ID, "alice", OWNER, email_sender=self.sender
        )

        self.assertEqual(view["status"], "submitted")
        self.assertIsNone(view["disqualificationReason"])
        changes = self.doc_ref.update.call_args[0][0]
        self.assertIs(
            changes["submission.disqualificationReason"], firestore.DELETE_FIELD
        )
        self.assertEqual(self.sender.sent, [])

    def test_email_failure_does_not_fail_review(self) -> None:
        self._with_participant(_participant())
        sender = FakeEmailSender(error=EmailError("SMTP down"))

        with self.assertLogs(self.app.logger, level="ERROR") as logs:
            view = ReviewService.shortlist_submission(
                self.db, HACKATHON_ID, ORG_ID, "alice", OWNER, email_sender=sender
            )

        self.assertEqual(view["status"], "shortlisted")
        self.doc_ref.update.assert_called_once()
        self.assertIn("SMTP down", logs.output[0])

    def test_unexpected_sender_error_does_not_fail_review(self) -> None:
        self._with_participant(_participant())
        sender = FakeEmailSender(error=RuntimeError("template exploded"))

        with self.assertLogs(self.app.logger, level="ERROR") as logs:
            view = ReviewService.disqualify_submission(
                self.db,
                HACKATHON_ID,
                ORG_ID,
                "alice",
                OWNER,
                comment="Late",
                email_sender=sender,
            )

        self.assertEqual(view["status"], "disqualified")
        self.doc_ref.update.assert_called_once()
        self.assertIn("template exploded", logs.output[0])

    def test_participant_without_submission(self) -> None:
        participant = _participant()
        del participant["submission"]
        self._with_participant(participant)

        with self.assertRaises(ValidationError):
            ReviewService.shortlist_submission(
                self.db, HACKATHON_ID, ORG_ID, "alice", OWNER
            )
        self.doc_ref.update.assert_not_called()


if __name__ == "__main__":
    unittest.main()
