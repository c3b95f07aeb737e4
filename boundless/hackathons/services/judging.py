"""Service layer for judge grading."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from boundless.core.constants import (
    DEFAULT_PAGE_LIMIT,
    FIRESTORE_IN_QUERY_LIMIT,
    JUDGING_SCORES_COLLECTION,
    MAX_CRITERION_SCORE,
    MAX_PAGE_LIMIT,
    MIN_CRITERION_SCORE,
    PARTICIPANTS_COLLECTION,
    SUBMISSION_SHORTLISTED,
)
from boundless.errors import ValidationError

from ..models import GradeSubmission, JudgingCriterion, JudgingScore, Participant
from ..utils import (
    chunked,
    compute_weighted_score,
    format_timestamp,
    paginate,
    summarize_scores,
)
from .hackathon_service import HackathonService

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

    from boundless.auth.tokens import Identity


class JudgingService:
    """Records weighted grades and summarizes them per submission."""

    @staticmethod
    def _score_doc_id(submission_id: str, judge_id: str) -> str:
        # One grade per (submission, judge) pair, so regrading overwrites.
        return f"{submission_id}_{judge_id}"

    @staticmethod
    def validate_scores(
        scores: list[dict[str, Any]], criteria: list[JudgingCriterion]
    ) -> None:
        """Require exactly one in-range score per criterion title."""
        if len(scores) != len(criteria):
            raise ValidationError(
                f"Must provide scores for all {len(criteria)} criteria"
            )
        criteria_titles = {c.get("title") for c in criteria}
        submitted_titles = {s.get("criterionTitle") for s in scores}
        if len(criteria_titles) != len(submitted_titles):
            raise ValidationError("Criterion titles do not match hackathon criteria")
        for title in criteria_titles:
            if title not in submitted_titles:
                raise ValidationError(f"Missing score for criterion: {title}")

        for item in scores:
            value = item.get("score")
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not MIN_CRITERION_SCORE <= value <= MAX_CRITERION_SCORE
            ):
                raise ValidationError(
                    f"Score for {item.get('criterionTitle')} must be a number "
                    f"between {MIN_CRITERION_SCORE} and {MAX_CRITERION_SCORE}"
                )

    @staticmethod
    def _list_scores(db: Client, submission_id: str) -> list[JudgingScore]:
        docs = (
            db.collection(JUDGING_SCORES_COLLECTION)
            .where(filter=firestore.FieldFilter("submissionId", "==", submission_id))
            .stream()
        )
        scores = []
        for doc in docs:
            data = cast(JudgingScore, doc.to_dict() or {})
            data["id"] = doc.id
            scores.append(data)
        return scores

    @staticmethod
    def _score_view(score: JudgingScore) -> dict[str, Any]:
        return {
            "id": score["id"],
            "judgeId": score.get("judgeId"),
            "judgeEmail": score.get("judgeEmail"),
            "scores": score.get("scores", []),
            "weightedScore": score.get("weightedScore"),
            "notes": score.get("notes"),
            "judgedAt": format_timestamp(score.get("createdAt")),
            "updatedAt": format_timestamp(score.get("updatedAt")),
        }

    @staticmethod
    def _submission_view(participant: Participant) -> dict[str, Any]:
        submission = participant.get("submission") or {}
        return {
            "id": participant["id"],
            "projectName": submission.get("projectName"),
            "category": submission.get("category"),
            "description": submission.get("description"),
            "logo": submission.get("logo"),
            "videoUrl": submission.get("videoUrl"),
            "introduction": submission.get("introduction"),
            "links": submission.get("links"),
            "submissionDate": format_timestamp(submission.get("submissionDate")),
            "status": submission.get("status"),
        }

    @staticmethod
    def submit_grade(
        db: Client,
        hackathon_id: str,
        org_id: str,
        participant_id: str,
        identity: Identity,
        payload: Any,
    ) -> dict[str, Any]:
        """Create or replace the caller's grade for a shortlisted submission."""
        hackathon = HackathonService.authorize(
            db, org_id, hackathon_id, identity, "grade submissions"
        )
        criteria = hackathon.get("criteria") or []
        if not criteria:
            raise ValidationError("Hackathon has no judging criteria defined")

        participant = HackathonService.get_participant(
            db, participant_id, hackathon_id, org_id
        )
        submission = participant.get("submission")
        if not submission:
            raise ValidationError("Participant has no submission")
        if submission.get("status") != SUBMISSION_SHORTLISTED:
            raise ValidationError("Only shortlisted submissions can be graded")

        grade = GradeSubmission.from_payload(payload)
        JudgingService.validate_scores(grade.scores, criteria)
        weighted_score = compute_weighted_score(grade.scores, criteria)

        judge_id = identity["uid"]
        score_ref = db.collection(JUDGING_SCORES_COLLECTION).document(
            JudgingService._score_doc_id(participant_id, judge_id)
        )
        existing = cast("DocumentSnapshot", score_ref.get())

        record: dict[str, Any] = {
            "submissionId": participant_id,
            "judgeId": judge_id,
            "judgeEmail": identity.get("email"),
            "hackathonId": hackathon_id,
            "organizationId": org_id,
            "scores": [
                {"criterionTitle": s["criterionTitle"], "score": s["score"]}
                for s in grade.scores
            ],
            "weightedScore": weighted_score,
            "notes": grade.notes,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }
        if existing.exists:
            score_ref.set(record, merge=True)
        else:
            record["createdAt"] = firestore.SERVER_TIMESTAMP
            score_ref.set(record)

        all_scores = JudgingService._list_scores(db, participant_id)
        summary = summarize_scores(
            [float(s.get("weightedScore") or 0) for s in all_scores]
        )
        return {
            "updated": bool(existing.exists),
            "submission": JudgingService._submission_view(participant),
            "score": {"weightedScore": weighted_score, "scores": record["scores"]},
            "allScores": [JudgingService._score_view(s) for s in all_scores],
            "averageScore": summary["averageScore"]
            if summary["averageScore"] is not None
            else weighted_score,
        }

    @staticmethod
    def get_submission_scores(
        db: Client,
        hackathon_id: str,
        org_id: str,
        participant_id: str,
        identity: Identity,
    ) -> dict[str, Any]:
        """Every judge's grade for a submission with summary statistics."""
        HackathonService.authorize(db, org_id, hackathon_id, identity, "view scores")
        participant = HackathonService.get_participant(
            db, participant_id, hackathon_id, org_id
        )
        if not participant.get("submission"):
            raise ValidationError("Participant has no submission")

        scores = JudgingService._list_scores(db, participant_id)
        summary = summarize_scores(
            [float(s.get("weightedScore") or 0) for s in scores]
        )
        return {
            "submission": JudgingService._submission_view(participant),
            "scores": [JudgingService._score_view(s) for s in scores],
            "totalScores": len(scores),
            **summary,
        }

    @staticmethod
    def _scores_by_submission(
        db: Client, submission_ids: list[str]
    ) -> dict[str, list[JudgingScore]]:
        grouped: dict[str, list[JudgingScore]] = {sid: [] for sid in submission_ids}
        for chunk in chunked(submission_ids, FIRESTORE_IN_QUERY_LIMIT):
            docs = (
                db.collection(JUDGING_SCORES_COLLECTION)
                .where(filter=firestore.FieldFilter("submissionId", "in", chunk))
                .stream()
            )
            for doc in docs:
                data = cast(JudgingScore, doc.to_dict() or {})
                data["id"] = doc.id
                grouped.setdefault(data.get("submissionId", ""), []).append(data)
        return grouped

    @staticmethod
    def _list_shortlisted(
        db: Client, hackathon_id: str, org_id: str
    ) -> list[Participant]:
        """Shortlisted participants, most recently registered first."""
        docs = (
            db.collection(PARTICIPANTS_COLLECTION)
            .where(filter=firestore.FieldFilter("hackathonId", "==", hackathon_id))
            .where(
                filter=firestore.FieldFilter(
                    "submission.status", "==", SUBMISSION_SHORTLISTED
                )
            )
            .stream()
        )
        participants = []
        for doc in docs:
            data = cast(Participant, doc.to_dict() or {})
            if data.get("organizationId") != org_id:
                continue
            data["id"] = doc.id
            participants.append(data)

        participants.sort(key=lambda p: p["id"])
        participants.sort(
            key=lambda p: (
                p.get("registeredAt") is not None,
                p.get("registeredAt") or 0,
            ),
            reverse=True,
        )
        return participants

    @staticmethod
    def list_judging_submissions(
        db: Client,
        hackathon_id: str,
        org_id: str,
        identity: Identity,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> dict[str, Any]:
        """Page through shortlisted submissions with every judge's grade.

        Each entry carries the hackathon criteria so a judge can grade it
        directly, plus the average weighted score and how many judges have
        graded it so far.
        """
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if not 1 <= limit <= MAX_PAGE_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_LIMIT}")

        hackathon = HackathonService.authorize(
            db, org_id, hackathon_id, identity, "view judging submissions"
        )
        criteria = hackathon.get("criteria") or []

        participants, pagination = paginate(
            JudgingService._list_shortlisted(db, hackathon_id, org_id), page, limit
        )
        scores = JudgingService._scores_by_submission(
            db, [p["id"] for p in participants]
        )

        submissions = []
        for participant in participants:
            judged = scores.get(participant["id"], [])
            summary = summarize_scores(
                [float(s.get("weightedScore") or 0) for s in judged]
            )
            submissions.append({
                "participant": {
                    "id": participant["id"],
                    "userId": participant.get("userId"),
                    "name": participant.get("name"),
                    "email": participant.get("email"),
                    "participationType": participant.get(
                        "participationType", "individual"
                    ),
                    "teamId": participant.get("teamId"),
                    "teamName": participant.get("teamName"),
                },
                "submission": JudgingService._submission_view(participant),
                "criteria": criteria,
                "scores": [JudgingService._score_view(s) for s in judged],
                "averageScore": summary["averageScore"],
                "judgeCount": len(judged),
            })

        return {"submissions": submissions, "pagination": pagination}
