from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, g, request

from boundless.auth.decorators import login_required
from boundless.core.cache import hackathon_cache_prefix
from boundless.core.constants import DEFAULT_PAGE_LIMIT
from boundless.errors import ValidationError
from boundless.utils import api_response

from . import bp
from .services import HackathonService, JudgingService, ReviewService, RewardsService

HACKATHON_PREFIX = "/<org_id>/hackathons/<hackathon_id>"


def _json_body() -> dict[str, Any]:
    """Return the request body as a JSON object or fail with 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _page_args() -> tuple[int, int]:
    """Read page and limit from the query string or fail with 400."""
    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", DEFAULT_PAGE_LIMIT))
    except ValueError:
        raise ValidationError("Page and limit must be integers") from None
    return page, limit


def _invalidate_hackathon_views(hackathon_id: str) -> None:
    current_app.extensions["hackathon_cache"].invalidate_prefix(
        hackathon_cache_prefix(hackathon_id)
    )


@bp.route(f"{HACKATHON_PREFIX}/rewards/ranks", methods=["POST"])
@login_required
def assign_ranks(org_id: str, hackathon_id: str) -> Any:
    """Assign ranks to a batch of participants."""
    data = _json_body()
    db = firestore.client()
    result = RewardsService.assign_ranks(
        db, hackathon_id, org_id, g.user, data.get("ranks")
    )
    _invalidate_hackathon_views(hackathon_id)
    current_app.logger.info(
        f"{g.user['email']} assigned {result['updated']} ranks in hackathon {hackathon_id}"
    )
    return api_response(result, "Ranks assigned successfully")


@bp.route(f"{HACKATHON_PREFIX}/rewards/milestones", methods=["POST"])
@login_required
def create_winner_milestones(org_id: str, hackathon_id: str) -> Any:
    """Validate winners before escrow milestones are created."""
    data = _json_body()
    db = firestore.client()
    result = RewardsService.create_winner_milestones(
        db,
        hackathon_id,
        org_id,
        g.user,
        data.get("winners"),
        escrow_client=current_app.extensions["escrow_client"],
    )
    return api_response(result, result["message"])


@bp.route(f"{HACKATHON_PREFIX}/escrow", methods=["GET"])
@login_required
def get_escrow(org_id: str, hackathon_id: str) -> Any:
    """Escrow snapshot for the hackathon."""
    db = firestore.client()
    details = RewardsService.get_escrow_details(
        db,
        hackathon_id,
        org_id,
        g.user,
        escrow_client=current_app.extensions["escrow_client"],
    )
    return api_response(details, "Escrow details retrieved successfully")


@bp.route(f"{HACKATHON_PREFIX}/winners/announce", methods=["POST"])
@login_required
def announce_winners(org_id: str, hackathon_id: str) -> Any:
    """Publish the hackathon's winners."""
    data = _json_body()
    announcement = data.get("announcement")
    if announcement is not None and not isinstance(announcement, str):
        raise ValidationError("Announcement must be a string")

    db = firestore.client()
    result = RewardsService.announce_winners(
        db, hackathon_id, org_id, g.user, data.get("winners"), announcement
    )
    _invalidate_hackathon_views(hackathon_id)
    current_app.logger.info(
        f"{g.user['email']} announced winners for hackathon {hackathon_id}"
    )
    return api_response(result, "Winners announced successfully")


@bp.route(
    f"{HACKATHON_PREFIX}/submissions/<participant_id>/shortlist", methods=["POST"]
)
@login_required
def shortlist_submission(org_id: str, hackathon_id: str, participant_id: str) -> Any:
    """Toggle the shortlisted state of a submission."""
    db = firestore.client()
    submission = ReviewService.shortlist_submission(
        db,
        hackathon_id,
        org_id,
        participant_id,
        g.user,
        email_sender=current_app.extensions["email_sender"],
    )
    return api_response(submission, "Submission review updated")


@bp.route(
    f"{HACKATHON_PREFIX}/submissions/<participant_id>/disqualify", methods=["POST"]
)
@login_required
def disqualify_submission(
    org_id: str, hackathon_id: str, participant_id: str
) -> Any:
    """Toggle the disqualified state of a submission."""
    data = request.get_json(silent=True) or {}
    comment = data.get("comment") if isinstance(data, dict) else None
    if comment is not None and not isinstance(comment, str):
        raise ValidationError("Comment must be a string")

    db = firestore.client()
    submission = ReviewService.disqualify_submission(
        db,
        hackathon_id,
        org_id,
        participant_id,
        g.user,
        comment=comment,
        email_sender=current_app.extensions["email_sender"],
    )
    return api_response(submission, "Submission review updated")


@bp.route(f"{HACKATHON_PREFIX}/judging/submissions", methods=["GET"])
@login_required
def list_judging_submissions(org_id: str, hackathon_id: str) -> Any:
    """Shortlisted submissions awaiting grades, one page at a time."""
    page, limit = _page_args()
    db = firestore.client()
    result = JudgingService.list_judging_submissions(
        db, hackathon_id, org_id, g.user, page=page, limit=limit
    )
    return api_response(result, "Judging submissions retrieved successfully")


@bp.route(
    f"{HACKATHON_PREFIX}/judging/submissions/<participant_id>/grade",
    methods=["POST"],
)
@login_required
def grade_submission(org_id: str, hackathon_id: str, participant_id: str) -> Any:
    """Record the caller's grade for a shortlisted submission."""
    data = _json_body()
    db = firestore.client()
    result = JudgingService.submit_grade(
        db, hackathon_id, org_id, participant_id, g.user, data
    )
    message = (
        "Grade updated successfully" if result["updated"] else "Grade submitted successfully"
    )
    return api_response(result, message)


@bp.route(
    f"{HACKATHON_PREFIX}/judging/submissions/<participant_id>/scores",
    methods=["GET"],
)
@login_required
def get_submission_scores(
    org_id: str, hackathon_id: str, participant_id: str
) -> Any:
    """All grades recorded for a submission."""
    db = firestore.client()
    result = JudgingService.get_submission_scores(
        db, hackathon_id, org_id, participant_id, g.user
    )
    return api_response(result, "Scores retrieved successfully")


@bp.route(f"{HACKATHON_PREFIX}/statistics", methods=["GET"])
@login_required
def get_statistics(org_id: str, hackathon_id: str) -> Any:
    """Participant and submission counts."""
    db = firestore.client()
    stats = HackathonService.get_statistics(db, hackathon_id, org_id, g.user)
    return api_response(stats, "Statistics retrieved successfully")
