"""Utility functions for hackathon judging and rewards."""

from __future__ import annotations

import datetime
import math
from collections import Counter
from collections.abc import Iterable
from typing import Any

from stellar_sdk import StrKey

from boundless.core.constants import (
    SUBMISSION_DISQUALIFIED,
    SUBMISSION_SHORTLISTED,
    SUBMISSION_SUBMITTED,
)

from .models import JudgingCriterion, Participant, PrizeTier

ORDINAL_SUFFIXES = ("st", "nd", "rd", "th")


def get_rank_suffix(rank: int) -> str:
    """Return the English ordinal suffix for a rank (1st, 2nd, 11th...)."""
    if 11 <= rank % 100 <= 13:  # noqa: PLR2004
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")


def _position_matches(position: str, rank: int) -> bool:
    rank_str = str(rank)
    with_suffix = f"{rank_str}{get_rank_suffix(rank)}"
    candidates = {rank_str, with_suffix} | {
        f"{rank_str}{suffix}" for suffix in ORDINAL_SUFFIXES
    }
    if position in candidates:
        return True
    # "1st Place", "2nd place prize", "3 - bronze"
    prefixes = candidates - {rank_str} | {f"{rank_str} "}
    return any(position.startswith(p) for p in prefixes)


def resolve_prize_tier(
    rank: int, prize_tiers: Iterable[PrizeTier] | None
) -> PrizeTier | None:
    """Find the first tier whose position names the given rank."""
    for tier in prize_tiers or []:
        position = str(tier.get("position") or "").lower().strip()
        if position and _position_matches(position, rank):
            return tier
    return None


def map_rank_to_prize_amount(
    rank: int, prize_tiers: Iterable[PrizeTier] | None
) -> float | None:
    """Map a rank to its configured prize amount.

    Returns None when no tier matches. None means "unconfigured" and must
    not be treated as a zero prize.
    """
    tier = resolve_prize_tier(rank, prize_tiers)
    if tier is None:
        return None
    return tier.get("amount")


def validate_stellar_address(address: Any) -> bool:
    """Check that an address is a valid Stellar ed25519 public key (G...)."""
    if not address or not isinstance(address, str):
        return False
    return StrKey.is_valid_ed25519_public_key(address)


def compute_weighted_score(
    scores: Iterable[dict[str, Any]], criteria: Iterable[JudgingCriterion]
) -> float:
    """Sum each score times its criterion weight percentage, to 2 places."""
    weights = {c.get("title"): float(c.get("weight", 0)) for c in criteria}
    total = 0.0
    for item in scores:
        weight = weights.get(item.get("criterionTitle"))
        if weight is not None:
            total += float(item["score"]) * weight / 100
    return round(total, 2)


def summarize_scores(weighted_scores: list[float]) -> dict[str, float | None]:
    """Average, min and max of weighted scores; None values when empty."""
    if not weighted_scores:
        return {"averageScore": None, "minScore": None, "maxScore": None}
    return {
        "averageScore": round(sum(weighted_scores) / len(weighted_scores), 2),
        "minScore": min(weighted_scores),
        "maxScore": max(weighted_scores),
    }


def build_participant_statistics(participants: Iterable[Participant]) -> dict[str, Any]:
    """Reduce participant records to counts and ratios in a single pass."""
    total = 0
    ranked = 0
    statuses: Counter[str] = Counter()
    types: Counter[str] = Counter()

    for participant in participants:
        total += 1
        types[participant.get("participationType") or "individual"] += 1
        if participant.get("rank") is not None:
            ranked += 1
        submission = participant.get("submission")
        if submission:
            statuses[submission.get("status") or SUBMISSION_SUBMITTED] += 1

    submissions = sum(statuses.values())
    return {
        "participantsCount": total,
        "submissionsCount": submissions,
        "submittedCount": statuses[SUBMISSION_SUBMITTED],
        "shortlistedCount": statuses[SUBMISSION_SHORTLISTED],
        "disqualifiedCount": statuses[SUBMISSION_DISQUALIFIED],
        "rankedCount": ranked,
        "teamCount": types["team"],
        "individualCount": types["individual"],
        "submissionRate": round(submissions / total * 100, 2) if total else 0,
    }


def format_timestamp(value: Any) -> str | None:
    """Render a Firestore timestamp or datetime as ISO-8601."""
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "to_datetime"):
        return value.to_datetime().isoformat()
    return str(value)


def utc_now() -> datetime.datetime:
    """Current time in UTC."""
    return datetime.datetime.now(datetime.timezone.utc)


def chunked(values: list[Any], size: int) -> list[list[Any]]:
    """Split values into lists of at most ``size`` items."""
    return [values[i : i + size] for i in range(0, len(values), size)]


def paginate(items: list[Any], page: int, limit: int) -> tuple[list[Any], dict[str, Any]]:
    """Slice one page out of items and describe where it sits."""
    total_items = len(items)
    total_pages = math.ceil(total_items / limit)
    start = (page - 1) * limit
    return items[start : start + limit], {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total_items,
        "itemsPerPage": limit,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
