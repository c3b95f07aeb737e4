from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, jsonify, make_response, request
from werkzeug.http import unquote_etag

from boundless.core.cache import winners_cache_key
from boundless.core.constants import DEFAULT_HACKATHON_CACHE_TTL
from boundless.core.types import APIResponse
from boundless.hackathons.services import HackathonService

from . import bp


@bp.route("/api/hackathons/<hackathon_id>/winners", methods=["GET"])
def get_winners(hackathon_id: str) -> Any:
    """Public list of announced winners, served from the cache when fresh."""
    cache = current_app.extensions["hackathon_cache"]
    key = winners_cache_key(hackathon_id)

    entry = cache.get(key)
    if entry is None:
        db = firestore.client()
        winners = HackathonService.get_public_winners(db, hackathon_id)
        ttl = current_app.config.get(
            "HACKATHON_CACHE_TTL", DEFAULT_HACKATHON_CACHE_TTL
        )
        entry = cache.set(key, winners, ttl)

    etag, _ = unquote_etag(entry.etag)
    if request.if_none_match.contains_weak(etag):
        response = make_response("", 304)
    else:
        response = make_response(
            jsonify(
                APIResponse(
                    success=True,
                    message="Winners retrieved successfully",
                    data=entry.data,
                )
            )
        )
    response.set_etag(etag)
    response.headers["Cache-Control"] = "public, max-age=60"
    return response


@bp.route("/health")
def health() -> Any:
    """Liveness check."""
    return "OK", 200
