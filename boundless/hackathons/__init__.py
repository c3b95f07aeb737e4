"""The hackathons blueprint."""

from flask import Blueprint

bp = Blueprint("hackathons", __name__, url_prefix="/api/organizations")

from . import routes  # noqa: E402

__all__ = ["routes"]
