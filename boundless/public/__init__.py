"""The public blueprint."""

from flask import Blueprint

bp = Blueprint("public", __name__)

from . import routes  # noqa: E402

__all__ = ["routes"]
