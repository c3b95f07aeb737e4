"""Request identity resolution."""

from .decorators import login_required
from .tokens import FirebaseTokenVerifier, Identity, TokenVerifier

__all__ = ["FirebaseTokenVerifier", "Identity", "TokenVerifier", "login_required"]
