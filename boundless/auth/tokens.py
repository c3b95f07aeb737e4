"""Bearer token verification."""

from __future__ import annotations

from typing import Any, Protocol, TypedDict

from firebase_admin import auth


class Identity(TypedDict, total=False):
    """The authenticated caller attached to ``g.user``."""

    uid: str
    email: str
    name: str


class TokenVerifier(Protocol):
    """Turns a bearer token into an identity, raising ValueError if invalid."""

    def verify(self, token: str) -> Identity: ...


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, check_revoked: bool = False) -> None:
        self.check_revoked = check_revoked

    def verify(self, token: str) -> Identity:
        """Decode the token and map its claims to an Identity."""
        try:
            decoded: dict[str, Any] = auth.verify_id_token(
                token, check_revoked=self.check_revoked
            )
        except (ValueError, auth.InvalidIdTokenError) as e:
            raise ValueError(str(e)) from e
        identity = Identity(uid=decoded["uid"], email=decoded.get("email", ""))
        if decoded.get("name"):
            identity["name"] = decoded["name"]
        return identity
