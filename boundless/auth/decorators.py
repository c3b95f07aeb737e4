"""Decorators for authenticated API routes."""

from functools import wraps

from flask import current_app, g, request

from boundless.errors import AuthenticationError


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def login_required(f=None):
    """Resolve the caller from the bearer token or fail with 401.

    Usage:
    @login_required
    def protected_view():
        ...

    The identity is stored on ``g.user``.
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            token = _bearer_token()
            if token is None:
                raise AuthenticationError()
            verifier = current_app.extensions["token_verifier"]
            try:
                g.user = verifier.verify(token)
            except ValueError as e:
                current_app.logger.warning(f"Rejected bearer token: {e}")
                raise AuthenticationError("Invalid or expired token") from e
            if not g.user.get("email"):
                raise AuthenticationError("Token carries no email claim")
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator
