"""Data models for organizations."""

from __future__ import annotations

from boundless.core.types import FirestoreDocument


class Organization(FirestoreDocument, total=False):
    """An organization document in Firestore."""

    name: str
    owner: str
    admins: list[str]
    members: list[str]
