"""Shared response and document shapes."""

from __future__ import annotations

from typing import Any, Optional, TypedDict


class _DocumentId(TypedDict):
    id: str


class FirestoreDocument(_DocumentId, total=False):
    """Fields every stored document may carry; ``id`` is the document key."""

    createdAt: Any
    updatedAt: Any


class APIResponse(TypedDict):
    """Body of every successful JSON response."""

    success: bool
    message: str
    data: Optional[Any]


class ErrorResponse(TypedDict):
    """Body of every failed JSON response."""

    success: bool
    message: str
