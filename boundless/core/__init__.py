"""Core module for the boundless application."""

from .cache import CacheEntry, HackathonCache
from .types import APIResponse, ErrorResponse, FirestoreDocument

__all__ = [
    "APIResponse",
    "CacheEntry",
    "ErrorResponse",
    "FirestoreDocument",
    "HackathonCache",
]
