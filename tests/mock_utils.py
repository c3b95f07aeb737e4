"""Mock utilities for Firestore, transactions and app capabilities."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, Optional

from firebase_admin import firestore
from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference

from boundless import create_app
from boundless.hackathons.escrow import EscrowState

ORG_ID = "org1"
HACKATHON_ID = "hack1"
OWNER_EMAIL = "owner@example.com"
ADMIN_EMAIL = "admin@example.com"
MEMBER_EMAIL = "member@example.com"
OWNER = {"uid": "owner-uid", "email": OWNER_EMAIL}
ADMIN = {"uid": "admin-uid", "email": ADMIN_EMAIL}
MEMBER = {"uid": "member-uid", "email": MEMBER_EMAIL}
OUTSIDER = {"uid": "outsider-uid", "email": "outsider@example.com"}


class MockTransaction:
    """Buffers transactional writes and applies them only on commit."""

    def __init__(self) -> None:
        self.updates: list[tuple[Any, dict[str, Any]]] = []
        self.committed = False

    def update(self, ref: Any, data: dict[str, Any]) -> None:
        self.updates.append((ref, data))

    def commit(self) -> None:
        for ref, data in self.updates:
            current = ref.get().to_dict() or {}
            for key, value in data.items():
                if value is firestore.DELETE_FIELD:
                    current.pop(key, None)
                else:
                    current[key] = value
            ref.set(current)
        self.committed = True

    def rollback(self) -> None:
        self.updates = []


def mock_transactional(func: Callable[..., Any]) -> Callable[..., Any]:
    """Stand-in for ``firestore.transactional``: commit on success only."""

    @functools.wraps(func)
    def wrapper(transaction: MockTransaction, *args: Any, **kwargs: Any) -> Any:
        try:
            result = func(transaction, *args, **kwargs)
        except Exception:
            transaction.rollback()
            raise
        transaction.commit()
        return result

    return wrapper


class MockFirestoreBuilder:
    """Builder to modularize mockfirestore patching."""

    @staticmethod
    def patch_db_read() -> None:
        """Support FieldFilter, reference equality and transaction kwargs."""

        def collection_where(
            self: Any,
            field_path: Optional[str] = None,
            op_string: Optional[str] = None,
            value: Any = None,
            filter: Any = None,
        ) -> Any:
            if filter:
                return self._where(filter.field_path, filter.op_string, filter.value)
            return self._where(field_path, op_string, value)

        if not hasattr(CollectionReference, "_where"):
            CollectionReference._where = CollectionReference.where
            CollectionReference.where = collection_where

        def query_where(
            self: Any,
            field_path: Optional[str] = None,
            op_string: Optional[str] = None,
            value: Any = None,
            filter: Any = None,
        ) -> Any:
            if filter:
                return self._where(filter.field_path, filter.op_string, filter.value)
            return self._where(field_path, op_string, value)

        if not hasattr(Query, "_where"):
            Query._where = Query.where
            Query.where = query_where

        def doc_ref_eq(self: Any, other: Any) -> bool:
            if not isinstance(other, DocumentReference):
                return False
            return self._path == other._path

        if not hasattr(DocumentReference, "_orig_eq"):
            DocumentReference._orig_eq = DocumentReference.__eq__
            DocumentReference.__eq__ = doc_ref_eq
            DocumentReference.__hash__ = lambda self: hash(tuple(self._path))

        if not hasattr(DocumentReference, "_orig_get"):
            DocumentReference._orig_get = DocumentReference.get

            def doc_ref_get(self: Any, transaction: Any = None) -> Any:
                return self._orig_get()

            DocumentReference.get = doc_ref_get

        for cls in (CollectionReference, Query):
            if "_orig_stream" not in cls.__dict__:
                cls._orig_stream = cls.stream

                def stream(self: Any, transaction: Any = None) -> Any:
                    return self._orig_stream()

                cls.stream = stream

        def get_all(
            self: Any,
            references: Any,
            field_paths: Any = None,
            transaction: Any = None,
        ) -> list[Any]:
            return [ref.get() for ref in references]

        MockFirestore.get_all = get_all
        MockFirestore.transaction = lambda self, **kwargs: MockTransaction()


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore."""
    MockFirestoreBuilder.patch_db_read()


def seed_hackathon(db: MockFirestore, **overrides: Any) -> dict[str, Any]:
    """Create the standard organization and hackathon used across tests."""
    db.collection("organizations").document(ORG_ID).set(
        {
            "name": "Stellar Builders",
            "owner": OWNER_EMAIL,
            "admins": [ADMIN_EMAIL],
            "members": [MEMBER_EMAIL],
        }
    )
    hackathon = {
        "organizationId": ORG_ID,
        "title": "Soroban Sprint",
        "slug": "soroban-sprint",
        "prizeTiers": [
            {"position": "1st Place", "amount": 5000, "currency": "USDC"},
            {"position": "2nd Place", "amount": 2500, "currency": "USDC"},
            {"position": "3rd Place", "amount": 1000},
        ],
        "criteria": [
            {"title": "Innovation", "weight": 40},
            {"title": "Execution", "weight": 60},
        ],
    }
    hackathon.update(overrides)
    db.collection("hackathons").document(HACKATHON_ID).set(hackathon)
    return hackathon


def seed_participant(
    db: MockFirestore,
    participant_id: str,
    submission: Optional[dict[str, Any]] = None,
    **fields: Any,
) -> dict[str, Any]:
    """Register a participant, with a submitted project unless told otherwise."""
    data: dict[str, Any] = {
        "hackathonId": HACKATHON_ID,
        "organizationId": ORG_ID,
        "userId": f"user-{participant_id}",
        "email": f"{participant_id}@example.com",
        "name": participant_id.title(),
        "participationType": "individual",
        "submission": submission
        if submission is not None
        else {"projectName": f"Project {participant_id}", "status": "submitted"},
    }
    data.update(fields)
    db.collection("participants").document(participant_id).set(data)
    return data


class FakeTokenVerifier:
    """Maps bearer tokens to identities."""

    def __init__(self, tokens: Optional[dict[str, dict[str, Any]]] = None) -> None:
        self.tokens = tokens or {}

    def verify(self, token: str) -> dict[str, Any]:
        if token not in self.tokens:
            raise ValueError("Token not recognized")
        return dict(self.tokens[token])


class FakeEmailSender:
    """Records sent emails instead of delivering them."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.error = error

    def send(self, to: str, subject: str, template: str, **context: Any) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {"to": to, "subject": subject, "template": template, "context": context}
        )


class FakeEscrowClient:
    """Escrow reader that always reports a fixed state."""

    def __init__(
        self,
        state: EscrowState = EscrowState.UNFUNDED,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.state = state
        self.details = details

    def get_state(self, hackathon: Any) -> EscrowState:
        return self.state

    def get_details(self, hackathon: Any) -> Optional[dict[str, Any]]:
        return self.details


class FakeClock:
    """Manually advanced clock for cache expiry."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_test_app(**config: Any) -> Any:
    """Create an app in testing mode with fake capabilities."""
    test_config = {
        "TESTING": True,
        "SERVER_NAME": "localhost",
        "TOKEN_VERIFIER": FakeTokenVerifier(
            {
                "owner-token": OWNER,
                "admin-token": ADMIN,
                "member-token": MEMBER,
                "outsider-token": OUTSIDER,
            }
        ),
        "EMAIL_SENDER": FakeEmailSender(),
        "ESCROW_CLIENT": FakeEscrowClient(),
    }
    test_config.update(config)
    return create_app(test_config)
