"""Service layer for organization roles and permissions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from boundless.core.constants import (
    MANAGER_ROLES,
    ORGANIZATIONS_COLLECTION,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_OWNER,
)
from boundless.errors import ForbiddenError, NotFoundError

from .models import Organization

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client


def is_valid_document_id(doc_id: Any) -> bool:
    """Return True if the value can be used as a Firestore document id."""
    return (
        isinstance(doc_id, str)
        and bool(doc_id.strip())
        and "/" not in doc_id
        and doc_id not in (".", "..")
    )


class OrganizationService:
    """Handles organization lookups and role checks."""

    @staticmethod
    def get_organization(db: Client, org_id: str) -> Organization | None:
        """Fetch an organization by id, or None if it does not exist."""
        if not is_valid_document_id(org_id):
            return None
        doc = cast("DocumentSnapshot", db.collection(ORGANIZATIONS_COLLECTION).document(org_id).get())
        if not doc.exists:
            return None
        data = cast(Organization, doc.to_dict() or {})
        data["id"] = doc.id
        return data

    @staticmethod
    def get_user_role(organization: Organization, email: str) -> str | None:
        """Resolve the role an email holds in the organization."""
        if organization.get("owner") == email:
            return ROLE_OWNER
        if email in (organization.get("admins") or []):
            return ROLE_ADMIN
        if email in (organization.get("members") or []):
            return ROLE_MEMBER
        return None

    @staticmethod
    def check_permission(
        organization: Organization, email: str, roles: tuple[str, ...]
    ) -> bool:
        """Return True if the email holds one of the given roles."""
        role = OrganizationService.get_user_role(organization, email)
        return role is not None and role in roles

    @staticmethod
    def can_manage_hackathons(
        db: Client, org_id: str, email: str
    ) -> tuple[bool, Organization | None]:
        """Check whether an email may manage the organization's hackathons."""
        organization = OrganizationService.get_organization(db, org_id)
        if organization is None:
            return False, None
        can_manage = OrganizationService.check_permission(
            organization, email, MANAGER_ROLES
        )
        return can_manage, organization

    @staticmethod
    def require_manager(
        db: Client, org_id: str, email: str, action: str
    ) -> Organization:
        """Return the organization or raise NotFound/Forbidden.

        ``action`` completes the sentence "Only owners and admins can ...".
        """
        can_manage, organization = OrganizationService.can_manage_hackathons(
            db, org_id, email
        )
        if organization is None:
            raise NotFoundError("Organization not found")
        if not can_manage:
            raise ForbiddenError(
                f"Only owners and admins can {action} for this organization"
            )
        return organization
