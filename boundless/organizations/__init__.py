"""Organizations and their member roles."""

from .models import Organization
from .services import OrganizationService

__all__ = ["Organization", "OrganizationService"]
