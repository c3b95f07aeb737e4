"""Read-only view of the escrow owned by the chain integration."""

from __future__ import annotations

import enum
from typing import Any, Protocol

from .models import Hackathon


class EscrowState(enum.Enum):
    """Funding state of a hackathon's escrow."""

    NO_ESCROW = "no_escrow"
    UNFUNDED = "unfunded"
    FUNDED = "funded"


class EscrowClient(Protocol):
    """Capability for reading escrow state. Never writes."""

    def get_details(self, hackathon: Hackathon) -> dict[str, Any] | None: ...

    def get_state(self, hackathon: Hackathon) -> EscrowState: ...


class StoredEscrowClient:
    """Reads the escrow fields the chain integration persists on the hackathon."""

    def get_details(self, hackathon: Hackathon) -> dict[str, Any] | None:
        """Build the escrow snapshot, or None if no escrow exists."""
        escrow_address = hackathon.get("escrowAddress")
        contract_id = hackathon.get("contractId") or escrow_address
        if not contract_id:
            return None
        details = hackathon.get("escrowDetails") or {}
        is_funded = details.get("isFunded") is True
        return {
            "contractId": contract_id,
            "escrowAddress": escrow_address or contract_id,
            "balance": details.get("balance") or None,
            "milestones": details.get("milestones") or [],
            "isFunded": is_funded,
            "canUpdate": not is_funded,
        }

    def get_state(self, hackathon: Hackathon) -> EscrowState:
        """Classify the hackathon's escrow as missing, unfunded or funded."""
        details = self.get_details(hackathon)
        if details is None:
            return EscrowState.NO_ESCROW
        if details["isFunded"]:
            return EscrowState.FUNDED
        return EscrowState.UNFUNDED
