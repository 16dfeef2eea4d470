"""Domain service: Permission Gate.

Consulted before every operation. Authentication (who is calling) and
authorization (may they do this) fail in different ways and are reported
with different reasons: an unknown caller is ``NOT_AUTHENTICATED``, a
known caller without the capability is ``FORBIDDEN``.
"""

from __future__ import annotations

from ims.domain.model.actor import Actor, Capability, OperationClass
from ims.domain.repository.actor_repository import ActorRepository
from ims.domain.results import Rejected, RejectionReason

_CAPABILITY_LABELS = {
    Capability.VIEW: "view stock",
    Capability.OUTFLOW: "record outflows",
    Capability.INFLOW: "record inflows and create items",
    Capability.RECONCILE: "run stock reconciliations",
}


class PermissionGate:

    def __init__(self, actor_repo: ActorRepository) -> None:
        self._actor_repo = actor_repo

    def authenticate(self, actor_id: str | None) -> Actor | Rejected:
        if not actor_id or not actor_id.strip():
            return Rejected(RejectionReason.NOT_AUTHENTICATED, "No actor identity supplied")
        actor = self._actor_repo.get_by_id(actor_id.strip())
        if actor is None:
            return Rejected(RejectionReason.NOT_AUTHENTICATED, "Unknown actor")
        return actor

    def authorize(self, actor: Actor, operation: OperationClass) -> Rejected | None:
        """Return None when allowed, otherwise a FORBIDDEN rejection."""
        needed = operation.required_capability
        if actor.can(needed):
            return None
        return Rejected(
            RejectionReason.FORBIDDEN,
            f"{actor.display_name} is not allowed to {_CAPABILITY_LABELS[needed]} "
            f"(missing capability '{needed.value}')",
        )

    def admit(self, actor_id: str | None, operation: OperationClass) -> Actor | Rejected:
        """Authenticate and authorize in one step."""
        actor = self.authenticate(actor_id)
        if isinstance(actor, Rejected):
            return actor
        return self.authorize(actor, operation) or actor
