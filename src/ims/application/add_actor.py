"""Application service: Add Actor use case (operator tooling, not gated)."""

from __future__ import annotations

from ims.domain.exceptions import DomainException
from ims.domain.model.actor import Actor, Capability
from ims.domain.model.value_objects import require_text, validate_identifier
from ims.domain.repository.actor_repository import ActorRepository
from ims.domain.results import Rejected, RejectionReason


class AddActorHandler:

    def __init__(self, actor_repo: ActorRepository) -> None:
        self._actor_repo = actor_repo

    def handle(self, actor_id: str, display_name: str, capabilities: list[str]) -> Actor | Rejected:
        """Create or replace an actor with exactly *capabilities*."""
        try:
            actor = Actor(
                id=validate_identifier(actor_id, "actor_id"),
                display_name=require_text(display_name, "display_name", max_length=200),
                capabilities=frozenset(Capability(c) for c in capabilities),
            )
        except DomainException as exc:
            return exc.to_rejection()
        except ValueError:
            return Rejected(RejectionReason.VALIDATION, "Unknown capability", "capabilities")
        self._actor_repo.save(actor)
        return actor
