"""Abstract repository for actors (the permission lookup boundary)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.actor import Actor


class ActorRepository(ABC):

    @abstractmethod
    def get_by_id(self, actor_id: str) -> Actor | None:
        """Return the actor with normalized capabilities, or None."""

    @abstractmethod
    def save(self, actor: Actor) -> None:
        """Persist a new or updated actor in the current permission shape."""
