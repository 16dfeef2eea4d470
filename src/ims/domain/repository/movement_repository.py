"""Abstract repository for the append-only movement ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.movement import Movement


class MovementRepository(ABC):

    @abstractmethod
    def append(self, movement: Movement) -> None:
        """Persist a new movement. Movements are never updated or deleted."""

    @abstractmethod
    def list_recent(self, limit: int) -> list[Movement]:
        """Return up to *limit* movements, newest first."""

    @abstractmethod
    def list_all(self) -> list[Movement]:
        """Return every movement in insertion order."""
