"""Application service: List Movements use case (query)."""

from __future__ import annotations

from ims.application.dto import MovementDTO, movement_to_dto
from ims.domain.model.actor import OperationClass
from ims.domain.repository.movement_repository import MovementRepository
from ims.domain.results import Rejected
from ims.domain.service.permission_gate import PermissionGate

DEFAULT_HISTORY_LIMIT = 100


class ListMovementsHandler:

    def __init__(
        self,
        gate: PermissionGate,
        movement_repo: MovementRepository,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._gate = gate
        self._movement_repo = movement_repo
        self._limit = limit

    def handle(self, actor_id: str | None) -> list[MovementDTO] | Rejected:
        """Newest first, at most ``limit`` entries."""
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        return [movement_to_dto(m) for m in self._movement_repo.list_recent(self._limit)]
