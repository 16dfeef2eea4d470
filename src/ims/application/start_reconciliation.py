"""Application service: Start Reconciliation use case.

Builds an in-memory session over the current catalog. Nothing is
persisted until the session is finalized.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from ims.domain.model.actor import OperationClass
from ims.domain.model.reconciliation import ReconciliationSession
from ims.domain.repository.stock_item_repository import StockItemRepository
from ims.domain.results import Rejected
from ims.domain.service.permission_gate import PermissionGate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StartReconciliationHandler:

    def __init__(
        self,
        gate: PermissionGate,
        item_repo: StockItemRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._gate = gate
        self._item_repo = item_repo
        self._clock = clock

    def handle(self, actor_id: str | None) -> ReconciliationSession | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.RECONCILE)
        if isinstance(actor, Rejected):
            return actor
        session = ReconciliationSession(operator=actor.display_name)
        session.start(self._item_repo.list_all(), started_at=self._clock())
        return session
