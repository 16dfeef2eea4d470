"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
A ``Container`` is built once per process (CLI invocation or server
lifespan) and handed to the outer layers; nothing here is a module-level
singleton.
"""

from __future__ import annotations

from dataclasses import dataclass

from ims.application.add_actor import AddActorHandler
from ims.application.audit_ledger import AuditLedgerHandler
from ims.application.create_item import CreateItemHandler
from ims.application.finalize_reconciliation import FinalizeReconciliationHandler
from ims.application.list_movements import ListMovementsHandler
from ims.application.record_movement import RecordMovementHandler
from ims.application.register_item import RegisterItemHandler
from ims.application.show_reconciliation import (
    ListReconciliationsHandler,
    ReconciliationStatsHandler,
    ShowReconciliationHandler,
)
from ims.application.show_stock import ListItemsHandler, ShowItemHandler
from ims.application.start_reconciliation import StartReconciliationHandler
from ims.application.submit_reconciliation import SubmitReconciliationHandler
from ims.domain.repository.actor_repository import ActorRepository
from ims.domain.repository.movement_repository import MovementRepository
from ims.domain.repository.reconciliation_repository import ReconciliationRepository
from ims.domain.repository.stock_item_repository import StockItemRepository
from ims.domain.service.ledger_audit import LedgerAuditService
from ims.domain.service.movement_ledger import AlertSink, MovementLedger
from ims.domain.service.permission_gate import PermissionGate
from ims.infrastructure.alerts import JournalAlertSink
from ims.infrastructure.config import Settings
from ims.infrastructure.persistence.json_actor_repository import JsonActorRepository
from ims.infrastructure.persistence.json_movement_repository import JsonMovementRepository
from ims.infrastructure.persistence.json_reconciliation_repository import (
    JsonReconciliationRepository,
)
from ims.infrastructure.persistence.json_stock_item_repository import JsonStockItemRepository


@dataclass
class Container:
    settings: Settings
    items: StockItemRepository
    movements: MovementRepository
    reconciliations: ReconciliationRepository
    actors: ActorRepository
    gate: PermissionGate
    ledger: MovementLedger

    # --- Use cases ------------------------------------------------------------

    def record_movement(self) -> RecordMovementHandler:
        return RecordMovementHandler(self.gate, self.ledger)

    def register_item(self) -> RegisterItemHandler:
        return RegisterItemHandler(self.gate, self.ledger)

    def create_item(self) -> CreateItemHandler:
        return CreateItemHandler(self.gate, self.items)

    def list_items(self) -> ListItemsHandler:
        return ListItemsHandler(self.gate, self.items)

    def show_item(self) -> ShowItemHandler:
        return ShowItemHandler(self.gate, self.items)

    def list_movements(self) -> ListMovementsHandler:
        return ListMovementsHandler(
            self.gate, self.movements, limit=self.settings.movement_history_limit
        )

    def start_reconciliation(self) -> StartReconciliationHandler:
        return StartReconciliationHandler(self.gate, self.items)

    def finalize_reconciliation(self) -> FinalizeReconciliationHandler:
        return FinalizeReconciliationHandler(self.reconciliations)

    def submit_reconciliation(self) -> SubmitReconciliationHandler:
        return SubmitReconciliationHandler(self.gate, self.reconciliations)

    def list_reconciliations(self) -> ListReconciliationsHandler:
        return ListReconciliationsHandler(self.gate, self.reconciliations)

    def show_reconciliation(self) -> ShowReconciliationHandler:
        return ShowReconciliationHandler(self.gate, self.reconciliations)

    def reconciliation_stats(self) -> ReconciliationStatsHandler:
        return ReconciliationStatsHandler(self.gate, self.reconciliations)

    def audit_ledger(self) -> AuditLedgerHandler:
        return AuditLedgerHandler(self.gate, LedgerAuditService(self.items, self.movements))

    def add_actor(self) -> AddActorHandler:
        return AddActorHandler(self.actors)


def build_container(settings: Settings, alerts: AlertSink | None = None) -> Container:
    data_dir = settings.data_dir
    items = JsonStockItemRepository(data_dir / "items.json")
    movements = JsonMovementRepository(data_dir / "movements.json")
    reconciliations = JsonReconciliationRepository(data_dir / "reconciliations.json")
    actors = JsonActorRepository(data_dir / "actors.json")
    ledger = MovementLedger(
        items,
        movements,
        alerts or JournalAlertSink(settings.alerts_path),
        cas_retries=settings.cas_retries,
    )
    return Container(
        settings=settings,
        items=items,
        movements=movements,
        reconciliations=reconciliations,
        actors=actors,
        gate=PermissionGate(actors),
        ledger=ledger,
    )
