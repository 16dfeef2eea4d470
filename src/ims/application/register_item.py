"""Application service: Register Item via Inflow use case."""

from __future__ import annotations

from ims.application.dto import (
    NewItemSpec,
    RegisteredItemDTO,
    item_to_dto,
    movement_to_dto,
)
from ims.domain.exceptions import DomainException
from ims.domain.model.actor import OperationClass
from ims.domain.model.movement import MovementDetails
from ims.domain.results import LedgerFailure, Rejected
from ims.domain.service.movement_ledger import ItemRegistered, MovementLedger
from ims.domain.service.permission_gate import PermissionGate


class RegisterItemHandler:

    def __init__(self, gate: PermissionGate, ledger: MovementLedger) -> None:
        self._gate = gate
        self._ledger = ledger

    def handle(
        self, actor_id: str | None, spec: NewItemSpec
    ) -> RegisteredItemDTO | Rejected | LedgerFailure:
        """Create a brand-new item and record its genesis inflow."""
        actor = self._gate.admit(actor_id, OperationClass.CREATE_ITEM)
        if isinstance(actor, Rejected):
            return actor

        try:
            details = MovementDetails.of(notes=spec.notes)
        except DomainException as exc:
            return exc.to_rejection()

        outcome = self._ledger.register_item(
            name=spec.name,
            category=spec.category,
            unit=spec.unit,
            quantity=spec.quantity,
            minimum_quantity=spec.minimum_quantity,
            actor=actor,
            details=details,
        )
        if isinstance(outcome, ItemRegistered):
            return RegisteredItemDTO(
                item=item_to_dto(outcome.item),
                movement=movement_to_dto(outcome.movement),
            )
        return outcome
