"""Application service: Record Movement use case.

Authenticates the caller, picks the operation class from the movement
type (inflows and outflows are gated independently) and hands over to
the Movement Ledger.
"""

from __future__ import annotations

from ims.application.dto import MovementDTO, MovementRequest, movement_to_dto
from ims.domain.exceptions import DomainException
from ims.domain.model.actor import OperationClass
from ims.domain.model.movement import MovementDetails, MovementType
from ims.domain.results import LedgerFailure, Rejected
from ims.domain.service.movement_ledger import MovementApplied, MovementLedger
from ims.domain.service.permission_gate import PermissionGate


class RecordMovementHandler:

    def __init__(self, gate: PermissionGate, ledger: MovementLedger) -> None:
        self._gate = gate
        self._ledger = ledger

    def handle(
        self, actor_id: str | None, request: MovementRequest
    ) -> MovementDTO | Rejected | LedgerFailure:
        actor = self._gate.authenticate(actor_id)
        if isinstance(actor, Rejected):
            return actor

        try:
            kind = MovementType.parse(request.type)
            details = MovementDetails.of(
                notes=request.notes,
                responsible=request.responsible,
                sector=request.sector,
                ticket_number=request.ticket_number,
                occurred_at=request.occurred_at,
            )
        except DomainException as exc:
            return exc.to_rejection()

        operation = (
            OperationClass.RECORD_INFLOW
            if kind is MovementType.INFLOW
            else OperationClass.RECORD_OUTFLOW
        )
        denied = self._gate.authorize(actor, operation)
        if denied is not None:
            return denied

        outcome = self._ledger.apply_movement(
            request.item_id,
            kind,
            request.quantity,
            actor=actor,
            details=details,
            new_minimum=request.minimum_quantity,
        )
        if isinstance(outcome, MovementApplied):
            return movement_to_dto(outcome.movement)
        return outcome
