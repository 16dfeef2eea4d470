"""Application service: Audit Ledger use case."""

from __future__ import annotations

from ims.domain.model.actor import OperationClass
from ims.domain.results import Rejected
from ims.domain.service.ledger_audit import AuditReport, LedgerAuditService
from ims.domain.service.permission_gate import PermissionGate


class AuditLedgerHandler:

    def __init__(self, gate: PermissionGate, audit_service: LedgerAuditService) -> None:
        self._gate = gate
        self._audit_service = audit_service

    def handle(self, actor_id: str | None) -> AuditReport | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        return self._audit_service.audit()
