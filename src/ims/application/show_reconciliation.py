"""Application service: reconciliation history queries."""

from __future__ import annotations

from ims.application.dto import (
    ReconciliationDetailDTO,
    ReconciliationStatsDTO,
    ReconciliationSummaryDTO,
    report_to_detail,
    report_to_summary,
)
from ims.domain.model.actor import OperationClass
from ims.domain.model.reconciliation import accuracy_percent
from ims.domain.repository.reconciliation_repository import ReconciliationRepository
from ims.domain.results import Rejected, RejectionReason
from ims.domain.service.permission_gate import PermissionGate


class ListReconciliationsHandler:

    def __init__(self, gate: PermissionGate, reconciliation_repo: ReconciliationRepository) -> None:
        self._gate = gate
        self._reconciliation_repo = reconciliation_repo

    def handle(self, actor_id: str | None) -> list[ReconciliationSummaryDTO] | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        return [report_to_summary(r) for r in self._reconciliation_repo.list_all()]


class ShowReconciliationHandler:

    def __init__(self, gate: PermissionGate, reconciliation_repo: ReconciliationRepository) -> None:
        self._gate = gate
        self._reconciliation_repo = reconciliation_repo

    def handle(self, actor_id: str | None, report_id: str) -> ReconciliationDetailDTO | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        report = self._reconciliation_repo.get_by_id(report_id)
        if report is None:
            return Rejected(
                RejectionReason.NOT_FOUND, f"Reconciliation '{report_id}' not found", "id"
            )
        return report_to_detail(report)


class ReconciliationStatsHandler:

    def __init__(self, gate: PermissionGate, reconciliation_repo: ReconciliationRepository) -> None:
        self._gate = gate
        self._reconciliation_repo = reconciliation_repo

    def handle(self, actor_id: str | None) -> ReconciliationStatsDTO | Rejected:
        """Totals across every sealed report."""
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor

        reports = self._reconciliation_repo.list_all()
        correct = sum(r.correct_count for r in reports)
        discrepant = sum(r.discrepant_count for r in reports)
        total = sum(len(r.entries) for r in reports)
        latest = max(reports, key=lambda r: r.ended_at, default=None)
        return ReconciliationStatsDTO(
            total_reports=len(reports),
            total_entries=total,
            correct=correct,
            discrepant=discrepant,
            accuracy_rate=accuracy_percent(correct, total),
            last_report_id=latest.id if latest else None,
        )
