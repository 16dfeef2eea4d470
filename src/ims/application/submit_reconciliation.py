"""Application service: Submit Reconciliation use case.

Accepts a session that was driven by a client (the HTTP flow keeps the
cursor state on the client side) and seals it. Entries without a
classification are dropped; a submission with no classified entries is
rejected.
"""

from __future__ import annotations

import logging

from ims.application.dto import ReconciliationSubmission
from ims.domain.exceptions import DomainException, ValidationError
from ims.domain.model.actor import OperationClass
from ims.domain.model.reconciliation import ReconciliationEntry, ReconciliationReport
from ims.domain.model.value_objects import parse_instant
from ims.domain.repository.reconciliation_repository import ReconciliationRepository
from ims.domain.results import Rejected
from ims.domain.service.permission_gate import PermissionGate

logger = logging.getLogger(__name__)


class SubmitReconciliationHandler:

    def __init__(
        self,
        gate: PermissionGate,
        reconciliation_repo: ReconciliationRepository,
    ) -> None:
        self._gate = gate
        self._reconciliation_repo = reconciliation_repo

    def handle(self, actor_id: str | None, submission: ReconciliationSubmission) -> str | Rejected:
        """Validate and store the report; return its ID."""
        actor = self._gate.admit(actor_id, OperationClass.RECONCILE)
        if isinstance(actor, Rejected):
            return actor

        try:
            if not submission.entries:
                raise ValidationError("entries must not be empty", field="entries")
            entries = [
                ReconciliationEntry.from_submission(
                    item_id=e.item_id,
                    item_name=e.item_name,
                    system_quantity=e.system_quantity,
                    counted_quantity=e.counted_quantity,
                    classification=e.classification,
                    index=i,
                )
                for i, e in enumerate(submission.entries)
            ]
            report = ReconciliationReport.create(
                month=submission.month,
                year=submission.year,
                started_at=parse_instant(submission.started_at, "started_at"),
                ended_at=parse_instant(submission.ended_at, "ended_at"),
                operator=actor.display_name,
                entries=entries,
            )
        except DomainException as exc:
            return exc.to_rejection()

        self._reconciliation_repo.add(report)
        logger.info(
            "reconciliation submitted",
            extra={"report_id": report.id, "entries": len(report.entries), "operator": report.operator},
        )
        return report.id
