"""Application service: Finalize Reconciliation use case.

Seals a session driven in-process (the interactive CLI walk) and stores
the resulting report.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from ims.application.dto import ReconciliationDetailDTO, report_to_detail
from ims.domain.exceptions import DomainException
from ims.domain.model.reconciliation import ReconciliationSession
from ims.domain.repository.reconciliation_repository import ReconciliationRepository
from ims.domain.results import Rejected

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FinalizeReconciliationHandler:

    def __init__(
        self,
        reconciliation_repo: ReconciliationRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._reconciliation_repo = reconciliation_repo
        self._clock = clock

    def handle(
        self, session: ReconciliationSession, month: object, year: object
    ) -> ReconciliationDetailDTO | Rejected:
        try:
            report = session.finalize(month=month, year=year, ended_at=self._clock())
        except DomainException as exc:
            return exc.to_rejection()
        self._reconciliation_repo.add(report)
        logger.info(
            "reconciliation finalized",
            extra={"report_id": report.id, "entries": len(report.entries), "operator": report.operator},
        )
        return report_to_detail(report)
