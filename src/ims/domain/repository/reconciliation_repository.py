"""Abstract repository for sealed reconciliation reports."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.reconciliation import ReconciliationReport


class ReconciliationRepository(ABC):

    @abstractmethod
    def add(self, report: ReconciliationReport) -> None:
        """Persist a finalized report. Reports are immutable once added."""

    @abstractmethod
    def get_by_id(self, report_id: str) -> ReconciliationReport | None:
        """Return a report by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[ReconciliationReport]:
        """Return every report, most recent period first."""
