"""JSON-file-backed implementation of ReconciliationRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.exceptions import PersistenceError
from ims.domain.model.reconciliation import (
    EntryClassification,
    ReconciliationEntry,
    ReconciliationReport,
)
from ims.domain.repository.reconciliation_repository import ReconciliationRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonReconciliationRepository(ReconciliationRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ReconciliationRepository interface -----------------------------------

    def add(self, report: ReconciliationReport) -> None:
        with self._file.locked():
            records = self._file.load()
            if any(raw["id"] == report.id for raw in records):
                raise PersistenceError(f"Reconciliation {report.id} is already stored")
            records.append(self._to_raw(report))
            self._file.persist(records)

    def get_by_id(self, report_id: str) -> ReconciliationReport | None:
        for raw in self._file.read():
            if raw["id"] == report_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[ReconciliationReport]:
        reports = [self._to_domain(raw) for raw in self._file.read()]
        return sorted(reports, key=lambda r: (r.year, r.month), reverse=True)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(report: ReconciliationReport) -> dict:
        return {
            "id": report.id,
            "month": report.month,
            "year": report.year,
            "started_at": report.started_at.isoformat(),
            "ended_at": report.ended_at.isoformat(),
            "operator": report.operator,
            "status": report.status,
            "created_at": report.created_at.isoformat(),
            "entries": [
                {
                    "item_id": e.item_id,
                    "item_name": e.item_name,
                    "system_quantity": str(e.system_quantity),
                    "counted_quantity": (
                        None if e.counted_quantity is None else str(e.counted_quantity)
                    ),
                    "classification": e.classification.value if e.classification else None,
                }
                for e in report.entries
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> ReconciliationReport:
        entries = tuple(
            ReconciliationEntry(
                item_id=e["item_id"],
                item_name=e["item_name"],
                system_quantity=Decimal(e["system_quantity"]),
                counted_quantity=(
                    None if e.get("counted_quantity") is None else Decimal(e["counted_quantity"])
                ),
                classification=(
                    None if e.get("classification") is None
                    else EntryClassification(e["classification"])
                ),
            )
            for e in raw.get("entries", [])
        )
        return ReconciliationReport(
            id=raw["id"],
            month=raw["month"],
            year=raw["year"],
            started_at=datetime.fromisoformat(raw["started_at"]),
            ended_at=datetime.fromisoformat(raw["ended_at"]),
            operator=raw["operator"],
            entries=entries,
            status=raw.get("status", "finalizada"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
