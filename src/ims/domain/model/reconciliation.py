"""Reconciliation ("revisão"): periodic physical recount of the catalog.

A ``ReconciliationSession`` is the operator's working state while walking
the catalog item by item. Nothing is stored until ``finalize()`` seals the
reviewed entries into an immutable ``ReconciliationReport``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from ims.domain.exceptions import (
    InvalidStateError,
    NoEntriesReviewedError,
    ValidationError,
)
from ims.domain.model.stock_item import StockItem
from ims.domain.model.value_objects import Quantity, require_text


class ReconciliationStatus(Enum):
    IN_PROGRESS = "em_andamento"
    FINALIZED = "finalizada"


class EntryClassification(Enum):
    CORRECT = "certo"
    DISCREPANT = "errado"

    @staticmethod
    def parse(raw: object, field: str = "classification") -> EntryClassification | None:
        if raw is None or isinstance(raw, EntryClassification):
            return raw
        for member in EntryClassification:
            if raw in (member.value, member.name.lower()):
                return member
        raise ValidationError(f"{field} must be 'certo', 'errado' or null", field=field)


class SessionState(Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    FINALIZED = "FINALIZED"


def classify(system_quantity: Decimal, counted_quantity: Decimal) -> EntryClassification:
    """Correct iff the count matches the recorded quantity exactly."""
    if counted_quantity == system_quantity:
        return EntryClassification.CORRECT
    return EntryClassification.DISCREPANT


@dataclass(frozen=True)
class ReconciliationEntry:
    item_id: str
    item_name: str
    system_quantity: Decimal
    counted_quantity: Decimal | None = None
    classification: EntryClassification | None = None

    @property
    def reviewed(self) -> bool:
        return self.classification is not None

    def with_count(self, counted: Decimal) -> ReconciliationEntry:
        return replace(
            self,
            counted_quantity=counted,
            classification=classify(self.system_quantity, counted),
        )

    @staticmethod
    def from_submission(
        item_id: object,
        item_name: object,
        system_quantity: object,
        counted_quantity: object = None,
        classification: object = None,
        index: int = 0,
    ) -> ReconciliationEntry:
        """Validate an entry coming from outside (e.g. the submit endpoint).

        A supplied classification must agree with the counted value; the
        client is not trusted to classify.
        """
        prefix = f"entries[{index}]"
        clean_id = require_text(item_id, f"{prefix}.item_id", max_length=64)
        clean_name = require_text(item_name, f"{prefix}.item_name", max_length=200)
        system = Quantity.of(system_quantity, f"{prefix}.system_quantity").value
        counted = None
        if counted_quantity is not None:
            counted = Quantity.of(counted_quantity, f"{prefix}.counted_quantity").value
        label = EntryClassification.parse(classification, f"{prefix}.classification")

        if label is not None:
            if counted is None:
                raise ValidationError(
                    f"{prefix} is classified but has no counted quantity",
                    field=f"{prefix}.counted_quantity",
                )
            if label is not classify(system, counted):
                raise ValidationError(
                    f"{prefix} classification does not match its counted quantity",
                    field=f"{prefix}.classification",
                )
        return ReconciliationEntry(
            item_id=clean_id,
            item_name=clean_name,
            system_quantity=system,
            counted_quantity=counted,
            classification=label,
        )


@dataclass(frozen=True)
class ReconciliationReport:
    """A sealed recount. Only reviewed entries are kept."""

    id: str
    month: int
    year: int
    started_at: datetime
    ended_at: datetime
    operator: str
    entries: tuple[ReconciliationEntry, ...]
    status: str = ReconciliationStatus.FINALIZED.value
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        month: object,
        year: object,
        started_at: datetime,
        ended_at: datetime,
        operator: str,
        entries: Iterable[ReconciliationEntry],
        report_id: str | None = None,
        now: datetime | None = None,
    ) -> ReconciliationReport:
        clean_month = _calendar_number(month, "month", 1, 12)
        clean_year = _calendar_number(year, "year", 1900, 2100)
        if ended_at < started_at:
            raise ValidationError("ended_at must not be before started_at", field="ended_at")
        if not operator:
            raise ValidationError("Reconciliation requires an operator", field="operator")

        reviewed = tuple(e for e in entries if e.reviewed)
        if not reviewed:
            raise NoEntriesReviewedError("No entries were reviewed; nothing to finalize")

        return ReconciliationReport(
            id=report_id or uuid.uuid4().hex,
            month=clean_month,
            year=clean_year,
            started_at=started_at,
            ended_at=ended_at,
            operator=operator,
            entries=reviewed,
            created_at=now or datetime.now(timezone.utc),
        )

    # --- Summary --------------------------------------------------------------

    @property
    def correct_count(self) -> int:
        return sum(1 for e in self.entries if e.classification is EntryClassification.CORRECT)

    @property
    def discrepant_count(self) -> int:
        return sum(1 for e in self.entries if e.classification is EntryClassification.DISCREPANT)

    @property
    def accuracy_rate(self) -> int:
        return accuracy_percent(self.correct_count, len(self.entries))


def accuracy_percent(correct: int, total: int) -> int:
    """Whole percent, half rounded up; 0 when nothing was counted."""
    if total == 0:
        return 0
    pct = Decimal(correct) * 100 / Decimal(total)
    return int(pct.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class ReconciliationSession:
    """Cursor-driven counting workflow over a catalog snapshot.

    NOT_STARTED -> IN_PROGRESS -> FINALIZED. Entries can be re-counted any
    number of times before finalizing; finalizing is terminal.
    """

    operator: str
    entries: list[ReconciliationEntry] = field(default_factory=list)
    started_at: datetime | None = None
    cursor: int = 0
    state: SessionState = SessionState.NOT_STARTED

    # --- State transitions ----------------------------------------------------

    def start(self, items: Iterable[StockItem], started_at: datetime) -> list[ReconciliationEntry]:
        """Snapshot every item's current quantity, sorted by name."""
        if self.state is not SessionState.NOT_STARTED:
            raise InvalidStateError(
                f"Cannot start session, current state is {self.state.value}"
            )
        self.entries = [
            ReconciliationEntry(
                item_id=item.id,
                item_name=item.name,
                system_quantity=item.quantity,
            )
            for item in sorted(items, key=lambda i: i.name)
        ]
        self.started_at = started_at
        self.cursor = 0
        self.state = SessionState.IN_PROGRESS
        return list(self.entries)

    def submit_count(self, counted: object, index: int | None = None) -> EntryClassification:
        """Record a count for the entry at *index* (default: the cursor)."""
        self._require_in_progress()
        position = self.cursor if index is None else index
        if not 0 <= position < len(self.entries):
            raise ValidationError(f"No entry at position {position}", field="index")
        value = Quantity.of(counted, "counted_quantity").value
        updated = self.entries[position].with_count(value)
        self.entries[position] = updated
        return updated.classification  # type: ignore[return-value]

    def advance(self) -> bool:
        self._require_in_progress()
        if self.cursor >= len(self.entries) - 1:
            return False
        self.cursor += 1
        return True

    def retreat(self) -> bool:
        self._require_in_progress()
        if self.cursor == 0:
            return False
        self.cursor -= 1
        return True

    def finalize(
        self,
        month: object,
        year: object,
        ended_at: datetime,
        report_id: str | None = None,
    ) -> ReconciliationReport:
        self._require_in_progress()
        report = ReconciliationReport.create(
            month=month,
            year=year,
            started_at=self.started_at,  # type: ignore[arg-type]
            ended_at=ended_at,
            operator=self.operator,
            entries=self.entries,
            report_id=report_id,
            now=ended_at,
        )
        self.state = SessionState.FINALIZED
        return report

    # --- Queries --------------------------------------------------------------

    @property
    def current(self) -> ReconciliationEntry | None:
        if not self.entries:
            return None
        return self.entries[self.cursor]

    @property
    def at_end(self) -> bool:
        return self.cursor >= len(self.entries) - 1

    @property
    def reviewed_count(self) -> int:
        return sum(1 for e in self.entries if e.reviewed)

    # --- Internal helpers -----------------------------------------------------

    def _require_in_progress(self) -> None:
        if self.state is not SessionState.IN_PROGRESS:
            raise InvalidStateError(
                f"Session is {self.state.value}, expected IN_PROGRESS"
            )


def _calendar_number(raw: object, field: str, low: int, high: int) -> int:
    value = Quantity.of(raw, field).value
    if value != value.to_integral_value():
        raise ValidationError(f"{field} must be a whole number", field=field)
    number = int(value)
    if not low <= number <= high:
        raise ValidationError(f"{field} must be between {low} and {high}", field=field)
    return number
