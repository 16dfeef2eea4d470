"""Data Transfer Objects: plain containers that cross layer boundaries.

Input specs carry raw caller values (validation happens in the domain);
output DTOs carry display-ready strings so the CLI and HTTP layers never
touch domain objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from ims.domain.model.movement import Movement
from ims.domain.model.reconciliation import ReconciliationEntry, ReconciliationReport
from ims.domain.model.stock_item import StockItem
from ims.domain.model.value_objects import format_quantity


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class MovementRequest:
    type: object
    item_id: object
    quantity: object
    minimum_quantity: object = None  # honoured for inflows only
    responsible: object = None
    sector: object = None
    ticket_number: object = None
    notes: object = None
    occurred_at: object = None


@dataclass(frozen=True)
class NewItemSpec:
    name: object
    category: object = None
    unit: object = None
    quantity: object = None
    minimum_quantity: object = None
    notes: object = None
    description: object = None
    supplier: object = None
    price: object = None
    location: object = None


@dataclass(frozen=True)
class EntrySubmission:
    item_id: object
    item_name: object
    system_quantity: object
    counted_quantity: object = None
    classification: object = None


@dataclass(frozen=True)
class ReconciliationSubmission:
    month: object
    year: object
    started_at: object
    ended_at: object
    entries: list[EntrySubmission] = field(default_factory=list)


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class StockItemDTO:
    id: str
    name: str
    category: str
    unit: str
    quantity: str
    minimum_quantity: str | None
    low_stock: bool
    description: str
    supplier: str
    price: str
    location: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class MovementDTO:
    id: str
    type: str
    item_id: str
    item_name: str
    quantity: str
    occurred_at: str  # ISO-8601
    actor_name: str
    responsible: str | None = None
    sector: str | None = None
    ticket_number: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RegisteredItemDTO:
    item: StockItemDTO
    movement: MovementDTO


@dataclass(frozen=True)
class ReconciliationEntryDTO:
    item_id: str
    item_name: str
    system_quantity: str
    counted_quantity: str | None
    classification: str | None


@dataclass(frozen=True)
class EntryClassificationDTO:
    item_id: str
    item_name: str
    classification: str | None


@dataclass(frozen=True)
class ReconciliationSummaryDTO:
    id: str
    month: int
    year: int
    ended_at: str
    operator: str
    status: str
    correct: int
    discrepant: int
    entries: list[EntryClassificationDTO]


@dataclass(frozen=True)
class ReconciliationDetailDTO:
    id: str
    month: int
    year: int
    started_at: str
    ended_at: str
    created_at: str
    operator: str
    status: str
    correct: int
    discrepant: int
    accuracy_rate: int
    entries: list[ReconciliationEntryDTO]


@dataclass(frozen=True)
class ReconciliationStatsDTO:
    total_reports: int
    total_entries: int
    correct: int
    discrepant: int
    accuracy_rate: int
    last_report_id: str | None


# --- Mapping ------------------------------------------------------------------


def _qty(value: Decimal | None) -> str | None:
    return None if value is None else format_quantity(value)


def item_to_dto(item: StockItem) -> StockItemDTO:
    return StockItemDTO(
        id=item.id,
        name=item.name,
        category=item.category,
        unit=item.unit,
        quantity=format_quantity(item.quantity),
        minimum_quantity=_qty(item.minimum_quantity),
        low_stock=item.is_low_stock,
        description=item.description,
        supplier=item.supplier,
        price=f"{item.price:.2f}",
        location=item.location,
        created_at=item.created_at.isoformat(),
        updated_at=item.updated_at.isoformat(),
    )


def movement_to_dto(movement: Movement) -> MovementDTO:
    return MovementDTO(
        id=movement.id,
        type=movement.type.value,
        item_id=movement.item_id,
        item_name=movement.item_name,
        quantity=format_quantity(movement.quantity),
        occurred_at=movement.occurred_at.isoformat(),
        actor_name=movement.actor_name,
        responsible=movement.responsible,
        sector=movement.sector,
        ticket_number=movement.ticket_number,
        notes=movement.notes,
    )


def entry_to_dto(entry: ReconciliationEntry) -> ReconciliationEntryDTO:
    return ReconciliationEntryDTO(
        item_id=entry.item_id,
        item_name=entry.item_name,
        system_quantity=format_quantity(entry.system_quantity),
        counted_quantity=_qty(entry.counted_quantity),
        classification=entry.classification.value if entry.classification else None,
    )


def report_to_summary(report: ReconciliationReport) -> ReconciliationSummaryDTO:
    return ReconciliationSummaryDTO(
        id=report.id,
        month=report.month,
        year=report.year,
        ended_at=report.ended_at.isoformat(),
        operator=report.operator,
        status=report.status,
        correct=report.correct_count,
        discrepant=report.discrepant_count,
        entries=[
            EntryClassificationDTO(
                item_id=e.item_id,
                item_name=e.item_name,
                classification=e.classification.value if e.classification else None,
            )
            for e in report.entries
        ],
    )


def report_to_detail(report: ReconciliationReport) -> ReconciliationDetailDTO:
    return ReconciliationDetailDTO(
        id=report.id,
        month=report.month,
        year=report.year,
        started_at=report.started_at.isoformat(),
        ended_at=report.ended_at.isoformat(),
        created_at=report.created_at.isoformat(),
        operator=report.operator,
        status=report.status,
        correct=report.correct_count,
        discrepant=report.discrepant_count,
        accuracy_rate=report.accuracy_rate,
        entries=[entry_to_dto(e) for e in report.entries],
    )
