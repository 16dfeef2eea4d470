"""JSON-file-backed implementation of MovementRepository (append-only)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.model.movement import Movement, MovementType
from ims.domain.repository.movement_repository import MovementRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonMovementRepository(MovementRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- MovementRepository interface -----------------------------------------

    def append(self, movement: Movement) -> None:
        with self._file.locked():
            records = self._file.load()
            records.append(self._to_raw(movement))
            self._file.persist(records)

    def list_recent(self, limit: int) -> list[Movement]:
        movements = [self._to_domain(raw) for raw in self._file.read()]
        # stable sort keeps insertion order for equal timestamps; reverse it first
        movements.reverse()
        movements.sort(key=lambda m: m.occurred_at, reverse=True)
        return movements[:limit]

    def list_all(self) -> list[Movement]:
        return [self._to_domain(raw) for raw in self._file.read()]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(movement: Movement) -> dict:
        return {
            "id": movement.id,
            "type": movement.type.value,
            "item_id": movement.item_id,
            "item_name": movement.item_name,
            "quantity": str(movement.quantity),
            "occurred_at": movement.occurred_at.isoformat(),
            "actor_id": movement.actor_id,
            "actor_name": movement.actor_name,
            "notes": movement.notes,
            "responsible": movement.responsible,
            "sector": movement.sector,
            "ticket_number": movement.ticket_number,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Movement:
        return Movement(
            id=raw["id"],
            type=MovementType(raw["type"]),
            item_id=raw["item_id"],
            item_name=raw["item_name"],
            quantity=Decimal(raw["quantity"]),
            occurred_at=datetime.fromisoformat(raw["occurred_at"]),
            actor_id=raw["actor_id"],
            actor_name=raw["actor_name"],
            notes=raw.get("notes"),
            responsible=raw.get("responsible"),
            sector=raw.get("sector"),
            ticket_number=raw.get("ticket_number"),
        )
