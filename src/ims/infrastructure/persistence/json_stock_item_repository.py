"""JSON-file-backed implementation of StockItemRepository.

Every read-then-write runs inside ``JsonFile.locked()``, so
``compare_and_set_quantity`` is atomic across threads and processes that
share the data directory.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from ims.domain.exceptions import DuplicateNameError
from ims.domain.model.stock_item import StockItem
from ims.domain.repository.stock_item_repository import (
    UNCHANGED,
    StockItemRepository,
    _Unchanged,
)
from ims.infrastructure.persistence.json_file import JsonFile


class JsonStockItemRepository(StockItemRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- StockItemRepository interface ----------------------------------------

    def get_by_id(self, item_id: str) -> StockItem | None:
        for raw in self._file.read():
            if raw["id"] == item_id:
                return self._to_domain(raw)
        return None

    def get_by_name(self, name: str) -> StockItem | None:
        for raw in self._file.read():
            if raw["name"] == name:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[StockItem]:
        items = [self._to_domain(raw) for raw in self._file.read()]
        return sorted(items, key=lambda i: i.name)

    def create(self, item: StockItem) -> StockItem:
        with self._file.locked():
            records = self._file.load()
            if any(raw["name"] == item.name for raw in records):
                raise DuplicateNameError(
                    f"An item named '{item.name}' already exists", field="name"
                )
            records.append(self._to_raw(item))
            self._file.persist(records)
        return item

    def set_quantity(
        self,
        item_id: str,
        quantity: Decimal,
        minimum: Decimal | None | _Unchanged = UNCHANGED,
    ) -> bool:
        with self._file.locked():
            records = self._file.load()
            for raw in records:
                if raw["id"] == item_id:
                    self._apply(raw, quantity, minimum)
                    self._file.persist(records)
                    return True
        return False

    def compare_and_set_quantity(
        self,
        item_id: str,
        expected: Decimal,
        quantity: Decimal,
        minimum: Decimal | None | _Unchanged = UNCHANGED,
    ) -> bool:
        with self._file.locked():
            records = self._file.load()
            for raw in records:
                if raw["id"] == item_id:
                    if Decimal(raw["quantity"]) != expected:
                        return False
                    self._apply(raw, quantity, minimum)
                    self._file.persist(records)
                    return True
        return False

    def remove(self, item_id: str) -> None:
        with self._file.locked():
            records = self._file.load()
            remaining = [raw for raw in records if raw["id"] != item_id]
            if len(remaining) != len(records):
                self._file.persist(remaining)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _apply(raw: dict, quantity: Decimal, minimum: Decimal | None | _Unchanged) -> None:
        raw["quantity"] = str(quantity)
        if minimum is not UNCHANGED:
            raw["minimum_quantity"] = None if minimum is None else str(minimum)
        raw["updated_at"] = datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _to_raw(item: StockItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "category": item.category,
            "unit": item.unit,
            "quantity": str(item.quantity),
            "initial_quantity": str(item.initial_quantity),
            "minimum_quantity": (
                None if item.minimum_quantity is None else str(item.minimum_quantity)
            ),
            "description": item.description,
            "supplier": item.supplier,
            "price": str(item.price),
            "location": item.location,
            "created_at": item.created_at.isoformat(),
            "updated_at": item.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockItem:
        minimum = raw.get("minimum_quantity")
        return StockItem(
            id=raw["id"],
            name=raw["name"],
            category=raw.get("category", ""),
            unit=raw.get("unit", "un"),
            quantity=Decimal(raw["quantity"]),
            initial_quantity=Decimal(raw.get("initial_quantity", "0")),
            minimum_quantity=None if minimum is None else Decimal(minimum),
            description=raw.get("description", ""),
            supplier=raw.get("supplier", ""),
            price=Decimal(raw.get("price", "0")),
            location=raw.get("location", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
