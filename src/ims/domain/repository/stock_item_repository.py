"""Abstract repository for the StockItem aggregate (the quantity store)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ims.domain.model.stock_item import StockItem


class _Unchanged:
    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED = _Unchanged()
"""Sentinel: leave the minimum threshold as it is."""


class StockItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> StockItem | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> StockItem | None:
        """Exact, case-sensitive name lookup."""

    @abstractmethod
    def list_all(self) -> list[StockItem]:
        """Return every item, sorted by name."""

    @abstractmethod
    def create(self, item: StockItem) -> StockItem:
        """Persist a new item.

        Raises DuplicateNameError if the name is already taken.
        """

    @abstractmethod
    def set_quantity(
        self,
        item_id: str,
        quantity: Decimal,
        minimum: Decimal | None | _Unchanged = UNCHANGED,
    ) -> bool:
        """Blindly overwrite the quantity. False if the item does not exist.

        For store maintenance only; the ledger writes through
        ``compare_and_set_quantity``.
        """

    @abstractmethod
    def compare_and_set_quantity(
        self,
        item_id: str,
        expected: Decimal,
        quantity: Decimal,
        minimum: Decimal | None | _Unchanged = UNCHANGED,
    ) -> bool:
        """Overwrite the quantity only if it still equals *expected*.

        The check and the write are atomic. Returns False when the item is
        missing or its quantity changed since it was read.
        """

    @abstractmethod
    def remove(self, item_id: str) -> None:
        """Delete an item. Only used to undo a failed registration."""
