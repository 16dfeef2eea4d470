"""Application service: catalog queries."""

from __future__ import annotations

from ims.application.dto import StockItemDTO, item_to_dto
from ims.domain.model.actor import OperationClass
from ims.domain.repository.stock_item_repository import StockItemRepository
from ims.domain.results import Rejected, RejectionReason
from ims.domain.service.permission_gate import PermissionGate


class ListItemsHandler:

    def __init__(self, gate: PermissionGate, item_repo: StockItemRepository) -> None:
        self._gate = gate
        self._item_repo = item_repo

    def handle(self, actor_id: str | None, low_stock_only: bool = False) -> list[StockItemDTO] | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        items = self._item_repo.list_all()
        if low_stock_only:
            items = [item for item in items if item.is_low_stock]
        return [item_to_dto(item) for item in items]


class ShowItemHandler:

    def __init__(self, gate: PermissionGate, item_repo: StockItemRepository) -> None:
        self._gate = gate
        self._item_repo = item_repo

    def handle(self, actor_id: str | None, item_id: str) -> StockItemDTO | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.VIEW_STOCK)
        if isinstance(actor, Rejected):
            return actor
        item = self._item_repo.get_by_id(item_id)
        if item is None:
            return Rejected(RejectionReason.NOT_FOUND, f"Item '{item_id}' not found", "item_id")
        return item_to_dto(item)
