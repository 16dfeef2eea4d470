"""Application service: Create Item use case (catalog entry with an opening balance).

Unlike registration via inflow, the opening quantity is recorded as the
item's ``initial_quantity`` and no movement is written.
"""

from __future__ import annotations

from ims.application.dto import NewItemSpec, StockItemDTO, item_to_dto
from ims.domain.exceptions import DomainException
from ims.domain.model.actor import OperationClass
from ims.domain.model.stock_item import StockItem
from ims.domain.repository.stock_item_repository import StockItemRepository
from ims.domain.results import Rejected
from ims.domain.service.permission_gate import PermissionGate


class CreateItemHandler:

    def __init__(self, gate: PermissionGate, item_repo: StockItemRepository) -> None:
        self._gate = gate
        self._item_repo = item_repo

    def handle(self, actor_id: str | None, spec: NewItemSpec) -> StockItemDTO | Rejected:
        actor = self._gate.admit(actor_id, OperationClass.CREATE_ITEM)
        if isinstance(actor, Rejected):
            return actor

        try:
            item = StockItem.create(
                spec.name,
                spec.category,
                spec.unit,
                spec.quantity if spec.quantity is not None else 0,
                spec.minimum_quantity,
                description=spec.description,
                supplier=spec.supplier,
                price=spec.price,
                location=spec.location,
            )
            self._item_repo.create(item)
        except DomainException as exc:
            return exc.to_rejection()
        return item_to_dto(item)
