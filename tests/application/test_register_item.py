"""Integration tests for item registration and plain catalog creation."""

from ims.application.create_item import CreateItemHandler
from ims.application.dto import NewItemSpec, RegisteredItemDTO
from ims.application.register_item import RegisterItemHandler
from ims.application.show_stock import ListItemsHandler, ShowItemHandler
from ims.domain.results import RejectionReason
from ims.domain.service.movement_ledger import MovementLedger
from ims.domain.service.permission_gate import PermissionGate
from tests.fakes import (
    FakeActorRepository,
    FakeMovementRepository,
    FakeStockItemRepository,
    RecordingAlertSink,
)


def _setup():
    item_repo = FakeStockItemRepository()
    movement_repo = FakeMovementRepository()
    gate = PermissionGate(FakeActorRepository())
    ledger = MovementLedger(item_repo, movement_repo, RecordingAlertSink())
    return gate, ledger, item_repo, movement_repo


SWABS = NewItemSpec(name="Swabs", category="Clinical", unit="un", quantity=100, notes="first delivery")


class TestRegisterItem:

    def test_swabs_registered_with_genesis_inflow(self):
        gate, ledger, item_repo, movement_repo = _setup()

        dto = RegisterItemHandler(gate, ledger).handle("admin", SWABS)

        assert isinstance(dto, RegisteredItemDTO)
        assert dto.item.quantity == "100"
        assert dto.movement.type == "entrada"
        assert dto.movement.quantity == "100"
        assert dto.movement.notes == "first delivery"
        assert [m.item_id for m in movement_repo.list_all()] == [dto.item.id]

    def test_second_registration_is_duplicate(self):
        gate, ledger, _, movement_repo = _setup()
        handler = RegisterItemHandler(gate, ledger)
        handler.handle("admin", SWABS)

        result = handler.handle("admin", SWABS)

        assert result.reason is RejectionReason.DUPLICATE_NAME
        assert len(movement_repo.list_all()) == 1

    def test_clerk_forbidden(self):
        gate, ledger, item_repo, _ = _setup()
        result = RegisterItemHandler(gate, ledger).handle("clerk", SWABS)
        assert result.reason is RejectionReason.FORBIDDEN
        assert item_repo.list_all() == []

    def test_unit_defaults_when_omitted(self):
        gate, ledger, _, _ = _setup()
        spec = NewItemSpec(name="Swabs", category="Clinical", quantity=1)
        result = RegisterItemHandler(gate, ledger).handle("admin", spec)
        assert result.item.unit == "un"


class TestCreateItem:

    def test_create_without_movement(self):
        gate, _, item_repo, movement_repo = _setup()

        dto = CreateItemHandler(gate, item_repo).handle(
            "admin", NewItemSpec(name="Masks", quantity="2.5", minimum_quantity=1, price="3")
        )

        assert dto.quantity == "2.5"
        assert dto.price == "3.00"
        assert movement_repo.list_all() == []
        assert item_repo.get_by_id(dto.id).initial_quantity == item_repo.get_by_id(dto.id).quantity

    def test_duplicate_name(self):
        gate, _, item_repo, _ = _setup()
        handler = CreateItemHandler(gate, item_repo)
        handler.handle("admin", NewItemSpec(name="Masks"))
        assert handler.handle("admin", NewItemSpec(name="Masks")).reason is RejectionReason.DUPLICATE_NAME


class TestShowStock:

    def test_list_sorted_and_low_stock_filter(self):
        gate, _, item_repo, _ = _setup()
        create = CreateItemHandler(gate, item_repo)
        create.handle("admin", NewItemSpec(name="Swabs", quantity=5, minimum_quantity=5))
        create.handle("admin", NewItemSpec(name="Gloves", quantity=50, minimum_quantity=10))

        all_items = ListItemsHandler(gate, item_repo).handle("viewer")
        low = ListItemsHandler(gate, item_repo).handle("viewer", low_stock_only=True)

        assert [i.name for i in all_items] == ["Gloves", "Swabs"]
        assert [i.name for i in low] == ["Swabs"]
        assert low[0].low_stock

    def test_show_missing_item(self):
        gate, _, item_repo, _ = _setup()
        result = ShowItemHandler(gate, item_repo).handle("viewer", "nope")
        assert result.reason is RejectionReason.NOT_FOUND

    def test_anonymous_cannot_list(self):
        gate, _, item_repo, _ = _setup()
        assert ListItemsHandler(gate, item_repo).handle(None).reason is RejectionReason.NOT_AUTHENTICATED
