"""Tests for the MovementLedger domain service.

Covers the ledger/counter invariant, negative-stock rejection, the
two-phase commit with compensation, and concurrent outflows.
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal

from ims.domain.model.movement import MovementDetails, MovementType
from ims.domain.model.stock_item import StockItem
from ims.domain.results import (
    CommitPhase,
    CompensationStatus,
    LedgerFailure,
    Rejected,
    RejectionReason,
)
from ims.domain.service.movement_ledger import ItemRegistered, MovementApplied, MovementLedger
from tests.fakes import (
    ADMIN,
    CLERK,
    FakeMovementRepository,
    FakeStockItemRepository,
    RecordingAlertSink,
)

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _setup(quantity="50", minimum="10", cas_retries=3):
    gloves = StockItem.create("Gloves", "PPE", "box", quantity, minimum, item_id="gloves", now=T0)
    item_repo = FakeStockItemRepository([gloves])
    movement_repo = FakeMovementRepository()
    alerts = RecordingAlertSink()
    ledger = MovementLedger(item_repo, movement_repo, alerts, cas_retries=cas_retries)
    return ledger, item_repo, movement_repo, alerts


def _ledger_sum(item_repo, movement_repo, item_id):
    item = item_repo.get_by_id(item_id)
    return item.initial_quantity + sum(
        (m.signed_quantity for m in movement_repo.list_all() if m.item_id == item_id),
        Decimal("0"),
    )


class TestApplyMovement:

    def test_gloves_scenario(self):
        ledger, item_repo, movement_repo, _ = _setup()

        inflow = ledger.apply_movement("gloves", "entrada", 20, actor=ADMIN)
        assert isinstance(inflow, MovementApplied)
        assert inflow.item.quantity == Decimal("70")

        outflow = ledger.apply_movement("gloves", "saida", 65, actor=CLERK)
        assert isinstance(outflow, MovementApplied)
        assert outflow.item.quantity == Decimal("5")
        assert outflow.item.is_low_stock

        rejected = ledger.apply_movement("gloves", "saida", 10, actor=CLERK)
        assert isinstance(rejected, Rejected)
        assert rejected.reason is RejectionReason.INSUFFICIENT_STOCK
        assert item_repo.get_by_id("gloves").quantity == Decimal("5")
        assert len(movement_repo.list_all()) == 2

    def test_quantity_equals_initial_plus_signed_movements(self):
        ledger, item_repo, movement_repo, _ = _setup()
        for kind, qty in [("entrada", "2.5"), ("saida", 10), ("saida", "0.5"), ("entrada", 7)]:
            ledger.apply_movement("gloves", kind, qty, actor=ADMIN)

        assert item_repo.get_by_id("gloves").quantity == Decimal("49")
        assert _ledger_sum(item_repo, movement_repo, "gloves") == Decimal("49")

    def test_outflow_to_exactly_zero_allowed(self):
        ledger, item_repo, _, _ = _setup(quantity="5", minimum=None)
        result = ledger.apply_movement("gloves", "saida", 5, actor=CLERK)
        assert isinstance(result, MovementApplied)
        assert item_repo.get_by_id("gloves").quantity == Decimal("0")

    def test_movement_snapshots_item_and_actor(self):
        ledger, _, movement_repo, _ = _setup()
        details = MovementDetails.of(responsible="Dr. Lima", sector="ER", ticket_number="T-1")
        ledger.apply_movement("gloves", MovementType.OUTFLOW, 1, actor=CLERK, details=details)

        [movement] = movement_repo.list_all()
        assert movement.item_name == "Gloves"
        assert movement.actor_id == "clerk"
        assert movement.actor_name == "Carlos Clerk"
        assert movement.sector == "ER"

    def test_inflow_may_update_minimum(self):
        ledger, item_repo, _, _ = _setup()
        result = ledger.apply_movement("gloves", "entrada", 10, actor=ADMIN, new_minimum="30")
        assert result.item.minimum_quantity == Decimal("30")
        assert item_repo.get_by_id("gloves").minimum_quantity == Decimal("30")

    def test_outflow_ignores_minimum(self):
        ledger, item_repo, _, _ = _setup()
        ledger.apply_movement("gloves", "saida", 1, actor=CLERK, new_minimum="1")
        assert item_repo.get_by_id("gloves").minimum_quantity == Decimal("10")

    def test_minimum_above_new_quantity_rejected_without_writes(self):
        ledger, item_repo, movement_repo, _ = _setup()
        result = ledger.apply_movement("gloves", "entrada", 1, actor=ADMIN, new_minimum="100")
        assert result.reason is RejectionReason.VALIDATION
        assert result.field == "minimum_quantity"
        assert item_repo.get_by_id("gloves").quantity == Decimal("50")
        assert movement_repo.list_all() == []


class TestApplyMovementValidation:

    def test_zero_quantity_rejected(self):
        ledger, _, movement_repo, _ = _setup()
        result = ledger.apply_movement("gloves", "saida", 0, actor=CLERK)
        assert result.reason is RejectionReason.VALIDATION
        assert result.field == "quantity"
        assert movement_repo.list_all() == []

    def test_quantity_above_ceiling_rejected(self):
        ledger, _, _, _ = _setup()
        result = ledger.apply_movement("gloves", "entrada", "1000000.01", actor=ADMIN)
        assert result.reason is RejectionReason.VALIDATION

    def test_unknown_type_rejected(self):
        ledger, _, _, _ = _setup()
        assert ledger.apply_movement("gloves", "loan", 1, actor=ADMIN).field == "type"

    def test_malformed_id_rejected(self):
        ledger, _, _, _ = _setup()
        assert ledger.apply_movement("not an id!", "saida", 1, actor=ADMIN).field == "item_id"

    def test_unknown_item_not_found(self):
        ledger, _, _, _ = _setup()
        assert ledger.apply_movement("nope", "saida", 1, actor=ADMIN).reason is RejectionReason.NOT_FOUND

    def test_malformed_minimum_rejected_before_the_item_is_looked_up(self):
        ledger, _, _, _ = _setup()
        result = ledger.apply_movement("nope", "entrada", 1, actor=ADMIN, new_minimum="abc")
        assert result.reason is RejectionReason.VALIDATION
        assert result.field == "minimum_quantity"

    def test_quantity_too_fine_to_register_rejected(self):
        ledger, item_repo, movement_repo, _ = _setup(quantity="1000000", minimum=None)
        result = ledger.apply_movement(
            "gloves", "entrada", "0.0000000000000000000000000001", actor=ADMIN
        )
        assert result.reason is RejectionReason.VALIDATION
        assert item_repo.get_by_id("gloves").quantity == Decimal("1000000")
        assert movement_repo.list_all() == []


class TestCompensation:

    def test_append_failure_reverts_quantity(self):
        ledger, item_repo, movement_repo, alerts = _setup()
        movement_repo.fail_appends = True

        result = ledger.apply_movement("gloves", "saida", 20, actor=CLERK)

        assert isinstance(result, LedgerFailure)
        assert result.phase is CommitPhase.LEDGER_APPEND
        assert result.compensation is CompensationStatus.REVERTED
        assert result.code == "movement_not_recorded"
        assert item_repo.get_by_id("gloves").quantity == Decimal("50")
        assert alerts.alerts == []

    def test_revert_also_restores_minimum(self):
        ledger, item_repo, movement_repo, _ = _setup()
        movement_repo.fail_appends = True
        ledger.apply_movement("gloves", "entrada", 5, actor=ADMIN, new_minimum="40")
        assert item_repo.get_by_id("gloves").minimum_quantity == Decimal("10")

    def test_failed_revert_is_reported_and_alerted(self):
        ledger, item_repo, movement_repo, alerts = _setup()
        movement_repo.fail_appends = True
        item_repo.fail_cas_from = 1  # first CAS succeeds, the compensating one fails

        result = ledger.apply_movement("gloves", "saida", 20, actor=CLERK)

        assert result.compensation is CompensationStatus.REVERT_FAILED
        assert result.inconsistent
        assert result.code == "ledger_inconsistent"
        assert result.previous_quantity == Decimal("50")
        assert result.attempted_quantity == Decimal("30")
        assert alerts.alerts == [result]

    def test_quantity_update_failure_needs_no_compensation(self):
        ledger, item_repo, movement_repo, alerts = _setup()
        item_repo.fail_cas_from = 0

        result = ledger.apply_movement("gloves", "saida", 1, actor=CLERK)

        assert result.phase is CommitPhase.QUANTITY_UPDATE
        assert result.compensation is CompensationStatus.NOT_REQUIRED
        assert movement_repo.list_all() == []
        assert alerts.alerts == []


class TestConcurrency:

    def test_concurrent_change_is_retried(self):
        ledger, item_repo, movement_repo, _ = _setup()
        interfered = []

        def other_writer(item_id):
            if not interfered:
                interfered.append(item_id)
                item_repo.set_quantity(item_id, Decimal("40"))

        item_repo.before_cas = other_writer
        result = ledger.apply_movement("gloves", "saida", 5, actor=CLERK)

        assert isinstance(result, MovementApplied)
        assert item_repo.get_by_id("gloves").quantity == Decimal("35")
        assert item_repo.cas_calls == 2

    def test_persistent_contention_is_a_conflict(self):
        ledger, item_repo, movement_repo, _ = _setup(cas_retries=2)
        bump = iter(range(100))
        item_repo.before_cas = lambda item_id: item_repo.set_quantity(
            item_id, Decimal(60 + next(bump))
        )

        result = ledger.apply_movement("gloves", "saida", 5, actor=CLERK)

        assert result.reason is RejectionReason.CONFLICT
        assert movement_repo.list_all() == []
        assert item_repo.cas_calls == 3

    def test_parallel_outflows_never_lose_updates(self):
        ledger, item_repo, movement_repo, _ = _setup(quantity="100", minimum=None)
        results = []

        def take_one():
            results.append(ledger.apply_movement("gloves", "saida", 1, actor=CLERK))

        threads = [threading.Thread(target=take_one) for _ in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(isinstance(r, MovementApplied) for r in results)
        assert item_repo.get_by_id("gloves").quantity == Decimal("60")
        assert len(movement_repo.list_all()) == 40

    def test_parallel_outflows_cannot_oversell(self):
        ledger, item_repo, movement_repo, _ = _setup(quantity="10", minimum=None)
        results = []

        def take_three():
            results.append(ledger.apply_movement("gloves", "saida", 3, actor=CLERK))

        threads = [threading.Thread(target=take_three) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        applied = [r for r in results if isinstance(r, MovementApplied)]
        assert len(applied) == 3
        assert item_repo.get_by_id("gloves").quantity == Decimal("1")
        assert _ledger_sum(item_repo, movement_repo, "gloves") == Decimal("1")

    def test_item_locks_released_after_use(self):
        ledger, _, _, _ = _setup()
        for i in range(200):
            result = ledger.apply_movement(f"ghost-{i}", "saida", 1, actor=CLERK)
            assert result.reason is RejectionReason.NOT_FOUND
        ledger.apply_movement("gloves", "saida", 1, actor=CLERK)

        assert len(ledger._locks) == 0


class TestRegisterItem:

    def _ledger(self):
        item_repo = FakeStockItemRepository()
        movement_repo = FakeMovementRepository()
        alerts = RecordingAlertSink()
        return MovementLedger(item_repo, movement_repo, alerts), item_repo, movement_repo, alerts

    def _register(self, ledger, name="Swabs", quantity=100, **kwargs):
        return ledger.register_item(
            name=name, category="Clinical", unit="un", quantity=quantity, actor=ADMIN, **kwargs
        )

    def test_swabs_scenario(self):
        ledger, item_repo, movement_repo, _ = self._ledger()

        result = self._register(ledger)

        assert isinstance(result, ItemRegistered)
        assert result.item.quantity == Decimal("100")
        assert result.item.initial_quantity == Decimal("0")
        [genesis] = movement_repo.list_all()
        assert genesis.type is MovementType.INFLOW
        assert genesis.quantity == Decimal("100")
        assert genesis.item_id == result.item.id
        assert _ledger_sum(item_repo, movement_repo, result.item.id) == Decimal("100")

    def test_duplicate_rejected_before_any_movement(self):
        ledger, _, movement_repo, _ = self._ledger()
        self._register(ledger)

        again = self._register(ledger)

        assert again.reason is RejectionReason.DUPLICATE_NAME
        assert len(movement_repo.list_all()) == 1

    def test_minimum_stored(self):
        ledger, item_repo, _, _ = self._ledger()
        result = self._register(ledger, minimum_quantity=20)
        assert item_repo.get_by_id(result.item.id).minimum_quantity == Decimal("20")

    def test_category_required(self):
        ledger, _, _, _ = self._ledger()
        result = ledger.register_item(name="Swabs", category="", unit="un", quantity=1, actor=ADMIN)
        assert result.field == "category"

    def test_append_failure_removes_item(self):
        ledger, item_repo, movement_repo, alerts = self._ledger()
        movement_repo.fail_appends = True

        result = self._register(ledger)

        assert result.phase is CommitPhase.LEDGER_APPEND
        assert result.compensation is CompensationStatus.REVERTED
        assert item_repo.get_by_name("Swabs") is None
        assert alerts.alerts == []

    def test_append_and_removal_failure_alerts(self):
        ledger, item_repo, movement_repo, alerts = self._ledger()
        movement_repo.fail_appends = True
        item_repo.fail_remove = True

        result = self._register(ledger)

        assert result.compensation is CompensationStatus.REVERT_FAILED
        assert alerts.alerts == [result]

    def test_create_failure_reported(self):
        ledger, item_repo, movement_repo, _ = self._ledger()
        item_repo.fail_create = True

        result = self._register(ledger)

        assert result.phase is CommitPhase.ITEM_CREATE
        assert result.compensation is CompensationStatus.NOT_REQUIRED
        assert movement_repo.list_all() == []

    def test_quantity_update_failure_removes_item(self):
        ledger, item_repo, movement_repo, _ = self._ledger()
        item_repo.fail_cas_from = 0

        result = self._register(ledger)

        assert result.phase is CommitPhase.QUANTITY_UPDATE
        assert result.compensation is CompensationStatus.REVERTED
        assert item_repo.list_all() == []
