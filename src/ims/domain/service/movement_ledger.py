"""Domain service: Movement Ledger.

Applies inflow/outflow movements to the quantity store and appends the
matching ledger entry. The store offers no transaction spanning both
records, so every movement is committed in two phases:

  Phase 1: conditional quantity update (compare-and-set against the
            quantity that was just read).
  Phase 2: append the Movement.

If phase 2 fails the quantity is put back by a compensating write. If
that write fails too the stock and the ledger disagree; the outcome is
reported as ``REVERT_FAILED`` and sent to the alert sink.

Movements on the same item are serialized in-process, and the store's
compare-and-set rejects writers from other processes sharing the store,
so concurrent outflows cannot overwrite each other.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterator

from ims.domain.exceptions import DomainException, PersistenceError
from ims.domain.model.actor import Actor
from ims.domain.model.movement import Movement, MovementDetails, MovementType
from ims.domain.model.stock_item import StockItem, validate_minimum
from ims.domain.model.value_objects import (
    MAX_MOVEMENT_QUANTITY,
    Quantity,
    format_quantity,
    validate_identifier,
)
from ims.domain.repository.movement_repository import MovementRepository
from ims.domain.repository.stock_item_repository import UNCHANGED, StockItemRepository
from ims.domain.results import (
    CommitPhase,
    CompensationStatus,
    LedgerFailure,
    Rejected,
    RejectionReason,
)

logger = logging.getLogger(__name__)


class AlertSink(ABC):
    """Operational alert path for failures that need a human."""

    @abstractmethod
    def ledger_inconsistent(self, failure: LedgerFailure) -> None:
        """Stock and ledger are known to disagree for ``failure.item_id``."""


@dataclass(frozen=True)
class MovementApplied:
    movement: Movement
    item: StockItem  # state after the movement


@dataclass(frozen=True)
class ItemRegistered:
    item: StockItem
    movement: Movement  # the genesis inflow


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _KeyedLocks:
    """One lock per key, kept only while some thread holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, list[int]]] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.setdefault(key, (threading.Lock(), [0]))
            users[0] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                users[0] -= 1
                if users[0] == 0:
                    del self._locks[key]


class MovementLedger:

    def __init__(
        self,
        item_repo: StockItemRepository,
        movement_repo: MovementRepository,
        alerts: AlertSink,
        *,
        cas_retries: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._items = item_repo
        self._movements = movement_repo
        self._alerts = alerts
        self._cas_retries = cas_retries
        self._clock = clock
        self._locks = _KeyedLocks()

    # --- Public operations ----------------------------------------------------

    def apply_movement(
        self,
        item_id: object,
        movement_type: object,
        quantity: object,
        *,
        actor: Actor,
        details: MovementDetails | None = None,
        new_minimum: object = None,
    ) -> MovementApplied | Rejected | LedgerFailure:
        """Apply one movement to an existing item.

        ``new_minimum`` is only honoured for inflows. Authorization is the
        caller's job (see PermissionGate).
        """
        try:
            clean_id = validate_identifier(item_id)
            kind = MovementType.parse(movement_type)
            qty = Quantity.of(
                quantity, "quantity", maximum=MAX_MOVEMENT_QUANTITY, allow_zero=False
            ).value
            minimum = None
            if kind is MovementType.INFLOW and new_minimum is not None:
                minimum = Quantity.of(new_minimum, "minimum_quantity").value
        except DomainException as exc:
            return exc.to_rejection()

        with self._locks.hold(clean_id):
            return self._commit(
                clean_id, kind, qty, minimum, details or MovementDetails(), actor,
                undo=self._restore_quantity,
            )

    def register_item(
        self,
        *,
        name: object,
        category: object,
        unit: object,
        quantity: object,
        minimum_quantity: object = None,
        actor: Actor,
        details: MovementDetails | None = None,
    ) -> ItemRegistered | Rejected | LedgerFailure:
        """Catalogue a new item and record its genesis inflow.

        The item is created at quantity zero and the initial quantity is
        then applied as an ordinary inflow, so the ledger alone explains
        the item's stock. If the inflow cannot be committed the item is
        removed again.
        """
        try:
            draft = StockItem.create(
                name, category, unit, quantity, minimum_quantity,
                require_category=True,
                allow_zero_quantity=False,
                now=self._clock(),
            )
        except DomainException as exc:
            return exc.to_rejection()

        item = replace(draft, quantity=Decimal("0"), initial_quantity=Decimal("0"), minimum_quantity=None)
        try:
            self._items.create(item)
        except DomainException as exc:
            return exc.to_rejection()
        except PersistenceError as exc:
            logger.error(
                "item registration failed",
                extra={"item_name": item.name, "phase": CommitPhase.ITEM_CREATE.value, "error": str(exc)},
            )
            return LedgerFailure(
                item_id=item.id,
                phase=CommitPhase.ITEM_CREATE,
                compensation=CompensationStatus.NOT_REQUIRED,
                previous_quantity=None,
                attempted_quantity=draft.quantity,
                message="Could not create the item; nothing was recorded",
            )

        with self._locks.hold(item.id):
            outcome = self._commit(
                item.id, MovementType.INFLOW, draft.quantity, draft.minimum_quantity,
                details or MovementDetails(), actor,
                undo=self._remove_item,
            )

        if isinstance(outcome, MovementApplied):
            return ItemRegistered(item=outcome.item, movement=outcome.movement)
        if isinstance(outcome, LedgerFailure) and outcome.phase is CommitPhase.LEDGER_APPEND:
            return outcome

        # Nothing reached the ledger; drop the empty item so the name is free again.
        removed = self._remove_item(item, Decimal("0"), UNCHANGED)
        if isinstance(outcome, Rejected):
            return outcome
        return self._report_failure(
            replace(
                outcome,
                compensation=(
                    CompensationStatus.REVERTED if removed else CompensationStatus.REVERT_FAILED
                ),
            )
        )

    # --- Two-phase commit -----------------------------------------------------

    def _commit(
        self,
        item_id: str,
        kind: MovementType,
        qty: Decimal,
        minimum_raw: object,
        details: MovementDetails,
        actor: Actor,
        undo: Callable[[StockItem, Decimal, object], bool],
    ) -> MovementApplied | Rejected | LedgerFailure:
        for attempt in range(self._cas_retries + 1):
            item = self._items.get_by_id(item_id)
            if item is None:
                return Rejected(RejectionReason.NOT_FOUND, f"Item '{item_id}' not found", "item_id")

            try:
                new_quantity = item.quantity_after(kind, qty)
                minimum = (
                    validate_minimum(minimum_raw, new_quantity)
                    if minimum_raw is not None
                    else UNCHANGED
                )
                movement = Movement.record(
                    movement_type=kind,
                    item_id=item.id,
                    item_name=item.name,
                    quantity=qty,
                    details=details,
                    actor_id=actor.id,
                    actor_name=actor.display_name,
                    now=self._clock(),
                )
            except DomainException as exc:
                logger.warning(
                    "movement rejected",
                    extra={"item_id": item.id, "type": kind.value, "quantity": str(qty), "reason": exc.reason.value},
                )
                return exc.to_rejection()

            # Phase 1: conditional quantity update
            try:
                swapped = self._items.compare_and_set_quantity(
                    item.id, item.quantity, new_quantity, minimum
                )
            except PersistenceError as exc:
                logger.error(
                    "quantity update failed",
                    extra={
                        "item_id": item.id,
                        "previous_quantity": str(item.quantity),
                        "attempted_quantity": str(new_quantity),
                        "phase": CommitPhase.QUANTITY_UPDATE.value,
                        "error": str(exc),
                    },
                )
                return LedgerFailure(
                    item_id=item.id,
                    phase=CommitPhase.QUANTITY_UPDATE,
                    compensation=CompensationStatus.NOT_REQUIRED,
                    previous_quantity=item.quantity,
                    attempted_quantity=new_quantity,
                    message="Could not update the stock quantity; nothing was recorded",
                )
            if swapped:
                break
            logger.warning(
                "quantity changed concurrently, retrying",
                extra={"item_id": item.id, "attempt": attempt + 1},
            )
        else:
            return Rejected(
                RejectionReason.CONFLICT,
                f"Item '{item_id}' is being updated concurrently; try again",
                "item_id",
            )

        # Phase 2: append to the ledger
        try:
            self._movements.append(movement)
        except PersistenceError as exc:
            logger.error(
                "ledger append failed, compensating",
                extra={
                    "item_id": item.id,
                    "movement_id": movement.id,
                    "previous_quantity": str(item.quantity),
                    "attempted_quantity": str(new_quantity),
                    "phase": CommitPhase.LEDGER_APPEND.value,
                    "error": str(exc),
                },
            )
            restored = undo(item, new_quantity, minimum)
            return self._report_failure(
                LedgerFailure(
                    item_id=item.id,
                    phase=CommitPhase.LEDGER_APPEND,
                    compensation=(
                        CompensationStatus.REVERTED if restored else CompensationStatus.REVERT_FAILED
                    ),
                    previous_quantity=item.quantity,
                    attempted_quantity=new_quantity,
                    message=(
                        "Could not record the movement; the stock quantity was reverted"
                        if restored
                        else "Could not record the movement and could not revert the stock "
                        "quantity; stock and ledger are inconsistent"
                    ),
                )
            )

        logger.info(
            "movement recorded",
            extra={
                "item_id": item.id,
                "movement_id": movement.id,
                "type": kind.value,
                "quantity": format_quantity(qty),
                "new_quantity": format_quantity(new_quantity),
                "actor_id": actor.id,
            },
        )
        updated = replace(
            item,
            quantity=new_quantity,
            minimum_quantity=item.minimum_quantity if minimum is UNCHANGED else minimum,
        )
        return MovementApplied(movement=movement, item=updated)

    # --- Compensation ---------------------------------------------------------

    def _restore_quantity(self, item: StockItem, written: Decimal, written_minimum: object) -> bool:
        restore_minimum = UNCHANGED if written_minimum is UNCHANGED else item.minimum_quantity
        try:
            return self._items.compare_and_set_quantity(
                item.id, written, item.quantity, restore_minimum
            )
        except PersistenceError as exc:
            logger.error("compensating write failed", extra={"item_id": item.id, "error": str(exc)})
            return False

    def _remove_item(self, item: StockItem, written: Decimal, written_minimum: object) -> bool:
        try:
            self._items.remove(item.id)
        except PersistenceError as exc:
            logger.error("could not remove registered item", extra={"item_id": item.id, "error": str(exc)})
            return False
        return True

    def _report_failure(self, failure: LedgerFailure) -> LedgerFailure:
        if failure.inconsistent:
            logger.critical(
                "stock and ledger are inconsistent",
                extra={
                    "item_id": failure.item_id,
                    "phase": failure.phase.value,
                    "previous_quantity": str(failure.previous_quantity),
                    "attempted_quantity": str(failure.attempted_quantity),
                },
            )
            self._alerts.ledger_inconsistent(failure)
        return failure
