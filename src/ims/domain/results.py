"""Typed outcomes returned by the public operations.

Expected failures (bad input, missing entities, permissions, business
rules) come back as ``Rejected``. Failures of the store while a movement
is being committed come back as ``LedgerFailure``, which records how far
the commit got and whether the compensating write worked.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class RejectionReason(Enum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    NOT_AUTHENTICATED = "not_authenticated"
    FORBIDDEN = "forbidden"
    INSUFFICIENT_STOCK = "insufficient_stock"
    DUPLICATE_NAME = "duplicate_name"
    NO_ENTRIES_REVIEWED = "no_entries_reviewed"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str
    field: str | None = None

    @property
    def code(self) -> str:
        return self.reason.value


class CommitPhase(Enum):
    ITEM_CREATE = "item_create"
    QUANTITY_UPDATE = "quantity_update"
    LEDGER_APPEND = "ledger_append"


class CompensationStatus(Enum):
    NOT_REQUIRED = "not_required"
    REVERTED = "reverted"
    REVERT_FAILED = "revert_failed"


@dataclass(frozen=True)
class LedgerFailure:
    """A movement could not be committed.

    ``inconsistent`` is True only when the compensating write also failed,
    i.e. the stored quantity and the ledger are now known to disagree.
    """

    item_id: str
    phase: CommitPhase
    compensation: CompensationStatus
    previous_quantity: Decimal | None
    attempted_quantity: Decimal | None
    message: str

    @property
    def inconsistent(self) -> bool:
        return self.compensation is CompensationStatus.REVERT_FAILED

    @property
    def code(self) -> str:
        return "ledger_inconsistent" if self.inconsistent else "movement_not_recorded"
