"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException.
Entities raise them to protect their invariants; the public operations
(ledger, application handlers) convert them once into ``Rejected`` results
so callers never have to catch them.

``PersistenceError`` is deliberately *not* a DomainException: it signals an
unexpected failure of the store, not a rule the caller broke.
"""

from __future__ import annotations

from ims.domain.results import Rejected, RejectionReason


class DomainException(Exception):
    """Base class for all domain errors."""

    reason = RejectionReason.VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_rejection(self) -> Rejected:
        return Rejected(reason=self.reason, message=self.message, field=self.field)


class ValidationError(DomainException):
    """Malformed or out-of-range input."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    reason = RejectionReason.NOT_FOUND


class DuplicateNameError(DomainException):
    """An item with the same name is already catalogued."""

    reason = RejectionReason.DUPLICATE_NAME


class InsufficientStockError(DomainException):
    """An outflow would drive the quantity below zero."""

    reason = RejectionReason.INSUFFICIENT_STOCK


class NoEntriesReviewedError(DomainException):
    """A reconciliation was finalized before any entry was counted."""

    reason = RejectionReason.NO_ENTRIES_REVIEWED


class InvalidStateError(DomainException):
    """An operation is not allowed in the aggregate's current state."""


class PersistenceError(Exception):
    """The underlying store failed to read or write."""
