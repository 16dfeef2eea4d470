"""Movement: one immutable ledger entry.

Quantities are stored as a positive magnitude plus a type tag; use
``signed_quantity`` when summing the ledger.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.value_objects import optional_text, parse_instant


class MovementType(Enum):
    INFLOW = "entrada"
    OUTFLOW = "saida"

    @staticmethod
    def parse(raw: object) -> MovementType:
        if isinstance(raw, MovementType):
            return raw
        for member in MovementType:
            if raw in (member.value, member.name.lower()):
                return member
        raise ValidationError(
            'type must be "entrada" (inflow) or "saida" (outflow)', field="type"
        )


@dataclass(frozen=True)
class MovementDetails:
    """Optional context a caller attaches to a movement."""

    notes: str | None = None
    responsible: str | None = None
    sector: str | None = None
    ticket_number: str | None = None
    occurred_at: datetime | None = None

    @staticmethod
    def of(
        notes: object = None,
        responsible: object = None,
        sector: object = None,
        ticket_number: object = None,
        occurred_at: object = None,
    ) -> MovementDetails:
        return MovementDetails(
            notes=optional_text(notes, "notes", max_length=1000),
            responsible=optional_text(responsible, "responsible", max_length=200),
            sector=optional_text(sector, "sector", max_length=200),
            ticket_number=optional_text(ticket_number, "ticket_number", max_length=100),
            occurred_at=(
                parse_instant(occurred_at, "occurred_at")
                if occurred_at not in (None, "")
                else None
            ),
        )


@dataclass(frozen=True)
class Movement:
    id: str
    type: MovementType
    item_id: str
    item_name: str  # snapshot of the name at movement time
    quantity: Decimal
    occurred_at: datetime
    actor_id: str
    actor_name: str
    notes: str | None = None
    responsible: str | None = None
    sector: str | None = None
    ticket_number: str | None = None

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity if self.type is MovementType.INFLOW else -self.quantity

    @staticmethod
    def record(
        movement_type: MovementType,
        item_id: str,
        item_name: str,
        quantity: Decimal,
        details: MovementDetails,
        actor_id: str,
        actor_name: str,
        now: datetime,
    ) -> Movement:
        if not actor_id or not actor_name:
            raise ValidationError("Movement requires an actor", field="actor")
        return Movement(
            id=uuid.uuid4().hex,
            type=movement_type,
            item_id=item_id,
            item_name=item_name,
            quantity=quantity,
            occurred_at=details.occurred_at or now,
            actor_id=actor_id,
            actor_name=actor_name,
            notes=details.notes,
            responsible=details.responsible,
            sector=details.sector,
            ticket_number=details.ticket_number,
        )
