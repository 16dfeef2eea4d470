"""StockItem aggregate: one counter per catalogued item.

The quantity only changes through the Movement Ledger. Descriptive fields
(description, supplier, price, location) ride along but take no part in
the ledger invariant.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from ims.domain.exceptions import InsufficientStockError, ValidationError
from ims.domain.model.movement import MovementType
from ims.domain.model.value_objects import (
    MAX_MOVEMENT_QUANTITY,
    Quantity,
    format_quantity,
    optional_text,
    require_text,
)

DEFAULT_UNIT = "un"
MAX_PRICE = Decimal("999999999.99")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockItem:
    """Aggregate root for a catalogued item.

    Invariants:
    - ``quantity`` is never negative
    - ``quantity == initial_quantity + sum of signed movements`` (kept by
      the ledger, checked by the ledger audit)

    Use ``StockItem.create()`` for new items. ``__init__`` does not
    validate so repositories can reconstitute stored items as they are.
    """

    id: str
    name: str
    category: str
    unit: str
    quantity: Decimal
    initial_quantity: Decimal
    minimum_quantity: Decimal | None = None
    description: str = ""
    supplier: str = ""
    price: Decimal = Decimal("0")
    location: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW items only) ------------------------------------

    @staticmethod
    def create(
        name: object,
        category: object = "",
        unit: object = None,
        quantity: object = 0,
        minimum_quantity: object = None,
        *,
        description: object = None,
        supplier: object = None,
        price: object = None,
        location: object = None,
        require_category: bool = False,
        allow_zero_quantity: bool = True,
        item_id: str | None = None,
        now: datetime | None = None,
    ) -> StockItem:
        """Validate all fields and build a new item."""
        clean_name = require_text(name, "name", max_length=200)
        if require_category:
            clean_category = require_text(category, "category", max_length=100)
        else:
            clean_category = optional_text(category, "category", max_length=100) or ""
        clean_unit = optional_text(unit, "unit", max_length=20) or DEFAULT_UNIT

        qty = Quantity.of(
            quantity,
            "quantity",
            maximum=MAX_MOVEMENT_QUANTITY,
            allow_zero=allow_zero_quantity,
        ).value
        minimum = validate_minimum(minimum_quantity, qty)

        clean_price = Decimal("0")
        if price is not None:
            clean_price = Quantity.of(price, "price", maximum=MAX_PRICE).value

        created = now or _utcnow()
        return StockItem(
            id=item_id or uuid.uuid4().hex,
            name=clean_name,
            category=clean_category,
            unit=clean_unit,
            quantity=qty,
            initial_quantity=qty,
            minimum_quantity=minimum,
            description=optional_text(description, "description", max_length=1000) or "",
            supplier=optional_text(supplier, "supplier", max_length=200) or "",
            price=clean_price,
            location=optional_text(location, "location", max_length=200) or "",
            created_at=created,
            updated_at=created,
        )

    # --- Queries --------------------------------------------------------------

    @property
    def is_low_stock(self) -> bool:
        return self.minimum_quantity is not None and self.quantity <= self.minimum_quantity

    def quantity_after(self, movement_type: MovementType, quantity: Decimal) -> Decimal:
        """Return the quantity this item would hold after the movement.

        Raises InsufficientStockError if an outflow would go below zero.
        Does not mutate the item.
        """
        if movement_type is MovementType.INFLOW:
            return self.quantity + quantity
        new_quantity = self.quantity - quantity
        if new_quantity < 0:
            raise InsufficientStockError(
                f"Insufficient stock for {self.name} "
                f"(need {format_quantity(quantity)}, have {format_quantity(self.quantity)})",
                field="quantity",
            )
        return new_quantity


def validate_minimum(raw: object, ceiling: Decimal) -> Decimal | None:
    """A minimum threshold is optional but may not exceed *ceiling*."""
    if raw is None:
        return None
    minimum = Quantity.of(raw, "minimum_quantity").value
    if minimum > ceiling:
        raise ValidationError(
            f"minimum_quantity must be at most {format_quantity(ceiling)}",
            field="minimum_quantity",
        )
    return minimum
