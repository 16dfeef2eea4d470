"""Value Objects and input coercion shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from ims.domain.exceptions import ValidationError

MAX_MOVEMENT_QUANTITY = Decimal("1000000")
MAX_DECIMAL_PLACES = 6

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class Quantity:
    """A finite, non-negative stock quantity.

    Uses Decimal so that counts like ``2.5`` (kg, litres) compare exactly
    during reconciliation.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError(
                f"Quantity must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite():
            raise ValidationError("Quantity must be a finite number")
        if self.value < 0:
            raise ValidationError("Quantity cannot be negative")

    def __str__(self) -> str:
        return format_quantity(self.value)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(
        raw: object,
        field: str = "quantity",
        *,
        maximum: Decimal | None = None,
        allow_zero: bool = True,
    ) -> Quantity:
        """Coerce user input (int, str, float, Decimal) into a Quantity.

        Every failure names *field* so callers can report it per field.
        """
        if raw is None or isinstance(raw, bool):
            raise ValidationError(f"{field} is required", field=field)
        try:
            value = Decimal(str(raw).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"{field} must be a valid number", field=field) from exc
        if not value.is_finite():
            raise ValidationError(f"{field} must be a valid number", field=field)
        if value < 0:
            raise ValidationError(f"{field} must be at least 0", field=field)
        if -value.normalize().as_tuple().exponent > MAX_DECIMAL_PLACES:
            raise ValidationError(
                f"{field} must have at most {MAX_DECIMAL_PLACES} decimal places", field=field
            )
        if not allow_zero and value == 0:
            raise ValidationError(f"{field} must be greater than zero", field=field)
        if maximum is not None and value > maximum:
            raise ValidationError(
                f"{field} must be at most {format_quantity(maximum)}", field=field
            )
        return Quantity(value)


def format_quantity(value: Decimal) -> str:
    """Render without exponent or redundant trailing zeros (``5.0`` -> ``5``)."""
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")


def require_text(
    raw: object,
    field: str,
    *,
    min_length: int = 1,
    max_length: int = 500,
) -> str:
    """Trim and length-check a required string field."""
    if raw is None or not isinstance(raw, str):
        raise ValidationError(f"{field} is required", field=field)
    value = raw.strip()
    if len(value) < min_length:
        if not value:
            raise ValidationError(f"{field} cannot be empty", field=field)
        raise ValidationError(
            f"{field} must have at least {min_length} characters", field=field
        )
    if len(value) > max_length:
        raise ValidationError(
            f"{field} must have at most {max_length} characters", field=field
        )
    return value


def optional_text(raw: object, field: str, *, max_length: int = 500) -> str | None:
    """Like ``require_text`` but blank or missing input becomes None."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return require_text(raw, field, max_length=max_length)


def validate_identifier(raw: object, field: str = "item_id") -> str:
    if not isinstance(raw, str) or not _ID_PATTERN.match(raw.strip()):
        raise ValidationError(f"{field} is not a valid identifier", field=field)
    return raw.strip()


def parse_instant(raw: object, field: str = "timestamp") -> datetime:
    """Parse an ISO-8601 instant; naive values are taken as UTC."""
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"{field} must be a valid date", field=field) from exc
    else:
        raise ValidationError(f"{field} must be a valid date", field=field)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
