"""Domain service: Ledger audit.

Replays the movement log per item and checks the ledger/counter
invariant ``quantity == initial_quantity + sum(signed movements)``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from ims.domain.model.value_objects import format_quantity
from ims.domain.repository.movement_repository import MovementRepository
from ims.domain.repository.stock_item_repository import StockItemRepository


@dataclass(frozen=True)
class AuditIssue:
    code: str
    item_id: str
    item_name: str
    detail: str


@dataclass(frozen=True)
class AuditReport:
    ok: bool
    items_checked: int
    movements_checked: int
    issues: list[AuditIssue]


class LedgerAuditService:

    def __init__(
        self,
        item_repo: StockItemRepository,
        movement_repo: MovementRepository,
    ) -> None:
        self._item_repo = item_repo
        self._movement_repo = movement_repo

    def audit(self) -> AuditReport:
        movements = self._movement_repo.list_all()
        items = self._item_repo.list_all()

        totals: dict[str, Decimal] = defaultdict(Decimal)
        names: dict[str, str] = {}
        for m in movements:
            totals[m.item_id] += m.signed_quantity
            names[m.item_id] = m.item_name

        issues: list[AuditIssue] = []
        known = set()
        for item in items:
            known.add(item.id)
            expected = item.initial_quantity + totals.get(item.id, Decimal("0"))
            if expected != item.quantity:
                issues.append(
                    AuditIssue(
                        code="quantity_ledger_mismatch",
                        item_id=item.id,
                        item_name=item.name,
                        detail=(
                            f"stored {format_quantity(item.quantity)}, "
                            f"ledger gives {format_quantity(expected)}"
                        ),
                    )
                )

        for item_id in sorted(set(totals) - known):
            issues.append(
                AuditIssue(
                    code="movement_references_missing_item",
                    item_id=item_id,
                    item_name=names[item_id],
                    detail="movements exist for an item that is no longer catalogued",
                )
            )

        return AuditReport(
            ok=not issues,
            items_checked=len(items),
            movements_checked=len(movements),
            issues=issues,
        )
