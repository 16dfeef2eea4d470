"""Actors and their capabilities.

Stored permissions come in three historical shapes: a bare string
(``"admin"``), an object of flags (``{"login": true, "editarEstoque":
true, "isAdmin": false}``) and the current ``{"capabilities": [...]}``.
``normalize_permission`` is the one place that understands all three; the
rest of the code only ever sees a frozenset of ``Capability``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Capability(Enum):
    VIEW = "view"
    OUTFLOW = "outflow"
    INFLOW = "inflow"
    RECONCILE = "reconcile"


class OperationClass(Enum):
    VIEW_STOCK = "view_stock"
    RECORD_OUTFLOW = "record_outflow"
    RECORD_INFLOW = "record_inflow"
    CREATE_ITEM = "create_item"
    RECONCILE = "reconcile"

    @property
    def required_capability(self) -> Capability:
        return _REQUIRED[self]


_REQUIRED = {
    OperationClass.VIEW_STOCK: Capability.VIEW,
    OperationClass.RECORD_OUTFLOW: Capability.OUTFLOW,
    OperationClass.RECORD_INFLOW: Capability.INFLOW,
    OperationClass.CREATE_ITEM: Capability.INFLOW,
    OperationClass.RECONCILE: Capability.RECONCILE,
}


ALL_CAPABILITIES = frozenset(Capability)
_LOGIN_CAPABILITIES = frozenset({Capability.VIEW, Capability.OUTFLOW, Capability.RECONCILE})


@dataclass(frozen=True)
class Actor:
    id: str
    display_name: str
    capabilities: frozenset[Capability] = frozenset()

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


def normalize_permission(raw: object) -> frozenset[Capability]:
    """Translate any stored permission shape into capabilities."""
    if isinstance(raw, str):
        return ALL_CAPABILITIES if raw == "admin" else frozenset()

    if not isinstance(raw, dict):
        return frozenset()

    if "capabilities" in raw:
        names = raw.get("capabilities")
        if not isinstance(names, list):
            return frozenset()
        known = {c.value: c for c in Capability}
        return frozenset(known[n] for n in names if isinstance(n, str) and n in known)

    if raw.get("isAdmin") is True:
        return ALL_CAPABILITIES
    if raw.get("login") is not True:
        return frozenset()
    if raw.get("editarEstoque") is True:
        return _LOGIN_CAPABILITIES | {Capability.INFLOW}
    return _LOGIN_CAPABILITIES


def serialize_capabilities(capabilities: frozenset[Capability]) -> dict:
    return {"capabilities": sorted(c.value for c in capabilities)}
