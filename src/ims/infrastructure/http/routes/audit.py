from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ims.infrastructure.bootstrap import Container
from ims.infrastructure.http.dependencies import authenticated_actor_id, get_container
from ims.infrastructure.http.errors import unwrap

router = APIRouter(tags=["audit"])


@router.get("/audit")
def audit_ledger(
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    """Replay the movement log against every item's stored quantity."""
    return asdict(unwrap(container.audit_ledger().handle(actor_id)))
