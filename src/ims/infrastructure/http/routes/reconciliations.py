from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ims.application.dto import EntrySubmission, ReconciliationSubmission, entry_to_dto
from ims.infrastructure.bootstrap import Container
from ims.infrastructure.http.dependencies import authenticated_actor_id, get_container
from ims.infrastructure.http.errors import unwrap
from ims.infrastructure.http.schemas import ReconciliationReq

router = APIRouter(tags=["reconciliations"])


@router.post("/reconciliations/start")
def start_reconciliation(
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    """Snapshot the catalog for a new count; nothing is stored."""
    session = unwrap(container.start_reconciliation().handle(actor_id))
    return {
        "operator": session.operator,
        "started_at": session.started_at.isoformat(),
        "entries": [asdict(entry_to_dto(e)) for e in session.entries],
    }


@router.get("/reconciliations")
def list_reconciliations(
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    reports = unwrap(container.list_reconciliations().handle(actor_id))
    return [asdict(r) for r in reports]


@router.get("/reconciliations/stats")
def reconciliation_stats(
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    return asdict(unwrap(container.reconciliation_stats().handle(actor_id)))


@router.get("/reconciliations/{report_id}")
def get_reconciliation(
    report_id: str,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    return asdict(unwrap(container.show_reconciliation().handle(actor_id, report_id)))


@router.post("/reconciliations", status_code=201)
def submit_reconciliation(
    body: ReconciliationReq,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    submission = ReconciliationSubmission(
        month=body.month,
        year=body.year,
        started_at=body.started_at,
        ended_at=body.ended_at,
        entries=[EntrySubmission(**e.model_dump()) for e in body.entries],
    )
    report_id = unwrap(container.submit_reconciliation().handle(actor_id, submission))
    return {"id": report_id}
