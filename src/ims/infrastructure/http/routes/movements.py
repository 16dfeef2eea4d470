from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ims.application.dto import MovementRequest
from ims.infrastructure.bootstrap import Container
from ims.infrastructure.http.dependencies import authenticated_actor_id, get_container
from ims.infrastructure.http.errors import unwrap
from ims.infrastructure.http.schemas import MovementReq

router = APIRouter(tags=["movements"])


@router.get("/movements")
def list_movements(
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    movements = unwrap(container.list_movements().handle(actor_id))
    return [asdict(m) for m in movements]


@router.post("/movements", status_code=201)
def record_movement(
    body: MovementReq,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    request = MovementRequest(**body.model_dump())
    movement = unwrap(container.record_movement().handle(actor_id, request))
    return asdict(movement)
