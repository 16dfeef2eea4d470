from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ims.application.dto import NewItemSpec
from ims.infrastructure.bootstrap import Container
from ims.infrastructure.http.dependencies import authenticated_actor_id, get_container
from ims.infrastructure.http.errors import unwrap
from ims.infrastructure.http.schemas import CreateItemReq, RegisterInflowReq

router = APIRouter(tags=["items"])


@router.get("/items")
def list_items(
    low_stock: bool = False,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    items = unwrap(container.list_items().handle(actor_id, low_stock_only=low_stock))
    return [asdict(i) for i in items]


@router.get("/items/{item_id}")
def get_item(
    item_id: str,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    return asdict(unwrap(container.show_item().handle(actor_id, item_id)))


@router.post("/items", status_code=201)
def create_item(
    body: CreateItemReq,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    item = unwrap(container.create_item().handle(actor_id, NewItemSpec(**body.model_dump())))
    return asdict(item)


@router.post("/items/register-inflow", status_code=201)
def register_inflow(
    body: RegisterInflowReq,
    container: Container = Depends(get_container),
    actor_id: str = Depends(authenticated_actor_id),
):
    registered = unwrap(
        container.register_item().handle(actor_id, NewItemSpec(**body.model_dump()))
    )
    return asdict(registered)
