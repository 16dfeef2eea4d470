from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from ims.infrastructure.bootstrap import Container
from ims.infrastructure.http.errors import unwrap


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_actor_id(x_actor_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Identity asserted by the upstream authentication layer."""
    return x_actor_id.strip() if x_actor_id else None


def authenticated_actor_id(
    container: Container = Depends(get_container),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> str:
    """Reject unknown callers with 401 before the request body is validated."""
    return unwrap(container.gate.authenticate(actor_id)).id
