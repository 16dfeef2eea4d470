"""FastAPI application factory.

The container is built in the lifespan handler unless one is passed in
(tests, ``ims serve``); routes reach it through ``app.state``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ims.infrastructure.bootstrap import Container, build_container
from ims.infrastructure.config import Settings
from ims.infrastructure.http.errors import install_error_handlers
from ims.infrastructure.http.routes import audit, items, movements, reconciliations
from ims.infrastructure.logging_config import configure_logging

API_PREFIX = "/api/stock"


def create_app(container: Container | None = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "container", None) is None:
            settings = Settings.from_env()
            configure_logging(settings.log_level)
            app.state.container = build_container(settings)
        yield

    app = FastAPI(title="IMS Inventory Movement Ledger", lifespan=lifespan)
    app.state.container = container

    install_error_handlers(app)
    app.include_router(movements.router, prefix=API_PREFIX)
    app.include_router(items.router, prefix=API_PREFIX)
    app.include_router(reconciliations.router, prefix=API_PREFIX)
    app.include_router(audit.router, prefix=API_PREFIX)
    return app
