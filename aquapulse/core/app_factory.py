from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..domain.errors import AuthError, InternalError
from ..presentation.api.routers import auth as auth_router
from .config import Settings
from .container import ApplicationContainer, build_container
from .logging import configure_logging

logger = logging.getLogger(__name__)

ContainerFactory = Callable[[Settings], ApplicationContainer]


def create_application(
    settings: Optional[Settings] = None,
    container_factory: Optional[ContainerFactory] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="AquaPulse Auth API",
        lifespan=_create_lifespan(settings, container_factory or build_container),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, _auth_error_handler)
    app.include_router(auth_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _create_lifespan(settings: Settings, container_factory: ContainerFactory):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = container_factory(settings)
        container.auth_service.ensure_default_admin(
            settings.admin_default_email, settings.admin_default_password
        )
        app.state.container = container  # type: ignore[attr-defined]
        logger.info("AquaPulse auth API ready (database: %s)", settings.database_path)
        try:
            yield
        finally:
            app.state.container = None  # type: ignore[attr-defined]

    return lifespan
