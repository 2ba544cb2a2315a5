"""FastAPI application factory for the podguard synthesis API."""

from __future__ import annotations

from fastapi import FastAPI

from podguard import __version__
from podguard.config import PodguardConfig


def create_app(config: PodguardConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or PodguardConfig.load()

    app = FastAPI(
        title="podguard",
        version=__version__,
        docs_url="/api/docs",
    )
    app.state.config = config

    # Register API routers
    from podguard.web.api.networkpolicy import router as networkpolicy_router
    from podguard.web.api.seccomp import router as seccomp_router
    from podguard.web.api.syscalls import router as syscalls_router

    app.include_router(networkpolicy_router, prefix="/api")
    app.include_router(seccomp_router, prefix="/api")
    app.include_router(syscalls_router, prefix="/api")

    return app
