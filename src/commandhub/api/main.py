"""
CommandHub API - FastAPI adapter over the command orchestrator
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commandhub import __version__
from commandhub.application.bootstrap import CommandHubRuntime, create_runtime
from commandhub.config.settings import Settings
from commandhub.config.validated_settings import load_validated_settings
from commandhub.infrastructure.logging import configure_logging

from .auth import Authenticator, HeaderAuthenticator
from .routes import commands


def create_app(
    runtime: Optional[CommandHubRuntime] = None,
    *,
    settings: Optional[Settings] = None,
    authenticator: Optional[Authenticator] = None,
) -> FastAPI:
    """
    Build the HTTP app.

    A runtime passed in is owned by the caller; otherwise one is built from
    COMMANDHUB_CONFIG on startup and closed on shutdown.
    """
    if settings is None:
        settings = runtime.settings if runtime is not None else load_validated_settings(os.getenv("COMMANDHUB_CONFIG"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "runtime", None) is None:
            configure_logging(settings.logging)
            owned = create_runtime(settings)
            app.state.runtime = owned
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.runtime = None

    app = FastAPI(
        title=settings.api.title,
        description="Command orchestration: registry, permissions, validation and execution",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = runtime
    app.state.authenticator = authenticator or HeaderAuthenticator(default_role=settings.api.default_role)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Liveness endpoint"""
        return {"status": "healthy", "version": __version__}

    @app.get("/")
    async def service_info():
        return {
            "service": settings.api.title,
            "version": __version__,
            "endpoints": {
                "execute": "POST /api/commands",
                "sequence": "POST /api/commands/sequence",
                "parallel": "POST /api/commands/parallel",
                "commands": "GET /api/commands",
                "documentation": "GET /api/commands/documentation",
                "health": "GET /api/commands/health",
            },
        }

    app.include_router(commands.router, prefix="/api", tags=["Commands"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
