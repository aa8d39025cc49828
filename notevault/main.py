"""FastAPI application entry point."""

from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from notevault.config import Settings, get_settings
from notevault.generation import TextGenerator
from notevault.log import logger, setup_logging
from notevault.operations.router import router as operations_router
from notevault.vault import Vault


def create_app(settings: Settings, generator: TextGenerator | None = None) -> FastAPI:
    """Build the application.

    The vault is opened here so a missing or invalid vault path stops the
    process before it starts serving.

    Args:
        settings: Loaded configuration
        generator: Text generator override (defaults to the configured OpenAI model)

    Raises:
        InvalidPathError: If the vault path does not exist or is not a directory
    """
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.server_name, version=settings.server_version)
    app.state.settings = settings
    app.state.vault = Vault(root=settings.vault_path)
    app.state.generator = generator or TextGenerator.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(operations_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "server": settings.server_name,
            "version": settings.server_version,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/info")
    async def info(request: Request) -> dict:
        """Server info with current vault statistics."""
        stats = await request.app.state.vault.stats()
        return {
            "server": settings.server_name,
            "version": settings.server_version,
            "vault_path": str(request.app.state.vault.root),
            "vault_stats": stats.model_dump(mode="json"),
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {"name": settings.server_name, "version": settings.server_version, "docs": "/docs"}

    logger.info(
        "app_startup",
        extra={
            "vault_path": str(app.state.vault.root),
            "host": settings.host,
            "port": settings.port,
        },
    )
    return app


def run() -> None:
    """Serve the application with uvicorn using environment settings."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
