"""
POS API main application.
Entry point for the FastAPI server.
"""

from fastapi import FastAPI

from shared.config.settings import settings
from pos_api.core import configure_cors, lifespan, register_middlewares
from pos_api.routers import backup_router, health_router, system_router


app = FastAPI(
    title="POS Back-Office API",
    description="Backups, restores and system resets",
    version="0.1.0",
    lifespan=lifespan,
)

configure_cors(app)
register_middlewares(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(backup_router)
app.include_router(system_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pos_api.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=True,
    )
