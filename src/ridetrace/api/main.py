"""FastAPI application factory."""
from fastapi import FastAPI

from ridetrace.api.routes import activities


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""
    app = FastAPI(
        title="Ridetrace API",
        description="FIT activity analytics and track simplification",
        version="0.1.0",
    )

    app.include_router(activities.router, prefix="/activities", tags=["activities"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


# Module-level app instance for uvicorn
app = create_app()
