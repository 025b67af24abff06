"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ripleyflow.api.middleware import ripley_error_handler
from ripleyflow.api.routes import download, process, status
from ripleyflow.models.errors import RipleyError


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="RipleyFlow",
        description="Media conversion, preview and denoising jobs",
        version="0.1.0",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(RipleyError, ripley_error_handler)

    # Routes
    app.include_router(process.router)
    app.include_router(status.router)
    app.include_router(download.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()
