"""
Product Image Archive Service

FastAPI application factory.

Routers:
    POST    /api/images-zip   Bundle many images into one ZIP download
    GET     /api/images-zip   Passthrough proxy for a single image
    OPTIONS /api/images-zip   CORS preflight
    GET     /health           Liveness check

Run:
    cd backend
    uvicorn main:app --reload
"""

import logging
import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from image_archive import router as image_archive_router
from image_proxy import router as image_proxy_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Product Image Archive API",
        description="Bundles remote product images into ZIP downloads and proxies single images.",
        version="1.0.0",
    )

    app.include_router(image_archive_router)
    app.include_router(image_proxy_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return JSONResponse(content={
            "status": "healthy",
            "service": "image-archive",
        })

    return app


app = create_app()
