"""
FastAPI entrypoint for the public bucket proxy.

Routes live in bucket_proxy.routes; this module wires settings, the store
collaborator, CORS and JSON error rendering into an application.
"""
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .backend_clients import build_client
from .config import GatewaySettings
from .store import ObjectStore
from . import routes

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def create_app(
    settings: Optional[GatewaySettings] = None,
    store: Optional[ObjectStore] = None,
) -> FastAPI:
    """
    Build the application. Tests pass their own settings and a store backed
    by a stub client; production builds both from the environment.
    """
    if settings is None:
        settings = GatewaySettings.from_env()
    if store is None:
        store = ObjectStore(build_client(settings))

    app = FastAPI(title="Public Bucket Proxy")
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "ETag", "Cache-Control"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.on_event("startup")
    def startup_event():
        logger.info("Public bucket proxy listening on port %s", settings.listen_port)
        logger.info("Public read buckets: %s", ", ".join(sorted(settings.public_buckets)))

    app.include_router(routes.router)
    return app


settings = GatewaySettings.from_env()
logging.basicConfig(level=settings.log_level)

app = create_app(settings)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.listen_port)


if __name__ == "__main__":
    run()
