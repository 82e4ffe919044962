# embeddy/app/main.py
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from embeddy.app.api_router import router
from embeddy.app.dependencies import get_model_cache
from embeddy.core.domain.errors import EmbeddyError, InvalidInput, ModelNotFound
from embeddy.settings import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)  # after basicConfig

# Anything not listed here is a server-side failure
ERROR_STATUS = {
    InvalidInput: 400,
    ModelNotFound: 404,
}


def status_for(exc: EmbeddyError) -> int:
    for error_cls, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_cls):
            return status_code
    return 500


# --- Lifespan Context Manager ---
@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    logger.info("Lifespan startup: Initializing model cache...")
    cache = get_model_cache()
    logger.info(f"Lifespan startup: Model cache ready (device: {cache.device}).")
    logger.info("Models will be loaded on-demand when requested via API")
    yield
    logger.info("Lifespan shutdown: Cleaning up resources (if any)...")


app = FastAPI(title="Embeddy", lifespan=lifespan)


@app.exception_handler(EmbeddyError)
async def embeddy_error_handler(request: Request, exc: EmbeddyError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed unexpectedly: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(router, prefix="/api")


def run_server(host: str | None = None, port: int | None = None) -> None:
    host = host or settings.app_host
    port = port or settings.app_port
    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    # default: host="0.0.0.0", port=8080
    run_server()
