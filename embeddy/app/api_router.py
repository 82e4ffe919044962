# embeddy/app/api_router.py

"""
FastAPI router for the application endpoints.

Handlers are plain ``def`` so FastAPI runs them in its threadpool.
"""

import logging

from fastapi import APIRouter, Depends

from embeddy.app.dependencies import get_model_cache
from embeddy.core.domain.errors import InvalidInput
from embeddy.core.services.model_cache import ModelCache
from embeddy.models import EmbedRequest, EmbedResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------- API Endpoints ---------------------- #


@router.get("/health", response_model=HealthResponse)
def health(cache: ModelCache = Depends(get_model_cache)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        loaded_models=cache.loaded_models(),
        device=str(cache.device),
    )


@router.post(
    "/embed",
    response_model=EmbedResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def embed(
    request: EmbedRequest, cache: ModelCache = Depends(get_model_cache)
) -> EmbedResponse:
    """
    Embeds every string of ``request.input`` with ``request.model``.

    The model is loaded on first use and kept for the life of the process.
    Errors are rendered by the ``EmbeddyError`` handler in ``main``.
    """
    if not request.input:
        raise InvalidInput("Input cannot be empty")

    embedder = cache.ensure_loaded(request.model)
    embeddings = embedder.embed(request.input)
    logger.debug(f"Embedded {len(embeddings)} texts with '{request.model}'")

    return EmbedResponse(
        model=request.model,
        dimension=embedder.embedding_dim,
        embeddings=embeddings,
    )
