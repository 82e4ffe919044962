# embeddy/models.py
from typing import List

from pydantic import BaseModel, Field


# API
class EmbedRequest(BaseModel):
    """Request schema for the `/embed` endpoint."""

    model: str = Field(..., description="Registered model name or alias")
    input: List[str] = Field(..., description="Texts to embed, in order")


class EmbedResponse(BaseModel):
    model: str
    dimension: int
    embeddings: List[List[float]]


class HealthResponse(BaseModel):
    status: str
    loaded_models: List[str] = []
    device: str


class ErrorResponse(BaseModel):
    error: str
