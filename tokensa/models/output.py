"""API response models."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class GenerationResponse(BaseModel):
    """Full report returned by the single-shot endpoint."""

    text: str
    model: str


class HealthResponse(BaseModel):
    """Model availability."""

    ok: bool
    model: str
    ready: bool


class ErrorResponse(BaseModel):
    error: str
    details: Optional[list[dict[str, Any]]] = None


class TagCatalog(BaseModel):
    """Accepted symptom tags grouped by domain then category."""

    count: int
    domains: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
