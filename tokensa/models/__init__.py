"""Data models for the Tokensa local server."""

from tokensa.models.intake import MAX_AGE, MAX_TAGS, MIN_AGE, GenerationRequest
from tokensa.models.output import ErrorResponse, GenerationResponse, HealthResponse, TagCatalog
from tokensa.models.tags import Domain, SymptomTag, tags_by_domain

__all__ = [
    "Domain",
    "ErrorResponse",
    "GenerationRequest",
    "GenerationResponse",
    "HealthResponse",
    "MAX_AGE",
    "MAX_TAGS",
    "MIN_AGE",
    "SymptomTag",
    "TagCatalog",
    "tags_by_domain",
]
