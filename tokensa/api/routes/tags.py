"""Catalog of accepted symptom tags, for building intake forms."""

from fastapi import APIRouter

from tokensa.models.output import TagCatalog
from tokensa.models.tags import SymptomTag, tags_by_domain

router = APIRouter(tags=["tags"])


@router.get("/tags", response_model=TagCatalog)
async def list_tags() -> TagCatalog:
    return TagCatalog(count=len(SymptomTag), domains=tags_by_domain())
