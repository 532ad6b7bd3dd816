"""Health check endpoint."""

from fastapi import APIRouter, Depends

from tokensa.api.dependencies import get_generator
from tokensa.models.output import HealthResponse
from tokensa.report.generator import ReportGenerator

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(generator: ReportGenerator = Depends(get_generator)) -> HealthResponse:
    """Check that the local model API answers."""
    ok = await generator.ping()
    return HealthResponse(ok=ok, model=generator.model_name, ready=ok)
