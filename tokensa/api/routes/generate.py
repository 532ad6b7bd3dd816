"""Report generation endpoints (single JSON response or streamed text)."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from tokensa.api.dependencies import get_generator
from tokensa.models.intake import GenerationRequest
from tokensa.models.output import ErrorResponse, GenerationResponse
from tokensa.report.generator import ReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])

JSON_UTF8 = "application/json; charset=utf-8"


@router.post(
    "/generate",
    response_model=GenerationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(
    body: GenerationRequest,
    generator: ReportGenerator = Depends(get_generator),
):
    """Generate the full report and return it once complete."""
    try:
        text = await generator.generate_once(body)
    except Exception:
        logger.exception("Generation failed (JSON)")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Generation failed").model_dump(exclude_none=True),
            media_type=JSON_UTF8,
        )

    return JSONResponse(
        content=GenerationResponse(text=text, model=generator.model_name).model_dump(),
        media_type=JSON_UTF8,
    )


@router.post(
    "/generate/stream",
    response_class=StreamingResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate_stream(
    body: GenerationRequest,
    generator: ReportGenerator = Depends(get_generator),
):
    """Stream the report as plain text, fragment by fragment."""
    return StreamingResponse(
        generator.stream_generate(body),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
