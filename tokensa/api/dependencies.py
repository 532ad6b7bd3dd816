"""FastAPI dependencies."""

from fastapi import HTTPException, Request

from tokensa.report.generator import ReportGenerator


def get_generator(request: Request) -> ReportGenerator:
    """Report generator created at startup."""
    generator = getattr(request.app.state, "generator", None)
    if generator is None:
        raise HTTPException(status_code=503, detail="Generator not initialized")
    return generator
