"""Speech-therapy report generation: prompt, model call and clean-up."""

from tokensa.report.generator import ReportGenerator, stream_error_message
from tokensa.report.postprocess import (
    ThinkingFilter,
    extract_json_object,
    extract_report_text,
    normalize_whitespace,
    personalize,
    postprocess,
    strip_thinking,
)
from tokensa.report.prompt import (
    SYSTEM_PROMPT,
    build_messages,
    build_prompt,
    encode_profile,
)

__all__ = [
    "ReportGenerator",
    "SYSTEM_PROMPT",
    "ThinkingFilter",
    "build_messages",
    "build_prompt",
    "encode_profile",
    "extract_json_object",
    "extract_report_text",
    "normalize_whitespace",
    "personalize",
    "postprocess",
    "stream_error_message",
    "strip_thinking",
]
