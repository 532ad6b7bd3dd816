"""Tokensa local server: speech-therapy report generation on a local LLM."""

__version__ = "0.1.0"
