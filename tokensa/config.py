"""Configuration management for the Tokensa local server."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3327)

    # Local LLM (Ollama)
    llm_backend: Literal["ollama", "openai"] = Field(
        default="ollama",
        description="'ollama' for the native chat API, 'openai' for an OpenAI-compatible endpoint",
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the local Ollama daemon",
    )
    ollama_model: str = Field(
        default="qwen3:4b",
        description="Model tag used for report generation",
    )
    openai_base_url: str = Field(
        default="http://localhost:11434/v1",
        description="OpenAI-compatible endpoint, used when llm_backend is 'openai'",
    )
    llm_timeout: int = Field(
        default=120,
        description="Timeout in seconds for LLM requests",
    )
    max_retries: int = Field(default=3, description="Attempts for single-shot generation")

    # Sampling
    llm_temperature: float = Field(default=0.5)
    llm_top_p: float = Field(default=0.9)
    llm_num_predict: int = Field(default=200, description="Maximum tokens generated per report")
    llm_seed: int = Field(default=42)

    # Origin allow-listing (CORS / Private Network Access)
    canonical_origin: str = Field(
        default="https://tokensa.com",
        description="Origin echoed back when the caller's origin is not allowed",
    )
    base_domain: str = Field(
        default="tokensa.com",
        description="Any subdomain of this domain is an allowed origin",
    )
    allowed_origins: list[str] = Field(
        default=[
            "https://tokensa.com",
            "https://www.tokensa.com",
            "http://127.0.0.1:5500",
            "http://localhost:5500",
        ],
        description="Exact origins (scheme + host + port) that are allowed",
    )
    default_allow_headers: str = Field(default="content-type, x-tokensa")

    # Observability
    observability_enabled: bool = Field(default=True)
    observability_log_dir: Path = Field(default=Path("data/logs"))

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (exposes error details in responses)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @property
    def display_host(self) -> str:
        """Host as shown in the startup banner."""
        if self.host == "0.0.0.0":
            return "0.0.0.0 (toutes interfaces)"
        return self.host


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
