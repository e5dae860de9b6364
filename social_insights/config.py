"""Configuration management for Social Insights."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from rich.logging import RichHandler


DEFAULT_ERROR_SENTINEL = (
    "Uh-oh! There seems to be an error on our side. Please try again later."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Langflow workflow
    langflow_base_url: str = Field(
        default="https://api.langflow.astra.datastax.com",
        description="Base URL of the Langflow deployment"
    )
    langflow_id: str = Field(
        default="",
        description="Langflow organisation/project ID"
    )
    langflow_flow_id: str = Field(
        default="",
        description="ID of the flow that answers questions about the data"
    )
    langflow_access_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the Langflow API"
    )
    langflow_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for a single flow run"
    )
    error_sentinel: str = Field(
        default=DEFAULT_ERROR_SENTINEL,
        description="Reply substituted when the flow call fails"
    )

    # Extraction
    vocabulary_file: Optional[str] = Field(
        default=None,
        description="JSON file overriding heading and label synonyms"
    )

    # Data
    data_file: str = Field(
        default="data/social_media_data.csv",
        description="CSV file with post-level performance data"
    )

    # Web API
    web_host: str = Field(
        default="127.0.0.1",
        description="Web API host"
    )
    web_port: int = Field(
        default=8000,
        description="Web API port"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    """Route log records through rich for the CLI and the web server."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
