"""Configuration for the Monogram API client."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    """Where the client talks to and how long it waits."""
    api_base_url: str = Field(
        default="http://localhost:8080/api/v1", description="Base URL of the REST API"
    )
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
