"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolstream-server.
        ollama_connected: Whether the Ollama server answered a connectivity check.
        ollama_host: The Ollama host URL.
        model: The model identifier used for generation.
        mcp_url: The configured tool-provider endpoint.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolstream-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    model: str | None = Field(default=None, description="Model used for generation")
    mcp_url: str | None = Field(default=None, description="Tool-provider endpoint")
