"""Configuration module for toolstream-server using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolstreamSettings(BaseSettings):
    """Main configuration settings for toolstream-server.

    All settings can be overridden via environment variables with the
    TOOLSTREAM_ prefix. For example, TOOLSTREAM_MCP_URL will override the
    mcp_url setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.2:latest"

    # Tool provider (MCP)
    mcp_url: str = "http://localhost:3001/sse"
    mcp_transport: Literal["sse", "streamable-http"] = "sse"
    mcp_headers: dict[str, str] = Field(default_factory=dict)

    # Timeouts in seconds. A value of 0 disables the stream abandonment watchdog.
    mcp_connect_timeout: float = Field(default=10.0, gt=0)
    mcp_discovery_timeout: float = Field(default=10.0, gt=0)
    tool_call_timeout: float = Field(default=60.0, gt=0)
    stream_idle_timeout: float = Field(default=120.0, gt=0)
    stream_abandon_timeout: float = Field(default=600.0, ge=0)

    # Generation
    max_tool_steps: int = Field(default=5, ge=1)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLSTREAM_")
