"""CLI entry point for toolstream-server.

This module provides the command-line interface for starting the server.
It can be invoked as `toolstream-server` (via the script entry point) or
`python -m toolstream_server`.
"""

import argparse
import os
import sys
from typing import Any

import uvicorn

from toolstream_server import __version__, create_app
from toolstream_server.config import ToolstreamSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolstream-server",
        description="Chat streaming server with MCP tool calling via Ollama",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolstream-server {__version__}",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLSTREAM_HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOLSTREAM_PORT)",
    )
    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via TOOLSTREAM_OLLAMA_HOST)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model used for generation (default: llama3.2:latest, can be set via TOOLSTREAM_MODEL)",
    )
    parser.add_argument(
        "--mcp-url",
        type=str,
        default=None,
        help="MCP tool-provider endpoint (default: http://localhost:3001/sse, can be set via TOOLSTREAM_MCP_URL)",
    )
    parser.add_argument(
        "--mcp-transport",
        type=str,
        default=None,
        choices=["sse", "streamable-http"],
        help="MCP transport (default: sse, can be set via TOOLSTREAM_MCP_TRANSPORT)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLSTREAM_LOG_LEVEL)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ToolstreamSettings:
    """Build settings where CLI args override environment variables."""
    return ToolstreamSettings(**_cli_overrides(args))


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides = {
        "host": args.host,
        "port": args.port,
        "ollama_host": args.ollama_host,
        "model": args.model,
        "mcp_url": args.mcp_url,
        "mcp_transport": args.mcp_transport,
        "log_level": args.log_level,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the toolstream-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application. With --reload, uvicorn needs an import string, so
    the app is built by the factory in the reloader's worker process and CLI
    overrides reach it through TOOLSTREAM_* environment variables.
    """
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    if args.reload:
        prefix = ToolstreamSettings.model_config.get("env_prefix", "")
        for name, value in _cli_overrides(args).items():
            os.environ[f"{prefix}{name}".upper()] = str(value)
        uvicorn.run(
            "toolstream_server.app:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            reload=True,
        )
        return

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
