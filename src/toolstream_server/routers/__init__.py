"""FastAPI routers for API endpoints.

Each router module defines endpoints for a specific concern (health, chat).
"""

from toolstream_server.routers import chat, health

__all__ = ["chat", "health"]
