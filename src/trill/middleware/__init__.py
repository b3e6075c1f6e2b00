"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    StaticFiles -- Serve files from the public directory (path-traversal safe)
"""

from trill.middleware.protocol import AnyResponse, Middleware, Next
from trill.middleware.static import StaticFiles, is_servable

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
    "StaticFiles",
    "is_servable",
]
