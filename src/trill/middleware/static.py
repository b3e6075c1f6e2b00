"""Static file serving from the public directory.

``is_servable`` is the containment check: the request path is resolved
under the static root (``..`` segments and symlinks included) and must
land strictly inside it, on an existing regular file. ``StaticFiles``
serves such paths byte-for-byte and lets everything else fall through
to the application.

The app installs ``StaticFiles`` only when ``AppConfig.static`` is on;
with static serving off the guard is never consulted.
"""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import anyio
import anyio.to_thread

from trill.http.request import Request
from trill.http.response import Response
from trill.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("trill.static")


@dataclass(frozen=True, slots=True)
class StaticCandidate:
    """A canonicalised file path and whether it may be served."""

    path: Path
    servable: bool


def resolve_static(request_path: str, static_root: str | Path) -> StaticCandidate:
    """Canonicalise *request_path* under *static_root*.

    *request_path* is the ASGI ``path``, which the server has already
    percent-decoded; it is not decoded again, so a file literally named
    ``a%20b.txt`` is reachable as ``/a%2520b.txt``.
    """
    root = Path(static_root).resolve()
    relative = request_path.lstrip("/")
    if "\x00" in relative:
        return StaticCandidate(path=root, servable=False)
    candidate = (root / relative).resolve()
    servable = (
        candidate != root
        and candidate.is_relative_to(root)
        and candidate.is_file()
    )
    return StaticCandidate(path=candidate, servable=servable)


def is_servable(request_path: str, static_root: str | Path) -> bool:
    """True if *request_path* names a regular file strictly inside *static_root*."""
    return resolve_static(request_path, static_root).servable


class StaticFiles:
    """Middleware that serves files from a public directory at the site root.

    Security: resolves symlinks and verifies the final path is within the
    configured directory to prevent path traversal.

    Usage::

        app.add_middleware(StaticFiles(directory="./public"))
    """

    __slots__ = ("_cache_control", "_directory")

    def __init__(
        self,
        directory: str | Path,
        *,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._cache_control = cache_control

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        candidate = await anyio.to_thread.run_sync(resolve_static, request.path, self._directory)
        if not candidate.servable:
            if not candidate.path.is_relative_to(self._directory):
                logger.debug("Refusing static path outside root: %s", request.path)
            return await next(request)

        return await self._serve_file(candidate.path)

    async def _serve_file(self, file_path: Path) -> Response:
        """Read a file and build a response."""
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"

        body = await anyio.Path(file_path).read_bytes()

        return (
            Response(body=body, content_type=content_type)
            .with_header("Cache-Control", self._cache_control)
        )
