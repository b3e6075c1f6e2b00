"""Diagnostic assets served under the reserved prefix.

The development error pages reference ``<prefix>/404.png`` and
``<prefix>/500.png``. These requests are answered before middleware and
routing run, in every mode, so the images load even when the app has
no static files and no matching route.
"""

from pathlib import Path

import anyio

from trill.http.request import Request
from trill.http.response import Response

ASSETS_DIR = Path(__file__).parent / "assets"

ASSETS: dict[str, str] = {
    "404.png": "image/png",
    "500.png": "image/png",
}


def is_diagnostics_path(path: str, prefix: str) -> bool:
    """True for ``<prefix>`` itself and anything below it."""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


async def serve_diagnostics(request: Request, prefix: str) -> Response:
    """Serve one of the bundled assets, or 404 for any other name."""
    name = request.path[len(prefix.rstrip("/")) :].lstrip("/")
    content_type = ASSETS.get(name)
    if content_type is None:
        return Response(body="Not Found", status=404, content_type="text/plain;charset=utf-8")
    data = await anyio.Path(ASSETS_DIR / name).read_bytes()
    return Response(
        body=data,
        content_type=content_type,
        headers=(("Cache-Control", "public, max-age=86400"),),
    )
