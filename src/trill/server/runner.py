"""Serve a trill App with uvicorn.

uvicorn's ``run()`` also accepts an import string (``"myapp:app"``), but
``App.run()`` has a live object, so it is handed over directly. Reload
needs an import string and is therefore only enabled when one is given.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import uvicorn

if TYPE_CHECKING:
    from trill.app import App

logger = logging.getLogger("trill.server")


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    log_level: str = "info",
    app_path: str | None = None,
) -> None:
    """Start uvicorn for *app* and block until it exits.

    Args:
        app: The trill App instance.
        host: Bind host address.
        port: Bind port number.
        log_level: Passed to uvicorn and applied to the ``trill`` loggers.
        app_path: Optional ``"module:attribute"`` import string. When
            given and the app is in debug mode, uvicorn reloads on changes.
    """
    logging.getLogger("trill").setLevel(log_level.upper())
    mode = "development" if app.config.debug else "production"
    logger.info("Serving on http://%s:%d (%s)", host, port, mode)

    if app_path is not None and app.config.debug:
        uvicorn.run(app_path, host=host, port=port, log_level=log_level, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, log_level=log_level)
