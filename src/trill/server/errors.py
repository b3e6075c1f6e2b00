"""Turning exceptions into responses.

Three kinds of failure reach here from the request pipeline:

- ``NegotiationFailure`` (unhandled format, missing template): a
  registered handler, else the error page presenter.
- ``HTTPError`` (404, 405, ...): a registered handler, else a plain-text
  body with the error's headers.
- anything else: logged with its traceback, then a registered 500
  handler, the debug page, or a bare ``Internal Server Error``.

A registered handler that leaves the status at 200 gets the failure's
status instead.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from jinja2 import Environment

from trill.errors import HTTPError, NegotiationFailure
from trill.http.request import Request
from trill.http.response import Response
from trill.negotiation.context import NegotiationContext
from trill.server.error_pages import ErrorPagePresenter
from trill.server.negotiation import to_response

logger = logging.getLogger("trill.server")

ErrorHandlers = dict[int | type, Callable[..., Any]]


def find_error_handler(exc: Exception, error_handlers: ErrorHandlers) -> Callable[..., Any] | None:
    """The handler for the closest registered class in the exception's MRO."""
    for klass in type(exc).__mro__:
        if klass in error_handlers:
            return error_handlers[klass]
        if klass is Exception:
            return None
    return None


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    env: Environment | None,
    ctx: NegotiationContext | None = None,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts."""
    arity = len(inspect.signature(handler).parameters)
    result = handler(*(request, exc)[: min(arity, 2)])
    if inspect.isawaitable(result):
        result = await result
    return to_response(result, env=env, ctx=ctx)


async def _handled(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
    env: Environment | None,
    ctx: NegotiationContext | None = None,
) -> Response:
    response = await call_error_handler(handler, request, exc, env, ctx)
    return response.with_status(status) if response.status == 200 else response


async def handle_negotiation_failure(
    exc: NegotiationFailure,
    request: Request,
    ctx: NegotiationContext,
    error_handlers: ErrorHandlers,
    env: Environment | None,
    presenter: ErrorPagePresenter,
) -> Response:
    """Answer an unhandled format (404) or a missing template (500)."""
    logger.info("%d %s %s [%s]: %s", exc.status, request.method, request.path, ctx.format, exc)
    handler = find_error_handler(exc, error_handlers) or error_handlers.get(exc.status)
    if handler is not None:
        return await _handled(handler, request, exc, exc.status, env, ctx)
    return presenter.present(exc, ctx)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    env: Environment | None,
    debug: bool,
) -> Response:
    """Answer an HTTPError; exact exception class wins over the status code."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        return await _handled(handler, request, exc, exc.status, env)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    response = Response(body=detail, status=exc.status, content_type="text/plain;charset=utf-8")
    return response.with_headers(dict(exc.headers))


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    env: Environment | None,
    debug: bool,
) -> Response:
    """Answer an unexpected exception with a 500 that leaks nothing in production."""
    logger.exception("500 %s %s", request.method, request.path)
    handler = error_handlers.get(500) or find_error_handler(exc, error_handlers)
    if handler is not None:
        return await _handled(handler, request, exc, 500, env)

    if debug:
        from trill.server.debug_page import render_debug_page

        return Response(body=render_debug_page(exc, request), status=500)
    return Response(body="Internal Server Error", status=500)
