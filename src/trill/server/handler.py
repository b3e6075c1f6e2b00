"""ASGI request pipeline.

One HTTP request, start to finish:

1. Paths under the diagnostics prefix are answered immediately, in
   every mode and ahead of any middleware.
2. The format is resolved and the negotiation context published in
   ``negotiation_var``; ``request_var`` holds the downstream request
   (``Accept`` possibly rewritten).
3. Middleware (static files first, when enabled) wraps the route call.
4. Whatever escapes becomes a response: negotiation failures through the
   error page presenter, everything else through ``trill.server.errors``.
"""

import inspect
from collections.abc import Callable
from typing import Any

from jinja2 import Environment

from trill._internal.asgi import Receive, Scope, Send
from trill._internal.invoke import invoke
from trill.context import request_var
from trill.errors import HTTPError, NegotiationFailure
from trill.http.request import Request
from trill.middleware.protocol import AnyResponse, Next
from trill.negotiation.context import NegotiationContext, negotiation_var
from trill.negotiation.resolver import FormatResolver
from trill.routing.route import RouteMatch
from trill.routing.router import Router, convert_param
from trill.server.diagnostics import is_diagnostics_path, serve_diagnostics
from trill.server.error_pages import ErrorPagePresenter
from trill.server.errors import (
    ErrorHandlers,
    handle_http_error,
    handle_internal_error,
    handle_negotiation_failure,
)
from trill.server.negotiation import to_response
from trill.server.sender import send_response

Providers = dict[type, Callable[..., Any]]


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    resolver: FormatResolver,
    presenter: ErrorPagePresenter,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    env: Environment | None = None,
    debug: bool,
    diagnostics_prefix: str,
    providers: Providers | None = None,
) -> None:
    """Answer one HTTP request. Request bodies are never read."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    head = request.method == "HEAD"

    if is_diagnostics_path(request.path, diagnostics_prefix):
        await send_response(await serve_diagnostics(request, diagnostics_prefix), send, head=head)
        return

    ctx, downstream = resolver.begin(request)

    async def endpoint(req: Request) -> AnyResponse:
        match = router.match(req.method, ctx.route_path)
        return await _call_route(match, req, ctx, env, providers)

    request_token = request_var.set(downstream)
    ctx_token = negotiation_var.set(ctx)
    try:
        response = await _chain(middleware, endpoint)(downstream)
    except NegotiationFailure as exc:
        response = await handle_negotiation_failure(
            exc, downstream, ctx, error_handlers, env, presenter
        )
    except HTTPError as exc:
        response = await handle_http_error(exc, downstream, error_handlers, env, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, downstream, error_handlers, env, debug)
    finally:
        negotiation_var.reset(ctx_token)
        request_var.reset(request_token)

    await send_response(response, send, head=head)


def _chain(middleware: tuple[Callable[..., Any], ...], endpoint: Next) -> Next:
    """Fold *middleware* around *endpoint*; the first entry runs outermost."""
    call = endpoint
    for mw in reversed(middleware):

        async def step(req: Request, _mw: Callable[..., Any] = mw, _next: Next = call) -> AnyResponse:
            return await _mw(req, _next)

        call = step
    return call


async def _call_route(
    match: RouteMatch,
    request: Request,
    ctx: NegotiationContext,
    env: Environment | None,
    providers: Providers | None,
) -> AnyResponse:
    handler = match.route.handler
    kwargs = _handler_kwargs(handler, request, ctx, match.path_params, providers)
    result = await invoke(handler, **kwargs)
    return to_response(result, env=env, ctx=ctx)


def _handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    ctx: NegotiationContext,
    path_params: dict[str, str],
    providers: Providers | None,
) -> dict[str, Any]:
    """Fill handler parameters by name or annotation.

    ``request`` / ``Request`` and ``negotiation`` / ``NegotiationContext``
    come first, then path parameters (``int`` and ``float`` annotations
    convert the captured text), then ``app.provide()`` factories.
    Parameters nothing matches are left to their defaults.
    """
    kwargs: dict[str, Any] = {}
    for name, param in inspect.signature(handler, eval_str=True).parameters.items():
        annotation = param.annotation
        if name == "request" or annotation is Request:
            kwargs[name] = request
        elif name == "negotiation" or annotation is NegotiationContext:
            kwargs[name] = ctx
        elif name in path_params:
            kwargs[name] = _path_value(path_params[name], annotation)
        elif providers and annotation in providers:
            kwargs[name] = providers[annotation]()
    return kwargs


def _path_value(raw: str, annotation: Any) -> Any:
    if annotation not in (int, float):
        return raw
    try:
        return convert_param(raw, annotation.__name__)
    except ValueError:
        return raw
