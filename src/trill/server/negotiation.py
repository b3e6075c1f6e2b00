"""Return-value conversion: maps handler results to Response objects.

``to_response`` inspects what a route handler (or the producer picked by
``respond_to``) returned and builds the Response. isinstance-based
dispatch, no magic, fully predictable.

Bodies produced for the request (``str``, ``bytes``, ``Template``) carry
the ``Content-Type`` the format resolver and the handler settled on.
"""

import json as json_module
from dataclasses import replace
from typing import Any

from jinja2 import Environment

from trill.errors import ConfigurationError
from trill.http.response import Redirect, Response
from trill.negotiation.context import NegotiationContext
from trill.templating.integration import render_template
from trill.templating.returns import Template

FALLBACK_CONTENT_TYPE = "text/html;charset=utf-8"


def _negotiated_type(ctx: NegotiationContext | None) -> str:
    if ctx is None:
        return FALLBACK_CONTENT_TYPE
    return ctx.content_type_value or FALLBACK_CONTENT_TYPE


def _negotiated_response(body: str | bytes, ctx: NegotiationContext | None) -> Response:
    response = Response(body=body, content_type=_negotiated_type(ctx))
    # Encoded with the negotiated charset while still inside the error handling
    return replace(response, body=response.body_bytes)


def to_response(
    value: Any,
    *,
    env: Environment | None = None,
    ctx: NegotiationContext | None = None,
) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 302 with Location header
    3. ``Template``         -> render for the resolved format
    4. ``str`` / ``bytes``  -> 200 with the negotiated Content-Type
    5. ``dict`` / ``list``  -> 200, application/json
    6. ``(value, int)``     -> convert value, override status
    7. ``(value, int, dict)`` -> convert value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case Template():
            if env is None:
                msg = (
                    "Template return type requires a template environment. "
                    "Ensure a template_dir is configured in AppConfig."
                )
                raise ConfigurationError(msg)
            format = ctx.format if ctx is not None and ctx.format else "html"
            return _negotiated_response(render_template(env, value, format), ctx)
        case str() | bytes():
            return _negotiated_response(value, ctx)
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json;charset=utf-8",
            )
        case (inner, int() as status):
            return to_response(inner, env=env, ctx=ctx).with_status(status)
        case (inner, int() as status, dict() as headers):
            return to_response(inner, env=env, ctx=ctx).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return str, bytes, dict, list, Template, Response, or Redirect."
            )
            raise TypeError(msg)
