"""Request-scoped context via ContextVar.

Provides ``request_var``, the current ``Request`` for this task/thread.
It is set by the handler pipeline and reset after each request;
accessing it outside a request raises ``LookupError``.

The per-request negotiation state lives next door in
``trill.negotiation.context``.
"""

from contextvars import ContextVar

from trill.http.request import Request

request_var: ContextVar[Request] = ContextVar("trill_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
