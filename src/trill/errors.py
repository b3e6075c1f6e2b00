"""Trill exception hierarchy.

Shared across Router, App, handler, middleware, and the negotiation
layer so every module raises and catches the same types.

Two families matter for content negotiation:

- Programmer errors (``UnknownFormat``, ``UnknownMimeType``,
  ``MissingContentType``) are raised immediately and never converted
  into a response by the negotiation layer.
- Request-time failures (``UnhandledFormat``, ``MissingTemplate``) derive
  from ``NegotiationFailure`` and are always caught at the dispatch
  boundary and turned into a 404/500 page.
"""

from dataclasses import dataclass


class TrillError(Exception):
    """Base for all trill-specific errors."""


class ConfigurationError(TrillError):
    """Raised when app configuration is invalid.

    Typically caught during ``App._freeze()`` at startup.
    """


class UnknownFormat(TrillError):  # noqa: N818
    """A format tag is not present in the mime registry."""

    def __init__(self, format: str) -> None:
        self.format = format
        super().__init__(f"Unknown format {format!r}: register it with app.mime_type()")


class UnknownMimeType(TrillError):  # noqa: N818
    """A mime type has no registered format."""

    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(f"No format is registered for mime type {mime_type!r}")


class UnknownCharset(TrillError):  # noqa: N818
    """A charset name that Python has no codec for."""

    def __init__(self, charset: str) -> None:
        self.charset = charset
        super().__init__(f"Unknown charset {charset!r}: no codec is registered under that name")


class MissingContentType(TrillError):
    """Charset or format was read or written before any Content-Type existed."""

    def __init__(self) -> None:
        super().__init__("The response has no Content-Type header yet")


@dataclass(frozen=True, slots=True)
class HTTPError(TrillError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class NegotiationFailure(TrillError):
    """Base for request-time negotiation failures.

    Never escapes the request pipeline: the handler hands these to the
    ``ErrorPagePresenter``.
    """

    status: int = 500


class UnhandledFormat(NegotiationFailure):  # noqa: N818
    """``respond_to`` found no producer for the resolved format."""

    status = 404

    def __init__(self, format: str, registered: tuple[str, ...] = ()) -> None:
        self.format = format
        self.registered = tuple(registered)
        handled = ", ".join(self.registered) or "nothing"
        super().__init__(f"No producer for format {format!r} (handled: {handled})")


class MissingTemplate(NegotiationFailure):
    """A producer rendered a template that does not exist.

    Attributes:
        template: Logical template name (``"resource"``).
        layout: Logical layout name, if one was requested.
        format: The format the template was looked up for.
        engine: Template engine key (see ``trill.templating.engines``).
        missing: The concrete file name the loader could not find.
    """

    status = 500

    def __init__(
        self,
        template: str,
        *,
        format: str,
        engine: str,
        layout: str | None = None,
        missing: str | None = None,
    ) -> None:
        self.template = template
        self.layout = layout
        self.format = format
        self.engine = engine
        self.missing = missing
        super().__init__(f"Template not found: {missing or template!r}")
