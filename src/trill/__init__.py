"""Trill: content negotiation for ASGI apps.

Resolves one format per request (``?format=``, extension, XHR, Accept,
default), sets the outgoing Content-Type and charset, and lets each
handler supply one body per format.

Basic usage::

    from trill import App, Template, respond_to

    app = App()

    @app.route("/resource")
    def resource():
        def formats(wants):
            wants.html(lambda: Template("resource", layout="app"))
            wants.json(lambda: {"name": "resource"})

        return respond_to(formats)

    app.run()

``GET /resource.json``, ``GET /resource?format=json`` and
``GET /resource`` with ``Accept: application/json`` all run the JSON
producer.
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "ContentTypeHeader",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "MimeRegistry",
    "MissingContentType",
    "MissingTemplate",
    "NegotiationContext",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "StaticFiles",
    "Template",
    "TrillError",
    "UnhandledFormat",
    "UnknownCharset",
    "UnknownFormat",
    "UnknownMimeType",
    "Wants",
    "get_charset",
    "get_format",
    "get_request",
    "respond_to",
    "set_charset",
    "set_format",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trill`` fast while providing a clean top-level API.
    """
    if name == "App":
        from trill.app import App

        return App

    if name == "AppConfig":
        from trill.config import AppConfig

        return AppConfig

    if name == "Request":
        from trill.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from trill.http import response as _resp

        return getattr(_resp, name)

    if name == "Template":
        from trill.templating.returns import Template

        return Template

    if name == "MimeRegistry":
        from trill.mime import MimeRegistry

        return MimeRegistry

    if name in (
        "ContentTypeHeader",
        "NegotiationContext",
        "Wants",
        "get_charset",
        "get_format",
        "respond_to",
        "set_charset",
        "set_format",
    ):
        from trill import negotiation as _neg

        return getattr(_neg, name)

    if name in ("AnyResponse", "Middleware", "Next", "StaticFiles"):
        from trill import middleware as _mw

        return getattr(_mw, name)

    if name == "get_request":
        from trill.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "MissingContentType",
        "MissingTemplate",
        "NotFound",
        "TrillError",
        "UnhandledFormat",
        "UnknownCharset",
        "UnknownFormat",
        "UnknownMimeType",
    ):
        from trill import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
