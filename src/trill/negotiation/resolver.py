"""Format resolution: pick one format per request.

Precedence, highest first:

1. ``?format=<fmt>`` naming a registered format
2. A ``.<ext>`` suffix on the last path segment naming a registered format
   (skipped when the router has a literal route for the full path,
   whatever its method)
3. ``X-Requested-With: XMLHttpRequest`` -> ``js`` when ``assume_xhr_is_js``
4. The first concrete media range of ``Accept`` that maps to a format
5. ``default_content``

Rules 1 and 2 also rewrite the request's ``Accept`` header to the chosen
mime type so anything downstream sees a consistent request. Every rule
sets the mime-type portion of the outgoing ``Content-Type``.

Resolution never fails: unregistered values fall through, and the
default format is validated when the app freezes.
"""

import logging
import posixpath
from collections.abc import Callable

from trill.errors import UnknownMimeType
from trill.http.request import Request
from trill.mime import Format, MimeRegistry, is_textual
from trill.negotiation.context import NegotiationContext, NegotiationSettings

logger = logging.getLogger("trill.negotiation")

# path -> True when a route (for any method) matches the literal path exactly
LiteralRoute = Callable[[str], bool]


def split_extension(path: str) -> tuple[str, str | None]:
    """Split ``/resource.xml`` into ``("/resource", "xml")``.

    Only the last segment is considered; dot-files (``/.env``) and
    trailing dots carry no extension.
    """
    head, tail = posixpath.split(path)
    stem, dot, ext = tail.rpartition(".")
    if not dot or not stem or not ext:
        return path, None
    return posixpath.join(head, stem), ext


def first_media_range(accept: str | None) -> str | None:
    """Return the first non-wildcard media range of an Accept header.

    Parameters (``;q=0.9``) are stripped. Quality values are not ranked.
    """
    if not accept:
        return None
    for candidate in accept.split(","):
        media = candidate.split(";", 1)[0].strip().lower()
        if media and "*" not in media:
            return media
    return None


class FormatResolver:
    """Resolve the target format of a request.

    Usage::

        resolver = FormatResolver(registry, NegotiationSettings())
        ctx, request = resolver.begin(request)
        ctx.format                 # "xml"
        ctx.content_type_value     # "application/xml;charset=utf-8"
    """

    __slots__ = ("_literal_route", "_registry", "_settings")

    def __init__(
        self,
        registry: MimeRegistry,
        settings: NegotiationSettings,
        *,
        literal_route: LiteralRoute | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._literal_route = literal_route

    @property
    def settings(self) -> NegotiationSettings:
        return self._settings

    def context_for(self, request: Request) -> NegotiationContext:
        """Gather the request facts resolution depends on."""
        route_path, extension = request.path, None
        stripped, ext = split_extension(request.path)
        if ext is not None and ext in self._registry and not self._is_literal(request):
            route_path, extension = stripped, ext

        return NegotiationContext(
            request=request,
            accept=request.accept,
            extension=extension,
            format_param=request.query.get("format"),
            xhr=request.is_xhr,
            route_path=route_path,
            settings=self._settings,
            registry=self._registry,
        )

    def resolve(self, ctx: NegotiationContext) -> Format:
        """Resolve and cache the format; later calls return the cached value."""
        if ctx.format is not None:
            return ctx.format

        format, source = self._choose(ctx)
        ctx.format = format
        header = ctx.content_type
        header.set_format(format)
        charset = self._settings.default_charset
        if charset and is_textual(self._registry.lookup(format)) and header.get_charset() is None:
            header.set_charset(charset)
        logger.debug("%s %s -> %s (%s)", ctx.request.method, ctx.request.path, format, source)
        return format

    def begin(self, request: Request) -> tuple[NegotiationContext, Request]:
        """Create and resolve a context; return it with the downstream request.

        When the format came from the query parameter or the extension,
        the downstream request's ``Accept`` header names that mime type.
        """
        ctx = self.context_for(request)
        format = self.resolve(ctx)
        if self._is_explicit(ctx):
            request = request.with_header("Accept", self._registry.lookup(format))
        return ctx, request

    # -- Internal --

    def _choose(self, ctx: NegotiationContext) -> tuple[Format, str]:
        if ctx.format_param and ctx.format_param in self._registry:
            return ctx.format_param, "format parameter"

        if ctx.extension is not None:
            return ctx.extension, "extension"

        if ctx.xhr and self._settings.assume_xhr_is_js and "js" in self._registry:
            return "js", "xhr"

        media = first_media_range(ctx.accept)
        accepted = self._accepted(media) if media is not None else None
        if accepted is not None:
            return accepted, "accept"

        return self._settings.default_content, "default"

    def _accepted(self, media: str) -> Format | None:
        try:
            return self._registry.lookup_format(media)
        except UnknownMimeType:
            return None

    def _is_explicit(self, ctx: NegotiationContext) -> bool:
        if ctx.format_param and ctx.format_param in self._registry:
            return True
        return ctx.extension is not None

    def _is_literal(self, request: Request) -> bool:
        if self._literal_route is None:
            return False
        return self._literal_route(request.path)
