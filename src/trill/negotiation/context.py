"""Per-request negotiation state.

A ``NegotiationContext`` is created when format resolution starts and is
discarded when the request ends. It is published through a ContextVar
so ``respond_to`` and the charset/format helpers find it without the
handler passing it around.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field

from trill.config import AppConfig
from trill.http.request import Request
from trill.mime import Format, MimeRegistry
from trill.negotiation.content_type import ContentTypeHeader


@dataclass(frozen=True, slots=True)
class NegotiationSettings:
    """Snapshot of the configuration flags the resolver reads."""

    default_content: Format = "html"
    assume_xhr_is_js: bool = True
    static: bool = False
    default_charset: str = "utf-8"

    @classmethod
    def from_config(cls, config: AppConfig) -> NegotiationSettings:
        return cls(
            default_content=config.default_content,
            assume_xhr_is_js=config.assume_xhr_is_js,
            static=config.static,
            default_charset=config.default_charset,
        )


@dataclass(slots=True)
class NegotiationContext:
    """Everything format resolution knows about one request.

    Attributes:
        request: The request as received (before ``Accept`` is rewritten).
        accept: Raw ``Accept`` header.
        extension: Recognised format extension of the path, if any.
        format_param: The ``format`` query value, if any.
        xhr: Whether the request declared itself an XMLHttpRequest.
        route_path: Path presented to the router (extension stripped).
        settings: Configuration snapshot.
        registry: The app's mime registry.
        response_headers: Outgoing headers owned by this request.
        format: The resolved format, ``None`` until resolution has run.
    """

    request: Request
    accept: str | None
    extension: Format | None
    format_param: str | None
    xhr: bool
    route_path: str
    settings: NegotiationSettings
    registry: MimeRegistry
    response_headers: dict[str, str] = field(default_factory=dict)
    format: Format | None = None

    @property
    def content_type(self) -> ContentTypeHeader:
        """Format/charset accessor over this request's outgoing headers."""
        return ContentTypeHeader(self.response_headers, self.registry)

    @property
    def content_type_value(self) -> str | None:
        """The outgoing ``Content-Type`` value, if one has been set."""
        return self.content_type.value


negotiation_var: ContextVar[NegotiationContext] = ContextVar("trill_negotiation")
"""The current request's negotiation context. Set by the ASGI handler."""


def get_negotiation() -> NegotiationContext:
    """Return the current negotiation context.

    Raises ``LookupError`` if called outside a request.
    """
    return negotiation_var.get()


# -- Handler helpers (operate on the current request) --


def get_format() -> Format:
    """Return the format of the current response's ``Content-Type``."""
    return get_negotiation().content_type.get_format()


def set_format(format: Format) -> None:
    """Change the format of the current response, keeping the charset.

    ``respond_to`` dispatches on the new format from here on.
    """
    ctx = get_negotiation()
    ctx.content_type.set_format(format)
    ctx.format = format


def get_charset() -> str | None:
    """Return the charset of the current response."""
    return get_negotiation().content_type.get_charset()


def set_charset(charset: str) -> None:
    """Set (or, with ``""``, remove) the charset of the current response."""
    get_negotiation().content_type.set_charset(charset)
