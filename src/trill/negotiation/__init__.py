"""Content negotiation: resolve one format per request and dispatch on it.

Modules:
    content_type -- ContentTypeValue, ContentTypeHeader (format + charset accessors)
    context -- NegotiationContext and the current-request helpers
    resolver -- FormatResolver (format param > extension > XHR > Accept > default)
    dispatch -- respond_to, Wants, RespondToDispatcher
"""

from trill.negotiation.content_type import ContentTypeHeader, ContentTypeValue
from trill.negotiation.context import (
    NegotiationContext,
    NegotiationSettings,
    get_charset,
    get_format,
    get_negotiation,
    set_charset,
    set_format,
)
from trill.negotiation.dispatch import RespondToDispatcher, Wants, respond_to
from trill.negotiation.resolver import FormatResolver

__all__ = [
    "ContentTypeHeader",
    "ContentTypeValue",
    "FormatResolver",
    "NegotiationContext",
    "NegotiationSettings",
    "RespondToDispatcher",
    "Wants",
    "get_charset",
    "get_format",
    "get_negotiation",
    "respond_to",
    "set_charset",
    "set_format",
]
