"""Content-Type header: structured view plus format/charset accessors.

``ContentTypeValue`` parses and serialises one header value. The charset
is always written as ``;charset=<value>`` after the mime type and any
other parameters, which keep their original order. Parsing what this
module writes gives back the same value.

``ContentTypeHeader`` addresses the mime-type portion (as a format tag)
and the charset of a mutable header mapping independently. Reads never
write to the mapping.

Usage::

    headers = {"Content-Type": "text/html"}
    ct = ContentTypeHeader(headers, registry)
    ct.set_charset("utf-8")      # "text/html;charset=utf-8"
    ct.set_format("json")        # "application/json;charset=utf-8"
    ct.get_format()              # "json"
"""

import codecs
from collections.abc import MutableMapping
from dataclasses import dataclass, replace

from trill.errors import MissingContentType, UnknownCharset
from trill.mime import Format, MimeRegistry

HEADER_NAME = "Content-Type"


def check_charset(charset: str) -> None:
    """Raise ``UnknownCharset`` unless a codec is registered for *charset*."""
    try:
        codecs.lookup(charset)
    except LookupError:
        raise UnknownCharset(charset) from None


@dataclass(frozen=True, slots=True)
class ContentTypeValue:
    """A parsed ``Content-Type`` value."""

    mime_type: str
    charset: str | None = None
    params: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: str) -> "ContentTypeValue":
        """Parse a header value. Unknown parameters are kept in order."""
        mime_type, *raw_params = value.split(";")
        charset: str | None = None
        params: list[tuple[str, str]] = []
        for raw in raw_params:
            raw = raw.strip()
            if not raw:
                continue
            name, _, param_value = raw.partition("=")
            name = name.strip()
            param_value = param_value.strip()
            if name.lower() == "charset":
                charset = param_value.strip('"') or None
            else:
                params.append((name, param_value))
        return cls(mime_type=mime_type.strip(), charset=charset, params=tuple(params))

    def with_mime_type(self, mime_type: str) -> "ContentTypeValue":
        return replace(self, mime_type=mime_type)

    def with_charset(self, charset: str | None) -> "ContentTypeValue":
        return replace(self, charset=charset or None)

    def __str__(self) -> str:
        parts = [self.mime_type]
        parts.extend(f"{name}={value}" if value else name for name, value in self.params)
        if self.charset:
            parts.append(f"charset={self.charset}")
        return ";".join(parts)


class ContentTypeHeader:
    """Format and charset accessors over a mutable header mapping.

    The mapping is typically the per-request outgoing header dict held by
    ``NegotiationContext``, but any ``MutableMapping[str, str]`` works.
    """

    __slots__ = ("_headers", "_registry")

    def __init__(self, headers: MutableMapping[str, str], registry: MimeRegistry) -> None:
        self._headers = headers
        self._registry = registry

    # -- Raw access --

    @property
    def value(self) -> str | None:
        """The raw header value, or ``None`` if not set."""
        key = self._key()
        return None if key is None else self._headers[key]

    def _key(self) -> str | None:
        for key in self._headers:
            if key.lower() == HEADER_NAME.lower():
                return key
        return None

    def _parsed(self) -> ContentTypeValue:
        value = self.value
        if value is None:
            raise MissingContentType
        return ContentTypeValue.parse(value)

    def _write(self, value: ContentTypeValue) -> None:
        key = self._key() or HEADER_NAME
        self._headers[key] = str(value)

    # -- Format --

    def get_format(self) -> Format:
        """Return the format of the current mime type.

        Raises ``MissingContentType`` if no header exists and
        ``UnknownMimeType`` if the mime type is not registered.
        """
        return self._registry.lookup_format(self._parsed().mime_type)

    def set_format(self, format: Format) -> None:
        """Replace the mime type with *format*'s, keeping the charset.

        Creates the header if it does not exist yet.
        Raises ``UnknownFormat`` for an unregistered format.
        """
        mime_type = self._registry.lookup(format)
        current = self.value
        if current is None:
            self._write(ContentTypeValue(mime_type))
            return
        self._write(ContentTypeValue.parse(current).with_mime_type(mime_type))

    # -- Charset --

    def get_charset(self) -> str | None:
        """Return the charset parameter, or ``None``.

        Raises ``MissingContentType`` if no header exists.
        """
        return self._parsed().charset

    def set_charset(self, charset: str) -> None:
        """Set the charset; an empty string removes it.

        Raises ``MissingContentType`` if no header exists and
        ``UnknownCharset`` if no codec is registered for *charset*.
        """
        parsed = self._parsed()
        if charset:
            check_charset(charset)
        if not charset and parsed.charset is None:
            return
        self._write(parsed.with_charset(charset))
