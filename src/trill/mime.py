"""Mime registry: format tag <-> canonical mime type.

Every other negotiation component depends on this mapping. Both
directions are plain dicts, so lookups are O(1). The reverse index is
rebuilt on registration (startup only) so that "first registered wins"
holds even after an entry is overwritten.

Usage::

    registry = default_registry()
    registry.lookup("json")                # "application/json"
    registry.lookup_format("text/html")    # "html"
    registry.register("ics", "text/calendar")
"""

from collections.abc import Iterator
from typing import TypeAlias

from trill.errors import UnknownFormat, UnknownMimeType

# A short format tag such as "html" or "json"
Format: TypeAlias = str

# One format per mime type, so set_format(f) then get_format() gives f back.
# Aliases registered later (app.mime_type("htm", "text/html")) lose the
# reverse lookup to the format registered first.
DEFAULT_MIME_TYPES: tuple[tuple[Format, str], ...] = (
    ("html", "text/html"),
    ("xhtml", "application/xhtml+xml"),
    ("xml", "application/xml"),
    ("js", "application/javascript"),
    ("json", "application/json"),
    ("css", "text/css"),
    ("txt", "text/plain"),
    ("csv", "text/csv"),
    ("atom", "application/atom+xml"),
    ("rss", "application/rss+xml"),
    ("yaml", "text/yaml"),
    ("svg", "image/svg+xml"),
    ("png", "image/png"),
    ("jpg", "image/jpeg"),
    ("gif", "image/gif"),
    ("ico", "image/vnd.microsoft.icon"),
    ("pdf", "application/pdf"),
)


def _normalize_mime(mime_type: str) -> str:
    """Strip parameters and whitespace, lowercase the type."""
    return mime_type.split(";", 1)[0].strip().lower()


class MimeRegistry:
    """Process-wide, read-mostly mapping between formats and mime types.

    Writes are expected only during app setup; reads are safe from any
    number of concurrent requests because nothing mutates after freeze.
    """

    __slots__ = ("_by_format", "_by_mime")

    def __init__(self, entries: tuple[tuple[Format, str], ...] = ()) -> None:
        self._by_format: dict[Format, str] = {}
        self._by_mime: dict[str, Format] = {}
        for format, mime_type in entries:
            self._by_format[format] = mime_type
        self._reindex()

    def register(self, format: Format, mime_type: str) -> None:
        """Add or overwrite a format. Registering the same pair twice is a no-op."""
        if not format or not mime_type:
            msg = "Both format and mime_type must be non-empty"
            raise ValueError(msg)
        if self._by_format.get(format) == mime_type:
            return
        self._by_format[format] = mime_type
        self._reindex()

    def lookup(self, format: Format) -> str:
        """Return the mime type for *format*.

        Raises ``UnknownFormat`` if the format is not registered.
        """
        try:
            return self._by_format[format]
        except KeyError:
            raise UnknownFormat(format) from None

    def lookup_format(self, mime_type: str) -> Format:
        """Return the first-registered format for *mime_type*.

        Parameters such as ``;charset=utf-8`` are ignored.
        Raises ``UnknownMimeType`` if no format matches.
        """
        try:
            return self._by_mime[_normalize_mime(mime_type)]
        except KeyError:
            raise UnknownMimeType(mime_type) from None

    @property
    def formats(self) -> tuple[Format, ...]:
        """Registered formats in registration order."""
        return tuple(self._by_format)

    def copy(self) -> "MimeRegistry":
        """Return an independent registry with the same entries."""
        return MimeRegistry(tuple(self._by_format.items()))

    def __contains__(self, format: object) -> bool:
        return format in self._by_format

    def __iter__(self) -> Iterator[Format]:
        return iter(self._by_format)

    def __len__(self) -> int:
        return len(self._by_format)

    def __repr__(self) -> str:
        return f"MimeRegistry({len(self)} formats)"

    def _reindex(self) -> None:
        by_mime: dict[str, Format] = {}
        for format, mime_type in self._by_format.items():
            by_mime.setdefault(_normalize_mime(mime_type), format)
        self._by_mime = by_mime


def default_registry() -> MimeRegistry:
    """Build a fresh registry pre-populated with the common web formats."""
    return MimeRegistry(DEFAULT_MIME_TYPES)


_TEXTUAL_APPLICATION_TYPES = frozenset({
    "application/javascript",
    "application/json",
    "application/xml",
})


def is_textual(mime_type: str) -> bool:
    """True for mime types that carry a charset (``text/*``, JSON, JS, XML)."""
    mime = _normalize_mime(mime_type)
    return (
        mime.startswith("text/")
        or mime in _TEXTUAL_APPLICATION_TYPES
        or mime.endswith("+xml")
        or mime.endswith("+json")
    )
