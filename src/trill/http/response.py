"""Responses and redirects.

A ``Response`` is frozen; every ``with_*`` call returns a new one. The
``Content-Type`` is a dedicated field rather than an entry in
``headers`` because it is what negotiation decides: the sender always
emits it, and the charset it names is the one ``str`` bodies are
encoded with.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace

DEFAULT_CHARSET = "utf-8"


def charset_of(content_type: str) -> str | None:
    """The ``charset`` parameter of a Content-Type value, if present."""
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return None


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response.

    ``Response("<p>hi</p>").with_status(201).with_header("X-Id", "7")``
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html;charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Append a header; earlier headers with the same name are kept."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> "Response":
        return replace(self, content_type=content_type)

    @property
    def charset(self) -> str:
        """The charset the content type names, ``utf-8`` when it names none."""
        return charset_of(self.content_type) or DEFAULT_CHARSET

    @property
    def body_bytes(self) -> bytes:
        """The body on the wire; ``str`` bodies are encoded with ``charset``."""
        if isinstance(self.body, str):
            return self.body.encode(self.charset)
        return self.body

    @property
    def text(self) -> str:
        """The body decoded with ``charset``; undecodable bytes are replaced."""
        if isinstance(self.body, bytes):
            return self.body.decode(self.charset, errors="replace")
        return self.body

    def header(self, name: str, default: str | None = None) -> str | None:
        """First header named *name*, case-insensitively; covers Content-Type."""
        wanted = name.lower()
        if wanted == "content-type":
            return self.content_type
        return next((value for key, value in self.headers if key.lower() == wanted), default)


@dataclass(frozen=True, slots=True)
class Redirect:
    """Return from a handler to redirect; ``status`` defaults to 302."""

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()
