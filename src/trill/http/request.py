"""The request as the negotiation layer sees it.

Only the parts format resolution and handlers read are kept: method,
path, headers and the query string. Body parsing is left to the
application. A request is never mutated; the format resolver hands a
rewritten ``Accept`` downstream through ``with_header``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from trill.http.headers import Headers


def parse_query(query_string: str) -> dict[str, str]:
    """First value per name; blank values are kept (``?format=`` is ``""``)."""
    params: dict[str, str] = {}
    for name, value in parse_qsl(query_string, keep_blank_values=True):
        params.setdefault(name, value)
    return params


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request."""

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query_string: str = ""
    query: Mapping[str, str] = field(default_factory=dict)

    @property
    def accept(self) -> str | None:
        """The raw ``Accept`` header value."""
        return self.headers.get("accept")

    @property
    def is_xhr(self) -> bool:
        """True if ``X-Requested-With`` says ``XMLHttpRequest``."""
        return (self.headers.get("x-requested-with") or "").lower() == "xmlhttprequest"

    def with_header(self, name: str, value: str) -> Request:
        """Return a copy of this request with *name* set to *value*."""
        return replace(self, headers=self.headers.replace(name, value))

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Build a request from an HTTP scope; ``path`` is already percent-decoded."""
        query_string = scope.get("query_string", b"").decode("latin-1")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers.from_asgi(scope.get("headers", ())),
            query_string=query_string,
            query=parse_query(query_string),
        )
