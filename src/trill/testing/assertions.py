"""Content-Type assertion helpers for trill tests.

Each assertion produces a clear error message on failure.
"""

from trill.http.response import Response
from trill.mime import MimeRegistry, default_registry
from trill.negotiation.content_type import ContentTypeValue


def assert_format(
    response: Response,
    format: str,
    *,
    registry: MimeRegistry | None = None,
) -> None:
    """Assert the response's Content-Type mime type is the one for *format*."""
    expected = (registry or default_registry()).lookup(format)
    actual = ContentTypeValue.parse(response.content_type).mime_type
    assert actual == expected, (
        f"Expected {format!r} ({expected}), got Content-Type {response.content_type!r}"
    )


def assert_charset(response: Response, charset: str | None) -> None:
    """Assert the response's charset. ``None`` means no charset parameter."""
    actual = ContentTypeValue.parse(response.content_type).charset
    assert actual == charset, (
        f"Expected charset {charset!r}, got Content-Type {response.content_type!r}"
    )
