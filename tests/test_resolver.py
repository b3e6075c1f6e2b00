"""Tests for trill.negotiation.resolver: one format per request."""

import pytest

from trill.http.request import Request
from trill.mime import default_registry
from trill.negotiation.context import NegotiationSettings
from trill.negotiation.resolver import FormatResolver, first_media_range, split_extension


def _request(
    path: str = "/resource",
    *,
    query: str = "",
    headers: dict[str, str] | None = None,
    method: str = "GET",
) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query.encode("latin-1"),
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()
        ],
    }
    return Request.from_asgi(scope)


def _resolver(literal: set[str] | None = None, **settings: object) -> FormatResolver:
    literal_paths = literal or set()
    return FormatResolver(
        default_registry(),
        NegotiationSettings(**settings),
        literal_route=lambda path: path in literal_paths,
    )


class TestSplitExtension:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/resource.xml", ("/resource", "xml")),
            ("/a/b/resource.tar.gz", ("/a/b/resource.tar", "gz")),
            ("/resource", ("/resource", None)),
            ("/.env", ("/.env", None)),
            ("/resource.", ("/resource.", None)),
            ("/v1.2/resource", ("/v1.2/resource", None)),
            ("/", ("/", None)),
        ],
    )
    def test_split(self, path, expected) -> None:
        assert split_extension(path) == expected


class TestFirstMediaRange:
    @pytest.mark.parametrize(
        ("accept", "expected"),
        [
            (None, None),
            ("", None),
            ("*/*", None),
            ("text/*, application/json", "application/json"),
            ("application/xml;q=0.5, text/html", "application/xml"),
            ("  Text/HTML ", "text/html"),
        ],
    )
    def test_first(self, accept, expected) -> None:
        assert first_media_range(accept) == expected


class TestPrecedence:
    def test_format_param_first(self) -> None:
        ctx, _ = _resolver().begin(
            _request(
                "/resource.json",
                query="format=xml",
                headers={"Accept": "text/html", "X-Requested-With": "XMLHttpRequest"},
            )
        )
        assert ctx.format == "xml"

    def test_extension_beats_xhr_and_accept(self) -> None:
        ctx, _ = _resolver().begin(
            _request(
                "/resource.json",
                headers={"Accept": "text/html", "X-Requested-With": "XMLHttpRequest"},
            )
        )
        assert ctx.format == "json"

    def test_xhr_beats_accept(self) -> None:
        ctx, _ = _resolver().begin(
            _request(headers={"Accept": "application/xml", "X-Requested-With": "XMLHttpRequest"})
        )
        assert ctx.format == "js"

    def test_xhr_ignored_when_disabled(self) -> None:
        ctx, _ = _resolver(assume_xhr_is_js=False).begin(
            _request(headers={"X-Requested-With": "XMLHttpRequest"})
        )
        assert ctx.format == "html"

    def test_accept(self) -> None:
        ctx, _ = _resolver().begin(_request(headers={"Accept": "application/json"}))
        assert ctx.format == "json"

    def test_default(self) -> None:
        ctx, _ = _resolver(default_content="txt").begin(_request())
        assert ctx.format == "txt"

    def test_unknown_values_fall_through(self) -> None:
        ctx, _ = _resolver().begin(
            _request("/resource.bogus", query="format=nope", headers={"Accept": "x/unknown"})
        )
        assert ctx.format == "html"
        assert ctx.route_path == "/resource.bogus"
        assert ctx.extension is None


class TestRoutePath:
    def test_extension_stripped(self) -> None:
        ctx, _ = _resolver().begin(_request("/users/42.json"))
        assert ctx.route_path == "/users/42"
        assert ctx.extension == "json"

    def test_literal_route_keeps_extension(self) -> None:
        ctx, _ = _resolver(literal={"/style.css"}).begin(_request("/style.css"))
        assert ctx.route_path == "/style.css"
        assert ctx.extension is None
        assert ctx.format == "html"


class TestAcceptRewrite:
    def test_explicit_format_rewrites_accept(self) -> None:
        original = _request(query="format=xml", headers={"Accept": "text/html"})
        _, downstream = _resolver().begin(original)
        assert downstream.accept == "application/xml"
        assert original.accept == "text/html"

    def test_extension_rewrites_accept(self) -> None:
        _, downstream = _resolver().begin(_request("/resource.js"))
        assert downstream.accept == "application/javascript"

    @pytest.mark.parametrize(
        "headers",
        [{"Accept": "application/json"}, {"X-Requested-With": "XMLHttpRequest"}, {}],
    )
    def test_implicit_rules_leave_accept_alone(self, headers) -> None:
        original = _request(headers=headers)
        _, downstream = _resolver().begin(original)
        assert downstream is original


class TestContentType:
    def test_textual_gets_default_charset(self) -> None:
        ctx, _ = _resolver().begin(_request("/resource.xml"))
        assert ctx.content_type_value == "application/xml;charset=utf-8"

    def test_binary_gets_no_charset(self) -> None:
        ctx, _ = _resolver().begin(_request("/logo.png"))
        assert ctx.content_type_value == "image/png"

    def test_no_default_charset(self) -> None:
        ctx, _ = _resolver(default_charset="").begin(_request())
        assert ctx.content_type_value == "text/html"

    def test_resolve_is_cached(self) -> None:
        resolver = _resolver()
        ctx = resolver.context_for(_request(headers={"Accept": "application/json"}))
        assert resolver.resolve(ctx) == "json"
        ctx.accept = "application/xml"
        assert resolver.resolve(ctx) == "json"

    def test_content_type_format_matches_resolved_format(self) -> None:
        for path in ("/r.html", "/r.json", "/r.css", "/r.txt", "/r.pdf"):
            ctx, _ = _resolver().begin(_request(path))
            assert ctx.content_type.get_format() == ctx.format
