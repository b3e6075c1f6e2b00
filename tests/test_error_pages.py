"""Tests for trill.server.error_pages: production and development pages."""

import pytest

from trill.errors import MissingTemplate, UnhandledFormat
from trill.http.request import Request
from trill.mime import default_registry
from trill.negotiation.context import NegotiationContext, NegotiationSettings
from trill.server.error_pages import ErrorPagePresenter, handler_name, route_snippet, wants_call


def _ctx(route_path: str = "/missing-template", method: str = "GET") -> NegotiationContext:
    request = Request.from_asgi({"method": method, "path": route_path})
    return NegotiationContext(
        request=request,
        accept=None,
        extension=None,
        format_param=None,
        xhr=False,
        route_path=route_path,
        settings=NegotiationSettings(),
        registry=default_registry(),
        format="html",
    )


def _missing(format: str = "html", engine: str = "jinja", layout: str | None = "app"):
    return MissingTemplate(
        "missing-template",
        layout=layout,
        format=format,
        engine=engine,
        missing=f"missing-template.{format}.{engine}",
    )


class TestProduction:
    presenter = ErrorPagePresenter(debug=False)

    def test_missing_template(self) -> None:
        response = self.presenter.present(_missing(), _ctx())
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_unhandled_format(self) -> None:
        response = self.presenter.present(UnhandledFormat("txt", ("html",)), _ctx())
        assert response.status == 404
        assert response.text == "Not Found"
        assert "respond_to" not in response.text


class TestDevelopmentMissingTemplate:
    presenter = ErrorPagePresenter(debug=True)

    def test_names_expected_files(self) -> None:
        response = self.presenter.present(_missing(), _ctx())
        assert response.status == 500
        assert "missing-template.html.jinja" in response.text
        assert "app.html.jinja" in response.text

    def test_snippet(self) -> None:
        response = self.presenter.present(_missing(), _ctx())
        snippet = route_snippet(
            "/missing-template",
            "GET",
            'wants.html(lambda: Template("missing-template", layout="app"))',
        )
        assert snippet in response.text

    def test_snippet_mentions_non_default_engine(self) -> None:
        response = self.presenter.present(_missing("xml", "j2"), _ctx())
        assert 'engine="j2"' in response.text
        assert "missing-template.xml.j2" in response.text

    def test_without_layout(self) -> None:
        response = self.presenter.present(_missing(layout=None), _ctx())
        assert "layout=" not in response.text

    def test_image(self) -> None:
        response = self.presenter.present(_missing(), _ctx())
        assert "src='/__trill__/500.png'" in response.text
        assert response.content_type == "text/html;charset=utf-8"


class TestDevelopmentUnhandledFormat:
    presenter = ErrorPagePresenter(debug=True, diagnostics_prefix="/_diag/")

    def test_snippet_and_image(self) -> None:
        response = self.presenter.present(UnhandledFormat("txt", ("html", "json")), _ctx())
        assert response.status == 404
        assert 'wants.txt(lambda: "Hello World")' in response.text
        assert "src='/_diag/404.png'" in response.text

    def test_lists_handled_formats(self) -> None:
        response = self.presenter.present(UnhandledFormat("txt", ("html", "json")), _ctx())
        assert "<code>html</code>, <code>json</code>" in response.text

    def test_non_get_route(self) -> None:
        response = self.presenter.present(UnhandledFormat("txt"), _ctx("/items", "POST"))
        assert '@app.route("/items", methods=["POST"])' in response.text

    def test_escapes_route_path(self) -> None:
        response = self.presenter.present(UnhandledFormat("txt"), _ctx("/<script>"))
        assert "<script>" not in response.text


class TestSnippetHelpers:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/missing-template", "missing_template"),
            ("/", "index"),
            ("/users/42", "users_42"),
            ("/2024/archive", "_2024_archive"),
        ],
    )
    def test_handler_name(self, path, expected) -> None:
        assert handler_name(path) == expected

    @pytest.mark.parametrize(
        ("format", "expected"),
        [("txt", "wants.txt"), ("x-yaml", 'wants["x-yaml"]'), ("class", 'wants["class"]')],
    )
    def test_wants_call(self, format, expected) -> None:
        assert wants_call(format) == expected
