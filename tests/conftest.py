"""Shared fixtures: a site on disk and the resource app built on it."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from trill.app import App
from trill.config import AppConfig
from trill.http.request import Request
from trill.negotiation import Wants, respond_to, set_charset
from trill.templating.returns import Template


@dataclass(frozen=True, slots=True)
class Site:
    root: Path
    templates: Path
    public: Path


@pytest.fixture
def site(tmp_path: Path) -> Site:
    """Templates, a public directory, and a file just outside it."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "app.html.jinja").write_text("<html>\n{{ content }}\n</html>\n")
    (templates / "resource.html.jinja").write_text("<body>Hello from HTML</body>")
    (templates / "resource.xml.jinja").write_text("<root>Some XML</root>\n")
    (templates / "resource.js.jinja").write_text("alert('Hiya from javascript');\n")

    public = tmp_path / "public"
    public.mkdir()
    (public / "static.txt").write_text("A static file")
    (public / "static folder").mkdir()
    (tmp_path / "unreachable_static.txt").write_text("Unreachable static file")

    return Site(root=tmp_path, templates=templates, public=public)


def build_resource_app(config: AppConfig) -> App:
    """The app most end-to-end tests run against."""
    app = App(config)

    @app.route("/resource")
    def resource():
        def formats(wants: Wants) -> None:
            wants.html(lambda: Template("resource", layout="app"))
            wants.xml(lambda: Template("resource"))
            wants.js(lambda: Template("resource"))
            wants.json(lambda: "We got some json")

        return respond_to(formats)

    @app.route("/style.css")
    def style():
        return "body { color: red; }"

    @app.route("/iso-8859-1")
    def latin_1():
        set_charset("iso-8859-1")
        return respond_to(lambda wants: wants.html(lambda: "Olá"))

    @app.route("/normal-no-respond_to")
    def normal():
        return "Just some plain old text"

    @app.route("/echo-accept")
    def echo_accept(request: Request):
        return request.accept or ""

    @app.route("/missing-template")
    def missing_template():
        def formats(wants: Wants) -> None:
            wants.html(lambda: Template("missing-template", layout="app"))
            wants.js(lambda: Template("missing-template", layout="app"))
            wants.xml(lambda: Template("missing-template", layout="app", engine="j2"))

        return respond_to(formats)

    return app


@pytest.fixture
def make_app(site: Site) -> Callable[..., App]:
    """Build the resource app; keyword arguments override AppConfig fields."""

    def factory(**overrides: Any) -> App:
        values: dict[str, Any] = {
            "template_dir": site.templates,
            "public_dir": site.public,
        }
        values.update(overrides)
        return build_resource_app(AppConfig(**values))

    return factory
