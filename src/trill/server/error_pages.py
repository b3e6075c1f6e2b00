"""Error pages for negotiation failures.

``ErrorPagePresenter`` turns an ``UnhandledFormat`` or ``MissingTemplate``
into a Response. In production the body is a bare status phrase. In
development the page names what is missing and shows a snippet that can
be pasted into the app to fix it, next to an image served from the
diagnostics prefix.
"""

import html
import keyword
import re

from trill.errors import MissingTemplate, NegotiationFailure, UnhandledFormat
from trill.http.response import Response
from trill.negotiation.context import NegotiationContext
from trill.server.debug_page import render_page
from trill.templating.engines import DEFAULT_ENGINE, template_filename

PAGE_CONTENT_TYPE = "text/html;charset=utf-8"

_GENERIC_BODIES = {
    404: "Not Found",
    500: "Internal Server Error",
}


def _esc(text: str) -> str:
    # Snippets sit inside <pre>; quotes stay readable for copy/paste
    return html.escape(text, quote=False)


def handler_name(route_path: str) -> str:
    """Derive a Python function name from a route path.

    ``/missing-template`` -> ``missing_template``, ``/`` -> ``index``.
    """
    name = re.sub(r"[^0-9A-Za-z]+", "_", route_path).strip("_").lower()
    if not name:
        return "index"
    if name[0].isdigit():
        return f"_{name}"
    return name


def wants_call(format: str) -> str:
    """``wants.xml`` or, for formats that are not identifiers, ``wants["x-foo"]``."""
    if format.isidentifier() and not keyword.iskeyword(format) and not format.startswith("_"):
        return f"wants.{format}"
    return f'wants["{format}"]'


def route_snippet(route_path: str, method: str, body: str) -> str:
    """A handler definition for *route_path* returning ``respond_to(...)``."""
    if method in ("GET", "HEAD"):
        decorator = f'@app.route("{route_path}")'
    else:
        decorator = f'@app.route("{route_path}", methods=["{method}"])'
    return (
        f"{decorator}\n"
        f"def {handler_name(route_path)}():\n"
        f"    return respond_to(lambda wants: {body})"
    )


class ErrorPagePresenter:
    """Render the response for a request-time negotiation failure."""

    __slots__ = ("debug", "diagnostics_prefix")

    def __init__(self, *, debug: bool, diagnostics_prefix: str = "/__trill__") -> None:
        self.debug = debug
        self.diagnostics_prefix = diagnostics_prefix.rstrip("/")

    def present(self, exc: NegotiationFailure, ctx: NegotiationContext | None) -> Response:
        status = exc.status
        if not self.debug:
            return Response(body=_GENERIC_BODIES.get(status, "Error"), status=status)

        route_path = ctx.route_path if ctx is not None else "/"
        method = ctx.request.method if ctx is not None else "GET"
        match exc:
            case MissingTemplate():
                body = self._missing_template(exc, route_path, method)
            case UnhandledFormat():
                body = self._unhandled_format(exc, route_path, method)
            case _:
                body = render_page(str(exc), f"<h1>{_esc(str(exc))}</h1>")
        return Response(body=body, status=status, content_type=PAGE_CONTENT_TYPE)

    # -- Pages --

    def _image(self, status: int) -> str:
        return f"<img src='{self.diagnostics_prefix}/{status}.png' alt='{status}'>"

    def _missing_template(self, exc: MissingTemplate, route_path: str, method: str) -> str:
        expected = template_filename(exc.template, exc.format, exc.engine)
        missing = exc.missing or expected

        args = [f'"{exc.template}"']
        if exc.layout is not None:
            args.append(f'layout="{exc.layout}"')
        if exc.engine != DEFAULT_ENGINE:
            args.append(f'engine="{exc.engine}"')
        producer = f"{wants_call(exc.format)}(lambda: Template({', '.join(args)}))"
        snippet = route_snippet(route_path, method, producer)

        files = [f"<li><code>{_esc(expected)}</code></li>"]
        if exc.layout is not None:
            layout_file = template_filename(exc.layout, exc.format, exc.engine)
            files.append(f"<li><code>{_esc(layout_file)}</code> (layout)</li>")

        return render_page(
            f"Trill can't find {missing}",
            self._image(500)
            + f"<h1>Trill can't find {_esc(missing)}</h1>"
            + f"<p>The <code>{_esc(exc.format)}</code> response for "
            + f"<code>{_esc(route_path)}</code> renders these templates:</p>"
            + f"<ul>{''.join(files)}</ul>"
            + "<p>Create the missing file in the template directory, or change the route:</p>"
            + f"<pre>{_esc(snippet)}</pre>",
        )

    def _unhandled_format(self, exc: UnhandledFormat, route_path: str, method: str) -> str:
        snippet = route_snippet(
            route_path, method, f'{wants_call(exc.format)}(lambda: "Hello World")'
        )
        if exc.registered:
            handled = ", ".join(f"<code>{_esc(f)}</code>" for f in exc.registered)
        else:
            handled = "no formats"
        return render_page(
            f"Trill doesn't know how to respond with {exc.format}",
            self._image(404)
            + f"<h1>Trill doesn't know how to respond with <code>{_esc(exc.format)}</code></h1>"
            + f"<p><code>{_esc(route_path)}</code> handles {handled}.</p>"
            + "<p>Add a producer for the format to the route's respond_to block:</p>"
            + f"<pre>{_esc(snippet)}</pre>",
        )
