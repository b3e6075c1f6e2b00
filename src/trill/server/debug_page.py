"""HTML pages for failures, built without the template engine.

The negotiation diagnostics and the debug traceback page are plain
f-strings, so a broken template directory still gets reported.
``render_page`` is the document shell both use.
"""

import html
import linecache
import sys
import sysconfig
import traceback

from trill.http.request import Request

_MASKED = "[masked]"
_SECRET_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization", "x-api-key"})
_LIBRARY_DIRS = tuple(
    path for path in {sysconfig.get_path("stdlib"), sysconfig.get_path("purelib")} if path
)
_CONTEXT = 3

_STYLE = """\
body { font: 14px/1.5 ui-monospace, Menlo, Consolas, monospace; margin: 0; padding: 2rem;
       background: #fbfaf7; color: #2b2b2b; }
main { max-width: 960px; margin: 0 auto; }
main > img { float: right; max-width: 180px; margin-left: 1rem; }
h1 { color: #b3261e; font-size: 1.4rem; margin: 0 0 0.5rem; }
h2 { font-size: 1.05rem; margin: 1.5rem 0 0.5rem; border-bottom: 1px solid #ddd; }
code { color: #8a4b08; }
pre, table { background: #f0eee8; border-radius: 4px; padding: 0.6rem 0.8rem; }
pre { overflow-x: auto; }
details { margin: 0.4rem 0; }
details.app summary { color: #1d4ed8; }
mark { background: #f8d7d4; display: block; }
th { text-align: left; padding-right: 1rem; vertical-align: top; }
"""


def _esc(text: object) -> str:
    return html.escape(str(text), quote=True)


def render_page(title: str, body_html: str) -> str:
    """Wrap *body_html* in a complete, self-styled HTML document."""
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="utf-8">'
        f"<title>{_esc(title)}</title><style>{_STYLE}</style></head>"
        f"<body><main>{body_html}</main></body></html>"
    )


def _in_application(filename: str) -> bool:
    if filename.startswith("<"):
        return False
    return not filename.startswith(_LIBRARY_DIRS)


def _frame_html(frame: traceback.FrameSummary) -> str:
    lineno = frame.lineno or 0
    source = []
    for number in range(max(1, lineno - _CONTEXT), lineno + _CONTEXT + 1):
        line = linecache.getline(frame.filename, number).rstrip()
        if not line and number > lineno:
            break
        text = f"{number:>5}  {_esc(line)}"
        source.append(f"<mark>{text}</mark>" if number == lineno else text)
    opening = '<details class="app" open>' if _in_application(frame.filename) else "<details>"
    listing = "\n".join(source)
    return (
        f"{opening}"
        f"<summary>{_esc(frame.filename)}:{lineno} in <code>{_esc(frame.name)}</code></summary>"
        f"<pre>{listing}</pre></details>"
    )


def _request_html(request: Request) -> str:
    rows = [f"<tr><th>Request</th><td>{_esc(request.method)} {_esc(request.path)}</td></tr>"]
    for name in request.headers:
        for value in request.headers.get_all(name):
            shown = _MASKED if name in _SECRET_HEADERS else value
            rows.append(f"<tr><th>{_esc(name)}</th><td>{_esc(shown)}</td></tr>")
    rows.append(f"<tr><th>Python</th><td>{_esc(sys.version)}</td></tr>")
    return f"<table>{''.join(rows)}</table>"


def render_debug_page(exc: BaseException, request: Request) -> str:
    """The traceback page shown for unexpected errors when ``debug`` is on.

    Application frames are expanded; library frames are collapsed.
    Credentials in the request headers are masked.
    """
    kind = type(exc)
    name = kind.__qualname__ if kind.__module__ == "builtins" else f"{kind.__module__}.{kind.__qualname__}"
    frames = traceback.extract_tb(exc.__traceback__)
    body = (
        f"<h1>{_esc(name)}</h1>"
        f"<pre>{_esc(exc)}</pre>"
        + ("<h2>Traceback</h2>" + "".join(_frame_html(f) for f in frames) if frames else "")
        + "<h2>Request</h2>"
        + _request_html(request)
    )
    return render_page(f"{name}: {str(exc)[:80]}", body)
