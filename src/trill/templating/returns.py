"""Template return type.

A frozen dataclass that producers and handlers return. The response
layer renders it for the request's resolved format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trill.templating.engines import DEFAULT_ENGINE, ENGINE_SUFFIXES


@dataclass(frozen=True, slots=True)
class Template:
    """Render a template for the current format, optionally inside a layout.

    Usage::

        wants.html(lambda: Template("resource", layout="app", title="Home"))

    For an ``html`` request this renders ``resource.html.jinja`` and then
    ``app.html.jinja`` with the page available as ``content``.
    """

    name: str
    layout: str | None = None
    engine: str = DEFAULT_ENGINE
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(
        self,
        name: str,
        /,
        *,
        layout: str | None = None,
        engine: str = DEFAULT_ENGINE,
        **context: Any,
    ) -> None:
        if engine not in ENGINE_SUFFIXES:
            msg = f"Unknown template engine {engine!r}; expected one of {sorted(ENGINE_SUFFIXES)}"
            raise ValueError(msg)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "layout", layout)
        object.__setattr__(self, "engine", engine)
        object.__setattr__(self, "context", context)
