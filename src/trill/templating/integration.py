"""Jinja2 environment setup and format-aware rendering.

Creates a Jinja2 Environment from trill's AppConfig and binds
user-registered filters and globals. The environment is created
once during App._freeze() and passed through the request pipeline.

The rendered page reaches the layout as ``content``, marked safe so
autoescaping leaves it intact.

Rendering translates ``jinja2.TemplateNotFound`` into ``MissingTemplate``
so the error page can name the file that was expected.
"""

from collections.abc import Callable
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from markupsafe import Markup

from trill.config import AppConfig
from trill.errors import MissingTemplate
from trill.templating.engines import template_filename
from trill.templating.returns import Template


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a Jinja2 Environment from app configuration.

    Called once during ``App._freeze()``. The returned environment
    is not modified for the lifetime of the app.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )
    env.filters.update(filters)
    env.globals.update(globals_)
    return env


def render_template(env: Environment, tpl: Template, format: str) -> str:
    """Render *tpl* for *format*, wrapping it in its layout if it has one.

    Raises ``MissingTemplate`` if the page or the layout file is missing.
    """
    page_file = template_filename(tpl.name, format, tpl.engine)
    try:
        html = env.get_template(page_file).render(tpl.context)
        if tpl.layout is None:
            return html
        layout_file = template_filename(tpl.layout, format, tpl.engine)
        return env.get_template(layout_file).render({**tpl.context, "content": Markup(html)})
    except TemplateNotFound as exc:
        raise MissingTemplate(
            tpl.name,
            layout=tpl.layout,
            format=format,
            engine=tpl.engine,
            missing=exc.name,
        ) from exc
