"""Template engines and the file names they look up.

Every engine here is backed by Jinja2; they differ only in file suffix.
A template named ``resource`` rendered for the ``xml`` format with the
``jinja`` engine is loaded from ``resource.xml.jinja``.
"""

DEFAULT_ENGINE = "jinja"

# engine key -> file suffix
ENGINE_SUFFIXES: dict[str, str] = {
    "jinja": "jinja",
    "j2": "j2",
}


def template_filename(name: str, format: str, engine: str = DEFAULT_ENGINE) -> str:
    """Return the file a template is loaded from: ``<name>.<format>.<suffix>``.

    Raises ``KeyError`` for an unknown engine.
    """
    return f"{name}.{format}.{ENGINE_SUFFIXES[engine]}"
