"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. The negotiation flags that other frameworks keep
as global settings live here and are passed explicitly into the resolver and
the error page presenter.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

_DEVELOPMENT_NAMES = frozenset({"development", "dev", "local"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, default_content="json", static=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False  # development mode: diagnostic error pages
    log_level: str = "info"

    # Content negotiation
    default_content: str = "html"
    assume_xhr_is_js: bool = True
    default_charset: str = "utf-8"

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Static files (served from the site root when enabled)
    static: bool = False
    public_dir: str | Path = "public"
    static_cache_control: str = "public, max-age=3600"

    # Reserved namespace for error page images
    diagnostics_prefix: str = "/__trill__"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "AppConfig":
        """Build a config whose development/production mode comes from the host.

        ``TRILL_ENV=development`` turns on ``debug``; anything else
        (including unset) means production. ``TRILL_LOG_LEVEL`` sets
        ``log_level``. Explicit keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        mode = env.get("TRILL_ENV", "").strip().lower()
        if mode:
            values["debug"] = mode in _DEVELOPMENT_NAMES

        log_level = env.get("TRILL_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level.lower()

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            msg = f"Unknown AppConfig field(s): {', '.join(sorted(unknown))}"
            raise TypeError(msg)

        values.update(overrides)
        return cls(**values)
