"""Route definitions and match results."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a route pattern.

    ``users`` is literal text; ``{id:int}`` captures ``id`` with the
    ``int`` converter.
    """

    value: str
    param_name: str | None = None
    param_type: str = "str"

    @property
    def is_param(self) -> bool:
        return self.param_name is not None


@dataclass(frozen=True, slots=True)
class Route:
    """A handler bound to a path pattern and a set of methods.

    The pattern never carries a format extension: ``/resource`` also
    answers ``/resource.xml`` once the resolver has stripped ``.xml``.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The route that answers a request, with its captured path text."""

    route: Route
    path_params: dict[str, str]
