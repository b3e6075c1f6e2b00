"""Route table.

Matching runs on the route path produced by format resolution
(``/resource.xml`` arrives as ``/resource``), so the router knows
nothing about formats. Routes made only of literal segments live in a
dict keyed by their normalised path; routes with ``{param}`` segments
are tried afterwards, most literal segments first.

``has_static_route`` is the one question the format resolver asks: is
the full, unstripped path a literal route? If so (``/style.css``), the
extension belongs to the route and no format is inferred from it.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from trill.errors import MethodNotAllowed, NotFound
from trill.routing.route import PathSegment, Route, RouteMatch

# converter -> (regex for one segment, python type)
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
}

_PARAM = re.compile(r"^\{(?P<name>\w+)(?::(?P<type>\w+))?\}$")


def _split(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def parse_path(path: str) -> list[PathSegment]:
    """Split a route pattern into segments.

    ``"/users/{id:int}"`` gives a literal ``users`` and an ``int``
    capture named ``id``. Raises ``ValueError`` for an unknown converter.
    """
    segments: list[PathSegment] = []
    for part in _split(path):
        found = _PARAM.match(part)
        if found is None:
            segments.append(PathSegment(part))
            continue
        param_type = found["type"] or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown path converter {param_type!r} in route {path!r}"
            raise ValueError(msg)
        segments.append(PathSegment(part, param_name=found["name"], param_type=param_type))
    return segments


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert captured text with the named converter; may raise ``ValueError``."""
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


@dataclass(slots=True)
class _Pattern:
    """Every route registered for one parameterised path pattern."""

    segments: tuple[PathSegment, ...]
    checks: tuple[re.Pattern[str] | str, ...]
    by_method: dict[str, Route] = field(default_factory=dict)

    @property
    def literal_count(self) -> int:
        return sum(1 for seg in self.segments if not seg.is_param)

    def capture(self, parts: list[str]) -> dict[str, str] | None:
        if len(parts) != len(self.checks):
            return None
        params: dict[str, str] = {}
        for part, check, seg in zip(parts, self.checks, self.segments):
            if isinstance(check, str):
                if part != check:
                    return None
            elif check.fullmatch(part) is None:
                return None
            else:
                params[seg.param_name or ""] = part
        return params


class Router:
    """Route table with literal and parameterised routes.

    Usage::

        router = Router()
        router.add(Route("/style.css", handler, frozenset({"GET"})))
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        router.has_static_route("/style.css")   # True
        router.match("GET", "/users/42")         # RouteMatch(..., {"id": "42"})
    """

    __slots__ = ("_compiled", "_literal", "_patterns", "_routes")

    def __init__(self) -> None:
        self._literal: dict[str, dict[str, Route]] = {}
        self._patterns: list[_Pattern] = []
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Register *route*. Only allowed before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = tuple(parse_path(route.path))
        self._routes.append(route)
        if not any(seg.is_param for seg in segments):
            by_method = self._literal.setdefault(_key(seg.value for seg in segments), {})
        else:
            by_method = self._pattern_for(segments).by_method
        for method in route.methods:
            by_method[method] = route

    def compile(self) -> None:
        """Freeze the table; patterns with more literal segments are tried first."""
        self._patterns.sort(key=lambda pattern: -pattern.literal_count)
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """Registered routes in registration order."""
        return list(self._routes)

    def has_static_route(self, path: str) -> bool:
        """True if a literal route (for any method) matches *path* exactly.

        A literal ``/style.css`` registered only for POST still owns the
        path, so a GET gets the router's 405 rather than a format.
        """
        return _key(_split(path)) in self._literal

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the route for *method* and *path*.

        Raises ``NotFound`` if no route matches the path and
        ``MethodNotAllowed`` if routes match it but none for *method*.
        """
        parts = _split(path)
        allowed: set[str] = set()

        literal = self._literal.get(_key(parts))
        if literal is not None:
            route = _for_method(literal, method)
            if route is not None:
                return RouteMatch(route=route, path_params={})
            allowed.update(literal)

        for pattern in self._patterns:
            params = pattern.capture(parts)
            if params is None:
                continue
            route = _for_method(pattern.by_method, method)
            if route is not None:
                return RouteMatch(route=route, path_params=params)
            allowed.update(pattern.by_method)

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")

    def _pattern_for(self, segments: tuple[PathSegment, ...]) -> _Pattern:
        for pattern in self._patterns:
            if pattern.segments == segments:
                return pattern
        checks = tuple(
            re.compile(CONVERTERS[seg.param_type][0]) if seg.is_param else seg.value
            for seg in segments
        )
        pattern = _Pattern(segments=segments, checks=checks)
        self._patterns.append(pattern)
        return pattern


def _key(parts: Iterable[str]) -> str:
    return "/" + "/".join(parts)


def _for_method(by_method: dict[str, Route], method: str) -> Route | None:
    """HEAD is answered by GET routes."""
    route = by_method.get(method)
    if route is None and method == "HEAD":
        route = by_method.get("GET")
    return route
