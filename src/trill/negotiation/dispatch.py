"""respond_to: one producer per format, exactly one of them runs.

The handler hands ``respond_to`` a builder callback. The builder receives
a ``Wants`` handle and registers a zero-argument producer per format it
supports. Afterwards the dispatcher looks up the request's resolved
format and calls the matching producer::

    @app.route("/resource")
    def resource():
        def formats(wants):
            wants.html(lambda: Template("resource", layout="app"))
            wants.json(lambda: {"name": "resource"})

            @wants.xml
            def _():
                return Template("resource")

        return respond_to(formats)

Registering a format the registry doesn't know raises ``UnknownFormat``
while the builder runs. A resolved format with no producer raises
``UnhandledFormat``, which the request pipeline turns into a 404.
"""

from collections.abc import Callable
from typing import Any

from trill._internal.types import Producer
from trill.errors import UnhandledFormat
from trill.mime import Format, MimeRegistry
from trill.negotiation.context import get_negotiation


class Wants:
    """Builder handle passed to a ``respond_to`` callback.

    ``wants.<format>(producer)``, ``wants[format](producer)`` and
    ``wants.register(format, producer)`` are equivalent. Each returns the
    producer, so the attribute form also works as a decorator.
    """

    __slots__ = ("_registry", "_table")

    def __init__(self, registry: MimeRegistry) -> None:
        self._registry = registry
        self._table: dict[Format, Producer] = {}

    def register(self, format: Format, producer: Producer) -> Producer:
        """Record *producer* for *format*. A later call for the same format wins."""
        self._registry.lookup(format)
        if not callable(producer):
            msg = f"Producer for {format!r} must be callable, got {type(producer).__name__}"
            raise TypeError(msg)
        self._table[format] = producer
        return producer

    def __getitem__(self, format: Format) -> Callable[[Producer], Producer]:
        self._registry.lookup(format)

        def registrar(producer: Producer) -> Producer:
            return self.register(format, producer)

        return registrar

    def __getattr__(self, name: str) -> Callable[[Producer], Producer]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    @property
    def formats(self) -> tuple[Format, ...]:
        """Formats registered so far, in registration order."""
        return tuple(self._table)

    @property
    def table(self) -> dict[Format, Producer]:
        """A copy of the format -> producer table."""
        return dict(self._table)

    def __repr__(self) -> str:
        return f"Wants({', '.join(self._table)})"


class RespondToDispatcher:
    """Build a ``Wants`` table and run the producer for the current format."""

    __slots__ = ("_registry",)

    def __init__(self, registry: MimeRegistry) -> None:
        self._registry = registry

    def dispatch(self, builder: Callable[[Wants], Any], current_format: Format) -> Any:
        """Run *builder*, then the producer registered for *current_format*.

        Raises ``UnknownFormat`` (from the builder) or ``UnhandledFormat``.
        Header state is never touched here.
        """
        wants = Wants(self._registry)
        builder(wants)
        producer = wants.table.get(current_format)
        if producer is None:
            raise UnhandledFormat(current_format, wants.formats)
        return producer()


def respond_to(builder: Callable[[Wants], Any]) -> Any:
    """Dispatch on the current request's resolved format.

    Must be called while a request is being handled.
    """
    ctx = get_negotiation()
    if ctx.format is None:
        msg = "respond_to() called before the request's format was resolved"
        raise RuntimeError(msg)
    return RespondToDispatcher(ctx.registry).dispatch(builder, ctx.format)
