"""Invoke helpers: call sync or async handlers uniformly.

Trill handlers can be ``def`` or ``async def``. Any code that calls
a user-provided handler must handle both cases, so the sync/async
check lives here and nowhere else.

Usage::

    from trill._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Awaitables are awaited until a plain value comes back, so a handler
    (sync or async) may return ``respond_to(...)`` with an ``async def``
    producer.
    """
    result = handler(*args, **kwargs)
    while inspect.isawaitable(result):
        result = await result
    return result
