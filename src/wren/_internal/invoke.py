"""Invoke helpers — call sync or async handlers uniformly.

Wren handlers can be ``def`` or ``async def``. Coroutine functions run on
the event loop; plain functions run in an anyio worker thread so a
blocking handler cannot hold up the response deadline.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(handler, payload, respond)
"""

import functools
import inspect
from collections.abc import Callable
from typing import Any

import anyio.to_thread


def accepts_respond(handler: Callable[..., Any]) -> bool:
    """Whether *handler* takes a second positional ``respond`` argument.

    Handlers may accept ``(payload)`` or ``(payload, respond)``.
    """
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return True
    positional = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional >= 2


def _is_async(handler: Callable[..., Any]) -> bool:
    while isinstance(handler, functools.partial):
        handler = handler.func
    if inspect.iscoroutinefunction(handler):
        return True
    call = getattr(handler, "__call__", None)  # noqa: B004
    return call is not None and inspect.iscoroutinefunction(call)


async def invoke(handler: Callable[..., Any], *args: Any) -> Any:
    """Call a handler and await the result.

    Works with both sync and async callables::

        # async: awaited on the event loop
        async def on_click(payload, respond):
            await respond({"text": "Working on it"})
            return {"text": "Done"}

        # sync: runs in a worker thread
        def on_click(payload):
            return {"text": "Done"}

    A sync handler that returns an awaitable has it awaited as well.
    """
    if _is_async(handler):
        return await handler(*args)
    result = await anyio.to_thread.run_sync(functools.partial(handler, *args))
    if inspect.isawaitable(result):
        result = await result
    return result
