"""Wren — an interactive message adapter for ASGI.

Receives interaction webhooks (button clicks, menu selections, dialog and
view submissions, shortcuts) from a messaging platform, verifies their
signatures, routes each one to the most specific registered handler, and
answers within the platform's response deadline.

Basic usage::

    from wren import InteractionAdapter

    adapter = InteractionAdapter("signing-secret")

    @adapter.action(action_id="new_order")
    async def new_order(payload, respond):
        return {"text": "Order received"}

    adapter.run(port=3000)

The adapter is an ASGI application, so it can also be mounted inside any
ASGI framework instead of calling ``run()``.
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "AdapterConfig",
    "AttachmentAction",
    "BlockAction",
    "Constraint",
    "DialogSubmission",
    "DispatchResult",
    "DispatchState",
    "InteractionAdapter",
    "MessageAction",
    "OptionsRequest",
    "Respond",
    "Shortcut",
    "ViewClosed",
    "ViewSubmission",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "InteractionAdapter":
        from wren.adapter import InteractionAdapter

        return InteractionAdapter

    if name == "AdapterConfig":
        from wren.config import AdapterConfig

        return AdapterConfig

    if name == "Constraint":
        from wren.routing.constraint import Constraint

        return Constraint

    if name in ("DispatchResult", "DispatchState"):
        from wren import dispatch as _dispatch

        return getattr(_dispatch, name)

    if name == "Respond":
        from wren.delivery import Respond

        return Respond

    if name in (
        "AttachmentAction",
        "BlockAction",
        "DialogSubmission",
        "MessageAction",
        "OptionsRequest",
        "Shortcut",
        "ViewClosed",
        "ViewSubmission",
    ):
        from wren import events as _events

        return getattr(_events, name)

    if name == "WrenError":
        from wren.errors import WrenError

        return WrenError

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
