"""The interaction adapter — the one object an application holds.

Owns the configuration (signing secret and deadline), the handler
registry, the delivery client, and the dispatcher. There is no module
level state: two adapters with different secrets can live in the same
process.

Registration may continue while requests are being served; each request
matches against a snapshot of the tables taken at dispatch time.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AdapterConfig
from wren.delivery import DeliveryClient
from wren.dispatch import DispatchResult, Dispatcher, RawRequest, reject
from wren.errors import ConfigurationError, HTTPError, MethodNotAllowed
from wren.events import DispatchKind
from wren.http.request import Request
from wren.http.response import Response
from wren.normalizer import normalize_payload
from wren.routing.constraint import parse_constraint
from wren.routing.registry import HandlerEntry, Registry
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")

type Handler = Callable[..., Any]


class InteractionAdapter:
    """Verify, route, and answer interaction requests.

    Usage::

        adapter = InteractionAdapter("signing-secret", sync_response_timeout=2000)

        @adapter.action(action_id="approve", type="button")
        async def approve(payload, respond):
            return {"text": "Approved"}

        @adapter.options(within="block_actions")
        def menu_options(payload):
            return {"options": [...]}

    The adapter is an ASGI application; mount it at the platform's
    request URL or call ``run()``.

    Args:
        signing_secret: Shared secret used to verify request signatures.
            Ignored when *config* is given.
        config: A complete ``AdapterConfig``.
        transport: httpx transport for outbound deliveries (tests).
        **options: Other ``AdapterConfig`` fields, e.g.
            ``sync_response_timeout`` or ``late_response_fallback_enabled``.
    """

    __slots__ = ("_client", "_dispatcher", "_registry", "config")

    def __init__(
        self,
        signing_secret: str | bytes | None = None,
        /,
        *,
        config: AdapterConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **options: Any,
    ) -> None:
        if config is not None:
            if signing_secret is not None or options:
                msg = "Pass either config= or a signing secret with options, not both."
                raise ConfigurationError(msg)
            self.config = config
        else:
            self.config = AdapterConfig(signing_secret=signing_secret or "", **options)

        self._registry = Registry()
        self._client = DeliveryClient(timeout=self.config.delivery_timeout, transport=transport)
        self._dispatcher = Dispatcher(self.config, self._registry, self._client)

    # -- Registration --

    def register_action(self, constraint: Any, handler: Handler) -> HandlerEntry:
        """Handle block actions, attachment actions, message actions, and dialog submissions."""
        return self._register("action", constraint, handler)

    def register_options(self, constraint: Any, handler: Handler) -> HandlerEntry:
        """Handle options loads for external-data menus."""
        return self._register("options", constraint, handler)

    def register_view_submission(self, constraint: Any, handler: Handler) -> HandlerEntry:
        """Handle modal view submissions."""
        return self._register("view_submission", constraint, handler)

    def register_view_closed(self, constraint: Any, handler: Handler) -> HandlerEntry:
        """Handle modal views being dismissed."""
        return self._register("view_closed", constraint, handler)

    def register_shortcut(self, constraint: Any, handler: Handler) -> HandlerEntry:
        """Handle global shortcuts."""
        return self._register("shortcut", constraint, handler)

    def action(self, constraint: Any = None, /, **fields: Any) -> Callable[[Handler], Handler]:
        """Register an action handler via decorator.

        Accepts a callback ID string, a compiled pattern, a mapping, a
        ``Constraint``, or constraint fields as keywords::

            @adapter.action("order_form")
            @adapter.action(re.compile(r"^order_"))
            @adapter.action(block_id="cart", action_id="checkout")
        """
        return self._decorator("action", constraint, fields)

    def options(self, constraint: Any = None, /, **fields: Any) -> Callable[[Handler], Handler]:
        """Register an options handler via decorator."""
        return self._decorator("options", constraint, fields)

    def view_submission(
        self, constraint: Any = None, /, **fields: Any
    ) -> Callable[[Handler], Handler]:
        """Register a view submission handler via decorator."""
        return self._decorator("view_submission", constraint, fields)

    def view_closed(self, constraint: Any = None, /, **fields: Any) -> Callable[[Handler], Handler]:
        """Register a view closed handler via decorator."""
        return self._decorator("view_closed", constraint, fields)

    def shortcut(self, constraint: Any = None, /, **fields: Any) -> Callable[[Handler], Handler]:
        """Register a global shortcut handler via decorator."""
        return self._decorator("shortcut", constraint, fields)

    def _register(self, kind: DispatchKind, constraint: Any, handler: Handler) -> HandlerEntry:
        return self._registry.register(kind, parse_constraint(constraint), handler)

    def _decorator(
        self,
        kind: DispatchKind,
        constraint: Any,
        fields: dict[str, Any],
    ) -> Callable[[Handler], Handler]:
        parsed = parse_constraint(constraint, **fields)

        def decorator(func: Handler) -> Handler:
            self._registry.register(kind, parsed, func)
            return func

        return decorator

    # -- Dispatch --

    async def dispatch(self, payload: dict[str, Any]) -> DispatchResult:
        """Dispatch an already-verified, decoded payload.

        For integrations that authenticate and decode requests
        themselves. Returns the reply the adapter would have sent.
        """
        try:
            event = normalize_payload(payload)
        except HTTPError as exc:
            return reject(exc)
        return await self._dispatcher.dispatch(event)

    async def handle(self, request: Request) -> Response:
        """Run one HTTP request through the full pipeline."""
        try:
            if request.method != "POST":
                raise MethodNotAllowed(request.method)
            raw = RawRequest(
                body=await request.body(),
                signature=request.signature,
                timestamp=request.timestamp,
                content_type=request.content_type,
            )
            result = await self._dispatcher.process(raw)
        except HTTPError as exc:
            result = reject(exc)

        try:
            return result.to_response()
        except TypeError:
            logger.exception("Handler result is not JSON-serializable")
            return Response(body="Internal Server Error", status=500)

    async def aclose(self) -> None:
        """Wait for late handlers and fallback deliveries to finish."""
        await self._dispatcher.drain()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request.from_asgi(scope, receive)
        try:
            response = await self.handle(request)
        except Exception:
            logger.exception("500 %s %s", request.method, request.path)
            response = Response(body="Internal Server Error", status=500)
        await send_response(response, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol; drain deliveries at shutdown."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.aclose()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the adapter with pounce (``pip install wren[server]``)."""
        from wren.server.dev import run_server

        run_server(self, host or self.config.host, port or self.config.port)
