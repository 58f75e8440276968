"""Response coordination — one inbound request, exactly one reply.

State machine::

    Received -> Verified -> Normalized -> Dispatched -+-> Replied
                                                      +-> TimedOut -> Closed
    (any rejection)                                   --> Closed

The deadline race runs the handler as a task and waits on it with a
timeout. ``asyncio.wait`` does not cancel the task when the timeout
fires, so the handler keeps running after the empty acknowledgment has
been sent; its eventual result then goes to the response URL (fallback
enabled) or is dropped. A late result never touches the HTTP reply,
which has already been sent.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any

from wren._internal.invoke import accepts_respond, invoke
from wren.config import AdapterConfig
from wren.delivery import DeliveryClient, Respond
from wren.errors import DeliveryError, HandlerError, HTTPError, NoMatch
from wren.events import Event
from wren.http.response import Response, json_response
from wren.normalizer import decode_payload, normalize_payload, parse_form
from wren.routing.matcher import match
from wren.routing.registry import HandlerEntry, Registry
from wren.verification import verify_request

logger = logging.getLogger("wren.dispatch")


class DispatchState(enum.Enum):
    """Every state of the request machine.

    A ``DispatchResult`` only ever carries one of the states a reply is
    decided in: ``REPLIED``, ``TIMED_OUT`` or ``CLOSED``. The earlier
    states name the steps in log messages.
    """

    RECEIVED = "received"
    VERIFIED = "verified"
    NORMALIZED = "normalized"
    DISPATCHED = "dispatched"
    REPLIED = "replied"
    TIMED_OUT = "timed_out"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class RawRequest:
    """The parts of an inbound request the dispatcher needs."""

    body: bytes
    signature: str | None
    timestamp: str | None
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """The synchronous reply decided for one request.

    ``content`` is the handler's return value (``None`` for an empty
    reply). ``state`` is where the state machine stood when the reply
    was decided: ``REPLIED``, ``TIMED_OUT`` or ``CLOSED``.
    """

    status: int
    content: Any = None
    state: DispatchState = DispatchState.CLOSED
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def to_response(self) -> Response:
        """Render as an HTTP response.

        Raises:
            TypeError: If ``content`` is not JSON-serializable.
        """
        if self.state is DispatchState.CLOSED and self.status >= 400:
            response = Response(body=self.detail, status=self.status)
        elif self.content is None:
            response = Response(status=self.status)
        else:
            response = json_response(self.content, status=self.status)
        for name, value in self.headers:
            response = response.with_header(name, value)
        return response


def reject(exc: HTTPError) -> DispatchResult:
    """Close a request with the status carried by *exc*."""
    logger.debug("%s with %d: %s", DispatchState.CLOSED.name, exc.status, exc.detail)
    return DispatchResult(
        status=exc.status,
        detail=exc.detail,
        headers=exc.headers,
        state=DispatchState.CLOSED,
    )


class Dispatcher:
    """Runs the request state machine against one registry.

    Tasks that outlive their request (handlers past the deadline and
    fallback deliveries) are tracked so ``drain()`` can wait for them at
    shutdown.
    """

    __slots__ = ("_background", "_client", "_config", "_registry")

    def __init__(
        self,
        config: AdapterConfig,
        registry: Registry,
        client: DeliveryClient,
    ) -> None:
        self._config = config
        self._registry = registry
        self._client = client
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        """Number of handler or delivery tasks still running."""
        return len(self._background)

    async def process(self, raw: RawRequest, *, now: float | None = None) -> DispatchResult:
        """Run a raw request through every state, from Received to a reply."""
        logger.debug("%s %d bytes", DispatchState.RECEIVED.name, len(raw.body))
        try:
            verify_request(
                raw.body,
                raw.signature,
                raw.timestamp,
                self._config.secret,
                tolerance=self._config.timestamp_tolerance,
                now=now,
            )
            logger.debug("%s", DispatchState.VERIFIED.name)

            form = parse_form(raw.body, raw.content_type)
            if "ssl_check" in form:
                return DispatchResult(status=200, state=DispatchState.CLOSED)

            event = normalize_payload(decode_payload(form))
        except HTTPError as exc:
            return reject(exc)
        return await self.dispatch(event)

    async def dispatch(self, event: Event) -> DispatchResult:
        """Route a normalized event and race its handler against the deadline."""
        logger.debug(
            "%s %s (kind=%s)", DispatchState.NORMALIZED.name, type(event).__name__, event.kind
        )

        entry = match(event, self._registry.snapshot(event.kind))
        if entry is None:
            return reject(NoMatch())

        respond = Respond(event.response_url, self._client)
        task = self._spawn(self._run_handler(entry, event, respond))
        logger.debug(
            "%s %s to %s",
            DispatchState.DISPATCHED.name,
            type(event).__name__,
            _name(entry.handler),
        )

        try:
            done, _ = await asyncio.wait({task}, timeout=self._config.timeout_seconds)
        except asyncio.CancelledError:
            # The request went away; the handler still settles through the late path.
            self._spawn(self._finish_late(task, event, entry))
            raise
        if done:
            return self._replied(task)

        logger.debug(
            "Handler %s missed the %dms deadline",
            _name(entry.handler),
            self._config.sync_response_timeout,
        )
        self._spawn(self._finish_late(task, event, entry))
        return DispatchResult(status=200, state=DispatchState.TIMED_OUT)

    async def drain(self) -> None:
        """Wait for every late handler and fallback delivery to finish."""
        while self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # -- Internal --

    def _spawn(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _run_handler(self, entry: HandlerEntry, event: Event, respond: Respond) -> Any:
        args = (event.payload, respond) if accepts_respond(entry.handler) else (event.payload,)
        try:
            return await invoke(entry.handler, *args)
        except Exception as exc:
            raise HandlerError(entry.handler, exc) from exc

    def _replied(self, task: asyncio.Task[Any]) -> DispatchResult:
        exc = task.exception()
        if exc is not None:
            cause = exc.cause if isinstance(exc, HandlerError) else exc
            logger.error("%s", exc, exc_info=cause)
            return DispatchResult(
                status=500,
                detail="Internal Server Error",
                state=DispatchState.REPLIED,
            )
        return DispatchResult(status=200, content=task.result(), state=DispatchState.REPLIED)

    async def _finish_late(
        self,
        task: asyncio.Task[Any],
        event: Event,
        entry: HandlerEntry,
    ) -> None:
        """Settle a handler that missed the deadline (TimedOut -> Closed)."""
        handler_name = _name(entry.handler)
        try:
            result = await task
        except HandlerError as exc:
            logger.error("%s (after the response deadline)", exc, exc_info=exc.cause)
            return

        if result is None:
            return
        if not self._config.late_response_fallback_enabled:
            logger.debug("Discarded late result from %s (fallback disabled)", handler_name)
            return
        if not event.supports_late_delivery or event.response_url is None:
            logger.warning(
                "Late result from %s cannot be delivered: %s has no response URL fallback",
                handler_name,
                type(event).__name__,
            )
            return

        try:
            await self._client.post(event.response_url, result)
        except DeliveryError as exc:
            logger.warning("Fallback delivery for %s failed: %s", handler_name, exc)
            return
        logger.info("Delivered late result from %s to the response URL", handler_name)


def _name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
