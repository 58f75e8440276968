"""Out-of-band delivery to platform response URLs.

Two callers share one client:

- the ``Respond`` handle given to every handler, which application code
  may await any number of times, before or after the synchronous reply;
- the dispatcher's late-response fallback, which posts a handler result
  that settled after the deadline.

Each POST uses a fresh ``httpx.AsyncClient`` (no shared connection
state across event loops or worker threads). Failures raise
``DeliveryError``; the core never retries.
"""

import logging
import platform
import sys
from typing import Any

import httpx

from wren.errors import DeliveryError

logger = logging.getLogger("wren.delivery")


def user_agent() -> str:
    """``wren/<version> python/<major.minor> <platform>``."""
    from wren import __version__

    python = f"{sys.version_info.major}.{sys.version_info.minor}"
    return f"wren/{__version__} python/{python} {platform.system().lower()}"


class DeliveryClient:
    """Posts JSON messages to response URLs.

    Args:
        timeout: Seconds allowed for each POST.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    __slots__ = ("_timeout", "_transport", "_user_agent")

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._user_agent = user_agent()

    async def post(self, url: str, message: Any) -> httpx.Response:
        """POST *message* as JSON to *url*.

        Raises:
            DeliveryError: On transport failure, a non-2xx status, or a
                message that cannot be encoded as JSON.
        """
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    url,
                    json=message,
                    headers={"user-agent": self._user_agent},
                    timeout=self._timeout,
                )
            except httpx.HTTPError as exc:
                raise DeliveryError(url, None, str(exc) or type(exc).__name__) from exc
            except (TypeError, ValueError) as exc:
                # Raised while encoding the message as JSON; nothing was sent.
                raise DeliveryError(url, None, f"message is not JSON-serializable: {exc}") from exc

        if not response.is_success:
            raise DeliveryError(url, response.status_code, response.text)
        return response


class Respond:
    """Deferred-response handle bound to one event's response URL.

    Passed to handlers as their second argument::

        @adapter.action(action_id="deploy")
        async def deploy(payload, respond):
            await respond({"text": "Deploying..."})
            await run_deploy()
            await respond({"text": "Deployed", "replace_original": True})

    Each call is an independent delivery; calls are not ordered relative
    to each other or to the handler's own return value. Sync handlers run
    in a worker thread and can use ``anyio.from_thread.run(respond, msg)``.
    """

    __slots__ = ("_client", "url")

    def __init__(self, url: str | None, client: DeliveryClient) -> None:
        self.url = url
        self._client = client

    @property
    def available(self) -> bool:
        """Whether the platform supplied a response URL for this event."""
        return self.url is not None

    async def __call__(self, message: Any) -> httpx.Response:
        """Deliver *message* to the response URL.

        Raises:
            DeliveryError: If there is no response URL or the POST fails.
        """
        if self.url is None:
            msg = "this interaction has no response URL"
            raise DeliveryError(None, None, msg)
        try:
            return await self._client.post(self.url, message)
        except DeliveryError as exc:
            logger.warning("Deferred response failed: %s", exc)
            raise

    def __repr__(self) -> str:
        return f"Respond(url={self.url!r})"
