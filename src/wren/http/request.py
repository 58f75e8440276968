"""Immutable inbound request.

Frozen metadata with async body access. Signature verification needs the
exact raw bytes, so the body is read once, cached, and never re-encoded.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.errors import BodyConsumed

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata is frozen at creation. The body is accessed asynchronously
    via ``.body()``.
    """

    method: str
    path: str
    # Lowercased names; the first occurrence of a repeated header wins
    headers: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for the body bytes
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def signature(self) -> str | None:
        """The request signature header."""
        return self.headers.get(SIGNATURE_HEADER)

    @property
    def timestamp(self) -> str | None:
        """The request timestamp header (Unix seconds, as sent)."""
        return self.headers.get(TIMESTAMP_HEADER)

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then the
        same bytes are returned on subsequent calls.

        Raises:
            BodyConsumed: If the ASGI channel reports a disconnect before
                any body message, meaning an outer layer already read it.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        started = False
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                if not started:
                    raise BodyConsumed
                break
            started = True
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=_decode_headers(scope.get("headers", ())),
            _receive=receive,
        )


def _decode_headers(raw: Iterable[tuple[bytes, bytes]]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for name, value in raw:
        headers.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
    return headers
