"""Wren exception hierarchy.

Shared across the verifier, normalizer, router, dispatcher, and delivery
client so every module raises and catches the same types.

Request-path rejections are ``HTTPError`` subclasses: the dispatcher
catches them and turns them into a single HTTP reply. They never reach
application handlers.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when adapter configuration or a handler constraint is invalid.

    Raised synchronously at construction or registration time.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class VerificationError(HTTPError):
    """401 — the request could not be authenticated."""

    def __init__(self, detail: str = "Request verification failed") -> None:
        super().__init__(status=401, detail=detail)


class InvalidSignature(VerificationError):  # noqa: N818 — mirrors the verdict name
    """The signature header is missing or does not match the body."""

    def __init__(self, detail: str = "Signature mismatch") -> None:
        super().__init__(detail=detail)


class StaleRequest(VerificationError):  # noqa: N818 — mirrors the verdict name
    """The timestamp header is missing, unparseable, or outside the replay window."""

    def __init__(self, detail: str = "Request timestamp outside the allowed window") -> None:
        super().__init__(detail=detail)


class MalformedPayload(HTTPError):  # noqa: N818 — mirrors the verdict name
    """400 — the verified body is not a recognizable interaction payload."""

    def __init__(self, detail: str = "Malformed payload") -> None:
        super().__init__(status=400, detail=detail)


class NoMatch(HTTPError):  # noqa: N818 — conventional name for a routing miss
    """404 — no registered handler satisfies the event."""

    def __init__(self, detail: str = "No handler matched the interaction") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — interactions are only delivered with POST."""

    def __init__(self, method: str) -> None:
        super().__init__(
            status=405,
            detail=f"Method {method} not allowed. Allowed methods: POST",
            headers=(("Allow", "POST"),),
        )


class BodyConsumed(HTTPError):  # noqa: N818 — describes the request state
    """500 — the request body was read before the adapter received it.

    Signature verification needs the exact raw bytes, so a body already
    parsed by an outer middleware cannot be verified.
    """

    def __init__(
        self,
        detail: str = "Request body was consumed before the adapter could verify it",
    ) -> None:
        super().__init__(status=500, detail=detail)


class HandlerError(WrenError):
    """Wraps an exception raised by an application handler."""

    def __init__(self, handler: object, cause: BaseException) -> None:
        self.handler = handler
        self.cause = cause
        name = getattr(handler, "__qualname__", repr(handler))
        super().__init__(f"Handler {name} raised {type(cause).__name__}: {cause}")


class DeliveryError(WrenError):
    """Raised when an out-of-band delivery to a response URL fails."""

    def __init__(self, url: str | None, status: int | None, detail: str) -> None:
        self.url = url
        self.status = status
        self.detail = detail
        if status is None:
            super().__init__(f"Delivery to {url} failed: {detail}")
        else:
            super().__init__(f"Delivery to {url} returned {status}: {detail}")
