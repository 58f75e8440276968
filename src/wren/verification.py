"""Request signature verification.

Every inbound request carries an HMAC-SHA256 signature over
``v0:{timestamp}:{body}`` and the Unix timestamp it was signed at::

    X-Slack-Request-Timestamp: 1531420618
    X-Slack-Signature: v0=a2114d57b48eac39b9ad189dd8316235a7b4a8d21a10bd27519666489c69b503

Both checks always run: a correctly signed request that is too old is
still rejected (replay protection), and the digest comparison is
constant-time regardless of the timestamp outcome.
"""

import hashlib
import hmac
import logging
import time

from wren.errors import InvalidSignature, StaleRequest

logger = logging.getLogger("wren.verification")

SIGNATURE_VERSION = "v0"
DEFAULT_TOLERANCE = 300  # seconds


def compute_signature(secret: bytes, timestamp: str | int, body: bytes) -> str:
    """Return the ``v0=<hex>`` signature for *body* signed at *timestamp*."""
    base = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
    digest = hmac.new(secret, base, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def _parse_timestamp(timestamp: str | None) -> int | None:
    if timestamp is None:
        return None
    try:
        return int(timestamp.strip())
    except ValueError:
        return None


def verify_request(
    body: bytes,
    signature: str | None,
    timestamp: str | None,
    secret: bytes,
    *,
    tolerance: int = DEFAULT_TOLERANCE,
    now: float | None = None,
) -> None:
    """Authenticate a raw request. Returns ``None`` when it is genuine.

    Args:
        body: The exact raw request body.
        signature: The signature header value (``v0=<hex>``).
        timestamp: The timestamp header value (Unix seconds).
        secret: The shared signing secret.
        tolerance: Maximum accepted distance, in seconds, between
            *timestamp* and the current time.
        now: Current Unix time; defaults to ``time.time()``.

    Raises:
        StaleRequest: The timestamp is missing, unparseable, or more than
            *tolerance* seconds away from *now*.
        InvalidSignature: The signature is missing or does not match.
    """
    current = time.time() if now is None else now
    ts = _parse_timestamp(timestamp)
    stale = ts is None or abs(current - ts) > tolerance

    # Sign whatever timestamp was sent so the comparison always runs.
    expected = compute_signature(secret, timestamp or "", body)
    matches = hmac.compare_digest(
        expected.encode("utf-8"),
        (signature or "").encode("utf-8"),
    )

    if stale:
        logger.warning("Rejected request with stale timestamp %r", timestamp)
        raise StaleRequest
    if not matches:
        logger.warning("Rejected request with invalid signature")
        raise InvalidSignature
