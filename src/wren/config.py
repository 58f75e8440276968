"""Adapter configuration.

AdapterConfig is a frozen dataclass — immutable after creation, so the
signing secret and deadline settings can be shared across concurrent
requests without synchronization.
"""

import os
from dataclasses import dataclass

from wren.errors import ConfigurationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AdapterConfig:
    """Adapter configuration. Immutable after creation.

    Only the signing secret is required::

        config = AdapterConfig(signing_secret="s3cr3t", sync_response_timeout=1000)
    """

    signing_secret: str | bytes

    # Response deadline (milliseconds). Kept below the platform's own
    # three-second acknowledgment limit.
    sync_response_timeout: int = 2500
    late_response_fallback_enabled: bool = True

    # Replay window (seconds)
    timestamp_tolerance: int = 300

    # Outbound deliveries (seconds per POST)
    delivery_timeout: float = 10.0

    # Server (only used by InteractionAdapter.run)
    host: str = "127.0.0.1"
    port: int = 3000

    def __post_init__(self) -> None:
        if not self.signing_secret:
            msg = "A signing secret is required to verify incoming requests."
            raise ConfigurationError(msg)
        if not isinstance(self.signing_secret, str | bytes):
            msg = (
                "signing_secret must be str or bytes, "
                f"got {type(self.signing_secret).__name__}"
            )
            raise ConfigurationError(msg)
        if self.sync_response_timeout <= 0:
            msg = f"sync_response_timeout must be positive, got {self.sync_response_timeout}"
            raise ConfigurationError(msg)
        if self.timestamp_tolerance <= 0:
            msg = f"timestamp_tolerance must be positive, got {self.timestamp_tolerance}"
            raise ConfigurationError(msg)

    @property
    def secret(self) -> bytes:
        """The signing secret as bytes (str secrets are UTF-8 encoded)."""
        if isinstance(self.signing_secret, str):
            return self.signing_secret.encode("utf-8")
        return self.signing_secret

    @property
    def timeout_seconds(self) -> float:
        """The synchronous response deadline in seconds."""
        return self.sync_response_timeout / 1000

    @classmethod
    def from_env(cls, prefix: str = "WREN_") -> "AdapterConfig":
        """Build a config from environment variables.

        Reads ``{prefix}SIGNING_SECRET`` (required),
        ``{prefix}SYNC_RESPONSE_TIMEOUT``, ``{prefix}LATE_RESPONSE_FALLBACK``,
        ``{prefix}HOST`` and ``{prefix}PORT``.
        """
        secret = os.environ.get(f"{prefix}SIGNING_SECRET", "")
        if not secret:
            msg = f"Environment variable {prefix}SIGNING_SECRET is not set."
            raise ConfigurationError(msg)

        kwargs: dict[str, object] = {"signing_secret": secret}
        try:
            if timeout := os.environ.get(f"{prefix}SYNC_RESPONSE_TIMEOUT"):
                kwargs["sync_response_timeout"] = int(timeout)
            if port := os.environ.get(f"{prefix}PORT"):
                kwargs["port"] = int(port)
        except ValueError as exc:
            msg = f"Invalid integer in {prefix}* environment: {exc}"
            raise ConfigurationError(msg) from exc
        if fallback := os.environ.get(f"{prefix}LATE_RESPONSE_FALLBACK"):
            kwargs["late_response_fallback_enabled"] = fallback.lower() in _TRUE_VALUES
        if host := os.environ.get(f"{prefix}HOST"):
            kwargs["host"] = host
        return cls(**kwargs)  # type: ignore[arg-type]
