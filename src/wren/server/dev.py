"""Standalone server bootstrap.

Starts a pounce ASGI server with the live adapter object. Mounting the
adapter inside another ASGI application is the alternative when the
process already runs a server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.adapter import InteractionAdapter


def run_server(adapter: InteractionAdapter, host: str, port: int) -> None:
    """Serve *adapter* on ``host:port`` until interrupted.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:adapter"``),
    but we hold a live adapter object, so ``pounce.Server`` is used
    directly with the ASGI callable.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "InteractionAdapter.run() requires the 'pounce' server. "
            "Install it with: pip install wren[server]"
        )
        raise ConfigurationError(msg) from None

    config = ServerConfig(host=host, port=port, workers=1)
    server = Server(config, adapter)
    server.run()
