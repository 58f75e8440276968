"""Test utilities for wren adapters.

Provides a test client that signs requests with the adapter's own
secret, plus helpers for building signed interaction bodies::

    from wren.testing import TestClient, form_body, sign_request
"""

from wren.testing.client import TestClient, form_body, sign_request

__all__ = ["TestClient", "form_body", "sign_request"]
