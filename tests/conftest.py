"""Shared fixtures: a signing secret, a recording delivery transport, adapters."""

import json
from typing import Any

import httpx
import pytest

from wren.adapter import InteractionAdapter

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"


class DeliveryRecorder:
    """httpx.MockTransport handler that records every delivery."""

    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, text="ok")

    @property
    def messages(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def recorder() -> DeliveryRecorder:
    return DeliveryRecorder()


@pytest.fixture
def make_adapter(recorder: DeliveryRecorder):
    """Build adapters that deliver through the recording transport."""

    def factory(**options: Any) -> InteractionAdapter:
        return InteractionAdapter(
            SECRET,
            transport=httpx.MockTransport(recorder),
            **options,
        )

    return factory


@pytest.fixture
def adapter(make_adapter) -> InteractionAdapter:
    return make_adapter()

