"""Tests for wren._internal.invoke — uniform sync/async handler calls."""

import functools
import threading

from wren._internal.invoke import accepts_respond, invoke


class TestAcceptsRespond:
    def test_single_argument(self) -> None:
        def handler(payload):
            return None

        assert accepts_respond(handler) is False

    def test_two_arguments(self) -> None:
        async def handler(payload, respond):
            return None

        assert accepts_respond(handler) is True

    def test_var_positional(self) -> None:
        def handler(*args):
            return None

        assert accepts_respond(handler) is True

    def test_keyword_only_not_counted(self) -> None:
        def handler(payload, *, respond=None):
            return None

        assert accepts_respond(handler) is False

    def test_bound_method(self) -> None:
        class Handlers:
            def on_click(self, payload, respond):
                return None

        assert accepts_respond(Handlers().on_click) is True

    def test_partial(self) -> None:
        def handler(prefix, payload):
            return None

        assert accepts_respond(functools.partial(handler, "x")) is False


class TestInvoke:
    async def test_async_handler(self) -> None:
        async def handler(payload):
            return payload["n"] + 1

        assert await invoke(handler, {"n": 1}) == 2

    async def test_sync_handler_runs_in_worker_thread(self) -> None:
        main = threading.get_ident()

        def handler(payload):
            return threading.get_ident()

        assert await invoke(handler, {}) != main

    async def test_async_partial(self) -> None:
        async def handler(prefix, payload):
            return f"{prefix}:{payload}"

        assert await invoke(functools.partial(handler, "p"), "x") == "p:x"

    async def test_async_callable_object(self) -> None:
        class Handler:
            async def __call__(self, payload):
                return "called"

        assert await invoke(Handler(), {}) == "called"
