"""Tests for wren.routing.registry — copy-on-write handler tables."""

import threading

import pytest

from wren.errors import ConfigurationError
from wren.routing.constraint import Constraint
from wren.routing.registry import DISPATCH_KINDS, Registry


def _handler(payload: object) -> None:
    return None


class TestRegistry:
    def test_dispatch_kinds(self) -> None:
        assert set(DISPATCH_KINDS) == {
            "action",
            "options",
            "view_submission",
            "view_closed",
            "shortcut",
        }

    def test_empty(self) -> None:
        registry = Registry()
        assert len(registry) == 0
        for kind in DISPATCH_KINDS:
            assert registry.snapshot(kind) == ()

    def test_register_appends_in_order(self) -> None:
        registry = Registry()
        first = registry.register("action", Constraint(), _handler)
        second = registry.register("action", Constraint(action_id="a"), _handler)

        assert registry.snapshot("action") == (first, second)
        assert first.order < second.order
        assert second.kind == "action"

    def test_tables_are_separate(self) -> None:
        registry = Registry()
        registry.register("options", Constraint(), _handler)

        assert registry.snapshot("action") == ()
        assert len(registry.snapshot("options")) == 1
        assert len(registry) == 1

    def test_overlapping_constraints_allowed(self) -> None:
        registry = Registry()
        registry.register("action", Constraint(action_id="a"), _handler)
        registry.register("action", Constraint(action_id="a"), _handler)
        assert len(registry.snapshot("action")) == 2

    def test_snapshot_unaffected_by_later_registration(self) -> None:
        registry = Registry()
        registry.register("action", Constraint(), _handler)
        snapshot = registry.snapshot("action")

        registry.register("action", Constraint(action_id="late"), _handler)

        assert len(snapshot) == 1
        assert len(registry.snapshot("action")) == 2

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown dispatch kind"):
            Registry().register("message", Constraint(), _handler)  # type: ignore[arg-type]

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="callable"):
            Registry().register("action", Constraint(), "not a handler")  # type: ignore[arg-type]


class TestConcurrentRegistration:
    def test_no_entries_lost(self) -> None:
        registry = Registry()
        per_thread = 200
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            for _ in range(per_thread):
                registry.register("action", Constraint(), _handler)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        entries = registry.snapshot("action")
        assert len(entries) == 8 * per_thread
        orders = [entry.order for entry in entries]
        assert orders == sorted(orders)
        assert len(set(orders)) == len(orders)
