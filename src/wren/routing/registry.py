"""Handler registry — append-only tables of (constraint, handler) entries.

One table per dispatch kind. Registration may happen at any time,
including while requests are being matched, so each table is an
immutable tuple replaced wholesale under a lock (copy-on-write). A
snapshot is just the current tuple reference: readers never lock and
never observe a half-appended table.
"""

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_args

from wren.errors import ConfigurationError
from wren.events import DispatchKind
from wren.routing.constraint import Constraint

DISPATCH_KINDS: tuple[DispatchKind, ...] = get_args(DispatchKind.__value__)


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """A registered handler. ``order`` is its global registration index."""

    constraint: Constraint
    handler: Callable[..., Any]
    kind: DispatchKind
    order: int


class Registry:
    """Copy-on-write handler tables keyed by dispatch kind.

    Usage::

        registry = Registry()
        registry.register("action", Constraint(action_id="approve"), on_approve)
        entries = registry.snapshot("action")
    """

    __slots__ = ("_counter", "_lock", "_tables")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count()
        self._tables: dict[DispatchKind, tuple[HandlerEntry, ...]] = dict.fromkeys(
            DISPATCH_KINDS, ()
        )

    def register(
        self,
        kind: DispatchKind,
        constraint: Constraint,
        handler: Callable[..., Any],
    ) -> HandlerEntry:
        """Append a handler entry. Overlapping constraints are allowed."""
        if kind not in self._tables:
            msg = f"Unknown dispatch kind {kind!r}. Expected one of: {', '.join(DISPATCH_KINDS)}"
            raise ConfigurationError(msg)
        if not callable(handler):
            msg = f"Handler must be callable, got {type(handler).__name__}"
            raise ConfigurationError(msg)
        with self._lock:
            entry = HandlerEntry(constraint, handler, kind, next(self._counter))
            self._tables[kind] = (*self._tables[kind], entry)
        return entry

    def snapshot(self, kind: DispatchKind) -> tuple[HandlerEntry, ...]:
        """Return the point-in-time, immutable table for *kind*."""
        return self._tables[kind]

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())
