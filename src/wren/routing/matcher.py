"""Specificity-ranked handler selection.

Among the entries whose constraints the event satisfies, the one naming
the most fields wins; ties go to the earliest registration. The result
depends only on the snapshot and the event.
"""

from collections.abc import Iterable

from wren.events import Event
from wren.routing.registry import HandlerEntry


def match(event: Event, entries: Iterable[HandlerEntry]) -> HandlerEntry | None:
    """Select the best entry for *event*, or ``None`` when nothing matches.

    *entries* must be in registration order (as returned by
    ``Registry.snapshot``); ties are resolved by position.
    """
    best: HandlerEntry | None = None
    best_specificity = -1
    for entry in entries:
        if entry.kind != event.kind:
            continue
        specificity = entry.constraint.specificity
        # Strictly greater: an equally specific later entry never displaces an earlier one.
        if specificity > best_specificity and entry.constraint.matches(event):
            best = entry
            best_specificity = specificity
    return best
