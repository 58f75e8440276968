"""Handler constraints — which events a handler wants.

A constraint names any subset of the routing fields. Each named field is
an exact string or a compiled pattern (``unfurl`` is a bool); unnamed
fields are wildcards. Specificity is the number of named fields, which
is what lets the matcher prefer ``{action_id, block_id}`` over
``{action_id}`` over ``{}``.

Accepted shorthands::

    "order_form"                       -> Constraint(callback_id="order_form")
    re.compile(r"^order_")             -> Constraint(callback_id=re.compile(...))
    {"action_id": "approve"}           -> Constraint(action_id="approve")
    {"actionId": "approve"}            -> Constraint(action_id="approve")
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from wren.errors import ConfigurationError
from wren.events import ROUTING_FIELDS, Event

type FieldMatcher = str | re.Pattern[str]

WITHIN_VALUES: frozenset[str] = frozenset({"block_actions", "interactive_message", "dialog"})

_CAMEL_ALIASES: dict[str, str] = {
    "callbackId": "callback_id",
    "blockId": "block_id",
    "actionId": "action_id",
    "externalId": "external_id",
}


@dataclass(frozen=True, slots=True)
class Constraint:
    """An immutable predicate over an event's routing fields.

    ``None`` means "any value".
    """

    callback_id: FieldMatcher | None = None
    block_id: FieldMatcher | None = None
    action_id: FieldMatcher | None = None
    type: FieldMatcher | None = None
    within: FieldMatcher | None = None
    unfurl: bool | None = None
    external_id: FieldMatcher | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "unfurl":
                if not isinstance(value, bool):
                    msg = f"Constraint 'unfurl' must be a bool, got {type(value).__name__}"
                    raise ConfigurationError(msg)
                continue
            if not isinstance(value, str | re.Pattern):
                msg = (
                    f"Constraint {f.name!r} must be a string or compiled pattern, "
                    f"got {type(value).__name__}"
                )
                raise ConfigurationError(msg)
        if isinstance(self.within, str) and self.within not in WITHIN_VALUES:
            allowed = ", ".join(sorted(WITHIN_VALUES))
            msg = f"Constraint 'within' must be one of {allowed}; got {self.within!r}"
            raise ConfigurationError(msg)

    @property
    def specificity(self) -> int:
        """Number of non-wildcard fields."""
        return sum(1 for name in ROUTING_FIELDS if getattr(self, name) is not None)

    def matches(self, event: Event) -> bool:
        """Whether every named field is satisfied by *event*."""
        for name in ROUTING_FIELDS:
            expected = getattr(self, name)
            if expected is None:
                continue
            if not _field_matches(expected, event.routing_value(name)):
                return False
        return True


def _field_matches(expected: FieldMatcher | bool, actual: str | bool | None) -> bool:
    if isinstance(expected, bool):
        return actual is expected
    if actual is None or isinstance(actual, bool):
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return expected == actual


def parse_constraint(source: Any = None, /, **fields_: Any) -> Constraint:
    """Coerce any accepted constraint form into a ``Constraint``.

    Keyword arguments are merged over *source*::

        parse_constraint()                          # catch-all
        parse_constraint("order_form")
        parse_constraint({"action_id": "approve"})
        parse_constraint(action_id="approve", type="button")

    Raises:
        ConfigurationError: On unknown fields or values of the wrong type.
    """
    if isinstance(source, Constraint):
        if not fields_:
            return source
        base: dict[str, Any] = {name: getattr(source, name) for name in ROUTING_FIELDS}
    elif source is None:
        base = {}
    elif isinstance(source, str | re.Pattern):
        base = {"callback_id": source}
    elif isinstance(source, Mapping):
        base = dict(source)
    else:
        msg = (
            "Constraint must be a string, compiled pattern, mapping, or Constraint; "
            f"got {type(source).__name__}"
        )
        raise ConfigurationError(msg)

    merged: dict[str, Any] = {}
    for key, value in {**base, **fields_}.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name not in ROUTING_FIELDS:
            allowed = ", ".join(ROUTING_FIELDS)
            msg = f"Unknown constraint field {key!r}. Allowed fields: {allowed}"
            raise ConfigurationError(msg)
        merged[name] = value
    return Constraint(**merged)
