"""Normalized interaction events.

Every verified payload becomes exactly one of these frozen variants. The
variant fixes the dispatch kind (which handler table is consulted) and
whether a late handler result may be delivered to the response URL.
The routing fields are flattened out of the payload so constraint
matching never has to know the payload's shape.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

type DispatchKind = Literal["action", "options", "view_submission", "view_closed", "shortcut"]

# Routing fields a constraint can name, in declaration order.
ROUTING_FIELDS: tuple[str, ...] = (
    "callback_id",
    "block_id",
    "action_id",
    "type",
    "within",
    "unfurl",
    "external_id",
)


@dataclass(frozen=True, slots=True)
class Event:
    """Base for all interaction events.

    ``payload`` is the decoded platform payload, passed to handlers
    untouched.
    """

    kind: ClassVar[DispatchKind]
    supports_late_delivery: ClassVar[bool] = False

    payload: dict[str, Any] = field(repr=False)
    callback_id: str | None = None
    block_id: str | None = None
    action_id: str | None = None
    type: str | None = None
    within: str | None = None
    unfurl: bool = False
    external_id: str | None = None
    response_url: str | None = None

    def routing_value(self, name: str) -> str | bool | None:
        """Return the routing field *name* (one of ``ROUTING_FIELDS``)."""
        return getattr(self, name)


# -- Actions --


@dataclass(frozen=True, slots=True)
class BlockAction(Event):
    """A user interacted with a block element (button, menu, date picker...)."""

    kind: ClassVar[DispatchKind] = "action"
    supports_late_delivery: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class AttachmentAction(Event):
    """A user clicked a button or chose a menu item in a legacy attachment."""

    kind: ClassVar[DispatchKind] = "action"
    supports_late_delivery: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class MessageAction(Event):
    """A user invoked a message shortcut from a message's context menu."""

    kind: ClassVar[DispatchKind] = "action"
    supports_late_delivery: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class DialogSubmission(Event):
    """A user submitted a legacy dialog."""

    kind: ClassVar[DispatchKind] = "action"
    supports_late_delivery: ClassVar[bool] = True


# -- Options --


@dataclass(frozen=True, slots=True)
class OptionsRequest(Event):
    """A user opened an external-data menu; the handler returns its options.

    ``within`` is ``"block_actions"``, ``"interactive_message"`` or
    ``"dialog"`` depending on where the menu lives.
    """

    kind: ClassVar[DispatchKind] = "options"


# -- Views and shortcuts --


@dataclass(frozen=True, slots=True)
class ViewSubmission(Event):
    """A user submitted a modal view."""

    kind: ClassVar[DispatchKind] = "view_submission"


@dataclass(frozen=True, slots=True)
class ViewClosed(Event):
    """A user dismissed a modal view that asked to be notified."""

    kind: ClassVar[DispatchKind] = "view_closed"


@dataclass(frozen=True, slots=True)
class Shortcut(Event):
    """A user invoked a global shortcut."""

    kind: ClassVar[DispatchKind] = "shortcut"
