"""Constraint-based handler routing.

Constraints are parsed at registration, stored in copy-on-write tables,
and matched by specificity at dispatch time.
"""

from wren.routing.constraint import Constraint, parse_constraint
from wren.routing.matcher import match
from wren.routing.registry import HandlerEntry, Registry

__all__ = ["Constraint", "HandlerEntry", "Registry", "match", "parse_constraint"]
