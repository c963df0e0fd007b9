"""Build-time exceptions raised while deriving a schema.

Query-time problems (missing arguments, failing default factories) are not
represented here: they surface through graphql-core as per-field errors.
"""
from __future__ import annotations

from typing import Any, Optional

__all__ = [
    'AnnoQLError',
    'DefinitionError',
    'UnresolvableTypeError',
    'NameCollisionError',
]


class AnnoQLError(Exception):
    """Base class for every schema construction error."""


class DefinitionError(AnnoQLError, TypeError):
    """A declaration is malformed (bad decorator usage, missing annotation...)."""


class UnresolvableTypeError(AnnoQLError, TypeError):
    """A native type has no scalar, enum, type function or definition shape.

    Attributes:
        native_type: The offending Python type (after unwrapping).
        definition: Class whose member referenced the type, when known.
        member: Attribute or parameter name, when known.
        direction: ``Direction`` the type was requested in.
    """

    def __init__(
        self,
        native_type: Any,
        *,
        definition: Any = None,
        member: Optional[str] = None,
        direction: Any = None,
        reason: Optional[str] = None,
    ):
        self.native_type = native_type
        self.definition = definition
        self.member = member
        self.direction = direction
        parts = [f"Cannot map {native_type!r} to a GraphQL type"]
        if definition is not None:
            where = getattr(definition, '__qualname__', None) or str(definition)
            parts.append(f"on {where}.{member}" if member else f"on {where}")
        elif member:
            parts.append(f"for {member}")
        if direction is not None:
            parts.append(f"({getattr(direction, 'value', direction)})")
        msg = ' '.join(parts)
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class NameCollisionError(AnnoQLError, ValueError):
    """Two members, root registrations or types resolve to the same name."""

    def __init__(self, name: str, owner: str, detail: Optional[str] = None):
        self.name = name
        self.owner = owner
        msg = f"Duplicate name {name!r} in {owner}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
