from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict

import graphql
from graphql import Undefined

from ..errors import AnnoQLError, NameCollisionError
from .definitions import Definition
from .fetchers import resolver_for
from .members import Member
from .types import Direction

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .context import BuildContext

__all__ = ['FieldAssembler']

_logger = logging.getLogger("annoql.assembler")


class FieldAssembler:
    """Turn extracted members into graphql-core field definitions."""

    def __init__(self, context: 'BuildContext'):
        self.context = context

    def assemble_fields(self, definition: Definition, direction: Direction) -> Dict[str, Any]:
        """Fields of ``definition`` in member order, keyed by exposed name.

        Build errors raised for a member get a note naming the definition,
        member and direction, so nested failures carry their whole path.
        """
        fields: Dict[str, Any] = {}
        attrs: Dict[str, str] = {}
        for member in self.context.members.extract(definition):
            name = member.exposed_name
            if name in fields:
                raise NameCollisionError(
                    name, f"fields of {definition.name}", f"{attrs[name]!r} and {member.attr!r} share the name",
                )
            try:
                if direction is Direction.OUTPUT:
                    fields[name] = self._output_field(definition, member)
                else:
                    fields[name] = self._input_field(definition, member)
            except AnnoQLError as exc:
                exc.add_note(f"while building {definition.name}.{name} ({direction.value})")
                raise
            attrs[name] = member.attr
        _logger.debug("%s (%s): %d field(s)", definition.name, direction.value, len(fields))
        return fields

    def _output_field(self, definition: Definition, member: Member) -> graphql.GraphQLField:
        field_type = self.context.types.resolve(
            member.annotation,
            Direction.OUTPUT,
            type_function=member.meta.type_function,
            definition=definition.cls,
            member=member.attr,
        )
        if member.is_callable:
            args, specs = self.context.arguments.build_arguments(definition, member)
        else:
            args, specs = {}, []
        return graphql.GraphQLField(
            field_type,
            args=args,
            resolve=resolver_for(self.context, definition, member, field_type, specs),
            description=member.description,
            deprecation_reason=member.deprecation_reason,
        )

    def _input_field(self, definition: Definition, member: Member) -> graphql.GraphQLInputField:
        field_type = self.context.types.resolve(
            member.annotation,
            Direction.INPUT,
            type_function=member.meta.type_function,
            definition=definition.cls,
            member=member.attr,
        )
        if member.has_default and isinstance(field_type, graphql.GraphQLNonNull):
            # the constructor or input factory supplies omitted values
            field_type = field_type.of_type
        default_value = member.default if member.default is not None else Undefined
        deprecation_reason = member.deprecation_reason
        if deprecation_reason and isinstance(field_type, graphql.GraphQLNonNull):
            # required input fields cannot be deprecated
            _logger.debug("dropping deprecation of required input field %s.%s", definition.name, member.exposed_name)
            deprecation_reason = None
        return graphql.GraphQLInputField(
            field_type,
            default_value=default_value,
            description=member.description,
            deprecation_reason=deprecation_reason,
            out_name=member.attr,
        )
