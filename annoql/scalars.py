"""Built-in scalar mapping for native Python value types.

Text, numeric and boolean types map to the GraphQL spec scalars. Temporal,
decimal, UUID and JSON values use custom scalars named like strawberry's
base scalars so schemas stay interchangeable.
"""
from __future__ import annotations

import datetime
import decimal
import uuid
from typing import Any, Callable, Dict, NewType, Optional

import graphql
from graphql.language import StringValueNode

__all__ = [
    'ID',
    'JSON',
    'DateTime',
    'Date',
    'Time',
    'Decimal',
    'UUID',
    'BUILTIN_SCALARS',
    'scalar_for',
]

# Marker type for GraphQL ``ID`` values; use ``annoql.ID`` in annotations.
ID = NewType('ID', str)


def _string_literal(parse: Callable[[str], Any], type_name: str):
    def parse_literal(value_node, _variables=None):
        if not isinstance(value_node, StringValueNode):
            raise graphql.GraphQLError(
                f"{type_name} cannot represent a non-string value: {graphql.print_ast(value_node)}",
                value_node,
            )
        return parse(value_node.value)
    return parse_literal


def _isoformat(expected: type, type_name: str):
    def serialize(value: Any) -> str:
        if isinstance(value, expected):
            return value.isoformat()
        if isinstance(value, str):
            return value
        raise graphql.GraphQLError(f"{type_name} cannot represent value: {value!r}")
    return serialize


def _parse_datetime(value: str) -> datetime.datetime:
    # fromisoformat on older interpreters rejects the 'Z' suffix
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.datetime.fromisoformat(value)


DateTime = graphql.GraphQLScalarType(
    'DateTime',
    serialize=_isoformat(datetime.datetime, 'DateTime'),
    parse_value=_parse_datetime,
    parse_literal=_string_literal(_parse_datetime, 'DateTime'),
    description='Date with time (isoformat)',
)

Date = graphql.GraphQLScalarType(
    'Date',
    serialize=_isoformat(datetime.date, 'Date'),
    parse_value=datetime.date.fromisoformat,
    parse_literal=_string_literal(datetime.date.fromisoformat, 'Date'),
    description='Date (isoformat)',
)

Time = graphql.GraphQLScalarType(
    'Time',
    serialize=_isoformat(datetime.time, 'Time'),
    parse_value=datetime.time.fromisoformat,
    parse_literal=_string_literal(datetime.time.fromisoformat, 'Time'),
    description='Time (isoformat)',
)


def _parse_decimal(value: Any) -> decimal.Decimal:
    try:
        return decimal.Decimal(str(value))
    except decimal.InvalidOperation as exc:
        raise graphql.GraphQLError(f"Decimal cannot represent value: {value!r}") from exc


Decimal = graphql.GraphQLScalarType(
    'Decimal',
    serialize=str,
    parse_value=_parse_decimal,
    parse_literal=_string_literal(_parse_decimal, 'Decimal'),
    description='Decimal (fixed-point)',
)

UUID = graphql.GraphQLScalarType(
    'UUID',
    serialize=str,
    parse_value=uuid.UUID,
    parse_literal=_string_literal(uuid.UUID, 'UUID'),
)

JSON = graphql.GraphQLScalarType(
    'JSON',
    serialize=lambda value: value,
    parse_value=lambda value: value,
    parse_literal=lambda value_node, variables=None: graphql.value_from_ast_untyped(value_node, variables),
    description='The `JSON` scalar type represents JSON values',
    specified_by_url='https://ecma-international.org/publications-and-standards/standards/ecma-404/',
)

# bool is a subclass of int: lookups are by exact type, never by isinstance.
BUILTIN_SCALARS: Dict[Any, graphql.GraphQLScalarType] = {
    str: graphql.GraphQLString,
    int: graphql.GraphQLInt,
    float: graphql.GraphQLFloat,
    bool: graphql.GraphQLBoolean,
    ID: graphql.GraphQLID,
    datetime.datetime: DateTime,
    datetime.date: Date,
    datetime.time: Time,
    decimal.Decimal: Decimal,
    uuid.UUID: UUID,
    dict: JSON,
    Any: JSON,
}


def scalar_for(tp: Any) -> Optional[graphql.GraphQLScalarType]:
    """Return the built-in scalar for ``tp`` or ``None``.

    ``NewType`` aliases map like their supertype unless they are themselves
    in the table, as ``ID`` is.
    """
    while tp is not None:
        try:
            scalar = BUILTIN_SCALARS.get(tp)
        except TypeError:  # unhashable annotation objects
            return None
        if scalar is not None:
            return scalar
        tp = getattr(tp, '__supertype__', None)
    return None
