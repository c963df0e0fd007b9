from dataclasses import dataclass
from typing import Optional

import pytest

import annoql
from annoql import Cardinality, DefinitionError, NameCollisionError, UnresolvableTypeError
from annoql.core.definitions import RootRegistration, definition_of, is_table
from annoql.core.types import Direction


class Documented:
    """A documented definition."""


@dataclass
class Point:
    x: int = 0


@annoql.type(name="Renamed", description="Explicit")
@annoql.table
class Decorated:
    """Ignored docstring."""


class DecoratedChild(Decorated):
    pass


def test_definition_defaults():
    definition = definition_of(Documented)
    assert definition.name == "Documented"
    assert definition.description == "A documented definition."
    assert definition.roots == []
    assert not definition.table
    assert not definition.no_root
    assert definition.qualname == f"{__name__}.Documented"


def test_dataclass_autodoc_is_not_a_description():
    assert definition_of(Point).description is None


def test_explicit_metadata_wins():
    definition = definition_of(Decorated)
    assert definition.name == "Renamed"
    assert definition.description == "Explicit"
    assert definition.table
    assert is_table(Decorated)


def test_class_metadata_is_not_inherited():
    definition = definition_of(DecoratedChild)
    assert definition.name == "DecoratedChild"
    assert not definition.table
    assert not is_table(DecoratedChild)


def test_root_registrations_keep_source_order():
    @annoql.root("first")
    @annoql.root("second", cardinality=Cardinality.LIST, description="Second")
    class Rooted:
        pass

    assert definition_of(Rooted).roots == [
        RootRegistration(name="first"),
        RootRegistration(name="second", description="Second", cardinality=Cardinality.LIST),
    ]


def test_root_field_names():
    assert RootRegistration().field_name("Thing") == "Thing"
    assert RootRegistration(cardinality=Cardinality.LIST).field_name("Thing") == "Thing_list"
    assert RootRegistration(name="things", cardinality=Cardinality.LIST).field_name("Thing") == "things"


def test_root_requires_a_cardinality():
    with pytest.raises(DefinitionError):
        annoql.root("x", cardinality="list")


def test_class_decorators_reject_functions():
    def not_a_class():
        pass

    for decorator in (annoql.table, annoql.no_root, annoql.type(), annoql.root()):
        with pytest.raises(DefinitionError):
            decorator(not_a_class)


class Pair:
    left: Optional[int] = annoql.field(default=None)
    right: Optional[int] = annoql.field(default=None)

    def __init__(self, left=None, right=None):
        self.left = left
        self.right = right


@annoql.type(input_factory=lambda **values: ("built", values))
class Factory:
    value: Optional[int] = annoql.field(default=None)


def test_build_input_uses_the_constructor_or_factory():
    pair = definition_of(Pair).build_input({"left": 1, "right": 2})
    assert (pair.left, pair.right) == (1, 2)
    assert definition_of(Factory).build_input({"value": 3}) == ("built", {"value": 3})


def test_input_factory_receives_coerced_input(context):
    input_type = context.types.definition_type(Pair, Direction.INPUT)
    assert input_type.out_type({"left": 5}).left == 5


def test_error_messages():
    error = UnresolvableTypeError(bytes, definition=Pair, member="left", direction=Direction.INPUT, reason="nope")
    assert str(error) == "Cannot map <class 'bytes'> to a GraphQL type on Pair.left (input): nope"
    assert isinstance(error, TypeError)

    collision = NameCollisionError("x", "fields of Pair", "'a' and 'b' share the name")
    assert str(collision) == "Duplicate name 'x' in fields of Pair: 'a' and 'b' share the name"
    assert isinstance(collision, ValueError)
    assert isinstance(collision, annoql.AnnoQLError)
