from enum import Enum
from typing import Annotated, Optional

import graphql
import pytest
from graphql import GraphQLResolveInfo, Undefined

import annoql
from annoql import DefinitionError, NameCollisionError, UnresolvableTypeError


class Color(Enum):
    RED = 1
    BLUE = 2


def failing_default():
    raise ValueError("no default today")


class Search:
    @annoql.field
    def find(
        self,
        info: GraphQLResolveInfo,
        text: str,
        limit: int = 10,
        offset: Optional[int] = None,
        color: Color = Color.RED,
        tags: Annotated[Optional[list[str]], annoql.arg(description="Tag filter")] = None,
        scale: Annotated[float, annoql.arg(default=1.5)] = 1.0,
        *rest,
        **extra,
    ) -> Optional[str]:
        return f"{text}:{limit}:{offset}:{color.name}:{scale}"

    @annoql.field
    def explode(self, value: Annotated[Optional[str], annoql.arg(default_factory=failing_default)]) -> Optional[str]:
        return value

    @annoql.field
    def optional_info(self, info: Optional[GraphQLResolveInfo] = None) -> Optional[str]:
        return info.field_name if info is not None else None


def args_of(builder, cls, field):
    return builder.object(cls).fields[field].args


def test_context_and_varargs_are_not_arguments(builder):
    args = args_of(builder, Search, "find")
    assert list(args) == ["text", "limit", "offset", "color", "tags", "scale"]
    assert args_of(builder, Search, "optional_info") == {}


def test_non_null_only_when_required(builder):
    args = args_of(builder, Search, "find")
    assert str(args["text"].type) == "String!"
    assert str(args["limit"].type) == "Int"
    assert str(args["offset"].type) == "Int"
    assert str(args["tags"].type) == "[String!]"


def test_published_defaults(builder):
    args = args_of(builder, Search, "find")
    assert args["text"].default_value is Undefined
    assert args["limit"].default_value == 10
    # None defaults stay with Python
    assert args["offset"].default_value is Undefined
    assert args["color"].default_value is Color.RED
    # arg(default=...) wins over the Python default
    assert args["scale"].default_value == 1.5
    assert args["tags"].description == "Tag filter"


def test_out_names_are_parameter_names(camel_builder):
    obj = camel_builder.object(Search)
    args = obj.fields["find"].args
    assert all(arg.out_name == name for name, arg in args.items())
    assert "optionalInfo" in obj.fields


class Renamed:
    @annoql.field
    def lookup(self, first_argument: Optional[str] = None, second: Annotated[Optional[str], annoql.arg(name="second_arg")] = None) -> Optional[str]:
        return first_argument or second


def test_argument_names_follow_the_naming_config(camel_builder, execute):
    obj = camel_builder.object(Renamed)
    args = obj.fields["lookup"].args
    # explicit names are used verbatim
    assert list(args) == ["firstArgument", "second_arg"]
    assert args["firstArgument"].out_name == "first_argument"
    result = execute(obj, '{ lookup(firstArgument: "x") }', Renamed())
    assert result.data == {"lookup": "x"}


def test_identity_naming_in_sdl(builder):
    sdl = graphql.print_type(builder.object(Renamed))
    assert "lookup(first_argument: String, second_arg: String): String" in sdl


def test_arguments_reach_the_method(builder, execute):
    obj = builder.object(Search)
    result = execute(obj, '{ find(text: "a", color: BLUE, offset: 2) }', Search())
    assert result.errors is None
    assert result.data == {"find": "a:10:2:BLUE:1.5"}


def test_optional_context_parameter_receives_info(builder, execute):
    result = execute(builder.object(Search), "{ optional_info }", Search())
    assert result.data == {"optional_info": "optional_info"}


def test_default_factory_failure_is_a_field_error(builder, execute):
    result = execute(builder.object(Search), "{ explode }", Search())
    assert result.data == {"explode": None}
    assert result.errors[0].message == "no default today"
    assert result.errors[0].path == ["explode"]


class PositionalOnly:
    @annoql.field
    def value(self, x: int, /) -> int:
        return x


class Unannotated:
    @annoql.field
    def value(self, x) -> int:
        return x


class DuplicateNames:
    @annoql.field
    def value(self, a: int, b: Annotated[int, annoql.arg(name="a")]) -> int:
        return a + b


class BadArgument:
    @annoql.field
    def value(self, payload: bytes) -> int:
        return len(payload)


def test_positional_only_parameters_are_rejected(builder):
    with pytest.raises(DefinitionError):
        builder.object(PositionalOnly)


def test_unannotated_parameters_are_rejected(builder):
    with pytest.raises(UnresolvableTypeError) as excinfo:
        builder.object(Unannotated)
    assert excinfo.value.member == "value(x)"


def test_duplicate_argument_names_are_rejected(builder):
    with pytest.raises(NameCollisionError):
        builder.object(DuplicateNames)


def test_unresolvable_argument_type(builder):
    with pytest.raises(UnresolvableTypeError) as excinfo:
        builder.object(BadArgument)
    assert excinfo.value.direction.value == "input"
