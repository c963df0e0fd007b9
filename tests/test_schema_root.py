import logging

import graphql
import pytest

import annoql
from annoql import Cardinality, NameCollisionError, SchemaBuilder, find_tables
from tests import roots


@pytest.fixture
def tables():
    return find_tables(roots)


@pytest.fixture
def root(builder, tables, fetcher_factory):
    return builder.build_root(tables, fetcher_factory)


def run(root, query):
    schema = graphql.GraphQLSchema(query=root)
    result = graphql.graphql_sync(schema, query)
    assert result.errors is None, result.errors
    return result.data


def test_find_tables_keeps_definition_order(tables):
    assert tables == [
        roots.Class1,
        roots.OtherClass,
        roots.OnlyList,
        roots.OnlySingle,
        roots.OnlyReference,
        roots.DataFetcherTest,
    ]


def test_find_tables_accepts_module_names():
    assert find_tables("tests.roots") == find_tables(roots)


def test_type_annotations(root):
    for name in ("class1", "class1_list", "NamedRoot", "NamedRoots", "list", "single", "dataFetcherTest", "dataFetcherTests"):
        assert name in root.fields, name


def test_basic_schema(root):
    assert root.name == "Query"
    assert len(root.fields) == 8
    assert "OnlyReference" not in root.fields


def test_cardinality(root):
    assert isinstance(root.fields["class1_list"].type, graphql.GraphQLList)
    assert root.fields["class1_list"].type.of_type is root.fields["class1"].type
    assert isinstance(root.fields["class1"].type, graphql.GraphQLObjectType)


def test_description(root):
    assert root.fields["class1"].description == "Test description."
    assert root.fields["class1_list"].description is None


def test_arguments(root):
    assert list(root.fields["class1"].args) == ["arg1"]
    assert list(root.fields["NamedRoot"].args) == ["arg2"]
    assert root.fields["list"].args == {}


def test_basic_data(root):
    assert run(root, "{ class1 { field } }") == {"class1": {"field": "field1"}}


def test_list_data(root):
    assert run(root, "{ class1_list { field } }") == {"class1_list": [{"field": "field1"}]}


def test_external_arguments_reach_the_fetcher(root):
    assert run(root, "{ class1(arg1: 3) { field } }") == {"class1": {"field": "field1"}}


def test_object_references(root):
    assert run(root, "{ class1 { other_class { field } } }") == {"class1": {"other_class": {"field": "field2"}}}
    assert run(root, "{ NamedRoot { class1 { field } } }") == {"NamedRoot": {"class1": {"field": "field1"}}}
    assert run(root, "{ NamedRoot { class1 { other_class { field } } } }") == {
        "NamedRoot": {"class1": {"other_class": {"field": "field2"}}}
    }


def test_only_reference(root):
    assert run(root, "{ class1 { only_reference { f } } }") == {"class1": {"only_reference": {"f": "field"}}}


def test_data_fetcher(root):
    data = run(root, "{ dataFetcherTest { field } dataFetcherTests { field } }")
    assert data == {
        "dataFetcherTest": {"field": "singleTest"},
        "dataFetcherTests": [{"field": "listTest"}, {"field": "SecondListTest"}],
    }


def test_roots_without_factory_read_the_root_value(builder, tables):
    root = builder.build_root(tables)
    schema = graphql.GraphQLSchema(query=root)
    result = graphql.graphql_sync(schema, "{ single { name } }", root_value={"single": {"name": "from root"}})
    assert result.errors is None
    assert result.data == {"single": {"name": "from root"}}


def test_naming_config_applies_to_nested_fields(camel_builder, tables, fetcher_factory):
    root = camel_builder.build_root(tables, fetcher_factory)
    # explicit root names are kept verbatim
    assert "class1_list" in root.fields
    assert run(root, "{ class1 { otherClass { field } onlyReference { f } } }") == {
        "class1": {"otherClass": {"field": "field2"}, "onlyReference": {"f": "field"}}
    }


@annoql.root()
@annoql.root(cardinality=Cardinality.LIST)
class Widget:
    name: str = annoql.field(default="w")


@annoql.root("widget")
class WidgetAlias:
    name: str = annoql.field(default="w")


@annoql.no_root
@annoql.root("hidden")
class Hidden:
    name: str = annoql.field(default="h")


class Unregistered:
    name: str = annoql.field(default="u")


def test_default_root_names(builder):
    root = builder.build_root([Widget, Unregistered])
    assert list(root.fields) == ["Widget", "Widget_list"]


def test_root_name_collision(builder):
    with pytest.raises(NameCollisionError) as excinfo:
        builder.build_root([Widget, WidgetAlias, WidgetAlias])
    assert excinfo.value.name == "widget"


def test_no_root_skips_registrations(builder, caplog):
    with caplog.at_level(logging.WARNING, logger="annoql"):
        root = builder.build_root([Hidden, Widget])
    assert "hidden" not in root.fields
    assert any("no_root" in record.getMessage() for record in caplog.records)


def test_each_build_gets_fresh_types(builder):
    first = builder.build_root([Widget])
    second = builder.build_root([Widget])
    assert first.fields["Widget"].type is not second.fields["Widget"].type


class Mutations:
    @annoql.field
    def rename(self, name: str) -> Widget:
        widget = Widget()
        widget.name = name
        return widget


def test_build_schema_with_mutation(builder):
    schema = builder.build_schema([Widget], mutation=Mutations)
    assert schema.mutation_type.name == "Mutations"
    # query and mutation share one build, hence one Widget type
    assert graphql.get_named_type(schema.mutation_type.fields["rename"].type) is schema.query_type.fields["Widget"].type
    result = graphql.graphql_sync(schema, 'mutation { rename(name: "x") { name } }', root_value=Mutations())
    assert result.errors is None
    assert result.data == {"rename": {"name": "x"}}


def test_build_schema_extra_types(builder):
    schema = builder.build_schema([Widget], types=[Unregistered])
    assert schema.get_type("Unregistered") is not None


def test_builder_level_factory(fetcher_factory, tables):
    root = SchemaBuilder(data_fetcher_factory=fetcher_factory).build_root(tables)
    assert list(root.fields["class1"].args) == ["arg1"]
