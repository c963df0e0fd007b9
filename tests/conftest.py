"""Test configuration and fixtures for annoql."""

import warnings
# Calls into typing_extensions.deprecated members are expected in a few tests
warnings.filterwarnings("ignore", category=DeprecationWarning, message=r"Use value")

import graphql
import pytest
from strawberry.schema.config import StrawberryConfig

from annoql import SchemaBuilder, TypeMappingRegistry
from annoql.core.context import BuildContext
from tests import roots


class ObjectFetcherFactory:
    """Serves fixed objects per definition class and extra root arguments."""

    def __init__(self, objects, arguments):
        self.objects = objects
        self.arguments = arguments

    def get_data_fetcher(self, definition, return_type):
        obj = self.objects.get(definition)
        if obj is None:
            return None

        def fetch(source, info, **kwargs):
            if isinstance(return_type, graphql.GraphQLList):
                return [obj]
            return obj
        return fetch

    def get_supported_arguments(self, definition, return_type):
        return self.arguments.get(definition, [])


@pytest.fixture
def registry():
    return TypeMappingRegistry()


@pytest.fixture
def builder(registry):
    return SchemaBuilder(registry=registry)


@pytest.fixture
def camel_builder(registry):
    return SchemaBuilder(config=StrawberryConfig(auto_camel_case=True), registry=registry)


@pytest.fixture
def context(registry):
    return BuildContext(registry=registry)


@pytest.fixture
def fetcher_factory():
    class1 = roots.Class1()
    other = roots.OtherClass(class1)
    class1.other_class = other
    class1.only_reference = roots.OnlyReference()
    objects = {roots.Class1: class1, roots.OtherClass: other}
    arguments = {
        roots.Class1: [("arg1", graphql.GraphQLArgument(graphql.GraphQLInt))],
        roots.OtherClass: {"arg2": graphql.GraphQLArgument(graphql.GraphQLInt)},
        roots.OnlyList: [],
    }
    return ObjectFetcherFactory(objects, arguments)


@pytest.fixture
def execute():
    """Run a query against a schema built from a single object type."""
    def run(query_type, source, root_value=None, **kwargs):
        schema = graphql.GraphQLSchema(query=query_type, **kwargs)
        return graphql.graphql_sync(schema, source, root_value=root_value)
    return run
