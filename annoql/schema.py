"""Schema entry points: single types, the root query object and full schemas.

``SchemaBuilder`` only holds configuration. Every public call runs in a fresh
``BuildContext`` so type instances, names and caches never leak between builds;
``build_schema`` shares one context between the query and mutation roots.
"""
from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Mapping
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Type, Union

import graphql
from strawberry.schema.config import StrawberryConfig

from .core.context import BuildContext
from .core.definitions import Cardinality, Definition, RootRegistration, is_table
from .core.fetchers import SupportedArguments, as_resolver
from .core.types import Direction
from .errors import DefinitionError, NameCollisionError
from .registry import TypeMappingRegistry

__all__ = ['SchemaBuilder', 'find_tables']

_logger = logging.getLogger("annoql.schema")

QUERY_ROOT_NAME = 'Query'
MUTATION_ROOT_NAME = 'Mutation'


def _supported_arguments(value: SupportedArguments, where: str) -> Dict[str, graphql.GraphQLArgument]:
    if value is None:
        return {}
    items = value.items() if isinstance(value, Mapping) else value
    result: Dict[str, graphql.GraphQLArgument] = {}
    for name, argument in items:
        if not isinstance(argument, graphql.GraphQLArgument):
            raise DefinitionError(f"Supported argument {name!r} of {where} is not a GraphQLArgument: {argument!r}")
        if name in result:
            raise NameCollisionError(name, f"arguments of root field {where}")
        result[name] = argument
    return result


class SchemaBuilder:
    """Build graphql-core types from annotated classes.

    Example:
        builder = SchemaBuilder(config=StrawberryConfig(auto_camel_case=True))
        schema = builder.build_schema([Class1, Class2], factory)
        graphql.graphql_sync(schema, "{ class1 { value } }", root_value=root)

    Args:
        config: Strawberry naming config applied to derived names. Defaults
            to identity naming.
        registry: Type mapping registry. Defaults to the process-wide one.
        data_fetcher_factory: Factory used when a call passes none.
    """

    def __init__(
        self,
        *,
        config: Optional[StrawberryConfig] = None,
        registry: Optional[TypeMappingRegistry] = None,
        data_fetcher_factory: Any = None,
    ):
        self.config = config
        self.registry = registry
        self.data_fetcher_factory = data_fetcher_factory

    def _context(self, data_fetcher_factory: Any = None) -> BuildContext:
        factory = data_fetcher_factory if data_fetcher_factory is not None else self.data_fetcher_factory
        return BuildContext(config=self.config, registry=self.registry, data_fetcher_factory=factory)

    # ---- single types -----------------------------------------------------
    def object(self, cls: Type[Any], data_fetcher_factory: Any = None) -> graphql.GraphQLObjectType:
        """Output object type of ``cls`` (and everything it references)."""
        ctx = self._context(data_fetcher_factory)
        return ctx.types.definition_type(cls, Direction.OUTPUT)

    def input_object(self, cls: Type[Any]) -> graphql.GraphQLInputObjectType:
        """Input object type of ``cls``; methods become plain input fields."""
        ctx = self._context()
        return ctx.types.definition_type(cls, Direction.INPUT)

    # ---- roots ------------------------------------------------------------
    def build_root(
        self,
        definitions: Iterable[Type[Any]],
        data_fetcher_factory: Any = None,
        *,
        name: str = QUERY_ROOT_NAME,
    ) -> graphql.GraphQLObjectType:
        """Root object with one field per root registration of ``definitions``."""
        ctx = self._context(data_fetcher_factory)
        return self._root(ctx, definitions, name)

    def build_schema(
        self,
        definitions: Iterable[Type[Any]],
        data_fetcher_factory: Any = None,
        *,
        mutation: Optional[Type[Any]] = None,
        types: Optional[Iterable[Type[Any]]] = None,
    ) -> graphql.GraphQLSchema:
        """Complete schema: the query root plus an optional mutation root.

        ``mutation`` is a definition class whose members become the mutation
        fields; resolvers receive the executor's ``root_value`` as source.
        ``types`` adds definitions that no root field references.
        """
        ctx = self._context(data_fetcher_factory)
        query = self._root(ctx, definitions, QUERY_ROOT_NAME)
        mutation_type = None
        if mutation is not None:
            mutation_type = ctx.types.definition_type(mutation, Direction.OUTPUT)
        extra = [ctx.types.definition_type(cls, Direction.OUTPUT) for cls in (types or ())]
        return graphql.GraphQLSchema(query=query, mutation=mutation_type, types=extra or None)

    def _root(self, ctx: BuildContext, definitions: Iterable[Type[Any]], name: str) -> graphql.GraphQLObjectType:
        fields: Dict[str, graphql.GraphQLField] = {}
        for cls in definitions:
            definition = ctx.definition(cls)
            if definition.no_root:
                if definition.roots:
                    _logger.warning("%s is marked no_root; ignoring %d root registration(s)", definition.qualname, len(definition.roots))
                continue
            if not definition.roots:
                _logger.debug("%s has no root registration", definition.qualname)
                continue
            object_type = ctx.types.definition_type(cls, Direction.OUTPUT)
            for registration in definition.roots:
                field_name = registration.field_name(definition.name)
                if field_name in fields:
                    raise NameCollisionError(field_name, f"root {name}")
                fields[field_name] = self._root_field(ctx, definition, registration, object_type)
                _logger.debug("root field %s.%s -> %s", name, field_name, definition.name)
        return graphql.GraphQLObjectType(name, lambda: fields)

    def _root_field(
        self,
        ctx: BuildContext,
        definition: Definition,
        registration: RootRegistration,
        object_type: graphql.GraphQLObjectType,
    ) -> graphql.GraphQLField:
        field_type: graphql.GraphQLOutputType = object_type
        if registration.cardinality is Cardinality.LIST:
            field_type = graphql.GraphQLList(object_type)
        factory = ctx.data_fetcher_factory
        args: Dict[str, graphql.GraphQLArgument] = {}
        resolve = None
        if factory is not None:
            where = registration.field_name(definition.name)
            args = _supported_arguments(factory.get_supported_arguments(definition.cls, field_type), where)
        if definition.resolver is not None:
            resolve = as_resolver(definition.resolver)
        elif factory is not None:
            fetcher = factory.get_data_fetcher(definition.cls, field_type)
            if fetcher is not None:
                resolve = as_resolver(fetcher)
        return graphql.GraphQLField(
            field_type,
            args=args,
            resolve=resolve,
            description=registration.description,
        )


def _tables_in(module: ModuleType) -> List[Type[Any]]:
    found = []
    for value in vars(module).values():
        # re-exported classes belong to the module that defines them
        if is_table(value) and value.__module__ == module.__name__:
            found.append(value)
    return found


def find_tables(module: Union[str, ModuleType], *, recursive: bool = True) -> List[Type[Any]]:
    """Discover ``@table`` classes in a module or package, in definition order."""
    if isinstance(module, str):
        module = importlib.import_module(module)
    if not inspect.ismodule(module):
        raise DefinitionError(f"find_tables expects a module or module name, got {module!r}")
    found = _tables_in(module)
    path = getattr(module, '__path__', None)
    if recursive and path is not None:
        for info in pkgutil.walk_packages(path, prefix=module.__name__ + '.'):
            found.extend(_tables_in(importlib.import_module(info.name)))
    return found
