from __future__ import annotations
import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Protocol, Sequence, Tuple, Type, Union, runtime_checkable

import graphql
from graphql import GraphQLResolveInfo

from ..errors import DefinitionError
from .arguments import ParameterSpec
from .members import Member

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .context import BuildContext
    from .definitions import Definition

__all__ = [
    'Resolver',
    'DataFetcherFactory',
    'as_resolver',
    'attribute_resolver',
    'method_resolver',
    'resolver_for',
]

_logger = logging.getLogger("annoql.fetchers")

Resolver = Callable[..., Any]
SupportedArguments = Union[Mapping, Iterable[Tuple[str, graphql.GraphQLArgument]], None]


@runtime_checkable
class DataFetcherFactory(Protocol):
    """Supplies resolvers and extra arguments for definition-typed fields.

    ``definition`` is the class the field's type was built from and
    ``return_type`` the (possibly wrapped) graphql-core type of the field.
    """

    def get_data_fetcher(self, definition: Type[Any], return_type: graphql.GraphQLOutputType) -> Optional[Resolver]:
        ...

    def get_supported_arguments(self, definition: Type[Any], return_type: graphql.GraphQLOutputType) -> SupportedArguments:
        ...


def as_resolver(obj: Any) -> Resolver:
    """Normalize a resolver declaration; classes are instantiated with no arguments."""
    if inspect.isclass(obj):
        obj = obj()
    if not callable(obj):
        raise DefinitionError(f"Resolver {obj!r} is not callable")
    return obj


def attribute_resolver(attr: str) -> Resolver:
    """Read ``attr`` from an object, or the key ``attr`` from a mapping."""
    def resolve(source: Any, info: GraphQLResolveInfo, **_kwargs: Any) -> Any:
        if source is None:
            return None
        if isinstance(source, Mapping):
            return source.get(attr)
        return getattr(source, attr, None)
    resolve.__name__ = f"resolve_{attr}"
    return resolve


def method_resolver(attr: str, specs: Sequence[ParameterSpec]) -> Resolver:
    """Call ``source.<attr>`` with GraphQL arguments as Python keyword arguments.

    Context parameters receive ``info``; omitted arguments with a default
    factory get a fresh value from it, others fall back to the Python default.
    """
    specs = tuple(specs)

    def resolve(source: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        if source is None:
            return None
        call_kwargs = {}
        for spec in specs:
            if spec.is_context:
                call_kwargs[spec.name] = info
            elif spec.name in kwargs:
                call_kwargs[spec.name] = kwargs[spec.name]
            elif spec.default_factory is not None:
                call_kwargs[spec.name] = spec.default_factory()
        if isinstance(source, Mapping):
            target = source.get(attr)
            return target(**call_kwargs) if callable(target) else target
        return getattr(source, attr)(**call_kwargs)
    resolve.__name__ = f"resolve_{attr}"
    return resolve


def resolver_for(
    context: 'BuildContext',
    definition: 'Definition',
    member: Member,
    field_type: graphql.GraphQLOutputType,
    specs: Sequence[ParameterSpec],
) -> Resolver:
    """Pick the resolver of an output field.

    Member override first, then the data fetcher factory for fields typed
    by another definition, then the structural read.
    """
    if member.meta.resolver is not None:
        return as_resolver(member.meta.resolver)
    factory = context.data_fetcher_factory
    if factory is not None:
        named = graphql.get_named_type(field_type)
        owner = context.types.native_owner(named)
        if isinstance(named, graphql.GraphQLObjectType) and inspect.isclass(owner):
            fetcher = factory.get_data_fetcher(owner, field_type)
            if fetcher is not None:
                _logger.debug("factory fetcher for %s.%s", definition.name, member.exposed_name)
                return as_resolver(fetcher)
    if member.is_callable:
        return method_resolver(member.attr, specs)
    return attribute_resolver(member.attr)
