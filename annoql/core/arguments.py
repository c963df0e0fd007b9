from __future__ import annotations
import inspect
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

import graphql
from graphql import GraphQLResolveInfo, Undefined

from ..errors import DefinitionError, NameCollisionError, UnresolvableTypeError
from ..naming import apply_naming
from .definitions import Definition
from .fields import ArgumentMeta
from .members import Member
from .types import Direction

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .context import BuildContext

__all__ = ['ParameterSpec', 'ArgumentBuilder', 'is_context_annotation']

_NoneType = type(None)


@dataclass(frozen=True)
class ParameterSpec:
    """How a GraphQL argument (or the resolve info) reaches a Python parameter."""

    name: str
    graphql_name: Optional[str] = None
    is_context: bool = False
    default_factory: Optional[Callable[[], Any]] = None


def _argument_meta(annotation: Any) -> Optional[ArgumentMeta]:
    if typing.get_origin(annotation) is typing.Annotated:
        for extra in annotation.__metadata__:
            if isinstance(extra, ArgumentMeta):
                return extra
    return None


def is_context_annotation(annotation: Any) -> bool:
    """True for ``GraphQLResolveInfo`` (optionally ``Optional``/``Annotated``)."""
    tp = annotation
    while typing.get_origin(tp) is typing.Annotated:
        tp = tp.__origin__
    args = typing.get_args(tp)
    if args and _NoneType in args:
        rest = [a for a in args if a is not _NoneType]
        if len(rest) == 1:
            tp = rest[0]
    return inspect.isclass(tp) and issubclass(tp, GraphQLResolveInfo)


class ArgumentBuilder:
    """Derive GraphQL arguments from a method's parameters.

    The receiver (first parameter), ``*args`` and ``**kwargs`` are never
    exposed. A parameter annotated with ``GraphQLResolveInfo`` receives the
    resolve info at query time instead of becoming an argument.
    """

    def __init__(self, context: 'BuildContext'):
        self.context = context

    def build_arguments(
        self, definition: Definition, member: Member
    ) -> Tuple[Dict[str, graphql.GraphQLArgument], List[ParameterSpec]]:
        function = member.function
        where = f"{definition.name}.{member.attr}"
        try:
            signature = inspect.signature(function)
            hints = typing.get_type_hints(function, include_extras=True)
        except (TypeError, ValueError, NameError) as exc:
            raise DefinitionError(f"Cannot inspect parameters of {where}: {exc}") from exc
        params = list(signature.parameters.values())
        if not params or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise DefinitionError(f"{where} must take the instance as its first parameter")

        arguments: Dict[str, graphql.GraphQLArgument] = {}
        specs: List[ParameterSpec] = []
        for param in params[1:]:
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.kind is inspect.Parameter.POSITIONAL_ONLY:
                raise DefinitionError(f"{where}: positional-only parameter {param.name!r} cannot be an argument")
            annotation = hints.get(param.name)
            if annotation is None:
                raise UnresolvableTypeError(
                    None, definition=definition.cls, member=f"{member.attr}({param.name})",
                    reason='parameter has no type annotation',
                )
            if is_context_annotation(annotation):
                specs.append(ParameterSpec(name=param.name, is_context=True))
                continue
            name, argument, spec = self._argument(definition, member, param, annotation)
            if name in arguments:
                raise NameCollisionError(name, f"arguments of {definition.name}.{member.exposed_name}")
            arguments[name] = argument
            specs.append(spec)
        return arguments, specs

    def _argument(
        self, definition: Definition, member: Member, param: inspect.Parameter, annotation: Any
    ) -> Tuple[str, graphql.GraphQLArgument, ParameterSpec]:
        meta = _argument_meta(annotation) or ArgumentMeta()
        gtype = self.context.types.resolve(
            annotation,
            Direction.INPUT,
            type_function=meta.type_function,
            definition=definition.cls,
            member=f"{member.attr}({param.name})",
        )
        has_python_default = param.default is not inspect.Parameter.empty
        if (has_python_default or meta.has_default) and isinstance(gtype, graphql.GraphQLNonNull):
            # only required arguments are non-null
            gtype = gtype.of_type
        if meta.default is not Undefined:
            default_value = meta.default
        elif has_python_default and param.default is not None:
            default_value = param.default
        else:
            default_value = Undefined
        name = meta.name or apply_naming(param.name, self.context.config)
        argument = graphql.GraphQLArgument(
            gtype,
            default_value=default_value,
            description=meta.description,
            out_name=param.name,
        )
        spec = ParameterSpec(name=param.name, graphql_name=name, default_factory=meta.default_factory)
        return name, argument, spec
