from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Optional

import graphql
from graphql import Undefined

from ..errors import DefinitionError

FIELD_META_ATTR = '__annoql_field__'


@dataclass(frozen=True)
class FieldMeta:
    """Normalized metadata captured from :func:`field`.

    Attributes:
        name: Explicit GraphQL name. Explicit names bypass name conversion.
        description: GraphQL field description.
        deprecation_reason: Reason shown for deprecated fields, or None.
        resolver: Member-level data fetcher override. Either a resolver
            callable ``fn(source, info, **kwargs)`` or a class whose instances
            are such callables.
        type_function: Per-member type mapping override, see
            :class:`annoql.registry.TypeMappingRegistry`.
        returns: Explicit native type; replaces the annotation.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    deprecation_reason: Optional[str] = None
    resolver: Any = None
    type_function: Any = None
    returns: Any = None


@dataclass(frozen=True)
class ArgumentMeta:
    """Parameter metadata, attached with ``Annotated[T, arg(...)]``."""

    name: Optional[str] = None
    description: Optional[str] = None
    default: Any = Undefined
    default_factory: Optional[Callable[[], Any]] = None
    type_function: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not Undefined or self.default_factory is not None


class FieldDescriptor:
    """Plain field marker placed on definition classes.

    Users normally call :func:`field` which returns a ``FieldDescriptor``.
    As a class attribute it declares a plain data field; called with a
    function or property it acts as a decorator and tags the target instead.

    The descriptor is non-data: a value assigned on the instance shadows it,
    otherwise reads fall back to ``default`` / ``default_factory``.

    Class-level reads return ``default`` when one is set, which is what
    ``@dataclass`` picks up as the field default. ``default_factory`` is not
    visible to ``@dataclass``; such fields must be passed to the constructor.
    """

    def __init__(self, meta: FieldMeta, *, default: Any = Undefined, default_factory: Optional[Callable[[], Any]] = None):
        if default is not Undefined and default_factory is not None:
            raise DefinitionError("field() accepts either default or default_factory, not both")
        self.meta = meta
        self.default = default
        self.default_factory = default_factory
        self.name: str | None = None

    def __set_name__(self, owner, name):  # pragma: no cover - simple
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            if self.default is not Undefined:
                return self.default
            return self
        if self.default_factory is not None:
            value = self.default_factory()
            instance.__dict__[self.name] = value
            return value
        if self.default is not Undefined:
            return self.default
        raise AttributeError(f"{type(instance).__name__!r} object has no attribute {self.name!r}")

    def __call__(self, target: Any) -> Any:
        return _mark(target, self.meta)

    def __repr__(self) -> str:
        return f"FieldDescriptor(name={self.name!r}, meta={self.meta!r})"


def _deprecation(deprecated: bool, reason: Optional[str]) -> Optional[str]:
    if reason:
        return reason
    if deprecated:
        return graphql.DEFAULT_DEPRECATION_REASON
    return None


def _mark(target: Any, meta: FieldMeta) -> Any:
    if isinstance(target, property):
        if target.fget is None:
            raise DefinitionError("field() cannot decorate a property without a getter")
        return property(_mark(target.fget, meta), target.fset, target.fdel, target.__doc__)
    if isinstance(target, (staticmethod, classmethod)):
        raise DefinitionError(f"field() cannot decorate {type(target).__name__} objects")
    if not callable(target):
        raise DefinitionError(f"field() cannot decorate {target!r}")
    setattr(target, FIELD_META_ATTR, meta)
    return target


def field(
    target: Any = None,
    /,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecated: bool = False,
    deprecation_reason: Optional[str] = None,
    resolver: Any = None,
    type_function: Any = None,
    returns: Any = None,
    default: Any = Undefined,
    default_factory: Optional[Callable[[], Any]] = None,
) -> Any:
    """Declare a schema-eligible member.

    Three forms are supported::

        @annoql.type()
        class TestObject:
            # plain field with a class-level default
            public_test: Optional[str] = annoql.field(default="public")

            # method field, bare decorator
            @annoql.field
            def field_with_args(self, a: str, b: Optional[str] = None) -> Optional[str]:
                return b

            # method or property with overrides
            @property
            @annoql.field(name="field0", description="field")
            def value(self) -> str:
                return "test"

    Args:
        name: Explicit GraphQL name (used verbatim).
        description: Field description.
        deprecated: Mark deprecated with graphql-core's default reason.
        deprecation_reason: Mark deprecated with this reason.
        resolver: Data fetcher override for this member; wins over the
            builder's data fetcher factory and over the structural read.
        type_function: Type mapping override for this member's core type.
        returns: Native type to use instead of the annotation.
        default: Class-level default for plain fields.
        default_factory: Zero-argument callable producing the default for
            plain fields; the value is stored on first read.
    """
    meta = FieldMeta(
        name=name,
        description=description,
        deprecation_reason=_deprecation(deprecated, deprecation_reason),
        resolver=resolver,
        type_function=type_function,
        returns=returns,
    )
    if target is not None:
        if default is not Undefined or default_factory is not None:
            raise DefinitionError("default/default_factory only apply to plain fields")
        return _mark(target, meta)
    return FieldDescriptor(meta, default=default, default_factory=default_factory)


def arg(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    default: Any = Undefined,
    default_factory: Optional[Callable[[], Any]] = None,
    type_function: Any = None,
) -> ArgumentMeta:
    """Describe a resolver parameter.

    Use inside ``typing.Annotated``::

        def field_with_args(self, a: str, b: Annotated[str, arg(default_factory=lambda: "default")]) -> str:
            return b

    ``default_factory`` is a zero-argument strategy evaluated each time the
    argument is omitted from a query; a failure is reported as an error on
    that field. ``default`` is published in the schema as the argument's
    default value.
    """
    if default is not Undefined and default_factory is not None:
        raise DefinitionError("arg() accepts either default or default_factory, not both")
    return ArgumentMeta(
        name=name,
        description=description,
        default=default,
        default_factory=default_factory,
        type_function=type_function,
    )


def field_meta(target: Any) -> Optional[FieldMeta]:
    """Return the metadata attached to a function/property/descriptor."""
    if isinstance(target, FieldDescriptor):
        return target.meta
    if isinstance(target, property):
        target = target.fget
    return getattr(target, FIELD_META_ATTR, None)


