from __future__ import annotations
import inspect
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Callable, List, Optional, Type

from ..errors import DefinitionError
from ..naming import LIST_ROOT_SUFFIX

__all__ = [
    'Cardinality',
    'RootRegistration',
    'Definition',
    'definition_of',
    'type',
    'table',
    'root',
    'no_root',
    'is_table',
]

_TYPE_ATTR = '__annoql_type__'
_TABLE_ATTR = '__annoql_table__'
_ROOTS_ATTR = '__annoql_roots__'
_NO_ROOT_ATTR = '__annoql_no_root__'


class Cardinality(Enum):
    SINGLE = 'single'
    LIST = 'list'


@dataclass(frozen=True)
class RootRegistration:
    """Declares that a definition is exposed as a root query field."""

    name: Optional[str] = None
    description: Optional[str] = None
    cardinality: Cardinality = Cardinality.SINGLE

    def field_name(self, type_name: str) -> str:
        if self.name:
            return self.name
        if self.cardinality is Cardinality.LIST:
            return f"{type_name}{LIST_ROOT_SUFFIX}"
        return type_name


@dataclass
class Definition:
    """Structural description of one annotated class.

    Attributes:
        cls: The class itself; identity of the definition.
        name: GraphQL type name (explicit or the class name).
        description: Explicit description, else the class' own docstring.
        table: Whether the class is marked with :func:`table`.
        no_root: Explicitly excluded from the schema root.
        roots: Root registrations in declaration order.
        resolver: Definition-level data fetcher used for its root fields.
        input_factory: Builds an instance from input object values
            (keyword arguments keyed by attribute name).
    """

    cls: Type[Any]
    name: str
    description: Optional[str] = None
    table: bool = False
    no_root: bool = False
    roots: List[RootRegistration] = dc_field(default_factory=list)
    resolver: Any = None
    input_factory: Optional[Callable[..., Any]] = None

    @property
    def qualname(self) -> str:
        return f"{self.cls.__module__}.{self.cls.__qualname__}"

    def build_input(self, values: dict) -> Any:
        factory = self.input_factory or self.cls
        return factory(**values)


def _own(cls: Type[Any], attr: str, default: Any = None) -> Any:
    # class decorators are not inherited: a subclass is its own definition
    return cls.__dict__.get(attr, default)


def definition_of(cls: Type[Any]) -> Definition:
    """Read the declarative metadata of ``cls`` into a :class:`Definition`."""
    if not inspect.isclass(cls):
        raise DefinitionError(f"{cls!r} is not a class")
    opts = _own(cls, _TYPE_ATTR) or {}
    description = opts.get('description')
    if description is None:
        doc = cls.__dict__.get('__doc__')
        # dataclasses synthesize "Name(field: type, ...)" docstrings
        if doc and not doc.startswith(f"{cls.__name__}("):
            description = inspect.cleandoc(doc)
    return Definition(
        cls=cls,
        name=opts.get('name') or cls.__name__,
        description=description,
        table=bool(_own(cls, _TABLE_ATTR, False)),
        no_root=bool(_own(cls, _NO_ROOT_ATTR, False)),
        roots=list(_own(cls, _ROOTS_ATTR) or ()),
        resolver=opts.get('resolver'),
        input_factory=opts.get('input_factory'),
    )


def type(
    cls: Optional[Type[Any]] = None,
    /,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    resolver: Any = None,
    input_factory: Optional[Callable[..., Any]] = None,
):
    """Attach type-level metadata to a definition class.

    Example:
        @annoql.type(name="TestObject", description="TestObject object")
        class TestObject:
            ...

    Args:
        name: GraphQL type name; defaults to the class name.
        description: Type description; defaults to the class docstring.
        resolver: Data fetcher for this definition's root fields. Wins over
            the data fetcher factory passed to the builder.
        input_factory: Callable building an instance from input object
            values; defaults to the class constructor.
    """
    def deco(c: Type[Any]) -> Type[Any]:
        if not inspect.isclass(c):
            raise DefinitionError(f"@type expects a class, got {c!r}")
        setattr(c, _TYPE_ATTR, {
            'name': name,
            'description': description,
            'resolver': resolver,
            'input_factory': input_factory,
        })
        return c
    return deco(cls) if cls is not None else deco


def table(cls: Type[Any]) -> Type[Any]:
    """Mark a class as part of the schema (discoverable by ``find_tables``)."""
    if not inspect.isclass(cls):
        raise DefinitionError(f"@table expects a class, got {cls!r}")
    setattr(cls, _TABLE_ATTR, True)
    return cls


def root(
    name: Optional[str] = None,
    *,
    cardinality: Cardinality = Cardinality.SINGLE,
    description: Optional[str] = None,
):
    """Expose the decorated definition as a root query field.

    Repeatable; registrations keep their top-to-bottom order::

        @annoql.root("class1", description="Test description.")
        @annoql.root("class1_list", cardinality=Cardinality.LIST)
        @annoql.table
        class Class1:
            ...

    Without a name, ``SINGLE`` uses the type name and ``LIST`` appends
    ``_list`` to it.
    """
    if not isinstance(cardinality, Cardinality):
        raise DefinitionError(f"cardinality must be a Cardinality, got {cardinality!r}")
    registration = RootRegistration(name=name, description=description, cardinality=cardinality)

    def deco(cls: Type[Any]) -> Type[Any]:
        if not inspect.isclass(cls):
            raise DefinitionError(f"@root expects a class, got {cls!r}")
        # decorators run bottom-up; prepend to keep source order
        setattr(cls, _ROOTS_ATTR, [registration, *(_own(cls, _ROOTS_ATTR) or ())])
        return cls
    return deco


def no_root(cls: Type[Any]) -> Type[Any]:
    """Keep a definition out of the root; it is only reachable by reference."""
    if not inspect.isclass(cls):
        raise DefinitionError(f"@no_root expects a class, got {cls!r}")
    setattr(cls, _NO_ROOT_ATTR, True)
    return cls


def is_table(obj: Any) -> bool:
    return inspect.isclass(obj) and bool(_own(obj, _TABLE_ATTR, False))
