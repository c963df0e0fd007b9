from __future__ import annotations
import collections.abc
import inspect
import logging
import types as _pytypes
import typing
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Set, Tuple, Type, Union

import graphql

from ..errors import NameCollisionError, UnresolvableTypeError
from ..naming import INPUT_SUFFIX
from ..registry import as_type_function
from ..scalars import JSON, scalar_for

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .context import BuildContext

__all__ = ['Direction', 'TypeResolver']

_logger = logging.getLogger("annoql.types")

_NoneType = type(None)

_LIST_ORIGINS = {
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Set,
    collections.abc.MutableSet,
}

_MAPPING_ORIGINS = {
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
}


class Direction(Enum):
    OUTPUT = 'output'
    INPUT = 'input'


def _strip_annotated(tp: Any) -> Any:
    while typing.get_origin(tp) is typing.Annotated:
        tp = tp.__origin__
    return tp


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is Union or origin is _pytypes.UnionType


def _one_of(tp: Any, group: set) -> bool:
    try:
        return tp in group
    except TypeError:  # unhashable annotation objects
        return False


class TypeResolver:
    """Map native annotations to graphql-core types for one schema build.

    Definitions are built insert-placeholder-then-fill: the object (or input
    object) type is created over an empty fields mapping, stored in the arena
    under ``(cls, direction)`` and only then filled by the field assembler.
    A reference reached while the type is still being filled gets the same
    instance, so recursive graphs terminate and every reference to a
    definition shares one type object per direction.
    """

    def __init__(self, context: 'BuildContext'):
        self.context = context
        self._arena: Dict[Tuple[Type[Any], Direction], graphql.GraphQLNamedType] = {}
        self._visiting: Set[Tuple[Type[Any], Direction]] = set()
        self._enums: Dict[Type[Enum], graphql.GraphQLEnumType] = {}
        # type name -> native owner, for collision checks and reverse lookups
        self._names: Dict[str, Any] = {}

    # ---- public API -------------------------------------------------------
    def resolve(
        self,
        native_type: Any,
        direction: Direction,
        *,
        type_function: Any = None,
        definition: Any = None,
        member: Optional[str] = None,
    ) -> graphql.GraphQLType:
        """Resolve ``native_type`` into a graphql-core type.

        Args:
            native_type: Annotation, possibly wrapped in ``Annotated``,
                ``Optional`` and collection generics.
            direction: OUTPUT for fields, INPUT for arguments/input fields.
            type_function: Per-member mapping override for the core type.
            definition: Class owning the member, for error context.
            member: Member or parameter name, for error context.
        """
        site = (definition, member, as_type_function(type_function) if type_function is not None else None)
        return self._resolve(native_type, direction, site, outer=True)

    def definition_type(self, cls: Type[Any], direction: Direction) -> graphql.GraphQLNamedType:
        """Object/input type of a definition class (never wrapped)."""
        key = (cls, direction)
        cached = self._arena.get(key)
        if cached is not None:
            if key in self._visiting:
                _logger.debug("forward reference to %s (%s)", cached.name, direction.value)
            return cached
        definition = self.context.definition(cls)
        if direction is Direction.OUTPUT:
            name = definition.name
        else:
            name = definition.name + INPUT_SUFFIX
        snapshot = (set(self._arena), set(self._names), set(self._enums))
        self.claim_name(name, cls)
        fields: Dict[str, Any] = {}
        if direction is Direction.OUTPUT:
            gtype: graphql.GraphQLNamedType = graphql.GraphQLObjectType(
                name, lambda: fields, description=definition.description,
            )
        else:
            gtype = graphql.GraphQLInputObjectType(
                name, lambda: fields, description=definition.description, out_type=definition.build_input,
            )
        _logger.debug("building %s type %s for %s", direction.value, name, definition.qualname)
        self._arena[key] = gtype
        self._visiting.add(key)
        try:
            fields.update(self.context.fields.assemble_fields(definition, direction))
        except Exception:
            self._rollback(snapshot)
            raise
        finally:
            self._visiting.discard(key)
        return gtype

    def _rollback(self, snapshot: tuple) -> None:
        # types finished during a failed build may reference its placeholder
        for table, kept in zip((self._arena, self._names, self._enums), snapshot):
            for added in [k for k in table if k not in kept]:
                del table[added]

    def enum_type(self, enum_cls: Type[Enum]) -> graphql.GraphQLEnumType:
        cached = self._enums.get(enum_cls)
        if cached is not None:
            return cached
        self.claim_name(enum_cls.__name__, enum_cls)
        # iteration skips aliases and keeps declaration order
        values = {m.name: graphql.GraphQLEnumValue(m) for m in enum_cls}
        gtype = graphql.GraphQLEnumType(enum_cls.__name__, values)
        self._enums[enum_cls] = gtype
        return gtype

    def claim_name(self, name: str, owner: Any) -> None:
        holder = self._names.get(name)
        if holder is not None and holder is not owner:
            raise NameCollisionError(name, 'schema types', f"used by {holder!r} and {owner!r}")
        self._names[name] = owner

    def native_owner(self, gtype: graphql.GraphQLType) -> Any:
        """Return the class/enum a named type was built from, if any."""
        named = graphql.get_named_type(gtype)
        return self._names.get(named.name) if named is not None else None

    # ---- internals --------------------------------------------------------
    def _resolve(self, tp: Any, direction: Direction, site: tuple, *, outer: bool) -> graphql.GraphQLType:
        annotation = tp
        tp = _strip_annotated(tp)
        nullable = False
        if _is_union(tp):
            args = [a for a in typing.get_args(tp) if a is not _NoneType]
            if len(args) != 1:
                raise self._error(annotation, direction, site, 'unions are not supported')
            if len(args) != len(typing.get_args(tp)):
                nullable = True
            tp = _strip_annotated(args[0])
            if _is_union(tp):
                raise self._error(annotation, direction, site, 'unions are not supported')
        item = self._list_item(tp, annotation, direction, site)
        if item is not None:
            gtype: graphql.GraphQLType = graphql.GraphQLList(self._resolve(item, direction, site, outer=False))
            # the outermost list stays nullable
            if outer or nullable:
                return gtype
            return graphql.GraphQLNonNull(gtype)
        gtype = self._core(tp, annotation, direction, site)
        if isinstance(gtype, graphql.GraphQLNonNull):
            return gtype.of_type if nullable else gtype
        return gtype if nullable else graphql.GraphQLNonNull(gtype)

    def _list_item(self, tp: Any, annotation: Any, direction: Direction, site: tuple) -> Any:
        origin = typing.get_origin(tp)
        if origin is tuple:
            args = typing.get_args(tp)
            if len(args) == 2 and args[1] is Ellipsis:
                return args[0]
            raise self._error(annotation, direction, site, 'only homogeneous tuple[X, ...] is supported')
        if origin in _LIST_ORIGINS:
            args = typing.get_args(tp)
            if not args:
                raise self._error(annotation, direction, site, 'collection item type is missing')
            return args[0]
        if _one_of(tp, _LIST_ORIGINS) or tp is tuple:
            raise self._error(annotation, direction, site, 'collection item type is missing')
        return None

    def _core(self, tp: Any, annotation: Any, direction: Direction, site: tuple) -> graphql.GraphQLType:
        _definition, _member, local_fn = site
        if local_fn is not None:
            return self._checked(local_fn(tp, annotation), annotation, direction, site)
        mapped = self.context.registry.resolve(tp, annotation)
        if mapped is not None:
            return self._checked(mapped, annotation, direction, site)
        if typing.get_origin(tp) in _MAPPING_ORIGINS or _one_of(tp, _MAPPING_ORIGINS):
            return JSON
        scalar = scalar_for(tp)
        if scalar is not None:
            return scalar
        if inspect.isclass(tp):
            if issubclass(tp, Enum):
                return self.enum_type(tp)
            if tp.__module__ != 'builtins':
                return self.definition_type(tp, direction)
        raise self._error(annotation, direction, site)

    def _checked(self, gtype: Any, annotation: Any, direction: Direction, site: tuple) -> graphql.GraphQLType:
        if not graphql.is_type(gtype):
            raise self._error(annotation, direction, site, f"type function returned {gtype!r}")
        if direction is Direction.INPUT and not graphql.is_input_type(gtype):
            raise self._error(annotation, direction, site, f"{gtype} is not an input type")
        if direction is Direction.OUTPUT and not graphql.is_output_type(gtype):
            raise self._error(annotation, direction, site, f"{gtype} is not an output type")
        return gtype

    @staticmethod
    def _error(annotation: Any, direction: Direction, site: tuple, reason: Optional[str] = None) -> UnresolvableTypeError:
        definition, member, _fn = site
        return UnresolvableTypeError(annotation, definition=definition, member=member, direction=direction, reason=reason)
