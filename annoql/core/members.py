from __future__ import annotations
import logging
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

import graphql
from graphql import Undefined
from strawberry.schema.config import StrawberryConfig

from ..errors import DefinitionError
from ..naming import apply_naming, is_accessor_name, strip_accessor_prefix
from .definitions import Definition
from .fields import FieldDescriptor, FieldMeta, field_meta

__all__ = ['MemberKind', 'Member', 'MemberExtractor']

_logger = logging.getLogger("annoql.members")


class MemberKind(Enum):
    FIELD = 'field'
    ACCESSOR = 'accessor'
    METHOD = 'method'


@dataclass
class Member:
    """One schema-eligible field, property or method of a definition.

    ``attr`` is the underlying identity: overrides in subclasses share it and
    replace the parent's member. ``owner`` is the class holding the effective
    implementation; only that implementation's metadata applies.
    """

    attr: str
    kind: MemberKind
    owner: Type[Any]
    meta: FieldMeta
    annotation: Any
    exposed_name: str
    function: Optional[Callable[..., Any]] = None
    is_property: bool = False
    deprecation_reason: Optional[str] = None
    default: Any = Undefined
    default_factory: Optional[Callable[[], Any]] = None

    @property
    def description(self) -> Optional[str]:
        return self.meta.description

    @property
    def has_default(self) -> bool:
        """True when a plain field carries a class-level default."""
        return self.default is not Undefined or self.default_factory is not None

    @property
    def is_callable(self) -> bool:
        """True when the member is read by calling a method with arguments."""
        return self.function is not None and not self.is_property


def _is_member_value(value: Any) -> bool:
    if isinstance(value, FieldDescriptor):
        return True
    return field_meta(value) is not None


def _pep702_reason(function: Any) -> Optional[str]:
    # warnings.deprecated / typing_extensions.deprecated set __deprecated__
    msg = getattr(function, '__deprecated__', None)
    if msg is None:
        return None
    return str(msg) or graphql.DEFAULT_DEPRECATION_REASON


class MemberExtractor:
    """Compute the flattened, override-resolved member list of a definition.

    Classes are walked base-first along the MRO, so mixins with decorated
    default implementations contribute members like interfaces do. Results
    are memoized per extractor; a builder uses one extractor per build.
    """

    def __init__(self, config: Optional[StrawberryConfig] = None):
        self.config = config
        self._cache: Dict[Type[Any], List[Member]] = {}

    def extract(self, definition: Definition) -> List[Member]:
        cls = definition.cls
        cached = self._cache.get(cls)
        if cached is not None:
            return cached
        mro = [c for c in cls.__mro__ if c is not object]
        # attribute names eligible anywhere in the hierarchy, base-first order
        candidates: Dict[str, None] = {}
        for klass in reversed(mro):
            for attr, value in vars(klass).items():
                if _is_member_value(value):
                    candidates.setdefault(attr, None)
        hints: Optional[Dict[str, Any]] = None
        members: List[Member] = []
        for attr in candidates:
            owner = next(c for c in mro if attr in vars(c))
            value = vars(owner)[attr]
            if isinstance(value, FieldDescriptor):
                if hints is None:
                    hints = self._class_hints(cls)
                member = self._field_member(definition, owner, attr, value, hints)
            elif callable(value) or isinstance(value, property):
                member = self._method_member(definition, owner, attr, value)
            else:
                _logger.debug("%s.%s hidden by a plain value in %s", definition.name, attr, owner.__name__)
                continue
            if field_meta(value) is None:
                _logger.debug("%s.%s overridden in %s without metadata", definition.name, attr, owner.__name__)
            members.append(member)
        result = self._dedupe(members, mro)
        self._cache[cls] = result
        return result

    def _dedupe(self, members: List[Member], mro: List[Type[Any]]) -> List[Member]:
        result: List[Member] = []
        positions: Dict[str, int] = {}
        for member in members:
            pos = positions.get(member.exposed_name)
            if pos is None:
                positions[member.exposed_name] = len(result)
                result.append(member)
                continue
            previous = result[pos]
            if previous.owner is member.owner:
                # same class: FieldAssembler reports the collision
                result.append(member)
            elif mro.index(member.owner) < mro.index(previous.owner):
                _logger.debug(
                    "%s.%s supersedes %s.%s as %r",
                    member.owner.__name__, member.attr, previous.owner.__name__, previous.attr, member.exposed_name,
                )
                result[pos] = member
        return result

    def _class_hints(self, cls: Type[Any]) -> Dict[str, Any]:
        try:
            return typing.get_type_hints(cls, include_extras=True)
        except Exception as exc:
            raise DefinitionError(f"Cannot evaluate annotations of {cls.__qualname__}: {exc}") from exc

    def _exposed(self, meta: FieldMeta, derived: str) -> str:
        return meta.name or apply_naming(derived, self.config)

    def _field_member(self, definition: Definition, owner: Type[Any], attr: str, value: Any, hints: Dict[str, Any]) -> Member:
        meta = value.meta
        annotation = meta.returns
        if annotation is None:
            annotation = hints.get(attr)
        if annotation is None:
            raise DefinitionError(f"Field {definition.name}.{attr} has no type annotation")
        return Member(
            attr=attr,
            kind=MemberKind.FIELD,
            owner=owner,
            meta=meta,
            annotation=annotation,
            exposed_name=self._exposed(meta, attr),
            deprecation_reason=meta.deprecation_reason,
            default=value.default,
            default_factory=value.default_factory,
        )

    def _method_member(self, definition: Definition, owner: Type[Any], attr: str, value: Any) -> Member:
        is_property = isinstance(value, property)
        function = value.fget if is_property else value
        if function is None:
            raise DefinitionError(f"Property {definition.name}.{attr} has no getter")
        meta = field_meta(function) or FieldMeta()
        if is_property:
            kind, derived = MemberKind.ACCESSOR, attr
        elif is_accessor_name(attr):
            kind, derived = MemberKind.ACCESSOR, strip_accessor_prefix(attr)
        else:
            kind, derived = MemberKind.METHOD, attr
        annotation = meta.returns
        if annotation is None:
            try:
                annotation = typing.get_type_hints(function, include_extras=True).get('return')
            except Exception as exc:
                raise DefinitionError(f"Cannot evaluate annotations of {definition.name}.{attr}: {exc}") from exc
        if annotation is None:
            raise DefinitionError(f"Member {definition.name}.{attr} has no return annotation")
        return Member(
            attr=attr,
            kind=kind,
            owner=owner,
            meta=meta,
            annotation=annotation,
            exposed_name=self._exposed(meta, derived),
            function=function,
            is_property=is_property,
            deprecation_reason=meta.deprecation_reason or _pep702_reason(function),
        )
