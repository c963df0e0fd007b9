"""Pluggable native type → GraphQL type mapping.

A type function is any callable ``fn(native_type, annotation) -> GraphQLType``.
Classes are accepted too and instantiated without arguments, so a mapping can
be declared as a small class with ``__call__``.

The module-level :data:`default_registry` is process-wide mutable state.
Registration is not synchronized: applications that register types while
building schemas on other threads must serialize those calls themselves.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import graphql

from .errors import DefinitionError

__all__ = ['TypeFunction', 'TypeMappingRegistry', 'default_registry', 'register_type', 'as_type_function']

_logger = logging.getLogger("annoql.registry")

TypeFunction = Callable[[Any, Any], graphql.GraphQLType]


def as_type_function(fn: Any) -> TypeFunction:
    """Normalize a type function declaration into a callable."""
    if isinstance(fn, type):
        fn = fn()
    if not callable(fn):
        raise DefinitionError(f"Type function {fn!r} is not callable")
    return fn


class TypeMappingRegistry:
    """Registry of custom type functions keyed by native type."""

    def __init__(self, mappings: Optional[Dict[Any, Any]] = None):
        self._functions: Dict[Any, TypeFunction] = {}
        for native_type, fn in (mappings or {}).items():
            self.register(native_type, fn)

    def register(self, native_type: Any, type_function: Any) -> None:
        """Map ``native_type`` (and its subclasses) through ``type_function``.

        Registrations win over the built-in scalars, so ``uuid.UUID`` can be
        remapped to ``String`` for example.
        """
        fn = as_type_function(type_function)
        if native_type in self._functions:
            _logger.debug("replacing type function for %r", native_type)
        self._functions[native_type] = fn

    def unregister(self, native_type: Any) -> None:
        self._functions.pop(native_type, None)

    def lookup(self, native_type: Any) -> Optional[TypeFunction]:
        """Find the type function for ``native_type``.

        Exact registrations first, then the ``NewType`` supertype chain, then
        base classes along the MRO.
        """
        tp = native_type
        while tp is not None:
            try:
                fn = self._functions.get(tp)
            except TypeError:
                return None
            if fn is not None:
                return fn
            tp = getattr(tp, '__supertype__', None)
        for base in getattr(native_type, '__mro__', ())[1:]:
            if base is object:
                break
            fn = self._functions.get(base)
            if fn is not None:
                return fn
        return None

    def resolve(self, native_type: Any, annotation: Any = None) -> Optional[graphql.GraphQLType]:
        """Apply the registered type function, or return ``None`` if there is none."""
        fn = self.lookup(native_type)
        if fn is None:
            return None
        return fn(native_type, annotation)

    def __contains__(self, native_type: Any) -> bool:
        return self.lookup(native_type) is not None


default_registry = TypeMappingRegistry()


def register_type(native_type: Any, type_function: Any) -> None:
    """Register a type function on the process-wide default registry."""
    default_registry.register(native_type, type_function)
