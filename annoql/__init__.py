"""annoql public API and lazy exports.

Declarations (``field``, ``arg``, ``type``, ``table``, ``root``, ``no_root``)
and the builder are resolved on first attribute access, so model modules can
import the decorators without pulling in the schema machinery.

Exposes:
- Declarations: field, arg, type, table, root, no_root, Cardinality
- Building: SchemaBuilder, find_tables, Direction, DataFetcherFactory
- Type mapping: TypeMappingRegistry, default_registry, register_type, ID
- Errors: AnnoQLError, DefinitionError, UnresolvableTypeError, NameCollisionError
"""
from __future__ import annotations

_EXPORTS = {
    'field': '.core.fields',
    'arg': '.core.fields',
    'type': '.core.definitions',
    'table': '.core.definitions',
    'root': '.core.definitions',
    'no_root': '.core.definitions',
    'Cardinality': '.core.definitions',
    'definition_of': '.core.definitions',
    'Direction': '.core.types',
    'DataFetcherFactory': '.core.fetchers',
    'SchemaBuilder': '.schema',
    'find_tables': '.schema',
    'TypeMappingRegistry': '.registry',
    'default_registry': '.registry',
    'register_type': '.registry',
    'ID': '.scalars',
    'AnnoQLError': '.errors',
    'DefinitionError': '.errors',
    'UnresolvableTypeError': '.errors',
    'NameCollisionError': '.errors',
    'LIST_ROOT_SUFFIX': '.naming',
    'INPUT_SUFFIX': '.naming',
}


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name == 'StrawberryConfig':
        from strawberry.schema.config import StrawberryConfig
        return StrawberryConfig
    module = _EXPORTS.get(name)
    if module is None:
        raise AttributeError(name)
    return getattr(_importlib.import_module(module, __name__), name)


__all__ = [*_EXPORTS, 'StrawberryConfig']
