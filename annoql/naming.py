"""Naming helpers: accessor prefix handling and configurable name conversion.

Derived field and argument names go through a strawberry ``NameConverter``
taken from a ``StrawberryConfig``. Without a config names are kept verbatim
(snake_case stays snake_case).
"""
from __future__ import annotations

import re
from typing import Optional

from strawberry.schema.config import StrawberryConfig

__all__ = [
    'ACCESSOR_PREFIXES',
    'LIST_ROOT_SUFFIX',
    'INPUT_SUFFIX',
    'default_config',
    'is_accessor_name',
    'strip_accessor_prefix',
    'lower_first',
    'apply_naming',
]

ACCESSOR_PREFIXES = ('get', 'set')
LIST_ROOT_SUFFIX = '_list'
INPUT_SUFFIX = 'Input'

# get_value / set_another_value (snake) or getValue / setAnotherValue (camel)
_accessor_pattern = re.compile(r'^(?:get|set)(?:_(?P<snake>[A-Za-z0-9]\w*)|(?P<camel>[A-Z]\w*))$')


def default_config() -> StrawberryConfig:
    """Config used when the caller passes none: identity naming."""
    return StrawberryConfig(auto_camel_case=False)


def is_accessor_name(name: str) -> bool:
    return bool(name) and _accessor_pattern.match(name) is not None


def lower_first(name: str) -> str:
    if not name:
        return name
    return name[0].lower() + name[1:]


def strip_accessor_prefix(name: str) -> str:
    """``get_value`` → ``value``, ``setAnotherValue`` → ``anotherValue``.

    Names without an accessor prefix are returned unchanged.
    """
    m = _accessor_pattern.match(name or '')
    if m is None:
        return name
    return lower_first(m.group('snake') or m.group('camel'))


def apply_naming(name: str, config: Optional[StrawberryConfig]) -> str:
    """Run a derived name through the config's name converter.

    Names starting with an underscore are preserved as-is.
    """
    if config is None or name.startswith('_'):
        return name
    return config.name_converter.apply_naming_config(name)
