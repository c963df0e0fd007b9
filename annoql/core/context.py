from __future__ import annotations
from typing import Any, Dict, Optional, Type

from strawberry.schema.config import StrawberryConfig

from ..naming import default_config
from ..registry import TypeMappingRegistry, default_registry
from .arguments import ArgumentBuilder
from .assembler import FieldAssembler
from .definitions import Definition, definition_of
from .members import MemberExtractor
from .types import TypeResolver


class BuildContext:
    """State shared by the components taking part in one schema build.

    Holds the naming config, the type mapping registry, the optional data
    fetcher factory and the per-build caches (definitions, members, the
    type arena). A context is never reused across builds.
    """

    def __init__(
        self,
        config: Optional[StrawberryConfig] = None,
        registry: Optional[TypeMappingRegistry] = None,
        data_fetcher_factory: Any = None,
    ):
        self.config = config if config is not None else default_config()
        self.registry = registry if registry is not None else default_registry
        self.data_fetcher_factory = data_fetcher_factory
        self._definitions: Dict[Type[Any], Definition] = {}
        self.members = MemberExtractor(self.config)
        self.types = TypeResolver(self)
        self.arguments = ArgumentBuilder(self)
        self.fields = FieldAssembler(self)

    def definition(self, cls: Type[Any]) -> Definition:
        definition = self._definitions.get(cls)
        if definition is None:
            definition = definition_of(cls)
            self._definitions[cls] = definition
        return definition
