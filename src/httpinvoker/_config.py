import os
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field

from .property_resolver import (
    DotenvPropertyResolver,
    EnvironmentPropertyResolver,
    MappingPropertyResolver,
    MultiSourcePropertyResolver,
)

ENV_CONFIG_FILES = "HTTPINVOKER_CONFIG_FILES"


class Config(BaseModel):
    """Where ``${...}`` url placeholders get their values from.

    Sources are consulted in this order: ``properties``, then
    ``config_files`` (later files win over earlier ones), then the process
    environment when ``use_environment`` is set.
    """

    properties: Dict[str, str] = Field(default_factory=dict)
    config_files: List[Path] = Field(default_factory=list)
    use_environment: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        raw = os.getenv(ENV_CONFIG_FILES, "")
        files = [Path(p) for p in raw.split(os.pathsep) if p]
        return cls(config_files=files)

    def property_resolver(self) -> MultiSourcePropertyResolver:
        resolver = MultiSourcePropertyResolver()
        if self.properties:
            resolver.add_property_resolver(
                MappingPropertyResolver(self.properties, order=0)
            )
        if self.config_files:
            resolver.add_property_resolver(
                DotenvPropertyResolver(self.config_files, order=1)
            )
        if self.use_environment:
            resolver.add_property_resolver(EnvironmentPropertyResolver(order=2))
        return resolver
