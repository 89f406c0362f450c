from ._property_resolver import (
    DotenvPropertyResolver,
    EnvironmentPropertyResolver,
    MappingPropertyResolver,
    MultiSourcePropertyResolver,
    PropertyResolver,
)

__all__ = [
    "DotenvPropertyResolver",
    "EnvironmentPropertyResolver",
    "MappingPropertyResolver",
    "MultiSourcePropertyResolver",
    "PropertyResolver",
]
