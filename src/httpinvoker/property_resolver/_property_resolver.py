import os
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol, Union, runtime_checkable

from dotenv import dotenv_values

DEFAULT_ORDER = 0


@runtime_checkable
class PropertyResolver(Protocol):
    """Key to value lookup used to fill ``${...}`` placeholders in urls."""

    def contains_property(self, key: str) -> bool: ...

    def get_property(self, key: str) -> Optional[str]: ...


class MappingPropertyResolver:
    """Resolves properties from an in-memory mapping."""

    def __init__(self, properties: Mapping[str, object], order: int = DEFAULT_ORDER):
        self._properties = dict(properties)
        self.order = order

    def contains_property(self, key: str) -> bool:
        return self._properties.get(key) is not None

    def get_property(self, key: str) -> Optional[str]:
        value = self._properties.get(key)
        return None if value is None else str(value)


class EnvironmentPropertyResolver:
    """Resolves properties from the process environment.

    The environment is read on every lookup so variables exported after
    setup are still visible.
    """

    def __init__(self, order: int = DEFAULT_ORDER):
        self.order = order

    def contains_property(self, key: str) -> bool:
        return key in os.environ

    def get_property(self, key: str) -> Optional[str]:
        return os.environ.get(key)


class DotenvPropertyResolver(MappingPropertyResolver):
    """Resolves properties from one or more dotenv files.

    Files are read once, at construction. A key defined in several files takes
    the value of the last file that defines it. Missing files are skipped.
    """

    def __init__(
        self,
        paths: Union[str, Path, Iterable[Union[str, Path]]],
        order: int = DEFAULT_ORDER,
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        properties: dict[str, object] = {}
        for path in paths:
            properties.update(dotenv_values(Path(path)))
        super().__init__(properties, order=order)


class MultiSourcePropertyResolver:
    """A PropertyResolver which includes a set of PropertyResolvers.

    Sources are consulted by ascending ``order`` (resolvers without one count
    as 0), ties broken by the order they were added. The first source that
    contains a key provides its value.
    """

    def __init__(self, resolvers: Optional[Iterable[PropertyResolver]] = None):
        self._resolvers: list[PropertyResolver] = []
        if resolvers is not None:
            for resolver in resolvers:
                self.add_property_resolver(resolver)

    def add_property_resolver(self, resolver: PropertyResolver) -> None:
        if resolver is None:
            raise ValueError("resolver must not be None")
        self._resolvers.append(resolver)
        self._resolvers.sort(key=lambda r: getattr(r, "order", DEFAULT_ORDER))

    @property
    def resolvers(self) -> tuple[PropertyResolver, ...]:
        return tuple(self._resolvers)

    def contains_property(self, key: str) -> bool:
        return any(resolver.contains_property(key) for resolver in self._resolvers)

    def get_property(self, key: str) -> Optional[str]:
        for resolver in self._resolvers:
            if resolver.contains_property(key):
                return resolver.get_property(key)
        return None
