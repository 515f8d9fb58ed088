from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ._keys import ServiceKey

    Factory = Callable[[], object | Awaitable[object]]


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass
class Registration:
    factory: Factory
    lifetime: Lifetime
    cached_instance: object | None = None  # cached singleton
    has_instance: bool = False  # a cached None/0/"" still counts

    @property
    def is_singleton(self) -> bool:
        return self.lifetime is Lifetime.SINGLETON

    def store(self, instance: object) -> object:
        """Cache `instance` unless one is already cached; return the cached one."""
        if not self.has_instance:
            self.cached_instance = instance
            self.has_instance = True
        return self.cached_instance


class Registry:
    """Insertion-ordered table of registrations keyed by `ServiceKey`.

    Keys must already be normalized. The registry never builds anything and
    never disposes anything.
    """

    def __init__(self) -> None:
        self._registrations: dict[ServiceKey, Registration] = {}

    def register(self, key: ServiceKey, factory: Factory, lifetime: Lifetime) -> Registration:
        reg = Registration(factory=factory, lifetime=lifetime)
        # last write wins; an overwritten key keeps its original position
        self._registrations[key] = reg
        return reg

    def register_instance(self, key: ServiceKey, instance: object) -> Registration:
        reg = self.register(key, lambda: instance, Lifetime.SINGLETON)
        reg.store(instance)
        return reg

    def lookup(self, key: ServiceKey) -> Registration | None:
        return self._registrations.get(key)

    def has(self, key: ServiceKey) -> bool:
        return key in self._registrations

    def keys(self) -> list[ServiceKey]:
        return list(self._registrations)

    def registrations(self) -> list[tuple[ServiceKey, Registration]]:
        return list(self._registrations.items())

    def clear(self) -> None:
        self._registrations.clear()
