from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._keys import ServiceKey


class ResolutionError(RuntimeError):
    """Base class for every error raised while resolving a service."""

    def __init__(self, key: ServiceKey, message: str) -> None:
        super().__init__(message)
        self.key = key


class ServiceNotFoundError(ResolutionError, LookupError):
    def __init__(self, key: ServiceKey) -> None:
        super().__init__(key, f"Service not found for token: {key}")


class CircularDependencyError(ResolutionError):
    """A key was requested again while its own factory was still running."""

    def __init__(self, key: ServiceKey) -> None:
        super().__init__(key, f"Circular dependency detected for token: {key}")


class AsyncInSyncContextError(ResolutionError):
    """The factory returned an awaitable during `Container.resolve`."""

    def __init__(self, key: ServiceKey) -> None:
        super().__init__(
            key,
            f"Cannot resolve async service synchronously: {key}. Use resolve_async instead.",
        )
