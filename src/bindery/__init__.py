"""Minimal inversion-of-control container.

This package provides a lightweight service container for Python: register an
explicit factory (or a pre-built instance) under a class, string or `Token`,
then resolve it synchronously or asynchronously. The container decides whether
to reuse a cached instance or build a new one, detects dependency cycles and
tears down owned services on disposal.

Exports:
- `Container`: Registration, resolution, disposal and performance counters.
- `container`: A default, shared `Container` with logging disabled.
- `Lifetime`: Enum for controlling object lifetimes (singleton or transient).
- `Token`: Opaque symbolic key for services without a class.
- `ServiceKey`: Normalized key as returned by `Container.keys()`.
- `Disposable`: Teardown capability services opt into.
- `ResolutionError` and its subclasses `ServiceNotFoundError`,
  `CircularDependencyError` and `AsyncInSyncContextError`.
"""

import logging

from ._container import Container, container
from ._errors import AsyncInSyncContextError, CircularDependencyError, ResolutionError, ServiceNotFoundError
from ._keys import ServiceKey, Token
from ._lifecycle import Disposable
from ._logging import TRACE, ContainerLogger
from ._metrics import ContainerStats, ServiceMetricsSnapshot
from ._registry import Lifetime


logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TRACE",
    "AsyncInSyncContextError",
    "CircularDependencyError",
    "Container",
    "ContainerLogger",
    "ContainerStats",
    "Disposable",
    "Lifetime",
    "ResolutionError",
    "ServiceKey",
    "ServiceMetricsSnapshot",
    "ServiceNotFoundError",
    "Token",
    "container",
]
