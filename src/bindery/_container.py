from __future__ import annotations

import inspect
import logging
import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import AsyncInSyncContextError, CircularDependencyError, ServiceNotFoundError
from ._keys import ServiceKey, normalize_key
from ._lifecycle import Disposable
from ._logging import ContainerLogger
from ._metrics import ContainerStats, PerformanceMonitor, ServiceMetricsSnapshot
from ._registry import Lifetime, Registration, Registry


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator
    from types import TracebackType

    from ._keys import Token, TokenLike
    from ._metrics import ServiceMetrics

    T = TypeVar("T")


_TOP_N = 5


class Container:
    """Minimal IoC container.

    - register explicit zero-argument factories (or pre-built instances)
    - resolve synchronously or with `await resolve_async(...)`
    - lifetimes: singleton / transient
    - cycle detection across nested resolutions
    - `await dispose()` tears down cached `Disposable` services.
    """

    def __init__(
        self,
        *,
        enable_logging: bool = True,
        log_prefix: str = "Container",
        logger: logging.Logger | None = None,
        enable_performance_monitoring: bool = False,
    ) -> None:
        self._registry = Registry()
        # keys mid-construction, one set per thread
        self._resolving: dict[int, set[ServiceKey]] = {}
        self._lock = threading.RLock()
        self._log = ContainerLogger(logger or logging.getLogger(__name__), log_prefix, enabled=enable_logging)
        self._monitor = PerformanceMonitor()
        self._monitoring = enable_performance_monitoring
        self._started_at = time.monotonic()

    # Registration

    def register(
        self,
        token: TokenLike,
        factory: Callable[[], Any],
        lifetime: Lifetime = Lifetime.SINGLETON,
    ) -> Container:
        """Register a factory for a token.

        Example:
          container.register(Database, lambda: Database(url))
          container.register("clock", time.monotonic, Lifetime.TRANSIENT)

        Registering the same token again replaces the previous entry.
        """
        if not callable(factory):
            msg = f"Factory for {token!r} must be callable, got {type(factory).__name__}."
            raise TypeError(msg)

        key = normalize_key(token)
        self._log.debug("Registering service: %s with scope: %s", key, lifetime.value)
        with self._lock:
            self._registry.register(key, factory, lifetime)
        return self

    def register_singleton(self, token: TokenLike, factory: Callable[[], Any]) -> Container:
        return self.register(token, factory, Lifetime.SINGLETON)

    def register_transient(self, token: TokenLike, factory: Callable[[], Any]) -> Container:
        return self.register(token, factory, Lifetime.TRANSIENT)

    def register_instance(self, token: TokenLike, instance: object) -> Container:
        """Register a pre-built instance (always singleton, never calls a factory)."""
        key = normalize_key(token)
        self._log.debug("Registering instance: %s", key)
        with self._lock:
            self._registry.register_instance(key, instance)
        return self

    # Resolution

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: str | Token | ServiceKey) -> Any: ...

    def resolve(self, token: TokenLike) -> Any:
        """Resolve the token to an instance.

        Raises `AsyncInSyncContextError` if the factory hands back an awaitable;
        use `resolve_async` for those services.
        """
        key = normalize_key(token)
        self._log.trace("Resolving service: %s", key)
        started = time.perf_counter()

        with self._lock:
            reg = self._lookup(key)

            if reg.is_singleton and reg.has_instance:
                self._log.trace("Returning existing singleton instance: %s", key)
                instance = reg.cached_instance
            else:
                with self._resolution(key):
                    instance = reg.factory()

                    if inspect.isawaitable(instance):
                        _discard(instance)
                        raise AsyncInSyncContextError(key)

                    if reg.is_singleton:
                        instance = reg.store(instance)

                self._log.trace("Successfully resolved service: %s", key)

        self._record(key, started)
        return instance

    @overload
    async def resolve_async(self, token: type[T]) -> T: ...

    @overload
    async def resolve_async(self, token: str | Token | ServiceKey) -> Any: ...

    async def resolve_async(self, token: TokenLike) -> Any:
        """Resolve the token, awaiting the factory result when it is awaitable."""
        key = normalize_key(token)
        self._log.trace("Resolving service async: %s", key)
        started = time.perf_counter()

        with self._lock:
            reg = self._lookup(key)
            cached = reg.is_singleton and reg.has_instance
            instance = reg.cached_instance

        if cached:
            self._log.trace("Returning existing singleton instance: %s", key)
        else:
            with self._resolution(key):
                instance = reg.factory()
                if inspect.isawaitable(instance):
                    instance = await instance

                if reg.is_singleton:
                    with self._lock:
                        # another thread may have cached one while we awaited
                        instance = reg.store(instance)

            self._log.trace("Successfully resolved service async: %s", key)

        self._record(key, started)
        return instance

    def _lookup(self, key: ServiceKey) -> Registration:
        # Cycle check comes first so a re-entered key is reported even though it is registered.
        if key in self._resolving.get(threading.get_ident(), ()):
            raise CircularDependencyError(key)

        reg = self._registry.lookup(key)
        if reg is None:
            raise ServiceNotFoundError(key)
        return reg

    @contextmanager
    def _resolution(self, key: ServiceKey) -> Iterator[None]:
        ident = threading.get_ident()
        with self._lock:
            self._resolving.setdefault(ident, set()).add(key)
        try:
            yield
        finally:
            with self._lock:
                stack = self._resolving[ident]
                stack.discard(key)
                if not stack:
                    del self._resolving[ident]

    # Introspection

    def has(self, token: TokenLike) -> bool:
        key = normalize_key(token)
        with self._lock:
            return self._registry.has(key)

    def keys(self) -> list[ServiceKey]:
        """Registered keys in registration order. `str(key)` gives the service name."""
        with self._lock:
            return self._registry.keys()

    def clear(self) -> None:
        """Drop every registration. Does not dispose anything; see `dispose`."""
        self._log.debug("Clearing all registrations")
        with self._lock:
            self._registry.clear()

    # Teardown

    async def dispose(self) -> None:
        """Dispose every cached `Disposable`, then clear the container.

        Teardown errors are logged and skipped so every service gets its turn.
        """
        self._log.debug("Disposing container")

        with self._lock:
            entries = self._registry.registrations()

        seen: set[int] = set()
        for key, reg in entries:
            if not reg.has_instance:
                continue

            instance = reg.cached_instance
            if not isinstance(instance, Disposable) or id(instance) in seen:
                continue
            seen.add(id(instance))

            try:
                await instance.dispose()
            except Exception:
                self._log.exception("Error disposing service %s", key)
            else:
                self._log.trace("Disposed service: %s", key)

        self.clear()

    async def __aenter__(self) -> Container:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.dispose()

    # Performance monitoring

    def _record(self, key: ServiceKey, started: float) -> None:
        if self._monitoring:
            self._monitor.record(key, time.perf_counter() - started)

    def get_service_metrics(self, token: TokenLike | None = None) -> list[ServiceMetricsSnapshot]:
        """Metrics for one token, or for every key resolved since the last reset."""
        if token is not None:
            metrics = self._monitor.get(normalize_key(token))
            records = [metrics] if metrics is not None else []
        else:
            records = self._monitor.records()

        with self._lock:
            return [self._snapshot(m) for m in records]

    def _snapshot(self, metrics: ServiceMetrics) -> ServiceMetricsSnapshot:
        reg = self._registry.lookup(metrics.key)
        return ServiceMetricsSnapshot(
            key=metrics.key,
            total_resolutions=metrics.total_resolutions,
            total_time=metrics.total_time,
            average_time=metrics.average_time,
            min_time=metrics.min_time if metrics.total_resolutions else 0.0,
            max_time=metrics.max_time,
            last_resolution_time=metrics.last_resolution_time,
            lifetime=reg.lifetime if reg is not None else None,
            has_instance=reg.has_instance if reg is not None else False,
        )

    def get_performance_stats(self) -> ContainerStats:
        snapshots = self.get_service_metrics()

        with self._lock:
            registrations = [reg for _, reg in self._registry.registrations()]

        total_resolutions = sum(s.total_resolutions for s in snapshots)
        total_time = sum(s.total_time for s in snapshots)
        singletons = sum(1 for reg in registrations if reg.is_singleton)

        return ContainerStats(
            total_services=len(registrations),
            total_resolutions=total_resolutions,
            total_resolution_time=total_time,
            average_resolution_time=total_time / total_resolutions if total_resolutions else 0.0,
            singleton_services=singletons,
            transient_services=len(registrations) - singletons,
            services_with_instances=sum(1 for reg in registrations if reg.has_instance),
            uptime=time.monotonic() - self._started_at,
            slowest_services=sorted(snapshots, key=lambda s: s.average_time, reverse=True)[:_TOP_N],
            fastest_services=sorted(snapshots, key=lambda s: s.average_time)[:_TOP_N],
            most_resolved_services=sorted(snapshots, key=lambda s: s.total_resolutions, reverse=True)[:_TOP_N],
        )

    def reset_performance_stats(self) -> None:
        self._monitor.reset()


def _discard(pending: Awaitable[Any]) -> None:
    # An un-awaited coroutine warns on garbage collection; close it explicitly.
    if inspect.iscoroutine(pending):
        pending.close()


container = Container(enable_logging=False)
