from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._keys import ServiceKey
    from ._registry import Lifetime


@dataclass
class ServiceMetrics:
    """Running resolution counters for one key. Times are in seconds."""

    key: ServiceKey
    total_resolutions: int = 0
    total_time: float = 0.0
    min_time: float = math.inf
    max_time: float = 0.0
    last_resolution_time: float = 0.0

    @property
    def average_time(self) -> float:
        if not self.total_resolutions:
            return 0.0
        return self.total_time / self.total_resolutions

    def record(self, elapsed: float) -> None:
        self.total_resolutions += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        self.last_resolution_time = elapsed


@dataclass(frozen=True)
class ServiceMetricsSnapshot:
    key: ServiceKey
    total_resolutions: int
    total_time: float
    average_time: float
    min_time: float
    max_time: float
    last_resolution_time: float
    lifetime: Lifetime | None  # None once the key is no longer registered
    has_instance: bool


@dataclass(frozen=True)
class ContainerStats:
    total_services: int
    total_resolutions: int
    total_resolution_time: float
    average_resolution_time: float
    singleton_services: int
    transient_services: int
    services_with_instances: int
    uptime: float
    slowest_services: list[ServiceMetricsSnapshot] = field(default_factory=list)
    fastest_services: list[ServiceMetricsSnapshot] = field(default_factory=list)
    most_resolved_services: list[ServiceMetricsSnapshot] = field(default_factory=list)


class PerformanceMonitor:
    """Per-key resolution timing. Observation only: nothing here affects resolution."""

    def __init__(self) -> None:
        self._records: dict[ServiceKey, ServiceMetrics] = {}

    def record(self, key: ServiceKey, elapsed: float) -> None:
        metrics = self._records.get(key)
        if metrics is None:
            metrics = self._records[key] = ServiceMetrics(key)
        metrics.record(elapsed)

    def get(self, key: ServiceKey) -> ServiceMetrics | None:
        return self._records.get(key)

    def records(self) -> list[ServiceMetrics]:
        return list(self._records.values())

    def reset(self) -> None:
        self._records.clear()
